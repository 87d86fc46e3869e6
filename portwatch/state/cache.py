from __future__ import annotations
import threading
from typing import Iterable

from ..models import Service

class SnapshotCache:
    """Latest snapshot, replaced wholesale by the poller and copied out to readers."""

    def __init__(self):
        self.lock = threading.Lock()
        self._services: list[Service] = []

    def replace(self, services: Iterable[Service]) -> None:
        snapshot = list(services)
        with self.lock:
            self._services = snapshot

    def read(self) -> list[Service]:
        with self.lock:
            return list(self._services)

    def __len__(self) -> int:
        with self.lock:
            return len(self._services)
