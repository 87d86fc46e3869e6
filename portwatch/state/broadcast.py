"""
Lossy fan-out of snapshots to event-stream subscribers.

Each subscriber owns a bounded buffer. When it is full the oldest pending
snapshot is dropped, so a slow reader sees gaps instead of stalling the
publisher. This is not a reliable log: clients that need the full picture
should poll the list endpoint.
"""

from __future__ import annotations
import logging
import threading
from collections import deque
from typing import Iterator, Optional

from ..config import CHANNEL_CAPACITY
from ..models import Service

logger = logging.getLogger(__name__)

Snapshot = list[Service]

class Subscription:
    def __init__(self, hub: "BroadcastHub", capacity: int):
        self._hub = hub
        self._buffer: deque[Snapshot] = deque(maxlen=capacity)
        self._cond = threading.Condition()
        self._closed = False
        self.dropped = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def pending(self) -> int:
        with self._cond:
            return len(self._buffer)

    def _push(self, snapshot: Snapshot) -> None:
        with self._cond:
            if self._closed:
                return
            if len(self._buffer) == self._buffer.maxlen:
                self.dropped += 1
            self._buffer.append(snapshot)
            self._cond.notify()

    def get(self, timeout: Optional[float] = None) -> Optional[Snapshot]:
        """Next buffered snapshot, or None on timeout or once closed."""
        with self._cond:
            if not self._buffer and not self._closed:
                self._cond.wait(timeout)
            if self._buffer:
                return self._buffer.popleft()
            return None

    def close(self) -> None:
        with self._cond:
            if self._closed:
                return
            self._closed = True
            self._buffer.clear()
            self._cond.notify_all()
        self._hub.unsubscribe(self)

    def __iter__(self) -> Iterator[Snapshot]:
        while not self._closed:
            item = self.get()
            if item is not None:
                yield item

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

class BroadcastHub:
    def __init__(self, capacity: int = CHANNEL_CAPACITY):
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._lock = threading.Lock()
        self._subs: list[Subscription] = []

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subs)

    def subscribe(self) -> Subscription:
        sub = Subscription(self, self.capacity)
        with self._lock:
            self._subs.append(sub)
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        with self._lock:
            try:
                self._subs.remove(sub)
            except ValueError:
                pass

    def publish(self, snapshot: Snapshot) -> int:
        """Hand snapshot to every current subscriber; returns how many got it."""
        with self._lock:
            subs = list(self._subs)
        for sub in subs:
            before = sub.dropped
            sub._push(list(snapshot))
            if sub.dropped != before:
                logger.debug("subscriber buffer full, dropped oldest snapshot (%d so far)", sub.dropped)
        return len(subs)
