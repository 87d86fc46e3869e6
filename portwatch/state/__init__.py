from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional

from ..collectors.base import ServiceDiscovery
from ..config import CFG
from ..rules import RecognitionRule
from .broadcast import BroadcastHub, Subscription
from .cache import SnapshotCache

@dataclass
class ServiceState:
    """Everything the poller and the HTTP handlers share. Built once in main()."""
    cfg: CFG
    discovery: ServiceDiscovery
    cache: SnapshotCache = field(default_factory=SnapshotCache)
    hub: Optional[BroadcastHub] = None
    rules: list[RecognitionRule] = field(default_factory=list)

    def __post_init__(self):
        if self.hub is None:
            self.hub = BroadcastHub(self.cfg.channel_capacity)

__all__ = ["ServiceState", "SnapshotCache", "BroadcastHub", "Subscription"]
