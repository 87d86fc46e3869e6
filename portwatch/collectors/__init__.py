from __future__ import annotations
import shutil

from ..config import CFG
from .base import ServiceDiscovery, dedupe
from .generic import PsutilDiscovery
from .liveness import probe, scan_all, scan_one
from .loop import collector_loop, poll_cycle, start_collector
from .lsof import LsofDiscovery

def make_discovery(cfg: CFG) -> ServiceDiscovery:
    if cfg.collector == "psutil":
        return PsutilDiscovery()
    if cfg.collector == "lsof" or shutil.which("lsof"):
        return LsofDiscovery(tool_timeout=cfg.tool_timeout)
    return PsutilDiscovery()
