from __future__ import annotations
from typing import Iterable, Protocol, runtime_checkable

from ..models import ServiceInfo

@runtime_checkable
class ServiceDiscovery(Protocol):
    """Anything that can list the TCP services listening on this host."""

    def discover(self) -> list[ServiceInfo]: ...

def dedupe(infos: Iterable[ServiceInfo]) -> list[ServiceInfo]:
    """Drop repeated (process, pid, port) entries, keeping the first one."""
    seen: set[tuple] = set()
    out: list[ServiceInfo] = []
    for info in infos:
        key = (info.process, info.pid, info.port)
        if key in seen:
            continue
        seen.add(key)
        out.append(info)
    return out
