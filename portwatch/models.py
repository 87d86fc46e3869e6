from __future__ import annotations
from dataclasses import dataclass, fields
from enum import Enum
from functools import total_ordering
from typing import Any, Optional

class ServiceStatus(str, Enum):
    OPEN = "Open"
    CLOSED = "Closed"

    @property
    def rank(self) -> int:
        return 0 if self is ServiceStatus.OPEN else 1

@dataclass(frozen=True)
class ServiceInfo:
    port: int
    process: Optional[str] = None
    pid: Optional[int] = None
    user: Optional[str] = None
    protocol: Optional[str] = None
    local_address: Optional[str] = None
    fd: Optional[str] = None
    type_field: Optional[str] = None  # lsof TYPE column, e.g. 'IPv4'
    device: Optional[str] = None
    size_off: Optional[str] = None
    node: Optional[str] = None
    command_line: Optional[str] = None
    exe_path: Optional[str] = None
    start_time: Optional[str] = None
    ppid: Optional[int] = None

@total_ordering
@dataclass(frozen=True)
class Service:
    port: int
    status: ServiceStatus
    process: Optional[str] = None
    pid: Optional[int] = None
    user: Optional[str] = None
    protocol: Optional[str] = None
    local_address: Optional[str] = None
    fd: Optional[str] = None
    type_field: Optional[str] = None
    device: Optional[str] = None
    size_off: Optional[str] = None
    node: Optional[str] = None
    command_line: Optional[str] = None
    exe_path: Optional[str] = None
    start_time: Optional[str] = None
    ppid: Optional[int] = None

    @classmethod
    def from_info(cls, info: ServiceInfo, status: ServiceStatus) -> "Service":
        values = {f.name: getattr(info, f.name) for f in fields(info)}
        return cls(status=status, **values)

    def sort_key(self) -> tuple:
        return tuple(field_key(self, f.name) for f in fields(self))

    def __lt__(self, other: Any) -> bool:
        if not isinstance(other, Service):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def to_dict(self) -> dict[str, Any]:
        d = {f.name: getattr(self, f.name) for f in fields(self)}
        d["status"] = self.status.value
        return d

# client-facing sort names -> attribute names
SORT_FIELDS: dict[str, str] = {
    "port": "port",
    "status": "status",
    "process": "process",
    "pid": "pid",
    "user": "user",
    "protocol": "protocol",
    "local_address": "local_address",
    "fd": "fd",
    "type": "type_field",
    "type_field": "type_field",
    "device": "device",
    "size_off": "size_off",
    "node": "node",
    "command_line": "command_line",
    "exe_path": "exe_path",
    "start_time": "start_time",
    "ppid": "ppid",
}

def field_key(service: Service, attr: str) -> tuple:
    """Comparable key for one attribute; ``None`` sorts before any value."""
    value = getattr(service, attr)
    if value is None:
        return (0,)
    if isinstance(value, ServiceStatus):
        return (1, value.rank)
    return (1, value)
