"""Liveness probes: is anything accepting connections on 127.0.0.1:<port>?"""

from __future__ import annotations
import socket
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Sequence

from ..config import PROBE_TIMEOUT
from ..models import Service, ServiceInfo, ServiceStatus

PROBE_HOST = "127.0.0.1"

def probe(port: int, timeout: float = PROBE_TIMEOUT) -> ServiceStatus:
    try:
        with socket.create_connection((PROBE_HOST, port), timeout=timeout):
            return ServiceStatus.OPEN
    except OSError:
        # refused, unreachable and socket.timeout all land here
        return ServiceStatus.CLOSED

def scan_all(infos: Sequence[ServiceInfo], timeout: float = PROBE_TIMEOUT) -> list[Service]:
    """
    Probe every port at once and wait for all of them.

    One worker per info, so the call takes about as long as the slowest
    probe. Results keep the order of `infos`.
    """
    if not infos:
        return []
    with ThreadPoolExecutor(max_workers=len(infos), thread_name_prefix="probe") as pool:
        statuses = list(pool.map(lambda info: probe(info.port, timeout), infos))
    return [Service.from_info(info, status) for info, status in zip(infos, statuses)]

def scan_one(infos: Sequence[ServiceInfo], port: int, timeout: float = PROBE_TIMEOUT) -> Optional[Service]:
    info = next((i for i in infos if i.port == port), None)
    if info is None:
        return None
    return Service.from_info(info, probe(port, timeout))
