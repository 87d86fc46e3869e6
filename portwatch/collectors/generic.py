from __future__ import annotations
import logging
import socket
import time
from typing import Optional

import psutil

from ..models import ServiceInfo
from .base import dedupe

logger = logging.getLogger(__name__)

def _family_name(family) -> Optional[str]:
    if family == socket.AF_INET:
        return "IPv4"
    if family == socket.AF_INET6:
        return "IPv6"
    return None

def _text(s: Optional[str]) -> Optional[str]:
    # psutil decodes argv/exe/name with surrogateescape; orjson rejects lone surrogates
    if s is None:
        return None
    return s.encode("utf-8", "surrogateescape").decode("utf-8", "replace")

def _proc_fields(pid: int) -> dict:
    """Name, owner and launch details for pid; missing ones are left out."""
    out: dict = {}
    try:
        p = psutil.Process(pid)
    except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
        return out
    getters = {
        "process": p.name,
        "user": p.username,
        "exe_path": p.exe,
        "ppid": p.ppid,
    }
    with p.oneshot():
        for key, getter in getters.items():
            try:
                value = getter() or None
                out[key] = _text(value) if isinstance(value, str) else value
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess, OSError):
                pass
        try:
            cmdline = p.cmdline()
            if cmdline:
                out["command_line"] = _text(" ".join(cmdline))
        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess, OSError):
            pass
        try:
            out["start_time"] = time.ctime(p.create_time())
        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess, OSError):
            pass
    return out

class PsutilDiscovery:
    """Listening sockets straight from psutil, for hosts without lsof."""

    def discover(self) -> list[ServiceInfo]:
        try:
            conns = psutil.net_connections(kind='tcp')
        except (psutil.AccessDenied, OSError) as exc:
            logger.warning("psutil cannot read the socket table: %s", exc)
            return []
        infos: list[ServiceInfo] = []
        procs: dict[int, dict] = {}
        for c in conns:
            if c.status != psutil.CONN_LISTEN or not c.laddr:
                continue
            ip = c.laddr.ip if hasattr(c.laddr, 'ip') else c.laddr[0]
            port = c.laddr.port if hasattr(c.laddr, 'port') else c.laddr[1]
            extra: dict = {}
            if c.pid:
                if c.pid not in procs:
                    procs[c.pid] = _proc_fields(c.pid)
                extra = procs[c.pid]
            infos.append(ServiceInfo(
                port=port,
                pid=c.pid or None,
                protocol="TCP",
                local_address=ip,
                fd=str(c.fd) if c.fd is not None and c.fd >= 0 else None,
                type_field=_family_name(c.family),
                **extra,
            ))
        return dedupe(infos)
