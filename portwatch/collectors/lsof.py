from __future__ import annotations
import logging
import subprocess
from dataclasses import replace
from typing import Callable, Dict, List, Optional, Tuple

from ..config import TOOL_TIMEOUT
from ..models import ServiceInfo
from .base import dedupe

logger = logging.getLogger(__name__)

LSOF_CMD = ["lsof", "-iTCP", "-sTCP:LISTEN", "-P", "-n"]
MIN_COLUMNS = 9

# (command_line, exe_path, start_time, ppid)
ProcDetails = Tuple[Optional[str], Optional[str], Optional[str], Optional[int]]
DetailLookup = Callable[[int], ProcDetails]

def _safe_int(s: str) -> Optional[int]:
    try:
        return int(s)
    except (TypeError, ValueError):
        return None

def _parse_port(s: str) -> Optional[int]:
    if not (s.isascii() and s.isdigit()):
        return None
    port = int(s)
    return port if 0 <= port <= 0xFFFF else None

def parse_name_column(name: str, fallback_protocol: Optional[str] = None
                      ) -> Tuple[Optional[str], Optional[str], Optional[int]]:
    """
    Split an lsof NAME value into (protocol, local_address, port).
      - 'TCP/127.0.0.1:8080' -> ('TCP', '127.0.0.1', 8080)
      - '*:3000'             -> (fallback_protocol, '*', 3000)
      - '[::1]:5432'         -> (fallback_protocol, '[::1]', 5432)
    The port is the last ':' token; a missing or invalid port gives None.
    """
    if not name:
        return fallback_protocol, None, None
    protocol = fallback_protocol
    addr = name
    if '/' in name:
        proto, rest = name.split('/', 1)
        protocol = proto or fallback_protocol
        addr = rest or name
    parts = addr.split(':')
    if len(parts) < 2:
        return protocol, None, None
    return protocol, ':'.join(parts[:-1]), _parse_port(parts[-1])

def parse_lsof_line(line: str) -> Optional[ServiceInfo]:
    """
    One lsof row:
      COMMAND PID USER FD TYPE DEVICE SIZE/OFF NODE NAME [(LISTEN)]
    Returns None for rows that are too short or carry no usable port.
    """
    cols = line.split()
    if len(cols) < MIN_COLUMNS:
        return None
    node = cols[7]
    protocol, local_address, port = parse_name_column(cols[8], fallback_protocol=node)
    if port is None:
        return None
    return ServiceInfo(
        port=port,
        process=cols[0],
        pid=_safe_int(cols[1]),
        user=cols[2],
        protocol=protocol,
        local_address=local_address,
        fd=cols[3],
        type_field=cols[4],
        device=cols[5],
        size_off=cols[6],
        node=node,
    )

def parse_lsof_output(out: str, details: Optional[DetailLookup] = None) -> List[ServiceInfo]:
    infos: List[ServiceInfo] = []
    cache: Dict[int, ProcDetails] = {}
    for line in out.splitlines()[1:]:
        if not line.strip():
            continue
        info = parse_lsof_line(line)
        if info is None:
            logger.debug("skipping lsof line: %r", line)
            continue
        if details is not None and info.pid is not None:
            if info.pid not in cache:
                cache[info.pid] = details(info.pid)
            command_line, exe_path, start_time, ppid = cache[info.pid]
            info = replace(info, command_line=command_line, exe_path=exe_path,
                           start_time=start_time, ppid=ppid)
        infos.append(info)
    return dedupe(infos)

def ps_field(pid: int, fmt: str, timeout: float = TOOL_TIMEOUT) -> Optional[str]:
    """Single `ps -o <fmt>=` value for pid; None when ps fails or prints nothing."""
    try:
        res = subprocess.run(["ps", "-p", str(pid), "-o", f"{fmt}="],
                             stdout=subprocess.PIPE, stderr=subprocess.DEVNULL, timeout=timeout)
    except (OSError, subprocess.SubprocessError):
        return None
    try:
        value = res.stdout.decode("utf-8").strip()
    except UnicodeDecodeError:
        return None
    return value or None

def process_details(pid: int, timeout: float = TOOL_TIMEOUT) -> ProcDetails:
    command_line = ps_field(pid, "command", timeout)
    exe_path = ps_field(pid, "comm", timeout)
    start_time = ps_field(pid, "lstart", timeout)
    ppid = _safe_int(ps_field(pid, "ppid", timeout) or "")
    return command_line, exe_path, start_time, ppid

class LsofDiscovery:
    def __init__(self, tool_timeout: float = TOOL_TIMEOUT):
        self.tool_timeout = tool_timeout

    def _details(self, pid: int) -> ProcDetails:
        return process_details(pid, self.tool_timeout)

    def discover(self) -> List[ServiceInfo]:
        try:
            # lsof exits 1 when nothing matches; stdout is still valid
            res = subprocess.run(LSOF_CMD, stdout=subprocess.PIPE, stderr=subprocess.DEVNULL,
                                 timeout=self.tool_timeout)
        except (OSError, subprocess.SubprocessError) as exc:
            logger.warning("lsof unavailable, no services this cycle: %s", exc)
            return []
        out = res.stdout.decode("utf-8", errors="replace")
        return parse_lsof_output(out, self._details)
