from __future__ import annotations
import argparse
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

POLL_INTERVAL = 5.0
PROBE_TIMEOUT = 0.2
CHANNEL_CAPACITY = 16
KEEPALIVE_INTERVAL = 15.0
TOOL_TIMEOUT = 10.0

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

COLLECTORS = ("auto", "lsof", "psutil")

@dataclass
class CFG:
    host: str = "127.0.0.1"
    port: int = 3000
    interval: float = POLL_INTERVAL
    probe_timeout: float = PROBE_TIMEOUT
    channel_capacity: int = CHANNEL_CAPACITY
    keepalive: float = KEEPALIVE_INTERVAL
    collector: str = "auto"
    tool_timeout: float = TOOL_TIMEOUT
    rules_path: Optional[Path] = None
    log_level: str = "INFO"

def _positive_float(s: str) -> float:
    try:
        v = float(s)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {s!r}")
    if v <= 0:
        raise argparse.ArgumentTypeError(f"must be > 0: {s!r}")
    return v

def _positive_int(s: str) -> int:
    try:
        v = int(s)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {s!r}")
    if v <= 0:
        raise argparse.ArgumentTypeError(f"must be > 0: {s!r}")
    return v

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description='Live view of TCP services listening on this host')
    ap.add_argument('--host', type=str, default=CFG.host, help='bind address of the HTTP API')
    ap.add_argument('--port', type=int, default=CFG.port)
    ap.add_argument('--interval', type=_positive_float, default=POLL_INTERVAL, help='seconds between poll cycles')
    ap.add_argument('--probe-timeout', type=_positive_float, default=PROBE_TIMEOUT, help='liveness probe timeout in seconds')
    ap.add_argument('--channel-capacity', type=_positive_int, default=CHANNEL_CAPACITY,
                    help='snapshots buffered per event-stream subscriber before the oldest is dropped')
    ap.add_argument('--keepalive', type=_positive_float, default=KEEPALIVE_INTERVAL, help='seconds between SSE keep-alive frames')
    ap.add_argument('--collector', choices=COLLECTORS, default='auto', help='process table backend')
    ap.add_argument('--tool-timeout', type=_positive_float, default=TOOL_TIMEOUT, help='max seconds to wait for lsof/ps')
    ap.add_argument('--rules', type=str, default=None, help='YAML or JSON file with recognition rules')
    ap.add_argument('--log-level', type=str.upper, default='INFO',
                    choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    return ap

def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)

def init_cfg_from_args(args) -> CFG:
    cfg = CFG()
    cfg.host = args.host
    cfg.port = int(args.port)
    cfg.interval = float(args.interval)
    cfg.probe_timeout = float(args.probe_timeout)
    cfg.channel_capacity = int(args.channel_capacity)
    cfg.keepalive = float(args.keepalive)
    cfg.collector = args.collector
    cfg.tool_timeout = float(args.tool_timeout)
    cfg.log_level = args.log_level
    if getattr(args, "rules", None):
        cfg.rules_path = Path(args.rules).expanduser()
    return cfg
