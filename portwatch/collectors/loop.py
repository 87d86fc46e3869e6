from __future__ import annotations
import logging
import threading
import time
from typing import TYPE_CHECKING, Optional

from ..config import POLL_INTERVAL
from ..models import Service
from .liveness import scan_all

if TYPE_CHECKING:
    from ..state import ServiceState

logger = logging.getLogger(__name__)

def poll_cycle(state: "ServiceState", baseline: list[Service]) -> list[Service]:
    """
    One discover -> probe -> cache -> publish round.

    The cache is always replaced; subscribers only hear about it when the
    snapshot differs from `baseline` (order included). Returns the new baseline.
    """
    started = time.monotonic()
    infos = state.discovery.discover()
    services = scan_all(infos, state.cfg.probe_timeout)
    state.cache.replace(services)
    if services != baseline:
        n = state.hub.publish(services)
        logger.info("services changed: %d listening, pushed to %d subscriber(s)", len(services), n)
    logger.debug("poll cycle done in %.3fs (%d services)", time.monotonic() - started, len(services))
    return services

def collector_loop(state: "ServiceState", interval: float = POLL_INTERVAL,
                   stop: Optional[threading.Event] = None) -> None:
    stop = stop or threading.Event()
    baseline: list[Service] = []
    while not stop.is_set():
        try:
            baseline = poll_cycle(state, baseline)
        except Exception:
            logger.exception("poll cycle failed, keeping previous snapshot")
        stop.wait(interval)

def start_collector(state: "ServiceState", stop: Optional[threading.Event] = None) -> threading.Thread:
    t = threading.Thread(target=collector_loop, args=(state, state.cfg.interval, stop),
                         daemon=True, name="collector")
    t.start()
    return t
