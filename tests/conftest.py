"""Shared fixtures: a canned discovery backend, a state handle and a Flask client."""

import socket

import pytest

from portwatch.config import CFG
from portwatch.state import ServiceState
from portwatch.web import create_app


class StaticDiscovery:
    """Discovery backend returning whatever the test put in `infos`."""

    def __init__(self, infos=None):
        self.infos = list(infos or [])
        self.calls = 0

    def discover(self):
        self.calls += 1
        return list(self.infos)


@pytest.fixture
def discovery():
    return StaticDiscovery()


@pytest.fixture
def state(discovery):
    cfg = CFG(probe_timeout=0.2, keepalive=0.05, channel_capacity=4)
    return ServiceState(cfg=cfg, discovery=discovery)


@pytest.fixture
def client(state):
    app = create_app(state)
    app.config["TESTING"] = True
    return app.test_client()


@pytest.fixture
def listener():
    """A loopback TCP listener on a free port; yields the port."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    sock.listen(8)
    try:
        yield sock.getsockname()[1]
    finally:
        sock.close()


@pytest.fixture
def closed_port():
    """A port that nothing listens on (bound then released)."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port

