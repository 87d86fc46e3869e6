"""Tests for command line configuration and backend selection."""

import shutil

import pytest

from portwatch.collectors import LsofDiscovery, PsutilDiscovery, make_discovery
from portwatch.config import CFG, init_cfg_from_args, parse_args


class TestConfig:
    def test_defaults(self):
        cfg = init_cfg_from_args(parse_args([]))
        assert cfg == CFG()
        assert (cfg.host, cfg.port) == ("127.0.0.1", 3000)
        assert cfg.interval == 5.0
        assert cfg.probe_timeout == 0.2
        assert cfg.channel_capacity == 16

    def test_overrides(self):
        cfg = init_cfg_from_args(parse_args([
            "--host", "0.0.0.0", "--port", "8080", "--interval", "2.5", "--probe-timeout", "0.5",
            "--channel-capacity", "4", "--collector", "psutil", "--rules", "~/rules.yaml", "--log-level", "debug",
        ]))
        assert cfg.host == "0.0.0.0"
        assert cfg.port == 8080
        assert cfg.interval == 2.5
        assert cfg.probe_timeout == 0.5
        assert cfg.channel_capacity == 4
        assert cfg.collector == "psutil"
        assert cfg.rules_path is not None and cfg.rules_path.name == "rules.yaml"
        assert cfg.log_level == "DEBUG"

    @pytest.mark.parametrize("argv", [
        ["--interval", "0"],
        ["--probe-timeout", "-1"],
        ["--channel-capacity", "0"],
        ["--collector", "netstat"],
        ["--interval", "soon"],
    ])
    def test_rejects_bad_values(self, argv):
        with pytest.raises(SystemExit) as exc:
            parse_args(argv)
        assert exc.value.code == 2


class TestMakeDiscovery:
    def test_forced_psutil(self):
        assert isinstance(make_discovery(CFG(collector="psutil")), PsutilDiscovery)

    def test_forced_lsof(self):
        d = make_discovery(CFG(collector="lsof", tool_timeout=3.0))
        assert isinstance(d, LsofDiscovery)
        assert d.tool_timeout == 3.0

    def test_auto_with_lsof(self, monkeypatch):
        monkeypatch.setattr(shutil, "which", lambda name: "/usr/sbin/lsof")
        assert isinstance(make_discovery(CFG()), LsofDiscovery)

    def test_auto_without_lsof(self, monkeypatch):
        monkeypatch.setattr(shutil, "which", lambda name: None)
        assert isinstance(make_discovery(CFG()), PsutilDiscovery)
