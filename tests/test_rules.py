"""Tests for recognition rules."""

import json

import pytest

from portwatch.models import Service, ServiceStatus
from portwatch.rules import DEFAULT_RULES, RecognitionRule, RuleError, load_rules, recognize


def svc(**kwargs):
    kwargs.setdefault("port", 1)
    return Service(status=ServiceStatus.OPEN, **kwargs)


class TestRecognize:
    def test_by_exact_name(self):
        assert recognize(svc(process="dockerd"), DEFAULT_RULES) == "Docker"

    def test_by_command_substring(self):
        assert recognize(svc(process="python3", command_line="/usr/bin/VITE --port 5173"), DEFAULT_RULES) == "Vite"

    def test_by_port(self):
        assert recognize(svc(port=6379), DEFAULT_RULES) == "Redis"

    def test_regex_name(self):
        assert recognize(svc(process="Postgres.app"), DEFAULT_RULES) == "PostgreSQL"

    def test_first_rule_wins(self):
        rules = [RecognitionRule(label="A", match_port=80), RecognitionRule(label="B", match_port=80)]
        assert recognize(svc(port=80), rules) == "A"

    def test_case_sensitive_regex(self):
        rules = [RecognitionRule(label="X", match_cmd="/Serve/")]
        assert recognize(svc(command_line="serve"), rules) is None
        assert recognize(svc(command_line="Serve"), rules) == "X"

    def test_no_match(self):
        assert recognize(svc(process="mystery", port=12345), DEFAULT_RULES) is None


class TestLoadRules:
    """Tests for load_rules."""

    def test_no_path_gives_defaults(self):
        assert load_rules(None) == DEFAULT_RULES

    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_rules(tmp_path / "nope.yaml") == DEFAULT_RULES

    def test_yaml(self, tmp_path):
        p = tmp_path / "rules.yaml"
        p.write_text("- label: Grafana\n  match_port: 3000\n- label: Caddy\n  match_name: caddy\n", encoding="utf-8")
        rules = load_rules(p)
        assert rules == [RecognitionRule(label="Grafana", match_port=3000), RecognitionRule(label="Caddy", match_name="caddy")]

    def test_json(self, tmp_path):
        p = tmp_path / "rules.json"
        p.write_text(json.dumps([{"label": "Jupyter", "match_cmd": "jupyter"}]), encoding="utf-8")
        assert load_rules(str(p)) == [RecognitionRule(label="Jupyter", match_cmd="jupyter")]

    def test_empty_yaml(self, tmp_path):
        p = tmp_path / "rules.yml"
        p.write_text("", encoding="utf-8")
        assert load_rules(p) == []

    def test_not_a_list(self, tmp_path):
        p = tmp_path / "rules.yaml"
        p.write_text("label: x\n", encoding="utf-8")
        with pytest.raises(RuleError):
            load_rules(p)

    def test_unknown_key(self, tmp_path):
        p = tmp_path / "rules.json"
        p.write_text(json.dumps([{"label": "x", "colour": "red"}]), encoding="utf-8")
        with pytest.raises(RuleError):
            load_rules(p)

    def test_bad_syntax(self, tmp_path):
        p = tmp_path / "rules.json"
        p.write_text("[{", encoding="utf-8")
        with pytest.raises(RuleError):
            load_rules(p)
