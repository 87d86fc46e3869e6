from __future__ import annotations
from pathlib import Path
import json
import logging
import re
from dataclasses import dataclass
from typing import Optional

import yaml

from .models import Service

logger = logging.getLogger(__name__)

class RuleError(ValueError):
    """A recognition rule file could not be read or has the wrong shape."""

@dataclass
class RecognitionRule:
    label: str
    match_name: str | None = None
    match_cmd: str | None = None
    match_port: int | None = None

def _matches(pattern: str, hay: str, exact: bool) -> bool:
    """'/re/' and '/re/i' are regexes, anything else a case-insensitive substring (or equality)."""
    if pattern.startswith('/') and pattern.endswith(('/i', '/I')) and len(pattern) > 3:
        return re.search(pattern[1:-2], hay, flags=re.IGNORECASE) is not None
    if pattern.startswith('/') and pattern.endswith('/') and len(pattern) > 2:
        return re.search(pattern[1:-1], hay) is not None
    if exact:
        return pattern.lower() == hay.lower()
    return pattern.lower() in hay.lower()

def recognize(svc: Service, rules: list[RecognitionRule]) -> Optional[str]:
    for r in rules:
        if r.match_name and svc.process and _matches(r.match_name, svc.process, exact=True):
            return r.label
        if r.match_cmd and svc.command_line and _matches(r.match_cmd, svc.command_line, exact=False):
            return r.label
        if r.match_port is not None and r.match_port == svc.port:
            return r.label
    return None

DEFAULT_RULES: list[RecognitionRule] = [
    RecognitionRule(label="Docker", match_name="dockerd", match_cmd="docker"),
    RecognitionRule(label="Vite", match_name="vite", match_cmd="vite"),
    RecognitionRule(label="Node.js", match_name="node", match_cmd="node"),
    RecognitionRule(label="MongoDB", match_name="mongod", match_cmd="mongod", match_port=27017),
    RecognitionRule(label="PostgreSQL", match_name="/postgres/i", match_cmd="postgres", match_port=5432),
    RecognitionRule(label="Redis", match_name="/redis/i", match_cmd="redis", match_port=6379),
    RecognitionRule(label="Ollama", match_name="ollama", match_cmd="ollama", match_port=11434),
]

def load_rules(path: Optional[str | Path]) -> list[RecognitionRule]:
    if not path:
        return list(DEFAULT_RULES)
    p = Path(path).expanduser().resolve()
    if not p.exists():
        logger.warning("rules not found: %s, using built-in rules", p)
        return list(DEFAULT_RULES)
    txt = p.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(txt) if p.suffix in (".yaml", ".yml") else json.loads(txt)
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise RuleError(f"cannot parse {p}: {exc}") from exc
    if data is None:
        return []
    if not isinstance(data, list):
        raise RuleError(f"{p}: expected a list of rules")
    try:
        rules = [RecognitionRule(**r) for r in data]
    except TypeError as exc:
        raise RuleError(f"{p}: {exc}") from exc
    logger.info("loaded %d recognition rules from %s", len(rules), p)
    return rules
