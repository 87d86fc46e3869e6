from __future__ import annotations
from typing import Any, Iterable

import orjson

from ..models import Service

class SerializationError(ValueError):
    """A record or snapshot could not be encoded as JSON."""

def _default(obj: Any) -> Any:
    if isinstance(obj, Service):
        return obj.to_dict()
    raise TypeError(f"unsupported type: {type(obj).__name__}")

def dumps(obj: Any) -> str:
    try:
        return orjson.dumps(obj, default=_default, option=orjson.OPT_PASSTHROUGH_DATACLASS).decode()
    except orjson.JSONEncodeError as exc:
        raise SerializationError(str(exc)) from exc

def dumps_snapshot(services: Iterable[Service]) -> str:
    return dumps([s.to_dict() for s in services])
