"""Cache key construction.

A key is the JSON serialization of the operation name followed by its ordered
arguments. Callers must pass every argument that affects the result (filters
included), otherwise two different requests share one entry.
"""

from __future__ import annotations

import dataclasses
import enum
import json
from typing import Any


def _normalize(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        fields = {f.name: _normalize(getattr(value, f.name)) for f in dataclasses.fields(value)}
        return {"__type__": type(value).__name__, **fields}
    if isinstance(value, enum.Enum):
        return _normalize(value.value)
    if isinstance(value, (set, frozenset)):
        # Sets compare order-independently; sort their serialized members.
        return sorted((_normalize(v) for v in value), key=lambda v: json.dumps(v, sort_keys=True))
    if isinstance(value, (list, tuple)):
        return [_normalize(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _normalize(v) for k, v in value.items()}
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    # Singletons such as the "current user" login marker serialize by repr.
    return repr(value)


def cache_key(operation: str, *args: Any) -> str:
    """Return a deterministic key for (operation, args)."""
    return json.dumps([operation, *(_normalize(a) for a in args)], sort_keys=True, separators=(",", ":"))
