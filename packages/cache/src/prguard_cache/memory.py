"""In-memory cache, the default for every run."""

from __future__ import annotations

from typing import Any

from prguard_cache.base import MISS, BaseCache


class MemoryCache(BaseCache):
    def __init__(self) -> None:
        self._entries: dict[str, Any] = {}

    def get(self, key: str) -> Any:
        return self._entries.get(key, MISS)

    def set(self, key: str, value: Any) -> Any:
        self._entries[key] = value
        return value

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries
