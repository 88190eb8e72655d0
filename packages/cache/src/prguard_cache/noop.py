"""No-op cache: every read misses and nothing is kept.

Using a NoOpCache rather than None lets the forge context always call
cache.get()/cache.set() without conditional checks.
"""

from __future__ import annotations

from typing import Any

from prguard_cache.base import MISS, BaseCache


class NoOpCache(BaseCache):
    def get(self, key: str) -> Any:
        return MISS

    def set(self, key: str, value: Any) -> Any:
        return value  # intentional no-op

    def clear(self) -> None:
        pass
