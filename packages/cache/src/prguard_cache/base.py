"""Abstract response-cache interface.

Every forge read goes through a cache owned by the forge context. Callers
depend on BaseCache, not on a concrete backend, so tests can hand each case a
fresh MemoryCache (or a NoOpCache to force every read to hit the API).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class _Miss:
    """Sentinel returned by BaseCache.get() when nothing is stored under a key."""

    _instance: _Miss | None = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISS"

    def __bool__(self) -> bool:
        return False


MISS = _Miss()


class BaseCache(ABC):
    """Key/value store valid for the lifetime of one run.

    No TTL and no eviction: a run is short-lived and bounded by the amount of
    data the forge hands back. Not thread-safe; a run is single-threaded.
    """

    @abstractmethod
    def get(self, key: str) -> Any:
        """Return the value stored under key, or MISS.

        Falsy values (empty lists, None) are real hits, which is why MISS is
        a dedicated sentinel.
        """

    @abstractmethod
    def set(self, key: str, value: Any) -> Any:
        """Store value under key and return it."""

    @abstractmethod
    def clear(self) -> None:
        """Drop every entry."""

    def __len__(self) -> int:
        return 0
