"""In-memory TTL cache for upstream API responses."""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Generic, TypedDict, TypeVar


_CacheValueT = TypeVar("_CacheValueT")

Clock = Callable[[], float]


class CacheStats(TypedDict):
    size: int
    keys: list[str]


@dataclass(slots=True)
class CacheEntry(Generic[_CacheValueT]):
    """Cached value together with the clock reading taken when it was stored."""

    value: _CacheValueT
    inserted_at: float


class TTLCache(Generic[_CacheValueT]):
    """Key/value cache whose entries expire ``ttl`` seconds after insertion.

    Expired entries are not evicted on read; they are reported as absent and
    keep their slot until the key is written again or :meth:`clear` runs.
    Passing ``max_entries`` bounds the mapping with least-recently-used
    eviction.
    """

    def __init__(
        self,
        ttl: float,
        *,
        max_entries: int | None = None,
        clock: Clock = time.monotonic,
    ) -> None:
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        if max_entries is not None and max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry[_CacheValueT]] = OrderedDict()
        self._lock = threading.Lock()

    def _is_fresh(self, entry: CacheEntry[_CacheValueT]) -> bool:
        return self._clock() - entry.inserted_at < self.ttl

    def get(self, key: str) -> _CacheValueT | None:
        """Return the value stored under ``key`` unless it is missing or stale."""

        with self._lock:
            entry = self._entries.get(key)
            if entry is None or not self._is_fresh(entry):
                return None
            if self.max_entries is not None:
                self._entries.move_to_end(key)
            return entry.value

    def set(self, key: str, value: _CacheValueT) -> None:
        """Store ``value`` under ``key``, replacing any previous entry."""

        with self._lock:
            if key in self._entries:
                self._entries.move_to_end(key)
            self._entries[key] = CacheEntry(value=value, inserted_at=self._clock())
            if self.max_entries is not None:
                while len(self._entries) > self.max_entries:
                    self._entries.popitem(last=False)

    def clear(self) -> None:
        """Remove all cached entries."""

        with self._lock:
            self._entries.clear()

    def stats(self) -> CacheStats:
        """Return the number of stored entries and their keys, stale ones included."""

        with self._lock:
            return {"size": len(self._entries), "keys": list(self._entries)}

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and self._is_fresh(entry)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = ["CacheEntry", "CacheStats", "Clock", "TTLCache"]
