from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

DEFAULT_TTL = 5 * 60


@dataclass(frozen=True)
class CacheEntry:
    payload: Any
    written_at: float


class WeatherCache:
    """Process-wide TTL map keyed by canonical location keys.

    An entry is valid for ``ttl`` seconds after it was written, inclusive.
    Expired entries read as misses and are dropped on that read. There is no
    locking: concurrent writers for the same key race and the last one wins.
    """

    def __init__(self, ttl: float = DEFAULT_TTL, time_func: Callable[[], float] = time.monotonic) -> None:
        self.ttl = ttl
        self._time_func = time_func
        self._storage: Dict[str, CacheEntry] = {}

    def get(self, key: str) -> Optional[Any]:
        entry = self._storage.get(key)
        if entry is None:
            return None
        if self._time_func() - entry.written_at > self.ttl:
            self._storage.pop(key, None)
            return None
        return entry.payload

    def set(self, key: str, value: Any) -> None:
        self._storage[key] = CacheEntry(payload=value, written_at=self._time_func())

    def clear(self) -> None:
        self._storage.clear()

    def __len__(self) -> int:
        return len(self._storage)


__all__ = ["CacheEntry", "WeatherCache", "DEFAULT_TTL"]
