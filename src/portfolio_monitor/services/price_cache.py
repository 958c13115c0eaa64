"""Key -> value cache with per-entry expiry"""

import time
from typing import Any, Callable, Dict, Hashable, Optional
from pydantic import BaseModel


class CachedValue(BaseModel):
    """Cached value with its expiry on the cache clock"""
    value: Any
    expires_at: float


class TTLCache:
    """
    Cache whose entries expire ttl_seconds after they are set.

    A TTL of 0 disables caching. The clock defaults to time.monotonic and can
    be injected for tests.
    """

    def __init__(self, ttl_seconds: float, clock: Optional[Callable[[], float]] = None):
        if ttl_seconds < 0:
            raise ValueError(f"TTL must be non-negative, got {ttl_seconds}")
        self.ttl_seconds = ttl_seconds
        self._clock = clock or time.monotonic
        self._entries: Dict[Hashable, CachedValue] = {}

    def get(self, key: Hashable) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: Hashable, value: Any, ttl_seconds: Optional[float] = None):
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        if ttl <= 0:
            return
        self._entries[key] = CachedValue(value=value, expires_at=self._clock() + ttl)

    def invalidate(self, key: Hashable):
        self._entries.pop(key, None)

    def clear(self):
        self._entries.clear()

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        now = self._clock()
        return sum(1 for entry in self._entries.values() if now < entry.expires_at)
