"""In-process cache with a capacity bound and a cache-wide time to live.

It does not survive restarts and is not shared between processes; useful for
single-process deployments or as a fast first layer in front of Redis.
"""

from __future__ import annotations

import threading
from datetime import timedelta
from typing import Any

from cachetools import TTLCache

from statiq.cache.layer import CacheLayer, _to_timedelta

_TABLE_SUFFIXES = ("GetAll", "Count", "GetById")


class LocalCache(CacheLayer):
    """Process-local cache; every entry lives for ``default_ttl``."""

    def __init__(
        self,
        max_capacity: int,
        default_ttl: timedelta | float,
        count_ttl: timedelta | float,
    ) -> None:
        self.max_capacity = int(max_capacity)
        if self.max_capacity < 0:
            raise ValueError("max_capacity must not be negative")
        self.default_ttl = _to_timedelta(default_ttl)
        self.count_ttl = _to_timedelta(count_ttl)
        self._entries: TTLCache = TTLCache(
            maxsize=self.max_capacity, ttl=self.default_ttl.total_seconds()
        )
        self._lock = threading.Lock()

    async def get(self, key: str) -> Any | None:
        with self._lock:
            data = self._entries.get(key)
        return None if data is None else self._loads(data)

    async def set(self, key: str, value: Any, ttl: timedelta | float) -> None:
        """Store ``value``; the per-call ``ttl`` is ignored in favour of ``default_ttl``."""
        data = self._dumps(value)
        if self.max_capacity == 0:
            return
        with self._lock:
            self._entries[key] = data

    async def invalidate_entry(self, prefix: str, id: str) -> None:
        with self._lock:
            self._entries.pop(f"{prefix}::{id}", None)

    async def invalidate_table(self, prefix: str) -> None:
        """Drop the well-known table keys; no prefix scan is available here."""
        with self._lock:
            for suffix in _TABLE_SUFFIXES:
                self._entries.pop(f"{prefix}::{suffix}", None)
            self._entries.expire()