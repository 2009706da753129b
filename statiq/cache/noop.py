"""Cache that stores nothing, used when caching is disabled."""

from __future__ import annotations

from datetime import timedelta
from typing import Any

from statiq.cache.layer import CacheLayer


class NoCache(CacheLayer):
    """All reads miss and all writes succeed without storing anything."""

    async def get(self, key: str) -> Any | None:
        return None

    async def set(self, key: str, value: Any, ttl: timedelta | float) -> None:
        return None

    async def invalidate_entry(self, prefix: str, id: str) -> None:
        return None

    async def invalidate_table(self, prefix: str) -> None:
        return None