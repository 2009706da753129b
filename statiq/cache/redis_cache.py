"""Redis-backed cache layer."""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Iterator
from datetime import timedelta
from typing import Any

import redis
import redis.asyncio as aioredis

from statiq.cache.layer import CacheLayer, _to_timedelta
from statiq.config import RedisConfig
from statiq.errors import CacheError

_log = logging.getLogger(__name__)
_SCAN_COUNT = 100


@contextlib.contextmanager
def _redis_errors() -> Iterator[None]:
    try:
        yield
    except redis.RedisError as exc:
        raise CacheError(exc) from exc


class RedisCache(CacheLayer):
    """Stores JSON-encoded values in Redis with a per-entry expiry."""

    def __init__(
        self,
        client: Any,
        default_ttl: timedelta | float = 300,
        count_ttl: timedelta | float = 60,
    ) -> None:
        self._client = client
        self.default_ttl = _to_timedelta(default_ttl)
        self.count_ttl = _to_timedelta(count_ttl)

    @classmethod
    def from_config(cls, cfg: RedisConfig) -> RedisCache:
        """Create a cache with an asyncio client for ``cfg.url``."""
        try:
            client = aioredis.Redis.from_url(cfg.url, max_connections=cfg.pool_size)
        except (redis.RedisError, ValueError) as exc:
            raise CacheError(exc) from exc
        return cls(client, cfg.default_ttl_secs, cfg.count_ttl_secs)

    async def get(self, key: str) -> Any | None:
        with _redis_errors():
            raw = await self._client.get(key)
        if raw is None:
            return None
        _log.debug("Cache hit: %s", key)
        return self._loads(raw)

    async def set(self, key: str, value: Any, ttl: timedelta | float) -> None:
        payload = self._dumps(value)
        seconds = int(_to_timedelta(ttl).total_seconds())
        with _redis_errors():
            await self._client.set(key, payload, ex=seconds)
        _log.debug("Cache set: %s (ttl %ss)", key, seconds)

    async def invalidate_entry(self, prefix: str, id: str) -> None:
        key = f"{prefix}::GetById::{id}"
        with _redis_errors():
            await self._client.delete(key)
        _log.debug("Cache invalidated entry: %s", key)

    async def invalidate_table(self, prefix: str) -> None:
        """Delete every key under ``prefix::`` with an incremental SCAN."""
        pattern = f"{prefix}::*"
        cursor = 0
        total_deleted = 0
        with _redis_errors():
            while True:
                cursor, keys = await self._client.scan(
                    cursor=cursor, match=pattern, count=_SCAN_COUNT
                )
                if keys:
                    pipe = self._client.pipeline(transaction=False)
                    for key in keys:
                        pipe.delete(key)
                    await pipe.execute()
                    total_deleted += len(keys)
                if int(cursor) == 0:
                    break
        if total_deleted:
            _log.debug("Cache invalidated table %s (%d keys)", pattern, total_deleted)