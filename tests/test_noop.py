from __future__ import annotations

from datetime import timedelta

import pytest

from statiq.cache.noop import NoCache


def test_ttls():
    cache = NoCache()
    assert cache.default_ttl == timedelta(seconds=300)
    assert cache.count_ttl == timedelta(seconds=60)


@pytest.mark.asyncio
async def test_writes_are_not_stored():
    cache = NoCache()
    await cache.set("k", {"a": 1}, 10)
    assert await cache.get("k") is None


@pytest.mark.asyncio
async def test_vec_and_scalar_always_miss():
    cache = NoCache()
    await cache.set_vec("v", [1, 2], 10)
    await cache.set_scalar("s", 3, 10)
    assert await cache.get_vec("v") is None
    assert await cache.get_scalar("s") is None


@pytest.mark.asyncio
async def test_invalidation_leaves_cache_empty():
    cache = NoCache()
    assert await cache.invalidate_entry("p", "1") is None
    assert await cache.invalidate_table("p") is None
    assert await cache.get("p::1") is None