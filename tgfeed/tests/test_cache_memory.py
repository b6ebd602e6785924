import time

import pytest

from tgfeed.cache import MemoryCacheClient, get_cache_client
from tgfeed.config import CacheConfig


@pytest.mark.asyncio
async def test_set_and_get():
    async with MemoryCacheClient(CacheConfig()) as cache:
        await cache.set("key", b"feed", 60)

        assert await cache.get("key") == b"feed"
        assert len(cache) == 1


@pytest.mark.asyncio
async def test_missing_key_is_none():
    async with MemoryCacheClient() as cache:
        assert await cache.get("missing") is None


@pytest.mark.asyncio
async def test_zero_ttl_is_a_no_op():
    async with MemoryCacheClient() as cache:
        await cache.set("key", b"feed", 0)

        assert await cache.get("key") is None
        assert len(cache) == 0


@pytest.mark.asyncio
async def test_expired_entry_is_a_miss():
    async with MemoryCacheClient() as cache:
        await cache.set("key", b"feed", 60)
        cache._entries["key"] = cache._entries["key"]._replace(deadline=time.monotonic() - 1)

        assert await cache.get("key") is None
        assert len(cache) == 0


@pytest.mark.asyncio
async def test_close_stops_cleanup_task():
    cache = MemoryCacheClient()
    await cache.set("key", b"feed", 60)
    assert cache._sweeper is not None

    await cache.close()

    assert cache._sweeper is None
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_factory_defaults_to_memory():
    cache = await get_cache_client(CacheConfig())
    assert isinstance(cache, MemoryCacheClient)
    await cache.close()


@pytest.mark.asyncio
async def test_factory_uses_memory_when_disabled():
    cache = await get_cache_client(
        CacheConfig(enabled=False, backend="redis", redis_url="redis://localhost:6379/0")
    )
    assert isinstance(cache, MemoryCacheClient)
    await cache.close()


@pytest.mark.asyncio
async def test_sweep_removes_only_stale_entries():
    async with MemoryCacheClient() as cache:
        await cache.set("fresh", b"a", 60)
        await cache.set("stale", b"b", 60)
        cache._entries["stale"] = cache._entries["stale"]._replace(deadline=time.monotonic() - 1)

        assert await cache.sweep() == 1
        assert await cache.get("fresh") == b"a"
        assert len(cache) == 1
