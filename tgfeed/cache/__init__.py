"""
Cache package for tgfeed.

Rendered feed documents are cached as opaque bytes under a string key. Two
backends share one interface: an in-process dict and Redis.

Contract for every backend:
- ``get`` returns None on a miss and raises CacheError when the backend fails
- ``set`` with a TTL of 0 stores nothing and is not an error
"""
from typing import Optional, Protocol

import structlog

from tgfeed.config import CacheBackend, CacheConfig
from tgfeed.exceptions import CacheError

logger = structlog.get_logger()


class CacheClient(Protocol):
    """Interface the feed pipeline expects from a cache."""

    async def get(self, key: str) -> Optional[bytes]:
        ...

    async def set(self, key: str, value: bytes, ttl: int) -> None:
        ...

    async def close(self) -> None:
        ...

    async def __aenter__(self) -> "CacheClient":
        ...

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        ...


class BaseCacheClient:
    """
    Shared plumbing for cache backends.

    Subclasses implement ``get``, ``set`` and, when they hold resources,
    ``close``.
    """

    def __init__(self, config: CacheConfig):
        self.config = config

    async def get(self, key: str) -> Optional[bytes]:
        raise NotImplementedError

    async def set(self, key: str, value: bytes, ttl: int) -> None:
        raise NotImplementedError

    async def close(self) -> None:
        pass

    async def __aenter__(self) -> "BaseCacheClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


async def get_cache_client(config: CacheConfig) -> CacheClient:
    """
    Build the cache backend selected by configuration.

    The memory backend is used when caching is disabled, so callers always
    get a working client.

    Raises:
        CacheError: If the Redis backend cannot be reached
    """
    if config.enabled and config.backend == CacheBackend.REDIS:
        logger.info("Using Redis cache", url=config.redis_url)
        return await RedisCacheClient.create(config)

    logger.info("Using memory cache", enabled=config.enabled)
    return MemoryCacheClient(config)


# Backends import BaseCacheClient from this module
from tgfeed.cache.memory import MemoryCacheClient  # noqa: E402
from tgfeed.cache.redis import RedisCacheClient  # noqa: E402

__all__ = [
    "CacheClient",
    "BaseCacheClient",
    "CacheError",
    "get_cache_client",
    "MemoryCacheClient",
    "RedisCacheClient",
]
