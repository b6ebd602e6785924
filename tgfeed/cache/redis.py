"""
Redis cache backend for tgfeed.

Feeds are stored as raw bytes under their cache key with a native Redis
expiry (``SET key value EX ttl``). Startup pings the server with exponential
backoff, so the service can come up next to a Redis that is still booting.
"""
from typing import Optional

import structlog
from redis.asyncio import Redis
from redis.asyncio.connection import ConnectionPool
from redis.exceptions import RedisError
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from tgfeed.cache import BaseCacheClient
from tgfeed.config import CacheConfig
from tgfeed.exceptions import CacheError

logger = structlog.get_logger()


async def _ping_with_backoff(redis_client: Redis, attempts: int) -> None:
    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=0.5, max=10),
        retry=retry_if_exception_type(RedisError),
    ):
        with attempt:
            await redis_client.ping()


class RedisCacheClient(BaseCacheClient):
    """
    Cache client backed by a Redis connection pool.

    Every Redis failure surfaces as CacheError, never as a miss.

    Args:
        config: Cache configuration
        redis_client: Connected client
        connection_pool: Pool the client draws from; disconnected on close
    """

    def __init__(
        self,
        config: CacheConfig,
        redis_client: Redis,
        connection_pool: ConnectionPool,
    ):
        super().__init__(config)
        self.redis = redis_client
        self.connection_pool = connection_pool
        self._closed = False

    @classmethod
    async def create(cls, config: CacheConfig) -> "RedisCacheClient":
        """
        Connect to the configured Redis server.

        Raises:
            CacheError: If no URL is configured, the URL is malformed, or the
                server does not answer within ``config.connect_retries`` pings
        """
        if not config.redis_url:
            raise CacheError("Redis URL is required")

        pool_kwargs = {}
        if config.redis_password:
            pool_kwargs["password"] = config.redis_password.get_secret_value()

        try:
            pool = ConnectionPool.from_url(config.redis_url, **pool_kwargs)
        except ValueError as e:
            raise CacheError(f"Invalid Redis URL: {e}") from e

        redis_client = Redis(connection_pool=pool)
        try:
            await _ping_with_backoff(redis_client, config.connect_retries)
        except (RetryError, RedisError) as e:
            logger.error("Redis unreachable", attempts=config.connect_retries, error=str(e))
            await pool.disconnect()
            raise CacheError(f"Failed to connect to Redis: {e}") from e

        logger.info("Connected to Redis")
        return cls(config, redis_client, pool)

    async def get(self, key: str) -> Optional[bytes]:
        try:
            return await self.redis.get(key)
        except RedisError as e:
            raise CacheError(f"Redis GET {key} failed: {e}") from e

    async def set(self, key: str, value: bytes, ttl: int) -> None:
        """Store ``value`` for ``ttl`` seconds; a TTL of 0 stores nothing."""
        if ttl <= 0:
            return

        try:
            await self.redis.set(key, value, ex=ttl)
        except RedisError as e:
            raise CacheError(f"Redis SET {key} failed: {e}") from e

    async def close(self) -> None:
        """Release the pool. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True

        try:
            await self.redis.aclose()
            await self.connection_pool.disconnect()
        except RedisError as e:
            logger.warning("Error closing Redis connection", error=str(e))
