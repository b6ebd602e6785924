"""
Cache-backed feed pipeline for tgfeed.

FeedService is the entry point for a feed request: it looks the rendered feed
up in the cache, scrapes and renders the channel on a miss, and writes the
result back. The cache only ever speeds things up; a failing cache degrades
to scraping on every request.
"""
import asyncio
from typing import Dict, Optional, Set

import structlog

from tgfeed.cache import CacheClient
from tgfeed.exceptions import CacheError
from tgfeed.extractor.channel import ChannelScraper
from tgfeed.feeds.generator import FeedGenerator
from tgfeed.models.params import FeedFormat, FeedParams

CACHE_NAMESPACE = "telegram:channel"

CACHE_HIT = "HIT"
CACHE_MISS = "MISS"


def build_cache_key(params: FeedParams) -> str:
    """
    Cache key for a feed request.

    Exclude words keep their request order, so the same words in a different
    order map to a different key.
    """
    return ":".join(
        [
            CACHE_NAMESPACE,
            params.username,
            params.format,
            "|".join(params.exclude_words),
            "1" if params.exclude_case_sensitive else "0",
        ]
    )


class FeedResponse:
    """A rendered feed plus what the HTTP layer needs to serve it."""

    def __init__(self, content: bytes, cache_status: str, format: str, cache_ttl_minutes: int):
        self.content = content
        self.cache_status = cache_status
        self.format = format
        self.cache_ttl_minutes = cache_ttl_minutes

    @property
    def content_type(self) -> str:
        return f"{FeedFormat(self.format).content_type}; charset=utf-8"

    @property
    def cache_control(self) -> str:
        if self.cache_ttl_minutes > 0:
            return f"public, max-age={self.cache_ttl_minutes * 60}"
        return "no-cache"

    def headers(self) -> Dict[str, str]:
        return {
            "Content-Type": self.content_type,
            "Cache-Control": self.cache_control,
            "X-CACHE-STATUS": self.cache_status,
        }


class FeedService:
    """
    Serves feeds through the cache.

    Args:
        scraper: Channel scraper
        generator: Feed generator
        cache: Cache client
        cache_enabled: When False the cache is never read or written
        write_timeout: Bound in seconds for each background cache write
        logger: Optional bound logger
    """

    def __init__(
        self,
        scraper: ChannelScraper,
        generator: FeedGenerator,
        cache: CacheClient,
        cache_enabled: bool = True,
        write_timeout: float = 5.0,
        logger: Optional[structlog.stdlib.BoundLogger] = None,
    ):
        self.scraper = scraper
        self.generator = generator
        self.cache = cache
        self.cache_enabled = cache_enabled
        self.write_timeout = write_timeout
        self.logger = logger or structlog.get_logger()
        self._pending_writes: Set[asyncio.Task] = set()

    async def serve(self, params: FeedParams) -> FeedResponse:
        """
        Produce the feed for a request.

        Args:
            params: Validated request parameters

        Returns:
            FeedResponse: Feed bytes and cache status

        Raises:
            FetchError: If the channel page cannot be fetched
            DocumentError: If the page is not a channel page
            FormatError: If the format cannot be rendered
        """
        use_cache = self.cache_enabled and params.caching_enabled
        ttl_minutes = params.cache_ttl_minutes if use_cache else 0
        key = build_cache_key(params)
        log = self.logger.bind(username=params.username, format=params.format)

        if use_cache:
            cached = await self._read(key)
            if cached is not None:
                log.debug("Feed served from cache", key=key)
                return FeedResponse(cached, CACHE_HIT, params.format, ttl_minutes)

        channel = await self.scraper.scrape(params.username)
        content = self.generator.generate(channel, params)

        if use_cache:
            self._schedule_write(key, content, ttl_minutes * 60)

        log.info("Feed generated", bytes=len(content))
        return FeedResponse(content, CACHE_MISS, params.format, ttl_minutes)

    async def _read(self, key: str) -> Optional[bytes]:
        try:
            return await self.cache.get(key)
        except CacheError as e:
            self.logger.warning("Cache read failed", key=key, error=str(e))
            return None

    def _schedule_write(self, key: str, content: bytes, ttl_seconds: int) -> None:
        # Detached from the request task; cancelling the request leaves the write running
        task = asyncio.create_task(self._write(key, content, ttl_seconds))
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)

    async def _write(self, key: str, content: bytes, ttl_seconds: int) -> None:
        try:
            await asyncio.wait_for(self.cache.set(key, content, ttl_seconds), self.write_timeout)
        except asyncio.TimeoutError:
            self.logger.warning("Cache write timed out", key=key, timeout=self.write_timeout)
        except CacheError as e:
            self.logger.warning("Cache write failed", key=key, error=str(e))

    @property
    def pending_writes(self) -> int:
        return len(self._pending_writes)

    async def drain(self) -> None:
        """Wait for all in-flight cache writes to finish."""
        if self._pending_writes:
            self.logger.info("Waiting for cache writes", count=len(self._pending_writes))
            await asyncio.gather(*self._pending_writes, return_exceptions=True)
