"""
Process-wide resources for the feed server.
"""
from contextlib import AsyncExitStack
from typing import Optional

import structlog

from tgfeed.cache import CacheClient, get_cache_client
from tgfeed.config import Settings
from tgfeed.extractor.channel import ChannelScraper
from tgfeed.extractor.media import ImageSizeResolver
from tgfeed.feeds.generator import FeedGenerator
from tgfeed.fetcher.http_client import AsyncHTTPClient
from tgfeed.pipeline import FeedService

logger = structlog.get_logger()


class AppContext:
    """
    Owns the clients every request shares.

    ``initialize`` opens the HTTP client and the cache in that order and wires
    the feed service on top; ``shutdown`` closes them in reverse through the
    exit stack.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.exit_stack = AsyncExitStack()
        self.http_client: Optional[AsyncHTTPClient] = None
        self.cache_client: Optional[CacheClient] = None
        self.feed_service: Optional[FeedService] = None

    async def initialize(self) -> None:
        logger.info("Starting application context")

        await self._init_http_client()
        await self._init_cache()
        self._init_feed_service()

        logger.info("Application context ready")

    async def _init_http_client(self) -> None:
        http = self.settings.http
        self.http_client = await self.exit_stack.enter_async_context(AsyncHTTPClient(http))
        logger.info(
            "HTTP client ready",
            max_connections=http.max_connections,
            timeout=http.timeout_seconds,
        )

    async def _init_cache(self) -> None:
        self.cache_client = await get_cache_client(self.settings.cache)
        await self.exit_stack.enter_async_context(self.cache_client)
        logger.info("Cache client ready", backend=type(self.cache_client).__name__)

    def _init_feed_service(self) -> None:
        resolver = ImageSizeResolver(
            self.http_client.measure,
            max_concurrency=self.settings.http.max_concurrent_image_probes,
        )
        scraper = ChannelScraper(
            self.http_client.get_document,
            resolver,
            config=self.settings.scraper,
        )
        self.feed_service = FeedService(
            scraper,
            FeedGenerator(),
            self.cache_client,
            cache_enabled=self.settings.cache.enabled,
            write_timeout=self.settings.cache.write_timeout_seconds,
        )

    async def shutdown(self) -> None:
        """Finish pending cache writes, then close the clients."""
        logger.info("Stopping application context")

        # Writes need the cache client open
        if self.feed_service:
            await self.feed_service.drain()

        await self.exit_stack.aclose()
        logger.info("Application context stopped")
