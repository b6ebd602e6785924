"""
HTTP client module for tgfeed.

This module provides an async HTTP client for fetching channel pages and
probing image sizes. It wraps a single pooled httpx client built from an
immutable HTTPClientConfig; failed requests are not retried.
"""
import asyncio
import time
from typing import Dict, Optional

import httpx
import structlog
from bs4 import BeautifulSoup

from tgfeed.config import HTTPClientConfig
from tgfeed.exceptions import FetchError

# Set up structured logger
logger = structlog.get_logger()

CHUNK_SIZE = 64 * 1024


class AsyncHTTPClient:
    """
    Async HTTP client shared by all requests.

    The underlying httpx client is safe for concurrent use, so one instance
    serves every inbound feed request.
    """

    def __init__(
        self,
        config: Optional[HTTPClientConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        default_headers: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize the HTTP client.

        Args:
            config: Timeouts and connection pool limits
            transport: Optional transport, mainly for tests
            default_headers: Default headers to include in all requests
        """
        self.config = config or HTTPClientConfig()

        # Set up default headers
        self.default_headers = dict(default_headers or {})
        if "User-Agent" not in self.default_headers:
            self.default_headers["User-Agent"] = self.config.user_agent

        self.timeout = httpx.Timeout(
            self.config.timeout_seconds,
            connect=self.config.connect_timeout_seconds,
        )
        self.image_timeout = httpx.Timeout(
            self.config.image_timeout_seconds,
            connect=min(self.config.connect_timeout_seconds, self.config.image_timeout_seconds),
        )
        limits = httpx.Limits(
            max_connections=self.config.max_connections,
            max_keepalive_connections=self.config.max_keepalive_connections,
            keepalive_expiry=self.config.keepalive_expiry_seconds,
        )

        # Create HTTP client
        self.client = httpx.AsyncClient(
            timeout=self.timeout,
            limits=limits,
            follow_redirects=True,
            headers=self.default_headers,
            transport=transport,
        )

    async def __aenter__(self) -> "AsyncHTTPClient":
        """Enter the async context manager."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit the async context manager."""
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def get_text(self, url: str) -> str:
        """
        Fetch a page and return its decoded body.

        Args:
            url: URL to fetch

        Returns:
            str: Response body

        Raises:
            FetchError: On transport failure, timeout or a non-2xx status
        """
        start_time = time.time()
        try:
            response = await self.client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "HTTP request returned an error status",
                url=url,
                status_code=e.response.status_code,
            )
            raise FetchError(
                f"could not fetch {url}: status {e.response.status_code}", url=url
            ) from e
        except httpx.HTTPError as e:
            logger.warning("HTTP request failed", url=url, error=str(e))
            raise FetchError(f"could not fetch {url}: {e}", url=url) from e

        logger.debug(
            "HTTP request successful",
            url=url,
            status_code=response.status_code,
            elapsed_seconds=time.time() - start_time,
        )
        return response.text

    async def get_document(self, url: str) -> BeautifulSoup:
        """
        Fetch a page and parse it into a document tree.

        Raises:
            FetchError: If the page cannot be fetched
        """
        return BeautifulSoup(await self.get_text(url), "html.parser")

    async def measure(self, url: str) -> int:
        """
        Download a resource and count its body bytes.

        The body is streamed and discarded chunk by chunk. The whole download
        is bounded by the image timeout, independently of the page fetch.

        Args:
            url: Resource URL

        Returns:
            int: Body length in bytes

        Raises:
            httpx.HTTPError: On transport failure or a non-2xx status
            asyncio.TimeoutError: If the download exceeds the image timeout
        """
        async def _count() -> int:
            size = 0
            async with self.client.stream("GET", url, timeout=self.image_timeout) as response:
                response.raise_for_status()
                async for chunk in response.aiter_bytes(CHUNK_SIZE):
                    size += len(chunk)
            return size

        return await asyncio.wait_for(_count(), timeout=self.config.image_timeout_seconds)
