"""
In-process cache backend for tgfeed.

Rendered feeds are kept in a dict keyed by cache key, each with a monotonic
deadline. Stale entries are dropped when read and swept by a background task
that starts with the first write, since the client may be built before an
event loop is running.
"""
import asyncio
import time
from typing import Dict, NamedTuple, Optional

import structlog

from tgfeed.cache import BaseCacheClient
from tgfeed.config import CacheConfig

logger = structlog.get_logger()

SWEEP_INTERVAL_SECONDS = 60


class _Entry(NamedTuple):
    value: bytes
    deadline: float

    def is_stale(self, now: float) -> bool:
        return self.deadline <= now


class MemoryCacheClient(BaseCacheClient):
    """
    Dict-backed cache client.

    Suitable for a single process; entries are lost on restart.
    """

    def __init__(self, config: Optional[CacheConfig] = None):
        super().__init__(config or CacheConfig())
        self._entries: Dict[str, _Entry] = {}
        self._guard = asyncio.Lock()
        self._sweeper: Optional[asyncio.Task] = None
        self._shut = False

    async def get(self, key: str) -> Optional[bytes]:
        """
        Look up a cached feed.

        Args:
            key: Cache key

        Returns:
            Optional[bytes]: The stored bytes, None if absent or stale
        """
        async with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_stale(time.monotonic()):
                self._entries.pop(key, None)
                return None
            return entry.value

    async def set(self, key: str, value: bytes, ttl: int) -> None:
        """
        Store a feed for ``ttl`` seconds. A TTL of 0 stores nothing.
        """
        if ttl <= 0:
            return

        self._ensure_sweeper()
        async with self._guard:
            self._entries[key] = _Entry(value, time.monotonic() + ttl)

    def _ensure_sweeper(self) -> None:
        if self._sweeper is None and not self._shut:
            self._sweeper = asyncio.create_task(self._sweep_periodically())

    async def _sweep_periodically(self) -> None:
        while not self._shut:
            await asyncio.sleep(SWEEP_INTERVAL_SECONDS)
            removed = await self.sweep()
            if removed:
                logger.debug("Swept stale cache entries", removed=removed)

    async def sweep(self) -> int:
        """
        Drop every stale entry.

        Returns:
            int: Number of entries removed
        """
        now = time.monotonic()
        async with self._guard:
            stale = [key for key, entry in self._entries.items() if entry.is_stale(now)]
            for key in stale:
                del self._entries[key]
        return len(stale)

    async def close(self) -> None:
        """Stop the sweeper and forget all entries."""
        self._shut = True

        if self._sweeper is not None:
            self._sweeper.cancel()
            try:
                await self._sweeper
            except asyncio.CancelledError:
                pass
            self._sweeper = None

        async with self._guard:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
