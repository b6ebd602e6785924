"""
Fetcher package for tgfeed.

This package provides the pooled async HTTP client used to download channel
pages and to probe the byte size of post images.
"""
from tgfeed.fetcher.http_client import AsyncHTTPClient

__all__ = [
    "AsyncHTTPClient",
]
