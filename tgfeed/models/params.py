"""
Request-scoped feed parameters.

FeedParams is built per request from the route and query string and is never
persisted. Parsing rules mirror the public HTTP contract: ``format`` defaults
to rss, ``exclude`` is pipe-separated, ``exclude_case_sensitive`` accepts
``1``/``true`` and ``cache_ttl`` is a non-negative number of minutes.
"""
import re
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from tgfeed import DEFAULT_CACHE_TTL_MINUTES, DEFAULT_FEED_FORMAT
from tgfeed.exceptions import ValidationError

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_]{1,64}$")


class FeedFormat(str, Enum):
    """Syndication formats the generator can render."""
    RSS = "rss"
    ATOM = "atom"

    @property
    def content_type(self) -> str:
        return f"application/{self.value}+xml"


class FeedParams(BaseModel):
    """Validated parameters of a single feed request."""
    username: str
    format: str = DEFAULT_FEED_FORMAT
    exclude_words: List[str] = Field(default_factory=list)
    exclude_case_sensitive: bool = False
    cache_ttl_minutes: int = DEFAULT_CACHE_TTL_MINUTES

    @classmethod
    def from_query(
        cls,
        username: Optional[str],
        format: Optional[str] = None,
        exclude: Optional[str] = None,
        exclude_case_sensitive: Optional[str] = None,
        cache_ttl: Optional[str] = None,
        default_cache_ttl: int = DEFAULT_CACHE_TTL_MINUTES,
    ) -> "FeedParams":
        """
        Parse and validate raw request values.

        Args:
            username: Channel handle from the route
            format: ``rss`` or ``atom``, defaults to ``rss``
            exclude: Pipe-separated words; blank words are dropped
            exclude_case_sensitive: ``1`` or ``true`` enables case-sensitive matching
            cache_ttl: Cache lifetime in minutes, ``0`` disables caching
            default_cache_ttl: TTL used when ``cache_ttl`` is absent

        Returns:
            FeedParams: Validated parameters

        Raises:
            ValidationError: If any value is invalid
        """
        if not username:
            raise ValidationError("username is required")
        if not USERNAME_PATTERN.match(username):
            raise ValidationError("username may only contain letters, digits and underscores")

        if not format:
            format = DEFAULT_FEED_FORMAT
        elif format not in (FeedFormat.RSS.value, FeedFormat.ATOM.value):
            raise ValidationError(
                f"format must be {FeedFormat.RSS.value} or {FeedFormat.ATOM.value}"
            )

        exclude_words: List[str] = []
        if exclude:
            exclude_words = [word.strip() for word in exclude.split("|")]
            exclude_words = [word for word in exclude_words if word]

        case_sensitive = False
        if exclude_case_sensitive:
            case_sensitive = exclude_case_sensitive == "1" or exclude_case_sensitive.lower() == "true"

        ttl = default_cache_ttl
        if cache_ttl:
            try:
                ttl = int(cache_ttl)
            except ValueError:
                raise ValidationError("cache_ttl must be a valid integer")
            if ttl < 0:
                raise ValidationError("cache_ttl must be non-negative")

        return cls(
            username=username,
            format=format,
            exclude_words=exclude_words,
            exclude_case_sensitive=case_sensitive,
            cache_ttl_minutes=ttl,
        )

    @property
    def caching_enabled(self) -> bool:
        return self.cache_ttl_minutes > 0
