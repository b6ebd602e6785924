"""
Channel, Post and Image models.

A Channel is built fresh on every extraction and never persisted; only the
rendered feed bytes end up in the cache.
"""
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class Image(BaseModel):
    """An image attached to a post."""
    url: str
    # image/jpeg, image/png, image/gif; empty means unsupported
    mime_type: str = ""
    # In bytes, 0 when the size could not be resolved
    size_bytes: int = 0


class Post(BaseModel):
    """
    One message of a channel.

    ``id`` is the composite ``<channel>/<message number>`` identifier taken
    from the page, stable across re-scrapes of the same message.
    """
    id: str
    url: str
    title: str = ""
    content_html: str = ""
    published_at: datetime
    preview: Optional[Image] = None
    images: List[Image] = Field(default_factory=list)

    @field_validator("published_at", mode="before")
    @classmethod
    def ensure_timezone(cls, v):
        """Naive timestamps are taken as UTC."""
        if isinstance(v, datetime) and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @property
    def message_number(self) -> str:
        """The numeric part of the composite id."""
        return self.id.rsplit("/", 1)[-1]


class Channel(BaseModel):
    """A public channel and its posts, in page order (oldest first)."""
    username: str
    title: str = ""
    url: str
    image_url: str = ""
    posts: List[Post] = Field(default_factory=list)

    @property
    def display_title(self) -> str:
        return self.title or self.username
