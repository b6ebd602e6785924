"""
Central re-exports for the tgfeed data models.

This module exposes the canonical models from their dedicated modules to
provide stable import paths as "tgfeed.models" without redefining types.
"""
from .channel import Channel, Image, Post
from .params import FeedFormat, FeedParams

__all__ = [
    "Channel",
    "FeedFormat",
    "FeedParams",
    "Image",
    "Post",
]
