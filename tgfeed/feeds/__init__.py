"""
Feed package for tgfeed.

This package renders extracted channels into RSS and Atom documents and
applies the per-request exclusion policy.
"""
from tgfeed.feeds.generator import FeedGenerator, item_content, should_exclude

__all__ = [
    "FeedGenerator",
    "item_content",
    "should_exclude",
]
