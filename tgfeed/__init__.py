"""
tgfeed

A service that turns public Telegram channel pages into RSS and Atom feeds.
"""

__version__ = "0.1.0"
__author__ = "tgfeed contributors"
__description__ = "Telegram channel to RSS/Atom feed bridge"
__license__ = "MIT"

# Package level constants
DEFAULT_FEED_FORMAT = "rss"
DEFAULT_CACHE_TTL_MINUTES = 60
