"""
Custom exception classes for tgfeed.

Only ValidationError, FetchError (and DocumentError) and FormatError ever
reach a caller. CacheError and PostExtractionWarning are absorbed where they
occur and logged.
"""


class TgFeedError(Exception):
    """Base exception for all tgfeed errors."""
    pass


# =============================================================================
# Request Errors
# =============================================================================

class ValidationError(TgFeedError):
    """Raised when request parameters are missing or malformed."""
    pass


# =============================================================================
# Extraction Errors
# =============================================================================

class FetchError(TgFeedError):
    """Raised when the channel page cannot be reached or read."""

    def __init__(self, message: str, url: str = ""):
        super().__init__(message)
        self.url = url


class DocumentError(FetchError):
    """Raised when the page was fetched but is not a recognizable channel page."""
    pass


class PostExtractionWarning(TgFeedError):
    """
    A single post could not be extracted.

    Returned, not raised, from per-post extraction so the channel loop can
    log it and carry on with the remaining posts.
    """

    def __init__(self, message: str, post_id: str = ""):
        super().__init__(message)
        self.post_id = post_id


# =============================================================================
# Rendering Errors
# =============================================================================

class FormatError(TgFeedError):
    """Raised when a feed is requested in a format the generator cannot render."""
    pass


# =============================================================================
# Cache Errors
# =============================================================================

class CacheError(TgFeedError):
    """Raised by cache backends on read or write failure."""
    pass
