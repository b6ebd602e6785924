"""
Extractor package for tgfeed.

This package turns the HTML of a channel preview page into Channel and Post
models. It handles title derivation, text truncation, image discovery and
per-post fallbacks.

The main components are:
- Text formatter for whitespace normalization and truncation
- Title extractor applying an ordered list of heuristics
- Media extractor for inline photos and link-preview images
- Channel scraper assembling the models
"""
from tgfeed.extractor.channel import ChannelScraper
from tgfeed.extractor.media import (
    ImageSizeResolver,
    extract_images,
    extract_preview,
    mime_type_for,
)
from tgfeed.extractor.text import format_title, normalize_whitespace
from tgfeed.extractor.title import extract_title

__all__ = [
    "ChannelScraper",
    "ImageSizeResolver",
    "extract_images",
    "extract_preview",
    "mime_type_for",
    "format_title",
    "normalize_whitespace",
    "extract_title",
]
