"""
Image extractor module for tgfeed.

Posts carry images in two places: photo wraps, whose CSS ``background-image``
holds the URL, and link previews pointing straight at an image file. Each
accepted image gets its MIME type from the file extension and its size from
downloading it. A failed size probe is logged and yields 0.
"""
import asyncio
import posixpath
import re
from typing import Awaitable, Callable, List, Optional, Tuple
from urllib.parse import urlparse

import httpx
import structlog
from bs4 import Tag

from tgfeed.models.channel import Image


PHOTO_WRAP_SELECTOR = ".tgme_widget_message_photo_wrap"
LINK_PREVIEW_SELECTOR = ".tgme_widget_message_link_preview"

MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
}

_CSS_URL = re.compile(r"url\(([^)]*)\)")

SizeProbe = Callable[[str], Awaitable[int]]


def image_url_from_style(style: Optional[str]) -> str:
    """
    Pull the first ``url(...)`` value out of an inline style.

    Surrounding quotes are stripped; returns an empty string if there is none.
    """
    if not style:
        return ""
    match = _CSS_URL.search(style)
    if match is None:
        return ""
    return match.group(1).strip().strip("'\"")


def mime_type_for(url: str) -> str:
    """MIME type from the URL's file extension, empty when unsupported."""
    try:
        path = urlparse(url).path
    except ValueError:
        return ""
    return MIME_TYPES.get(posixpath.splitext(path)[1].lower(), "")


def inline_image_refs(fragment: Tag) -> List[Tuple[str, str]]:
    """(url, mime type) for every supported photo wrap, in page order."""
    refs = []
    for wrap in fragment.select(PHOTO_WRAP_SELECTOR):
        url = image_url_from_style(wrap.get("style"))
        if not url:
            continue
        mime_type = mime_type_for(url)
        if not mime_type:
            continue
        refs.append((url, mime_type))
    return refs


def link_preview_ref(fragment: Tag) -> Optional[Tuple[str, str]]:
    """(url, mime type) of a link preview that points at an image."""
    anchor = fragment.select_one(LINK_PREVIEW_SELECTOR)
    if anchor is None:
        return None
    href = anchor.get("href") or ""
    mime_type = mime_type_for(href)
    if not href or not mime_type:
        return None
    return href, mime_type


class ImageSizeResolver:
    """
    Resolves image byte sizes through a size probe.

    Probes run concurrently up to ``max_concurrency``. Any failure is logged
    as a warning and reported as size 0.
    """

    def __init__(
        self,
        probe: SizeProbe,
        max_concurrency: int = 8,
        logger: Optional[structlog.stdlib.BoundLogger] = None,
    ):
        self.probe = probe
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self.logger = logger or structlog.get_logger()

    async def resolve(self, url: str) -> int:
        async with self._semaphore:
            try:
                return await self.probe(url)
            except (httpx.HTTPError, httpx.InvalidURL, asyncio.TimeoutError, OSError) as e:
                self.logger.warning(
                    "Could not resolve image size",
                    image_url=url,
                    error=str(e) or type(e).__name__,
                )
                return 0

    async def image(self, url: str, mime_type: str) -> Image:
        return Image(url=url, mime_type=mime_type, size_bytes=await self.resolve(url))


async def extract_images(fragment: Tag, resolver: ImageSizeResolver) -> List[Image]:
    """
    Extract all supported photo-wrap images of a post.

    Args:
        fragment: Parsed post element
        resolver: Size resolver for the found images

    Returns:
        List[Image]: Images in page order
    """
    refs = inline_image_refs(fragment)
    return list(await asyncio.gather(*(resolver.image(url, mime) for url, mime in refs)))


async def extract_preview(fragment: Tag, resolver: ImageSizeResolver) -> Optional[Image]:
    """
    Extract the image a post's link preview points at, if any.

    Args:
        fragment: Parsed post element
        resolver: Size resolver for the found image

    Returns:
        Optional[Image]: Preview image, None if the preview is not an image
    """
    ref = link_preview_ref(fragment)
    if ref is None:
        return None
    return await resolver.image(*ref)
