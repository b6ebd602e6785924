"""
Feed generation for tgfeed.

Renders a Channel into an RSS 2.0 or Atom document with feedgen. Posts whose
content matches an exclude word are left out entirely, and they do not count
towards the feed's publication date either.
"""
import html
from datetime import datetime
from typing import Iterable, List, Optional

import structlog
from feedgen.feed import FeedGenerator as _FeedGen

from tgfeed import __version__
from tgfeed.exceptions import FormatError
from tgfeed.models.channel import Channel, Image, Post
from tgfeed.models.params import FeedFormat, FeedParams


GALLERY_SEPARATOR = "<br><br>"


def should_exclude(content: str, exclude_words: Iterable[str], case_sensitive: bool = False) -> bool:
    """
    Check whether content contains any of the exclude words.

    Matching is plain substring containment, case-folded unless
    ``case_sensitive`` is set. Empty words never match.
    """
    if not case_sensitive:
        content = content.casefold()

    for word in exclude_words:
        if not word:
            continue
        if (word if case_sensitive else word.casefold()) in content:
            return True
    return False


def render_gallery(images: List[Image]) -> str:
    """Inline ``<img>`` tags for all images of a post."""
    return "".join(f'<img src="{html.escape(image.url)}">' for image in images)


def item_content(post: Post) -> str:
    """Post content with the image gallery appended."""
    if not post.images:
        return post.content_html
    return f"{post.content_html}{GALLERY_SEPARATOR}{render_gallery(post.images)}"


class FeedGenerator:
    """
    Renders channels into syndication documents.

    Args:
        logger: Optional bound logger
    """

    def __init__(self, logger: Optional[structlog.stdlib.BoundLogger] = None):
        self.logger = logger or structlog.get_logger()

    def generate(self, channel: Channel, params: FeedParams) -> bytes:
        """
        Render a channel as a feed.

        Args:
            channel: Channel to render
            params: Format and exclusion policy

        Returns:
            bytes: Serialized feed document

        Raises:
            FormatError: If ``params.format`` is neither rss nor atom
        """
        if params.format not in (FeedFormat.RSS.value, FeedFormat.ATOM.value):
            raise FormatError(f"unsupported feed format: {params.format!r}")

        fg = self._new_feed(channel)

        created: Optional[datetime] = None
        for post in channel.posts:
            if should_exclude(post.content_html, params.exclude_words, params.exclude_case_sensitive):
                self.logger.info(
                    "Skipping post with an excluded word",
                    username=channel.username,
                    post_id=post.id,
                )
                continue

            self._add_entry(fg, channel, post)

            if created is None or post.published_at > created:
                created = post.published_at

        if created is not None:
            fg.updated(created)
            fg.pubDate(created)
            fg.lastBuildDate(created)

        if params.format == FeedFormat.ATOM.value:
            return fg.atom_str(pretty=True)
        return fg.rss_str(pretty=True)

    @staticmethod
    def _new_feed(channel: Channel) -> _FeedGen:
        fg = _FeedGen()
        fg.id(channel.url)
        fg.title(channel.display_title)
        fg.link(href=channel.url, rel="alternate")
        fg.description(channel.display_title)
        fg.generator("tgfeed", version=__version__)
        if channel.image_url:
            fg.image(url=channel.image_url, title=channel.display_title, link=channel.url)
        return fg

    @staticmethod
    def _add_entry(fg: _FeedGen, channel: Channel, post: Post) -> None:
        fe = fg.add_entry(order="append")
        fe.id(post.url)
        # Atom entries must have a title
        fe.title(post.title or f"{channel.display_title} #{post.message_number}")
        fe.link(href=post.url)
        fe.content(item_content(post), type="html")
        fe.published(post.published_at)
        fe.updated(post.published_at)

        if post.preview is not None and post.preview.mime_type:
            fe.enclosure(
                url=post.preview.url,
                length=str(post.preview.size_bytes),
                type=post.preview.mime_type,
            )
