"""
Channel scraping for tgfeed.

Fetches the public web preview of a channel (``https://t.me/s/<username>``)
and builds a Channel from it. Each post is extracted on its own; a post that
cannot be extracted is logged and skipped without affecting the others.
Only a failure to get the page at all, or a page that is not a channel page,
aborts the whole extraction.
"""
import asyncio
import html
import re
from datetime import datetime
from typing import Awaitable, Callable, Optional, Union

import structlog
from bs4 import BeautifulSoup, Tag
from dateutil import parser as date_parser

from tgfeed.config import ScraperConfig
from tgfeed.exceptions import DocumentError, PostExtractionWarning
from tgfeed.extractor.media import ImageSizeResolver, extract_images, extract_preview
from tgfeed.extractor.title import extract_title, find_message_container
from tgfeed.models.channel import Channel, Post

CHANNEL_HEADER_SELECTOR = ".tgme_channel_info_header"
CHANNEL_TITLE_SELECTOR = ".tgme_channel_info_header_title"
MESSAGE_SELECTOR = ".tgme_widget_message"
MESSAGE_DATE_SELECTOR = ".tgme_widget_message_date time"

POST_ID_PATTERN = re.compile(r"^[A-Za-z0-9_]+/\d+$")

DocumentLoader = Callable[[str], Awaitable[BeautifulSoup]]


class ChannelScraper:
    """
    Builds Channel models from channel preview pages.

    Args:
        load_document: Coroutine fetching a URL into a parsed document,
            raising FetchError on transport failure
        resolver: Image size resolver
        config: Scraper configuration
        logger: Optional bound logger
    """

    def __init__(
        self,
        load_document: DocumentLoader,
        resolver: ImageSizeResolver,
        config: Optional[ScraperConfig] = None,
        logger: Optional[structlog.stdlib.BoundLogger] = None,
    ):
        self.load_document = load_document
        self.resolver = resolver
        self.config = config or ScraperConfig()
        self.logger = logger or structlog.get_logger()

    def channel_url(self, username: str) -> str:
        return f"https://{self.config.domain}/s/{username}"

    def post_url(self, post_id: str) -> str:
        return f"https://{self.config.domain}/{post_id}"

    async def scrape(self, username: str) -> Channel:
        """
        Fetch and extract a channel.

        Args:
            username: Channel handle

        Returns:
            Channel: Channel with its posts in page order

        Raises:
            FetchError: If the page cannot be fetched
            DocumentError: If the page is not a channel page
        """
        url = self.channel_url(username)
        log = self.logger.bind(username=username, url=url)
        log.debug("Scraping channel")

        document = await self.load_document(url)
        channel = await self.build_channel(username, document)

        log.info("Channel scraped", posts=len(channel.posts))
        return channel

    async def build_channel(self, username: str, document: BeautifulSoup) -> Channel:
        """
        Build a Channel from an already fetched page.

        Raises:
            DocumentError: If the page has no channel header
        """
        url = self.channel_url(username)
        header = document.select_one(CHANNEL_HEADER_SELECTOR)
        if header is None:
            raise DocumentError(f"channel {username} not found or page not recognized", url=url)

        title_element = header.select_one(CHANNEL_TITLE_SELECTOR)
        avatar = header.select_one("img")

        channel = Channel(
            username=username,
            title=title_element.get_text(strip=True) if title_element else "",
            url=url,
            image_url=(avatar.get("src") or "") if avatar else "",
        )

        fragments = document.select(MESSAGE_SELECTOR)
        results = await asyncio.gather(
            *(self.extract_post(fragment) for fragment in fragments),
            return_exceptions=True,
        )

        for fragment, result in zip(fragments, results):
            if isinstance(result, BaseException) and not isinstance(result, Exception):
                raise result
            if isinstance(result, Exception) and not isinstance(result, PostExtractionWarning):
                result = PostExtractionWarning(
                    f"post extraction failed: {result}",
                    post_id=(fragment.get("data-post") or "").strip(),
                )
            if isinstance(result, PostExtractionWarning):
                self.logger.warning(
                    "Skipping post",
                    username=username,
                    post_id=result.post_id,
                    reason=str(result),
                )
                continue
            channel.posts.append(result)

        return channel

    async def extract_post(self, fragment: Tag) -> Union[Post, PostExtractionWarning]:
        """
        Extract one post.

        Returns:
            Union[Post, PostExtractionWarning]: The post, or the reason it was
            skipped
        """
        post_id = (fragment.get("data-post") or "").strip()
        if not POST_ID_PATTERN.match(post_id):
            return PostExtractionWarning("post has no usable identifier", post_id=post_id)

        url = self.post_url(post_id)

        published_at = self._published_at(fragment)
        if published_at is None:
            return PostExtractionWarning("post has no parseable datetime", post_id=post_id)

        title = extract_title(fragment, self.config.title_max_length)
        content_html = self._content_html(fragment)

        images = await extract_images(fragment, self.resolver)
        if images:
            preview = images[0]
        else:
            preview = await extract_preview(fragment, self.resolver)

        if not content_html:
            # The web preview does not render every message type
            content_html = (
                f'<a href="{html.escape(url)}">{html.escape(self.config.fallback_link_text)}</a>'
            )
            if not title and not images and preview is None:
                title = self.config.unsupported_title

        return Post(
            id=post_id,
            url=url,
            title=title,
            content_html=content_html,
            published_at=published_at,
            preview=preview,
            images=images,
        )

    @staticmethod
    def _content_html(fragment: Tag) -> str:
        container = find_message_container(fragment)
        if container is None:
            return ""
        return container.decode_contents().strip()

    @staticmethod
    def _published_at(fragment: Tag) -> Optional[datetime]:
        time_element = fragment.select_one(MESSAGE_DATE_SELECTOR)
        if time_element is None:
            return None
        value = time_element.get("datetime")
        if not value:
            return None
        try:
            return date_parser.isoparse(value)
        except (ValueError, OverflowError):
            return None
