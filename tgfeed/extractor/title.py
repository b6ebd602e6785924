"""
Title extraction for channel posts.

Posts have no title of their own, so one is derived from the message text.
Strategies are tried in order and the first non-empty candidate wins:

1. A bold span the message starts with
2. The first visual line, up to a double line break or paragraph boundary
3. The first sentence
4. The whole text

Every candidate goes through :func:`tgfeed.extractor.text.format_title`.
"""
import re
from typing import Callable, Optional, Sequence

from bs4 import BeautifulSoup, NavigableString, Tag

from tgfeed.extractor.text import format_title

MESSAGE_TEXT_SELECTOR = ".tgme_widget_message_text"
BOLD_TAGS = ("b", "strong")

_LINE_BREAKS = re.compile(r"(?:<br\s*/?>\s*){2,}|<p(?:\s[^>]*)?>|</p>", re.IGNORECASE)
_SENTENCE_END = re.compile(r"[.!?…](?:\s|$)|\.{3}")

TitleStrategy = Callable[[Tag], str]


def find_message_container(fragment: Tag) -> Optional[Tag]:
    """
    Find the message text container of a post.

    Some posts carry a text container nested inside another one with the same
    class; the innermost one holds the actual message.
    """
    container = fragment.select_one(MESSAGE_TEXT_SELECTOR)
    if container is None:
        return None

    while True:
        nested = container.select_one(MESSAGE_TEXT_SELECTOR)
        if nested is None:
            return container
        container = nested


def lead_bold_text(container: Tag) -> str:
    """Text of the bold element the message starts with, if any."""
    for child in container.children:
        if isinstance(child, NavigableString):
            if child.strip():
                return ""
            continue
        if isinstance(child, Tag) and child.name in BOLD_TAGS:
            return child.get_text()
        return ""
    return ""


def first_visual_line(container: Tag) -> str:
    """Text before the first double line break or paragraph boundary."""
    parts = _LINE_BREAKS.split(container.decode_contents(), maxsplit=1)
    if len(parts) < 2:
        return ""
    return BeautifulSoup(parts[0], "html.parser").get_text().strip()


def first_sentence(container: Tag) -> str:
    """Text up to and including the first sentence terminator."""
    text = container.get_text()
    match = _SENTENCE_END.search(text)
    if match is None:
        return ""
    return text[:match.end()]


def full_text(container: Tag) -> str:
    return container.get_text()


DEFAULT_STRATEGIES: Sequence[TitleStrategy] = (
    lead_bold_text,
    first_visual_line,
    first_sentence,
    full_text,
)


def first_match(strategies: Sequence[TitleStrategy], container: Tag) -> str:
    """Return the first non-blank candidate produced by ``strategies``."""
    for strategy in strategies:
        candidate = strategy(container)
        if candidate and candidate.strip():
            return candidate
    return ""


def extract_title(
    fragment: Tag,
    limit: int = 80,
    strategies: Sequence[TitleStrategy] = DEFAULT_STRATEGIES,
) -> str:
    """
    Derive a short title from a post fragment.

    Args:
        fragment: Parsed post (or message text) element
        limit: Maximum title length in points, before the ellipsis
        strategies: Ordered title strategies

    Returns:
        str: Formatted title, empty when the post has no text
    """
    container = find_message_container(fragment)
    if container is None:
        return ""

    return format_title(first_match(strategies, container), limit)
