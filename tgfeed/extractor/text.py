"""
Title text formatting.

Collapses whitespace and shortens text to a point limit without cutting
words in half or leaving a dangling opening parenthesis. Lengths are counted
in Unicode code points. The result is never longer than ``limit + 1``; the
extra point is the ellipsis.
"""
import re

ELLIPSIS = "…"
TRAILING_PUNCTUATION = ",.;:!? "

_WHITESPACE = re.compile(r"\s+")


def normalize_whitespace(text: str) -> str:
    """Collapse runs of whitespace into single spaces and trim the ends."""
    return _WHITESPACE.sub(" ", text).strip()


def _open_paren_at(text: str, position: int) -> int:
    """
    Index of the outermost parenthesis still open at ``position``, or -1.
    """
    depth = 0
    outermost = -1
    for i, ch in enumerate(text[:position + 1]):
        if ch == "(":
            if depth == 0:
                outermost = i
            depth += 1
        elif ch == ")" and depth > 0:
            depth -= 1
            if depth == 0:
                outermost = -1
    return outermost if depth > 0 else -1


def truncate_at_word_boundary(text: str, limit: int) -> str:
    """
    Cut ``text`` at the last whitespace that keeps at most ``limit`` points.

    A single word longer than the limit is hard-cut at ``limit``.
    """
    if len(text) <= limit:
        return text

    boundary = -1
    for i, ch in enumerate(text[:limit + 1]):
        if ch.isspace():
            boundary = i

    truncated = text[:boundary] if boundary > 0 else text[:limit]
    return truncated.rstrip(TRAILING_PUNCTUATION) + ELLIPSIS


def format_title(text: str, limit: int = 80) -> str:
    """
    Normalize and shorten a title candidate.

    Args:
        text: Raw candidate text
        limit: Maximum number of points before the ellipsis

    Returns:
        str: Formatted title, possibly ending with an ellipsis
    """
    text = normalize_whitespace(text)

    # A trailing colon marks a lead-in, even on short text
    has_colon = text.endswith(":") and not text.endswith("::")
    if has_colon:
        text = text[:-1]

    if len(text) <= limit:
        return text + ELLIPSIS if has_colon else text

    paren_start = _open_paren_at(text, limit - 1)
    if paren_start >= 0:
        head = text[:paren_start].rstrip(TRAILING_PUNCTUATION)
        if head:
            return head + ELLIPSIS

    return truncate_at_word_boundary(text, limit)
