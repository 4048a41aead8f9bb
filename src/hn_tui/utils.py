"""Text helpers shared by the client, view models and renderer."""

import html
import re
import textwrap

ITEM_URL = "https://news.ycombinator.com/item?id={}"

_TAG_PATTERN = re.compile(r"<[^>]*>")


def item_url(item_id: str | int) -> str:
    """Return the discussion page URL for an item id."""
    return ITEM_URL.format(item_id)


def sanitize_comment(text: str) -> str:
    """Reduce comment HTML to a single line of plain text.

    Example: "<p>Hello &amp; <i>bye</i></p>" -> "Hello & bye"

    Tags become word breaks, entities are decoded and whitespace runs
    collapse to one space.
    """
    if not text:
        return ""
    stripped = _TAG_PATTERN.sub(" ", text)
    return " ".join(html.unescape(stripped).split())


def truncate(text: str, max_chars: int) -> str:
    """Cut text to max_chars characters, appending "..." when shortened."""
    if len(text) <= max_chars:
        return text
    return text[:max_chars].rstrip() + "..."


def format_points(score: int) -> str:
    if score == 1:
        return "1 point"
    return f"{score} points"


def wrap_text(text: str, width: int) -> list[str]:
    """Wrap text to the given width, never returning an empty list for text."""
    width = max(width, 1)
    lines = textwrap.wrap(text, width=width, break_long_words=True, break_on_hyphens=False)
    return lines or ([text] if text else [])
