"""Excerpt and highlight generation for search results."""

import re
from collections.abc import Sequence

DEFAULT_EXCERPT_LENGTH = 200
EXCERPT_LEAD = 50  # characters kept before the first match
ELLIPSIS = "..."


def build_excerpt(
    content: str | None,
    terms: Sequence[str],
    max_length: int = DEFAULT_EXCERPT_LENGTH,
) -> str:
    """Cut an excerpt of ``content`` around the first matching term.

    The window starts ``EXCERPT_LEAD`` characters before the first
    case-insensitive occurrence of the first term that occurs at all, and is
    bounded by ellipses on the sides where content was cut. Without a match
    the excerpt is the beginning of the content.

    Args:
        content: Full text
        terms: Search terms, in priority order
        max_length: Characters taken from the content

    Returns:
        Excerpt string (empty for empty content)
    """
    if not content:
        return ""

    start = 0
    lowered = content.lower()
    for term in terms:
        index = lowered.find(term.lower())
        if index != -1:
            start = max(0, index - EXCERPT_LEAD)
            break

    excerpt = content[start:start + max_length]
    if start > 0:
        excerpt = ELLIPSIS + excerpt
    if start + max_length < len(content):
        excerpt += ELLIPSIS
    return excerpt


def build_highlight(text: str, terms: Sequence[str]) -> dict[str, list[str]]:
    """Collect every case-insensitive occurrence of each term in ``text``.

    Terms without a match are left out of the mapping.

    Returns:
        Term -> matched substrings, in text order
    """
    highlights: dict[str, list[str]] = {}
    for term in terms:
        if not term:
            continue
        matches = re.findall(re.escape(term), text, flags=re.IGNORECASE)
        if matches:
            highlights[term] = matches
    return highlights
