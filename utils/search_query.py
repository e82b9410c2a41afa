"""
Search query sanitizer.

Rewrites free text into to_tsquery syntax: words separated by spaces
must all match (&), comma-separated terms are alternatives (|).

The replacement order below is relied on by saved searches and must not
change: "a, b c" becomes "a|b&c".
"""

import re

from models.search import SearchQuery

_WHITESPACE = re.compile(r"\s+")


def normalize_query(raw: str) -> str:
    """Trim, collapse whitespace runs and drop spaces before commas."""
    text = _WHITESPACE.sub(" ", (raw or "").strip())
    return text.replace(" ,", ",")


def to_engine_syntax(normalized: str) -> str:
    """Rewrite a normalized query into to_tsquery operators."""
    return (
        normalized
        .replace(", ", ",")
        .replace(",", "|")
        .replace(" ", "&")
    )


def sanitize_query(raw: str) -> SearchQuery:
    """
    Build the normalized and engine forms of a user query.

    Examples:
        "blue, green" → "blue|green"
        "ocean blue"  → "ocean&blue"
        "red ,blue"   → "red,blue" → "red|blue"
    """
    normalized = normalize_query(raw)
    return SearchQuery(
        original_text=raw or "",
        normalized_text=normalized,
        engine_syntax=to_engine_syntax(normalized),
    )
