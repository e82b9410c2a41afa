"""
Text utilities for catalog values.

Used by the record normalizer for case-normalizing transforms.
"""

import re


def to_capital_case(text: str) -> str:
    """
    Capitalize the first letter of every space-separated word.

    - "OCEAN BLUE matte" → "Ocean Blue Matte"
    - "wood  look" → "Wood  Look"  (spacing untouched)
    """
    words = text.lower().split(" ")
    return " ".join(word[:1].upper() + word[1:] for word in words)


def to_upper_key(text: str) -> str:
    """Uppercase natural key with inner whitespace collapsed: " ab  12 " → "AB 12"."""
    return re.sub(r"\s+", " ", text).strip().upper()
