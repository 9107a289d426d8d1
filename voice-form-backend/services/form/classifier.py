"""
Field Classifier

Heuristic predicate deciding whether a node's text looks like an unfilled
form blank: underscore or dot runs, parenthetical hints such as "(enter)",
bracketed tokens like "[Name]", or nothing but whitespace.

False positives are acceptable; the transformer only uses the result to
decide which leaves become editable.
"""

from config.constants import BLANK_PATTERN, PLACEHOLDER_PATTERNS


def needs_filling(text: str) -> bool:
    """Return True if text matches any blank/placeholder pattern."""
    text = text or ""
    if BLANK_PATTERN.search(text):
        return True
    return any(pattern.search(text) for pattern in PLACEHOLDER_PATTERNS)


def strip_placeholders(text: str) -> str:
    """
    Remove every recognised placeholder token and trim the result.

    "Name: ______ (enter)" -> "Name:"
    """
    cleaned = text or ""
    for pattern in PLACEHOLDER_PATTERNS:
        cleaned = pattern.sub("", cleaned)
    return cleaned.strip()
