"""Value classification for structure ledgers.

Every attribute value and element text in a ledger is reduced to one of a
small set of value classes. The ledger diff compares classes rather than raw
values, so redaction can change a value as long as its class transition is
approved.
"""

from __future__ import annotations

import re
from enum import Enum


class ValueClass(str, Enum):
    """Closed set of value classes."""

    EMPTY = "empty"
    PLAIN_TEXT = "plain_text"
    URL = "url"
    LONG_NUMERIC_ID = "long_numeric_id"
    TOKEN_LIKE = "token_like"
    TIMESTAMP_LIKE = "timestamp_like"
    EMAIL_LIKE = "email_like"
    PATH_LIKE = "path_like"


# Checked in order against the trimmed value; first match wins.
# fmt: off
CLASSIFICATION_RULES: list[tuple[re.Pattern[str], ValueClass]] = [
    (re.compile(r"^(?:[A-Za-z]:\\|/)", re.ASCII),                          ValueClass.PATH_LIKE),
    (re.compile(r"^(?:https?://|//)", re.ASCII | re.IGNORECASE),            ValueClass.URL),
    (re.compile(r"^[0-9]{9,}$", re.ASCII),                                  ValueClass.LONG_NUMERIC_ID),
    (re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}(?:[T\s][0-9:.+\-Z]+)?$", re.ASCII), ValueClass.TIMESTAMP_LIKE),
    (re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$", re.ASCII),                   ValueClass.EMAIL_LIKE),
    (re.compile(r"\b(?:ntn_[A-Za-z0-9._-]{8,}|[A-Za-z0-9._-]{24,})\b", re.ASCII), ValueClass.TOKEN_LIKE),
]
# fmt: on


def classify_value(value: str) -> ValueClass:
    """Classify a string into exactly one value class.

    Args:
        value: Raw attribute value or element text

    Returns:
        The first matching class, EMPTY for blank input, PLAIN_TEXT otherwise

    Example:
        >>> classify_value("https://example.com/p/123456789123").value
        'url'
        >>> classify_value("123456789123").value
        'long_numeric_id'
    """
    trimmed = value.strip()
    if not trimmed:
        return ValueClass.EMPTY
    for pattern, value_class in CLASSIFICATION_RULES:
        if pattern.search(trimmed):
            return value_class
    return ValueClass.PLAIN_TEXT
