"""
normalizer.py — turns free-text product names into comparable word tokens.

Store catalogue names carry noise the retail site never shows in its page
titles: internal "GD" codes, embedded barcodes, notes in parentheses.
"""
from __future__ import annotations

import re
from typing import Optional

_SKU_RE        = re.compile(r"\bGD\d{3,}\b", re.IGNORECASE)   # e.g. GD01234
_LONG_DIGITS   = re.compile(r"\b\d{6,}\b", re.ASCII)         # ASCII barcodes only
_PARENTHESES   = re.compile(r"\([^)]*\)")
_PUNCTUATION   = re.compile(r"[^\w\s]|_")                     # \w is Unicode-aware
_WHITESPACE    = re.compile(r"\s+")


def clean_name(text: Optional[str]) -> str:
    """Strip codes, long digit runs, parentheticals and punctuation. Never raises."""
    if not text:
        return ""
    cleaned = _SKU_RE.sub(" ", str(text))
    cleaned = _LONG_DIGITS.sub(" ", cleaned)
    cleaned = _PARENTHESES.sub(" ", cleaned)
    cleaned = _PUNCTUATION.sub(" ", cleaned)
    return _WHITESPACE.sub(" ", cleaned).strip()


def tokens(text: Optional[str]) -> list[str]:
    """Lower-cased words of clean_name(text)."""
    return clean_name(text).lower().split()
