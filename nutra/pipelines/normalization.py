"""Text normalization utilities for search queries.

Handles unicode forms, punctuation, casing and whitespace before tokenizing.
"""
from __future__ import annotations

import re
import unicodedata


def normalize_whitespace(text: str) -> str:
    """Normalize whitespace: collapse multiple spaces, remove leading/trailing."""
    text = re.sub(r'\s+', ' ', text)
    return text.strip()


def normalize_punctuation(text: str) -> str:
    """Normalize common punctuation variations."""
    # Replace smart quotes
    text = text.replace('“', '"').replace('”', '"')
    text = text.replace('‘', "'").replace('’', "'")

    # Normalize dashes
    text = text.replace('–', '-').replace('—', '-')

    return text


def strip_query_punctuation(text: str) -> str:
    """Replace punctuation with spaces, keeping joiners used inside terms.

    Hyphens (who-gmp), ampersands (r&d), plus signs (100+) and slashes survive.
    """
    text = re.sub(r"[^\w\s\-&+/]", " ", text)
    # A hyphen only joins when it sits between two word characters
    text = re.sub(r"(?<!\w)-|-(?!\w)", " ", text)
    return text


def normalize_query(text: str) -> str:
    """Normalize a free-text search query.

    Args:
        text: Raw query as typed by the user

    Returns:
        Lowercased, punctuation-folded, whitespace-collapsed query
    """
    if not text or not text.strip():
        return ""

    text = unicodedata.normalize('NFC', text)
    text = normalize_punctuation(text)
    text = text.lower()
    text = strip_query_punctuation(text)
    return normalize_whitespace(text)


def tokenize(text: str) -> list[str]:
    """Split an already normalized query into tokens."""
    return text.split() if text else []
