"""
Validation Module

This module provides query normalization and text shaping utilities for
hybrid search operations.
"""

import hashlib
import logging
import re
import unicodedata
from typing import List

logger = logging.getLogger(__name__)

MAX_QUERY_LENGTH = 500

_LEADING_FILLER = re.compile(r"^(hey|hi|hello|please|can you|could you|would you)\s+", re.IGNORECASE)
_TRAILING_FILLER = re.compile(r"\s+(please|thanks|thank you)[\s.,!?]*$", re.IGNORECASE)
_SPACE_BEFORE_PUNCTUATION = re.compile(r"\s+([.,!?])")
_NON_WORD = re.compile(r"[^\w\s]")


def normalize_query(query: str, max_length: int = MAX_QUERY_LENGTH) -> str:
    """
    Normalize a user query before search.

    Applies Unicode NFC composition, lowercases, collapses whitespace,
    strips a leading pleasantry and trailing thanks, collapses repeated
    punctuation and removes spaces before punctuation. The result is capped
    at ``max_length`` characters.

    Args:
        query: Raw query string
        max_length: Maximum length of the normalized query (default: 500)

    Returns:
        Normalized query string (may be empty)

    Example:
        >>> normalize_query("Hello   What is RRF???")
        'what is rrf?'
    """
    normalized = unicodedata.normalize("NFC", query)
    normalized = " ".join(normalized.lower().split())

    normalized = _LEADING_FILLER.sub("", normalized, count=1)
    normalized = _TRAILING_FILLER.sub("", normalized, count=1)

    normalized = re.sub(r"\?{2,}", "?", normalized)
    normalized = re.sub(r"!{2,}", "!", normalized)
    normalized = re.sub(r"\.{2,}", ".", normalized)
    normalized = re.sub(r",{2,}", ",", normalized)
    normalized = _SPACE_BEFORE_PUNCTUATION.sub(r"\1", normalized)

    if len(normalized) > max_length:
        logger.warning(
            f"Query truncated from {len(normalized)} to {max_length} characters"
        )
        normalized = normalized[:max_length]

    return normalized


def meaningful_tokens(query: str, min_length: int = 4) -> List[str]:
    """
    Split a query into lowercase word tokens of at least ``min_length`` characters.

    Punctuation is treated as a separator.
    """
    tokens = _NON_WORD.sub(" ", query.lower()).split()
    return [token for token in tokens if len(token) >= min_length]


def truncate_snippet(text: str, max_length: int = 280) -> str:
    """
    Shorten a snippet for display.

    Text within ``max_length`` is returned unchanged. Longer text is cut at
    the last space before ``max_length`` when that space lies past 60% of the
    limit, otherwise at ``max_length``. A cut that would leave an unclosed
    HTML tag is moved back to the start of that tag. An ellipsis is appended.

    Args:
        text: Snippet text, possibly containing highlight markup
        max_length: Maximum length before truncation

    Returns:
        The snippet, truncated with ``...`` if it was too long
    """
    if len(text) <= max_length:
        return text

    cutoff = text.rfind(" ", 0, max_length + 1)
    if cutoff == -1 or cutoff < max_length * 0.6:
        cutoff = max_length

    candidate = text[:cutoff].rstrip()
    last_open = candidate.rfind("<")
    last_close = candidate.rfind(">")
    if last_open > last_close:
        candidate = candidate[:last_open].rstrip()

    return f"{candidate}..."


def query_hash(query: str) -> str:
    """Short stable hash identifying a query in logs and metrics without exposing it."""
    return hashlib.sha256(query.encode("utf-8")).hexdigest()[:16]
