"""
Utilities Module

This module provides utility classes and functions for hybrid search operations,
including metrics tracking and query/snippet shaping utilities.
"""

from .metrics import SearchStatus, HybridSearchMetrics
from .validation import normalize_query, meaningful_tokens, truncate_snippet, query_hash

__all__ = [
    "SearchStatus",
    "HybridSearchMetrics",
    "normalize_query",
    "meaningful_tokens",
    "truncate_snippet",
    "query_hash",
]
