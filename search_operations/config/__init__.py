"""
Search Configuration Module

This module provides the validated request models for all search types.
"""

from .validation import (
    SearchQuery,
    SemanticQuery,
    HybridSearchQuery,
    parse_query,
)

__all__ = [
    "SearchQuery",
    "SemanticQuery",
    "HybridSearchQuery",
    "parse_query",
]
