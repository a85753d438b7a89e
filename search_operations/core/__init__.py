"""
Core Search Operations Module

This module provides the core infrastructure for search operations,
including result models, the search analytics log and exceptions.
"""

from .models import (
    SearchResultItem,
    SearchResponse,
    LexicalSearchResult,
    Candidate,
    SemanticSearchResultItem,
    SemanticSearchResult,
    RerankScore,
    DocumentDetail,
    AdjacentChunk,
)
from .search_log import SearchType, SearchLogStatus, SearchLogEntry, SearchLogSink
from .search_ops_exceptions import (
    SearchError,
    InvalidSearchParametersError,
    LexicalSearchError,
    SemanticSearchError,
    EmbeddingGenerationError,
    ReRankingError,
    SemanticTimeoutError,
    EmptyResultError,
    SemanticSearchUnavailableError,
)

__all__ = [
    # Models
    "SearchResultItem",
    "SearchResponse",
    "LexicalSearchResult",
    "Candidate",
    "SemanticSearchResultItem",
    "SemanticSearchResult",
    "RerankScore",
    "DocumentDetail",
    "AdjacentChunk",

    # Search log
    "SearchType",
    "SearchLogStatus",
    "SearchLogEntry",
    "SearchLogSink",

    # Exceptions
    "SearchError",
    "InvalidSearchParametersError",
    "LexicalSearchError",
    "SemanticSearchError",
    "EmbeddingGenerationError",
    "ReRankingError",
    "SemanticTimeoutError",
    "EmptyResultError",
    "SemanticSearchUnavailableError",
]
