"""
Search Operations Module

This module provides tenant-scoped document search:
- Lexical (full-text) search, the always-available baseline
- Semantic (embedding + rerank) search protected by a circuit breaker
- Hybrid search fusing both with Reciprocal Rank Fusion, degrading to
  lexical-only results when the semantic backend is unavailable
- Search analytics logging
"""

# Core exports
from .core import (
    SearchResultItem,
    SearchResponse,
    LexicalSearchResult,
    Candidate,
    SemanticSearchResultItem,
    SemanticSearchResult,
    RerankScore,
    DocumentDetail,
    AdjacentChunk,
    SearchType,
    SearchLogStatus,
    SearchLogEntry,
    SearchLogSink,
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
from .core.manager import SearchService, create_search_service

# Request model exports
from .config import (
    SearchQuery,
    SemanticQuery,
    HybridSearchQuery,
    parse_query,
)

# Provider exports
from .providers import (
    EmbeddingProvider,
    ReRanker,
    DocumentStore,
    InMemoryDocumentStore,
    InMemorySearchLog,
)

# Search implementations exports
from .search import (
    LexicalSearch,
    SemanticSearch,
    HybridSearchEngine,
)

__all__ = [
    # Service
    "SearchService",
    "create_search_service",

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

    # Request models
    "SearchQuery",
    "SemanticQuery",
    "HybridSearchQuery",
    "parse_query",

    # Providers
    "EmbeddingProvider",
    "ReRanker",
    "DocumentStore",
    "InMemoryDocumentStore",
    "InMemorySearchLog",

    # Search implementations
    "LexicalSearch",
    "SemanticSearch",
    "HybridSearchEngine",
]
