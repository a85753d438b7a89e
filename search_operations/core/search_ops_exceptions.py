"""
Search Operations Exceptions

This module defines custom exceptions for search operations, separating
hard failures of the lexical path from the soft failures of the semantic
path that hybrid search absorbs.
"""

from search_hub_exceptions import QueryError


class SearchError(QueryError):
    """Base exception for all search-related errors"""
    pass


class InvalidSearchParametersError(SearchError):
    """Raised when search parameters are invalid"""
    pass


class LexicalSearchError(SearchError):
    """Raised when the full-text backend fails; there is no fallback for it"""
    pass


class SemanticSearchError(SearchError):
    """Base exception for failures on the semantic (embedding + rerank) path"""
    pass


class EmbeddingGenerationError(SemanticSearchError):
    """Raised when embedding generation fails"""
    pass


class ReRankingError(SemanticSearchError):
    """Raised when re-ranking fails or returns a malformed response"""
    pass


class SemanticTimeoutError(SemanticSearchError):
    """Raised when an embedding or rerank call exceeds its timeout"""
    pass


class EmptyResultError(SemanticSearchError):
    """Raised when nearest-neighbor retrieval returns no candidates"""
    pass


class SemanticSearchUnavailableError(SemanticSearchError):
    """Raised when the circuit breaker blocks a standalone semantic search"""
    pass
