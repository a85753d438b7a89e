"""
Providers Module

This module provides interfaces for the external collaborators of search
operations (embedding, rerank and document store) and in-memory
implementations for development and tests.
"""

from .base import (
    EmbeddingProvider,
    ReRanker,
    DocumentStore,
)

from .memory import (
    InMemoryDocumentStore,
    InMemorySearchLog,
)

__all__ = [
    # Interfaces
    "EmbeddingProvider",
    "ReRanker",
    "DocumentStore",

    # In-memory implementations
    "InMemoryDocumentStore",
    "InMemorySearchLog",
]
