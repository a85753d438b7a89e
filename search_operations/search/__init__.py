"""
Search Implementations Module

This module contains the lexical, semantic and hybrid search implementations.
"""

from .lexical import LexicalSearch
from .semantic import SemanticSearch, stitch_chunks
from .hybrid import (
    HybridSearchEngine,
    fuse_rankings,
    HybridSearchMetrics,
    SearchStatus,
)

__all__ = [
    # Lexical search
    "LexicalSearch",

    # Semantic search
    "SemanticSearch",
    "stitch_chunks",

    # Hybrid search
    "HybridSearchEngine",
    "fuse_rankings",
    "HybridSearchMetrics",
    "SearchStatus",
]
