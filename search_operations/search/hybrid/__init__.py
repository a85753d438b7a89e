"""
Hybrid Search Module

This module provides hybrid search combining lexical full-text search with
breaker-gated semantic search through Reciprocal Rank Fusion, degrading to
lexical-only results when the semantic backend is unavailable.
"""

from .core.engine import HybridSearchEngine
from .core.fusion import best_ranks, compute_rrf_scores, fuse_rankings
from .core.window import plan_lexical_window, plan_semantic_window
from .utils.metrics import HybridSearchMetrics, SearchStatus
from .utils.validation import normalize_query, truncate_snippet

__all__ = [
    "HybridSearchEngine",
    "best_ranks",
    "compute_rrf_scores",
    "fuse_rankings",
    "plan_lexical_window",
    "plan_semantic_window",
    "HybridSearchMetrics",
    "SearchStatus",
    "normalize_query",
    "truncate_snippet",
]
