"""
Hybrid Search Core Module

This module provides the core functionality for hybrid search operations,
including the main search engine, fetch window planning and result fusion.
"""

from .engine import HybridSearchEngine
from .fusion import best_ranks, compute_rrf_scores, rank_by_score, fuse_rankings
from .window import LexicalWindow, SemanticWindow, plan_lexical_window, plan_semantic_window

__all__ = [
    "HybridSearchEngine",
    "best_ranks",
    "compute_rrf_scores",
    "rank_by_score",
    "fuse_rankings",
    "LexicalWindow",
    "SemanticWindow",
    "plan_lexical_window",
    "plan_semantic_window",
]
