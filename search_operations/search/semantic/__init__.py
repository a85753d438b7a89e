"""
Semantic Search Module

This module provides semantic (embedding + rerank) search over document
chunks, protected by a circuit breaker.

Main Components:
- SemanticSearch: Embed, retrieve, rerank, stitch context and deduplicate
- stitch_chunks: Overlap-aware joining of adjacent chunks
"""

from .engine import SemanticSearch
from .context import stitch_chunks

__all__ = [
    "SemanticSearch",
    "stitch_chunks",
]
