"""
Result Fusion Module

This module provides Reciprocal Rank Fusion (RRF) for combining the lexical
and semantic ranked lists into a unified ranking.

Fusion is a two-pass fold kept free of I/O:
1. ``best_ranks`` reduces each source to one rank per document (the best one),
   so a document with several matching chunks is credited once per source.
2. ``compute_rrf_scores`` sums ``1 / (k + rank)`` over the sources.
"""

import logging
from typing import Dict, Iterable, List, Sequence, Tuple

logger = logging.getLogger(__name__)

DEFAULT_RRF_K = 60


def best_ranks(doc_ids: Iterable[str]) -> Dict[str, int]:
    """
    Map each document to its best (lowest) 1-based rank in a ranked list.

    Args:
        doc_ids: Document IDs in rank order, possibly repeated

    Returns:
        Document ID to best rank, in first-seen order
    """
    ranks: Dict[str, int] = {}
    for rank, doc_id in enumerate(doc_ids, start=1):
        if doc_id not in ranks:
            ranks[doc_id] = rank
    return ranks


def compute_rrf_scores(
    rank_lists: Sequence[Dict[str, int]],
    k: int = DEFAULT_RRF_K
) -> Dict[str, float]:
    """
    Sum Reciprocal Rank Fusion contributions across sources.

    Formula: RRF_score(d) = Σ (1 / (k + rank(d)))

    Args:
        rank_lists: One document-to-rank mapping per source
        k: RRF constant; lower values weight top ranks more heavily

    Returns:
        Document ID to fused score, in first-seen order across sources
    """
    if k < 1:
        raise ValueError(f"RRF constant must be at least 1, got {k}")

    scores: Dict[str, float] = {}
    for ranks in rank_lists:
        for doc_id, rank in ranks.items():
            scores[doc_id] = scores.get(doc_id, 0.0) + 1.0 / (k + rank)
    return scores


def rank_by_score(scores: Dict[str, float]) -> List[Tuple[str, float]]:
    """
    Order documents by fused score, highest first.

    The sort is stable, so equal scores keep first-seen order.
    """
    return sorted(scores.items(), key=lambda entry: entry[1], reverse=True)


def fuse_rankings(
    lexical_ids: Sequence[str],
    semantic_ids: Sequence[str],
    k: int = DEFAULT_RRF_K
) -> List[Tuple[str, float]]:
    """
    Fuse a lexical and a semantic ranking with Reciprocal Rank Fusion.

    Args:
        lexical_ids: Lexical hits in rank order (one per document)
        semantic_ids: Document IDs of semantic hits in rank order; a document
            may appear several times (one entry per chunk)
        k: RRF constant

    Returns:
        ``(document_id, score)`` pairs, highest score first
    """
    fused = rank_by_score(compute_rrf_scores([best_ranks(lexical_ids), best_ranks(semantic_ids)], k))

    logger.debug(
        f"RRF fusion completed - "
        f"lexical: {len(lexical_ids)}, "
        f"semantic: {len(semantic_ids)}, "
        f"unique_docs: {len(fused)}, "
        f"k: {k}"
    )

    return fused
