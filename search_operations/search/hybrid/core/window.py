"""
Fetch Window Planning

This module decides how much to fetch from each source for one page of
hybrid results.

Fusion re-ranks the union of both sources from rank 1, so every page inside
the fusion window is sliced from the same fused list: the lexical top
``max_window`` fused with the semantic top ``k``. Pages that reach past the
fusion window are served from the lexical ranking alone.
"""

from dataclasses import dataclass
from typing import Optional

MAX_FUSION_WINDOW = 50


@dataclass(frozen=True)
class LexicalWindow:
    """
    Lexical fetch plan for one hybrid page.

    Attributes:
        offset: Offset passed to lexical search
        limit: Limit passed to lexical search
        expanded: Whether the fetch covers the whole fusion window, in which
            case the page is sliced from the fused list
        page_start: Index of the requested page within the fetched
            (or fused) list
        page_size: Requested page size
    """
    offset: int
    limit: int
    expanded: bool
    page_start: int
    page_size: int

    def lexical_page(self, items: list) -> list:
        """Slice the requested page out of the fetched lexical items."""
        if not self.expanded:
            return list(items)
        return list(items[self.page_start:self.page_start + self.page_size])


@dataclass(frozen=True)
class SemanticWindow:
    """
    Semantic fetch plan for one hybrid search.

    Attributes:
        k: Number of reranked semantic hits kept
        recall: Number of nearest-neighbor candidates reranked
    """
    k: int
    recall: int

    def __post_init__(self):
        """Validate semantic window."""
        if self.k < 1:
            raise ValueError(f"k must be at least 1, got {self.k}")
        if self.recall < self.k:
            raise ValueError(f"recall ({self.recall}) must be at least k ({self.k})")


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def plan_lexical_window(offset: int, limit: int, max_window: int = MAX_FUSION_WINDOW) -> LexicalWindow:
    """
    Plan the lexical fetch for a page.

    A page inside the fusion window fetches the lexical top ``max_window``
    whatever its offset, so all such pages fuse the same candidates. Any
    other page fetches exactly ``[offset, offset + limit)``.

    Args:
        offset: Requested offset
        limit: Requested page size
        max_window: Deepest rank fetched for fusion

    Returns:
        LexicalWindow describing the fetch and where the page starts
    """
    if offset + limit <= max_window:
        return LexicalWindow(
            offset=0,
            limit=max_window,
            expanded=True,
            page_start=offset,
            page_size=limit,
        )
    return LexicalWindow(offset=offset, limit=limit, expanded=False, page_start=0, page_size=limit)


def plan_semantic_window(
    semantic_k: Optional[int] = None,
    semantic_recall: Optional[int] = None,
    max_window: int = MAX_FUSION_WINDOW
) -> SemanticWindow:
    """
    Resolve semantic k and recall for the fusion window.

    ``k`` defaults to the whole fusion window and is clamped to
    ``[1, max_window]``. ``recall`` defaults to ``3 * k`` and is clamped to
    ``[k, max_window]``. Neither depends on the requested page.

    Args:
        semantic_k: Explicit number of semantic hits, if given
        semantic_recall: Explicit number of candidates to rerank, if given
        max_window: Deepest rank fetched for fusion

    Returns:
        SemanticWindow with resolved k and recall
    """
    k = _clamp(semantic_k or max_window, 1, max_window)
    recall_input = semantic_recall or max(k * 3, k)
    recall = _clamp(max(recall_input, k), k, max_window)
    return SemanticWindow(k=k, recall=recall)
