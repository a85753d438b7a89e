"""
Search Result Models

This module defines the data carried between the search backends, the
fusion step and the caller:
- Ranked hits and the paginated response returned to callers
- Nearest-neighbor candidates and their reranked form (semantic path only)
- Records returned by the document store
"""

from dataclasses import dataclass, field, asdict
from typing import List, Dict, Any, Optional


@dataclass
class SearchResultItem:
    """A single ranked hit."""
    id: str
    title: str
    snippet: Optional[str] = None
    score: Optional[float] = None
    url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Wire form; unset optional fields are omitted."""
        return {key: value for key, value in asdict(self).items() if value is not None}


@dataclass
class SearchResponse:
    """
    Paginated search response.

    ``degraded`` is an observability flag set when hybrid search fell back to
    lexical-only results. It takes no part in equality and is not part of the
    wire form, so a degraded response is indistinguishable from a lexical one
    to the caller.
    """
    total: int
    items: List[SearchResultItem]
    page: int
    page_size: int
    no_strong_matches: Optional[bool] = None
    degraded: bool = field(default=False, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire form (camelCase keys)."""
        result = {
            "total": self.total,
            "items": [item.to_dict() for item in self.items],
            "page": self.page,
            "pageSize": self.page_size,
        }
        if self.no_strong_matches is not None:
            result["noStrongMatches"] = self.no_strong_matches
        return result


@dataclass
class LexicalSearchResult:
    """Raw full-text search result for one offset/limit window."""
    total: int
    items: List[SearchResultItem] = field(default_factory=list)


@dataclass
class Candidate:
    """Nearest-neighbor chunk hit before reranking."""
    document_id: str
    chunk_index: int
    content: str
    distance: float
    similarity: float


@dataclass
class SemanticSearchResultItem(Candidate):
    """Candidate after reranking."""
    rerank_score: float = 0.0
    document_title: Optional[str] = None


@dataclass
class SemanticSearchResult:
    """Reranked semantic hits, one per document, best first."""
    items: List[SemanticSearchResultItem] = field(default_factory=list)


@dataclass
class RerankScore:
    """Rerank output: index into the submitted documents and its relevance."""
    index: int
    score: float


@dataclass
class DocumentDetail:
    """Document metadata used to back-fill semantic-only hits."""
    id: str
    title: str
    content: Optional[str] = None


@dataclass
class AdjacentChunk:
    """A chunk neighbouring a semantic hit, used for context stitching."""
    chunk_index: int
    content: str
