"""
Provider Interfaces

This module defines the interfaces of the external collaborators used by
search operations:
- EmbeddingProvider: turns query text into a vector (remote, unreliable)
- ReRanker: scores candidate passages against the query (remote, unreliable)
- DocumentStore: full-text search, nearest-neighbor retrieval and document
  metadata lookups, all scoped to a tenant
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Sequence

from ..core.models import (
    AdjacentChunk,
    Candidate,
    DocumentDetail,
    LexicalSearchResult,
    RerankScore,
)


class EmbeddingProvider(ABC):
    """Interface for query embedding services."""

    name: str = "embedding"

    @abstractmethod
    async def embed_query(self, text: str) -> List[float]:
        """
        Generate an embedding for a search query.

        Args:
            text: Query text

        Returns:
            Embedding vector (empty if the service returned nothing)
        """
        pass


class ReRanker(ABC):
    """Interface for rerank services."""

    name: str = "rerank"

    @abstractmethod
    async def rerank(self, query: str, documents: Sequence[str]) -> List[RerankScore]:
        """
        Score documents by relevance to the query.

        Args:
            query: Query text
            documents: Candidate passages

        Returns:
            Scores with indexes into ``documents`` (higher score = more relevant)
        """
        pass


class DocumentStore(ABC):
    """Interface for the tenant-scoped document database."""

    @abstractmethod
    async def lexical_search(
        self,
        tenant_id: str,
        query: str,
        limit: int,
        offset: int
    ) -> LexicalSearchResult:
        """
        Full-text search with a stable ranking and an offset/limit window.

        Returns:
            The requested window and the total number of matches
        """
        pass

    @abstractmethod
    async def find_nearest_chunks(
        self,
        tenant_id: str,
        vector: Sequence[float],
        limit: int
    ) -> List[Candidate]:
        """Find the chunks closest to ``vector`` by cosine distance, nearest first."""
        pass

    @abstractmethod
    async def get_document_details(
        self,
        tenant_id: str,
        document_ids: Sequence[str]
    ) -> List[DocumentDetail]:
        """Fetch title and content for a batch of documents in one call."""
        pass

    @abstractmethod
    async def get_document_titles(
        self,
        tenant_id: str,
        document_ids: Sequence[str]
    ) -> Dict[str, str]:
        """Fetch document titles keyed by document ID."""
        pass

    @abstractmethod
    async def get_adjacent_chunks(
        self,
        tenant_id: str,
        document_id: str,
        chunk_index: int,
        window: int
    ) -> List[AdjacentChunk]:
        """Fetch chunks ``chunk_index - window`` to ``chunk_index + window`` in order."""
        pass
