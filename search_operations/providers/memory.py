"""
In-Memory Providers

This module provides in-process implementations of the document store and
the search log sink for local development and tests. Documents and their
chunks are held in dictionaries keyed by tenant; nearest-neighbor retrieval
uses cosine distance computed with numpy.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np

from ..core.models import (
    AdjacentChunk,
    Candidate,
    DocumentDetail,
    LexicalSearchResult,
    SearchResultItem,
)
from ..core.search_log import SearchLogEntry, SearchLogSink
from .base import DocumentStore

logger = logging.getLogger(__name__)

_TOKEN_PATTERN = re.compile(r"\w+")


def _tokenize(text: str) -> List[str]:
    return _TOKEN_PATTERN.findall(text.lower())


@dataclass
class StoredChunk:
    """A document chunk with its embedding."""
    chunk_index: int
    content: str
    embedding: np.ndarray


@dataclass
class StoredDocument:
    """A document and its ordered chunks."""
    id: str
    title: str
    content: str
    url: Optional[str] = None
    chunks: List[StoredChunk] = field(default_factory=list)


class InMemoryDocumentStore(DocumentStore):
    """
    Tenant-scoped document store held in memory.

    Lexical ranking scores documents by the number of query-token
    occurrences in title and content, ties broken by insertion order, so the
    ranking is stable across calls and pages.

    Example:
        >>> store = InMemoryDocumentStore()
        >>> store.add_document("t1", "doc-1", "Billing", "How invoices work",
        ...                    chunks=[("How invoices work", [0.1, 0.9])])
    """

    def __init__(self, snippet_length: int = 280):
        """
        Initialize an empty store.

        Args:
            snippet_length: Length of the leading content used as lexical snippet
        """
        self.snippet_length = snippet_length
        self._documents: Dict[str, Dict[str, StoredDocument]] = {}

    def add_document(
        self,
        tenant_id: str,
        document_id: str,
        title: str,
        content: str,
        chunks: Optional[Sequence[tuple]] = None,
        url: Optional[str] = None
    ) -> StoredDocument:
        """
        Add or replace a document.

        Args:
            tenant_id: Owning tenant
            document_id: Document ID, unique within the tenant
            title: Document title
            content: Full document text
            chunks: Ordered ``(content, embedding)`` pairs
            url: Optional link to the document

        Returns:
            The stored document
        """
        document = StoredDocument(id=document_id, title=title, content=content, url=url)
        for index, (chunk_content, embedding) in enumerate(chunks or []):
            document.chunks.append(StoredChunk(
                chunk_index=index,
                content=chunk_content,
                embedding=np.asarray(embedding, dtype=float),
            ))
        self._documents.setdefault(tenant_id, {})[document_id] = document
        logger.debug(
            f"Stored document {document_id} for tenant {tenant_id} "
            f"with {len(document.chunks)} chunks"
        )
        return document

    def _tenant_documents(self, tenant_id: str) -> Dict[str, StoredDocument]:
        return self._documents.get(tenant_id, {})

    async def lexical_search(
        self,
        tenant_id: str,
        query: str,
        limit: int,
        offset: int
    ) -> LexicalSearchResult:
        terms = set(_tokenize(query))
        if not terms:
            return LexicalSearchResult(total=0, items=[])

        scored = []
        for document in self._tenant_documents(tenant_id).values():
            tokens = _tokenize(f"{document.title} {document.content}")
            score = sum(1 for token in tokens if token in terms)
            if score > 0:
                scored.append((score, document))

        # sorted() is stable, so equal scores keep insertion order
        scored.sort(key=lambda entry: entry[0], reverse=True)

        items = [
            SearchResultItem(
                id=document.id,
                title=document.title,
                snippet=document.content[:self.snippet_length] or None,
                score=float(score),
                url=document.url,
            )
            for score, document in scored[offset:offset + limit]
        ]
        return LexicalSearchResult(total=len(scored), items=items)

    async def find_nearest_chunks(
        self,
        tenant_id: str,
        vector: Sequence[float],
        limit: int
    ) -> List[Candidate]:
        query_vector = np.asarray(vector, dtype=float)
        query_norm = np.linalg.norm(query_vector)

        candidates = []
        for document in self._tenant_documents(tenant_id).values():
            for chunk in document.chunks:
                denominator = query_norm * np.linalg.norm(chunk.embedding)
                similarity = float(np.dot(query_vector, chunk.embedding) / denominator) if denominator else 0.0
                candidates.append(Candidate(
                    document_id=document.id,
                    chunk_index=chunk.chunk_index,
                    content=chunk.content,
                    distance=1.0 - similarity,
                    similarity=similarity,
                ))

        candidates.sort(key=lambda candidate: candidate.distance)
        return candidates[:limit]

    async def get_document_details(
        self,
        tenant_id: str,
        document_ids: Sequence[str]
    ) -> List[DocumentDetail]:
        documents = self._tenant_documents(tenant_id)
        return [
            DocumentDetail(id=doc_id, title=documents[doc_id].title, content=documents[doc_id].content)
            for doc_id in document_ids
            if doc_id in documents
        ]

    async def get_document_titles(
        self,
        tenant_id: str,
        document_ids: Sequence[str]
    ) -> Dict[str, str]:
        documents = self._tenant_documents(tenant_id)
        return {doc_id: documents[doc_id].title for doc_id in document_ids if doc_id in documents}

    async def get_adjacent_chunks(
        self,
        tenant_id: str,
        document_id: str,
        chunk_index: int,
        window: int
    ) -> List[AdjacentChunk]:
        document = self._tenant_documents(tenant_id).get(document_id)
        if document is None:
            return []
        low = max(0, chunk_index - window)
        high = chunk_index + window
        return [
            AdjacentChunk(chunk_index=chunk.chunk_index, content=chunk.content)
            for chunk in document.chunks
            if low <= chunk.chunk_index <= high
        ]


class InMemorySearchLog(SearchLogSink):
    """Search log sink that keeps entries in a list."""

    def __init__(self):
        self.entries: List[SearchLogEntry] = []

    async def write(self, entry: SearchLogEntry) -> None:
        self.entries.append(entry)
