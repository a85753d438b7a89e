"""
Shared fixtures and fakes for search operations tests.
"""

import asyncio
from collections import defaultdict
from typing import Dict, List, Optional, Sequence

import pytest
from prometheus_client import CollectorRegistry

from config.settings import SearchHubSettings, SemanticSettings, HybridSettings
from monitoring.metrics import SearchHubMetrics
from resilience import CircuitBreaker, CircuitBreakerConfig
from search_operations.core.models import (
    AdjacentChunk,
    Candidate,
    DocumentDetail,
    LexicalSearchResult,
    RerankScore,
    SearchResultItem,
)
from search_operations.providers.base import DocumentStore, EmbeddingProvider, ReRanker
from search_operations.search.lexical import LexicalSearch
from search_operations.search.semantic.engine import SemanticSearch
from search_operations.search.hybrid.core.engine import HybridSearchEngine


class FakeClock:
    """Manually advanced clock for the circuit breaker."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeEmbedder(EmbeddingProvider):
    name = "fake"

    def __init__(self, vector: Optional[List[float]] = None):
        self.vector = vector if vector is not None else [1.0, 0.0]
        self.error: Optional[Exception] = None
        self.delay = 0.0
        self.calls: List[str] = []

    async def embed_query(self, text: str) -> List[float]:
        self.calls.append(text)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.vector


class FakeReRanker(ReRanker):
    """Scores passages from a content-to-score mapping."""

    name = "fake"

    def __init__(self, scores: Optional[Dict[str, float]] = None):
        self.scores = dict(scores or {})
        self.response: Optional[List[RerankScore]] = None
        self.error: Optional[Exception] = None
        self.delay = 0.0
        self.calls: List[Sequence[str]] = []

    async def rerank(self, query: str, documents: Sequence[str]) -> List[RerankScore]:
        self.calls.append(list(documents))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if self.response is not None:
            return self.response
        return [RerankScore(index=i, score=self.scores.get(doc, 0.0)) for i, doc in enumerate(documents)]


class FakeDocumentStore(DocumentStore):
    """Document store with a fixed lexical ranking and fixed nearest neighbours."""

    def __init__(
        self,
        lexical: Optional[List[SearchResultItem]] = None,
        candidates: Optional[List[Candidate]] = None,
        documents: Optional[Dict[str, DocumentDetail]] = None
    ):
        self.lexical = list(lexical or [])
        self.candidates = list(candidates or [])
        self.documents = dict(documents or {})
        self.adjacent: Dict[tuple, List[AdjacentChunk]] = {}
        self.adjacent_errors: set = set()
        self.lexical_error: Optional[Exception] = None
        self.details_error: Optional[Exception] = None
        self.calls = defaultdict(list)

    async def lexical_search(self, tenant_id, query, limit, offset):
        self.calls["lexical_search"].append({"tenant_id": tenant_id, "q": query, "limit": limit, "offset": offset})
        if self.lexical_error is not None:
            raise self.lexical_error
        return LexicalSearchResult(total=len(self.lexical), items=self.lexical[offset:offset + limit])

    async def find_nearest_chunks(self, tenant_id, vector, limit):
        self.calls["find_nearest_chunks"].append({"tenant_id": tenant_id, "limit": limit})
        return self.candidates[:limit]

    async def get_document_details(self, tenant_id, document_ids):
        self.calls["get_document_details"].append(list(document_ids))
        if self.details_error is not None:
            raise self.details_error
        return [self.documents[doc_id] for doc_id in document_ids if doc_id in self.documents]

    async def get_document_titles(self, tenant_id, document_ids):
        self.calls["get_document_titles"].append(list(document_ids))
        return {doc_id: self.documents[doc_id].title for doc_id in document_ids if doc_id in self.documents}

    async def get_adjacent_chunks(self, tenant_id, document_id, chunk_index, window):
        key = (document_id, chunk_index)
        if key in self.adjacent_errors:
            raise RuntimeError("chunk lookup failed")
        return self.adjacent.get(key, [])


def lexical_item(doc_id: str, snippet: Optional[str] = None, score: float = 1.0) -> SearchResultItem:
    return SearchResultItem(id=doc_id, title=f"Title {doc_id}", snippet=snippet or f"snippet {doc_id}", score=score)


def candidate(doc_id: str, chunk_index: int = 0, content: Optional[str] = None) -> Candidate:
    return Candidate(
        document_id=doc_id,
        chunk_index=chunk_index,
        content=content or f"{doc_id} chunk {chunk_index}",
        distance=0.1,
        similarity=0.9,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def breaker(clock):
    return CircuitBreaker(
        CircuitBreakerConfig(failure_threshold=3, reset_timeout=30.0, half_open_timeout=10.0),
        name="semantic",
        clock=clock,
    )


@pytest.fixture
def registry():
    return CollectorRegistry()


@pytest.fixture
def metrics(registry):
    return SearchHubMetrics(registry=registry)


@pytest.fixture
def settings():
    return SearchHubSettings(
        semantic=SemanticSettings(context_window=0),
        hybrid=HybridSettings(),
    )


@pytest.fixture
def store():
    return FakeDocumentStore()


@pytest.fixture
def embedder():
    return FakeEmbedder()


@pytest.fixture
def reranker():
    return FakeReRanker()


@pytest.fixture
def semantic(store, embedder, reranker, breaker, settings, metrics):
    return SemanticSearch(store, embedder, reranker, breaker, settings=settings.semantic, metrics=metrics)


@pytest.fixture
def engine(store, semantic, breaker, settings, metrics):
    return HybridSearchEngine(
        LexicalSearch(store),
        semantic,
        store,
        breaker,
        settings=settings.hybrid,
        metrics=metrics,
    )
