"""
Semantic Search Operations

This module provides semantic (embedding + rerank) search over document
chunks, reporting every outcome to the circuit breaker that protects the
remote embedding and rerank services.
"""

import time
import asyncio
import logging
from dataclasses import asdict, replace
from typing import Optional, List, Dict

from search_hub_exceptions import OperationTimeoutError
from config.settings import SemanticSettings
from monitoring.metrics import SearchHubMetrics
from resilience import CircuitBreaker, run_with_timeout
from ...core.models import Candidate, SemanticSearchResult, SemanticSearchResultItem
from ...core.search_ops_exceptions import (
    SemanticSearchError,
    EmbeddingGenerationError,
    ReRankingError,
    SemanticTimeoutError,
    EmptyResultError,
)
from ...config.validation import SemanticQuery
from ...providers.base import DocumentStore, EmbeddingProvider, ReRanker

from .context import stitch_chunks

logger = logging.getLogger(__name__)

UNTITLED = "Untitled"


class SemanticSearch:
    """
    Semantic search over tenant-scoped document chunks.

    Workflow:
    1. Embed the query (bounded by ``embed_timeout``)
    2. Retrieve ``max(recall_k, k)`` nearest chunks by cosine distance
    3. Rerank the candidates (bounded by ``rerank_timeout``) and keep the top k
    4. Expand each hit with adjacent chunks and stitch them
    5. Deduplicate by document, keeping the highest rerank score
    6. Attach document titles

    The caller decides whether to run (``breaker.can_execute()``); this class
    reports the outcome with ``record_success`` or ``record_failure`` and
    raises a ``SemanticSearchError`` subclass on failure. The whole call is
    bounded by the breaker's ``half_open_timeout`` and a cancelled call counts
    as a failure, so an admitted probe always reports.
    """

    def __init__(
        self,
        store: DocumentStore,
        embedding_provider: EmbeddingProvider,
        reranker: ReRanker,
        breaker: CircuitBreaker,
        settings: Optional[SemanticSettings] = None,
        metrics: Optional[SearchHubMetrics] = None
    ):
        """
        Initialize semantic search.

        Args:
            store: Document store for chunks, context and titles
            embedding_provider: Query embedding service
            reranker: Rerank service
            breaker: Circuit breaker protecting the remote services
            settings: Semantic search settings (uses defaults if not provided)
            metrics: Prometheus metrics to report AI request latency to
        """
        self._store = store
        self._embedder = embedding_provider
        self._reranker = reranker
        self.breaker = breaker
        self.settings = settings or SemanticSettings()
        self._metrics = metrics

    async def search(self, query: SemanticQuery) -> SemanticSearchResult:
        """
        Perform semantic search.

        Args:
            query: Validated semantic query

        Returns:
            SemanticSearchResult with one item per document, best first

        Raises:
            SemanticSearchError: If any step of the semantic path fails
        """
        start_time = time.time()
        try:
            result = await run_with_timeout(
                self._run(query),
                self.breaker.config.half_open_timeout,
                operation="Semantic search"
            )
        except BaseException as e:
            # Cancellation must also resolve an admitted half-open probe
            self.breaker.record_failure()
            logger.warning(
                f"Semantic search failed - tenant: {query.tenant_id}, "
                f"error: {type(e).__name__}: {str(e)}"
            )
            if isinstance(e, SemanticSearchError) or not isinstance(e, Exception):
                raise
            if isinstance(e, OperationTimeoutError):
                raise SemanticTimeoutError(str(e)) from e
            raise SemanticSearchError(f"Semantic search failed: {str(e)}") from e

        self.breaker.record_success()
        logger.debug(
            f"Semantic search completed - tenant: {query.tenant_id}, "
            f"results: {len(result.items)}, "
            f"took: {(time.time() - start_time) * 1000:.2f}ms"
        )
        return result

    async def _run(self, query: SemanticQuery) -> SemanticSearchResult:
        recall = max(query.recall_k, query.k)

        vector = await self._embed(query.q)

        try:
            candidates = await self._store.find_nearest_chunks(query.tenant_id, vector, recall)
        except Exception as e:
            raise SemanticSearchError(f"Nearest-neighbor retrieval failed: {str(e)}") from e

        if not candidates:
            if self.settings.empty_candidates_is_failure:
                raise EmptyResultError("Nearest-neighbor retrieval returned no candidates")
            return SemanticSearchResult(items=[])

        items = await self._rerank(query.q, candidates, query.k)
        items = await self._attach_context(query.tenant_id, items)
        items = self._deduplicate(items)
        items = await self._attach_titles(query.tenant_id, items)

        return SemanticSearchResult(items=items)

    async def _embed(self, text: str) -> List[float]:
        embed_start = time.time()
        try:
            vector = await run_with_timeout(
                self._embedder.embed_query(text),
                self.settings.embed_timeout,
                operation="Query embedding"
            )
        except OperationTimeoutError as e:
            raise SemanticTimeoutError(str(e)) from e
        except Exception as e:
            raise EmbeddingGenerationError(f"Embedding generation failed: {str(e)}") from e

        self._observe(self._embedder.name, "embed", time.time() - embed_start)

        if vector is None or len(vector) == 0:
            raise EmbeddingGenerationError("Failed to generate embedding for query")
        return vector

    async def _rerank(
        self,
        text: str,
        candidates: List[Candidate],
        k: int
    ) -> List[SemanticSearchResultItem]:
        rerank_start = time.time()
        try:
            scores = await run_with_timeout(
                self._reranker.rerank(text, [candidate.content for candidate in candidates]),
                self.settings.rerank_timeout,
                operation="Rerank"
            )
        except OperationTimeoutError as e:
            raise SemanticTimeoutError(str(e)) from e
        except Exception as e:
            raise ReRankingError(f"Re-ranking failed: {str(e)}") from e

        self._observe(self._reranker.name, "rerank", time.time() - rerank_start)

        items = []
        for scored in sorted(scores, key=lambda s: s.score, reverse=True)[:k]:
            if not 0 <= scored.index < len(candidates):
                raise ReRankingError(
                    f"Rerank response referenced missing candidate {scored.index} "
                    f"(candidates: {len(candidates)})"
                )
            items.append(SemanticSearchResultItem(
                **asdict(candidates[scored.index]),
                rerank_score=scored.score,
            ))
        return items

    async def _attach_context(
        self,
        tenant_id: str,
        items: List[SemanticSearchResultItem]
    ) -> List[SemanticSearchResultItem]:
        window = self.settings.context_window
        if window <= 0:
            return items

        async def with_context(item: SemanticSearchResultItem) -> SemanticSearchResultItem:
            try:
                chunks = await self._store.get_adjacent_chunks(
                    tenant_id, item.document_id, item.chunk_index, window
                )
            except Exception as e:
                logger.warning(
                    f"Failed to fetch adjacent chunks, using original - "
                    f"document: {item.document_id}, chunk: {item.chunk_index}, error: {str(e)}"
                )
                return item
            if not chunks:
                return item
            return replace(item, content=stitch_chunks(chunks))

        return list(await asyncio.gather(*(with_context(item) for item in items)))

    @staticmethod
    def _deduplicate(items: List[SemanticSearchResultItem]) -> List[SemanticSearchResultItem]:
        best: Dict[str, SemanticSearchResultItem] = {}
        for item in items:
            existing = best.get(item.document_id)
            if existing is None or item.rerank_score > existing.rerank_score:
                best[item.document_id] = item
        return sorted(best.values(), key=lambda item: item.rerank_score, reverse=True)

    async def _attach_titles(
        self,
        tenant_id: str,
        items: List[SemanticSearchResultItem]
    ) -> List[SemanticSearchResultItem]:
        if not items:
            return items
        try:
            titles = await self._store.get_document_titles(
                tenant_id, [item.document_id for item in items]
            )
        except Exception as e:
            raise SemanticSearchError(f"Document title lookup failed: {str(e)}") from e
        return [replace(item, document_title=titles.get(item.document_id) or UNTITLED) for item in items]

    def _observe(self, provider: str, operation: str, seconds: float) -> None:
        if self._metrics is not None:
            self._metrics.observe_ai_request(provider, operation, seconds)
