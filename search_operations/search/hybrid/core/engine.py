"""
Hybrid Search Engine

This module fuses lexical full-text search with breaker-gated semantic
search using Reciprocal Rank Fusion, with pagination-aware fetch windows
and graceful degradation to lexical-only results whenever the semantic path
is blocked or fails.
"""

import time
import logging
import asyncio
from collections import defaultdict
from dataclasses import replace
from typing import List, Dict, Any, Optional, Callable

from search_hub_exceptions import SearchHubError
from config.settings import HybridSettings
from monitoring.metrics import SearchHubMetrics, FallbackReason
from resilience import CircuitBreaker, CircuitState
from ....core.models import SearchResponse, SearchResultItem, DocumentDetail
from ....core.search_ops_exceptions import SearchError, SemanticSearchError
from ....config.validation import SearchQuery, SemanticQuery, HybridSearchQuery
from ....providers.base import DocumentStore
from ...lexical import LexicalSearch
from ...semantic.engine import SemanticSearch

from .fusion import fuse_rankings
from .window import plan_lexical_window, plan_semantic_window
from ..utils.metrics import HybridSearchMetrics, SearchStatus
from ..utils.validation import meaningful_tokens, truncate_snippet, query_hash

logger = logging.getLogger(__name__)

UNTITLED_DOCUMENT = "Untitled document"


class HybridSearchEngine:
    """
    Hybrid (lexical + semantic) search with Reciprocal Rank Fusion.

    Lexical search always runs first and its page is the fallback response.
    Semantic search runs only when the circuit breaker admits it; any
    semantic failure is logged and absorbed, and the lexical page is
    returned. Lexical failures propagate.

    Features:
    - One fusion window shared by every page inside it, so pages never repeat documents
    - Per-document deduplication of semantic hits (best rank only)
    - Rerank relevance threshold and a "no strong matches" guard
    - Batched metadata back-fill for semantic-only documents
    - Per-search metrics history, summary and health check
    """

    def __init__(
        self,
        lexical_search: LexicalSearch,
        semantic_search: SemanticSearch,
        store: DocumentStore,
        breaker: CircuitBreaker,
        settings: Optional[HybridSettings] = None,
        metrics: Optional[SearchHubMetrics] = None,
        metrics_callback: Optional[Callable[[HybridSearchMetrics], None]] = None,
        max_metrics_history: int = 1000
    ):
        """
        Initialize hybrid search.

        Args:
            lexical_search: Lexical search engine (the baseline)
            semantic_search: Semantic search engine (breaker-gated)
            store: Document store used to back-fill semantic-only documents
            breaker: Circuit breaker shared with ``semantic_search``
            settings: Hybrid settings (uses defaults if not provided)
            metrics: Prometheus metrics to record fallbacks to
            metrics_callback: Optional callback receiving each search's metrics
            max_metrics_history: Number of metrics records kept for summaries
        """
        self._lexical = lexical_search
        self._semantic = semantic_search
        self._store = store
        self.breaker = breaker
        self.settings = settings or HybridSettings()
        self._metrics = metrics
        self.metrics_callback = metrics_callback
        self.max_metrics_history = max_metrics_history

        self._metrics_history: List[HybridSearchMetrics] = []
        self._lock = asyncio.Lock()

        logger.info(
            f"HybridSearchEngine initialized - "
            f"max_window: {self.settings.max_window}, "
            f"rerank_threshold: {self._semantic.settings.rerank_threshold}, "
            f"short_query_filter: {self.settings.filter_short_queries}"
        )

    async def search(self, query: HybridSearchQuery) -> SearchResponse:
        """
        Perform hybrid search.

        Args:
            query: Validated hybrid query

        Returns:
            SearchResponse with ``total = max(lexical total, fused documents)``

        Raises:
            LexicalSearchError: If lexical search fails
            SearchError: If the metadata back-fill or fusion fails
        """
        start_time = time.time()
        record = HybridSearchMetrics(query_hash=query_hash(query.q), tenant_id=query.tenant_id)

        try:
            response = await self._search(query, record)
            record.results_count = len(response.items)
            return response

        except SearchHubError as e:
            record.status = SearchStatus.FAILURE
            record.error_message = str(e)
            logger.error(
                f"Hybrid search failed - tenant: {query.tenant_id}, "
                f"query_hash: {record.query_hash}, error: {str(e)}"
            )
            raise

        except Exception as e:
            record.status = SearchStatus.FAILURE
            record.error_message = str(e)
            error_msg = f"Hybrid search failed: {str(e)}"
            logger.error(error_msg, exc_info=True)
            raise SearchError(error_msg) from e

        finally:
            record.total_time_ms = (time.time() - start_time) * 1000
            await self._store_metrics(record)

    async def _search(self, query: HybridSearchQuery, record: HybridSearchMetrics) -> SearchResponse:
        page = query.offset // query.limit + 1

        if self.settings.filter_short_queries and not meaningful_tokens(
            query.q, self.settings.min_token_length
        ):
            logger.debug(
                f"Query filtered - tenant: {query.tenant_id}, "
                f"query_hash: {record.query_hash}, reason: short_or_stopword_only"
            )
            return SearchResponse(total=0, items=[], page=page, page_size=query.limit)

        # Lexical search first; its errors propagate
        window = plan_lexical_window(query.offset, query.limit, self.settings.max_window)
        record.expanded_window = window.expanded
        lexical_start = time.time()
        lexical_response = await self._lexical.search(SearchQuery(
            tenant_id=query.tenant_id,
            q=query.q,
            limit=window.limit,
            offset=window.offset,
        ))
        record.lexical_time_ms = (time.time() - lexical_start) * 1000

        lexical_items = lexical_response.items
        record.lexical_results = len(lexical_items)

        lexical_only = SearchResponse(
            total=lexical_response.total,
            items=window.lexical_page(lexical_items),
            page=page,
            page_size=query.limit,
        )

        if not window.expanded:
            logger.debug(
                f"Page past the fusion window, serving lexical ranking - "
                f"tenant: {query.tenant_id}, offset: {query.offset}, "
                f"max_window: {self.settings.max_window}"
            )
            return lexical_only

        if not self.breaker.can_execute():
            logger.debug(
                f"Semantic search skipped, circuit '{self.breaker.name}' is "
                f"{self.breaker.current_state().value} - tenant: {query.tenant_id}"
            )
            return self._fallback(lexical_only, record, FallbackReason.BREAKER_OPEN)

        record.semantic_attempted = True
        semantic_window = plan_semantic_window(
            query.semantic_k,
            query.semantic_recall,
            self.settings.max_window
        )
        semantic_start = time.time()
        try:
            semantic_result = await self._semantic.search(SemanticQuery(
                tenant_id=query.tenant_id,
                q=query.q,
                k=semantic_window.k,
                recall_k=semantic_window.recall,
            ))
        except SemanticSearchError as e:
            record.semantic_time_ms = (time.time() - semantic_start) * 1000
            record.error_message = str(e)
            logger.error(
                f"Semantic search failed, falling back to lexical - "
                f"tenant: {query.tenant_id}, query_hash: {record.query_hash}, "
                f"error: {type(e).__name__}: {str(e)}"
            )
            return self._fallback(lexical_only, record, FallbackReason.SEMANTIC_ERROR)
        record.semantic_time_ms = (time.time() - semantic_start) * 1000
        record.semantic_results = len(semantic_result.items)

        if not semantic_result.items:
            record.fallback_reason = FallbackReason.NO_SEMANTIC_RESULTS
            self._record_fallback(FallbackReason.NO_SEMANTIC_RESULTS)
            return lexical_only

        fusion_start = time.time()
        semantic_settings = self._semantic.settings
        semantic_items = sorted(semantic_result.items, key=lambda item: item.rerank_score, reverse=True)
        relevant = [
            item for item in semantic_items
            if item.rerank_score >= semantic_settings.rerank_threshold
        ]

        if (
            not lexical_items
            and relevant
            and relevant[0].rerank_score < semantic_settings.top_score_cutoff
        ):
            logger.debug(
                f"Semantic results filtered by top score - tenant: {query.tenant_id}, "
                f"top_score: {relevant[0].rerank_score}, "
                f"cutoff: {semantic_settings.top_score_cutoff}"
            )
            return SearchResponse(
                total=0,
                items=[],
                page=page,
                page_size=query.limit,
                no_strong_matches=True,
            )

        scored = fuse_rankings(
            [item.id for item in lexical_items],
            [item.document_id for item in relevant],
            query.rrf_k or self.settings.default_rrf_k
        )

        if len(scored) <= window.page_start:
            return lexical_only
        paged = scored[window.page_start:window.page_start + query.limit]

        lexical_by_id: Dict[str, SearchResultItem] = {}
        for item in lexical_items:
            lexical_by_id.setdefault(item.id, item)
        semantic_snippets: Dict[str, str] = {}
        for item in relevant:
            semantic_snippets.setdefault(item.document_id, item.content)

        details = await self._backfill(
            query.tenant_id,
            [doc_id for doc_id, _ in paged if doc_id not in lexical_by_id]
        )

        items = []
        for doc_id, score in paged:
            lexical_item = lexical_by_id.get(doc_id)
            detail = details.get(doc_id)
            if lexical_item is not None:
                title = lexical_item.title
            elif detail is not None and detail.title:
                title = detail.title
            else:
                title = UNTITLED_DOCUMENT
            items.append(SearchResultItem(
                id=doc_id,
                title=title,
                snippet=self._snippet(lexical_item, semantic_snippets.get(doc_id), detail),
                score=round(score, 6),
                url=lexical_item.url if lexical_item is not None else None,
            ))
        record.fusion_time_ms = (time.time() - fusion_start) * 1000

        logger.info(
            f"Hybrid search completed - tenant: {query.tenant_id}, "
            f"results: {len(items)}, fused_docs: {len(scored)}, "
            f"lexical: {record.lexical_time_ms:.2f}ms, "
            f"semantic: {record.semantic_time_ms:.2f}ms, "
            f"fusion: {record.fusion_time_ms:.2f}ms"
        )

        return SearchResponse(
            total=max(lexical_response.total, len(scored)),
            items=items,
            page=page,
            page_size=query.limit,
        )

    async def _backfill(self, tenant_id: str, document_ids: List[str]) -> Dict[str, DocumentDetail]:
        if not document_ids:
            return {}
        try:
            details = await self._store.get_document_details(tenant_id, document_ids)
        except Exception as e:
            raise SearchError(f"Document metadata back-fill failed: {str(e)}") from e
        return {detail.id: detail for detail in details}

    def _snippet(
        self,
        lexical_item: Optional[SearchResultItem],
        semantic_snippet: Optional[str],
        detail: Optional[DocumentDetail]
    ) -> Optional[str]:
        max_length = self.settings.snippet_max_length
        if lexical_item is not None and lexical_item.snippet:
            return truncate_snippet(lexical_item.snippet, max_length)
        if semantic_snippet:
            return truncate_snippet(semantic_snippet, max_length)
        if detail is not None and detail.content:
            return truncate_snippet(detail.content, max_length)
        return None

    def _fallback(
        self,
        lexical_only: SearchResponse,
        record: HybridSearchMetrics,
        reason: str
    ) -> SearchResponse:
        record.status = SearchStatus.DEGRADED
        record.fallback_reason = reason
        self._record_fallback(reason)
        return replace(lexical_only, degraded=True)

    def _record_fallback(self, reason: str) -> None:
        if self._metrics is not None:
            self._metrics.record_fallback(reason)

    async def _store_metrics(self, record: HybridSearchMetrics) -> None:
        async with self._lock:
            self._metrics_history.append(record)
            if len(self._metrics_history) > self.max_metrics_history:
                self._metrics_history = self._metrics_history[-self.max_metrics_history:]

        if self.metrics_callback:
            try:
                self.metrics_callback(record)
            except Exception as e:
                logger.error(f"Metrics callback failed: {str(e)}")

    async def get_metrics_summary(self) -> Dict[str, Any]:
        """
        Get summary of search metrics.

        Returns:
            Dictionary with metrics summary including success rates,
            average timings, and fallback statistics
        """
        async with self._lock:
            if not self._metrics_history:
                return {"message": "No metrics available"}

            total_searches = len(self._metrics_history)
            successful = sum(1 for m in self._metrics_history if m.status == SearchStatus.SUCCESS)
            failed = sum(1 for m in self._metrics_history if m.status == SearchStatus.FAILURE)
            degraded = sum(1 for m in self._metrics_history if m.status == SearchStatus.DEGRADED)

            avg_lexical = sum(m.lexical_time_ms for m in self._metrics_history) / total_searches
            avg_semantic = sum(m.semantic_time_ms for m in self._metrics_history) / total_searches
            avg_fusion = sum(m.fusion_time_ms for m in self._metrics_history) / total_searches
            avg_total = sum(m.total_time_ms for m in self._metrics_history) / total_searches

            fallback_counts = defaultdict(int)
            for m in self._metrics_history:
                if m.fallback_reason:
                    fallback_counts[m.fallback_reason] += 1

            return {
                "total_searches": total_searches,
                "successful": successful,
                "failed": failed,
                "degraded": degraded,
                "success_rate": successful / total_searches,
                "avg_lexical_time_ms": round(avg_lexical, 2),
                "avg_semantic_time_ms": round(avg_semantic, 2),
                "avg_fusion_time_ms": round(avg_fusion, 2),
                "avg_total_time_ms": round(avg_total, 2),
                "fallback_reasons": dict(fallback_counts),
                "circuit_breaker_state": self.breaker.current_state().value,
            }

    async def health_check(self) -> Dict[str, Any]:
        """
        Report the health of hybrid search.

        Lexical search has no breaker, so an open circuit only degrades the
        service to lexical-only results.

        Returns:
            Health status dictionary with component status
        """
        state = self.breaker.current_state()
        health = {
            "status": "healthy",
            "timestamp": time.time(),
            "components": {
                "circuit_breaker": {
                    "state": state.value,
                    "failures": self.breaker.get_failure_count(),
                },
            },
        }
        if state != CircuitState.CLOSED:
            health["status"] = "degraded"
        return health
