"""
Search Operations Manager

This module provides a unified interface for all search operations. It wires
the circuit breaker, metrics and the lexical, semantic and hybrid engines
together from settings, and records search analytics.
"""

import time
import logging
from typing import Any, Callable, Dict, Optional

from prometheus_client import CollectorRegistry

from config.settings import SearchHubSettings, load_settings
from monitoring.metrics import SearchHubMetrics
from resilience import CircuitBreaker, CircuitBreakerConfig, CircuitState
from .models import SearchResponse, SemanticSearchResult
from .search_log import SearchLogEntry, SearchLogSink, SearchLogStatus, SearchType
from .search_ops_exceptions import SemanticSearchUnavailableError
from ..config.validation import SearchQuery, SemanticQuery, HybridSearchQuery
from ..providers.base import DocumentStore, EmbeddingProvider, ReRanker
from ..search.lexical import LexicalSearch
from ..search.semantic.engine import SemanticSearch
from ..search.hybrid.core.engine import HybridSearchEngine
from ..search.hybrid.utils.validation import normalize_query

logger = logging.getLogger(__name__)


class SearchService:
    """
    Facade over the search engines.

    One instance (and so one circuit breaker) is meant to live for the whole
    process; the breaker is the only state shared between requests.
    """

    def __init__(
        self,
        lexical_search: LexicalSearch,
        semantic_search: SemanticSearch,
        hybrid_search: HybridSearchEngine,
        breaker: CircuitBreaker,
        search_log: Optional[SearchLogSink] = None,
        metrics: Optional[SearchHubMetrics] = None
    ):
        """
        Initialize the search service.

        Args:
            lexical_search: Lexical search engine
            semantic_search: Semantic search engine
            hybrid_search: Hybrid search engine
            breaker: Circuit breaker protecting the semantic backend
            search_log: Sink for search analytics entries (logging disabled if None)
            metrics: Prometheus metrics (disabled if None)
        """
        self._lexical = lexical_search
        self._semantic = semantic_search
        self._hybrid = hybrid_search
        self.breaker = breaker
        self._search_log = search_log
        self._metrics = metrics

    async def lexical_search(self, query: SearchQuery) -> SearchResponse:
        """
        Perform full-text search.

        Raises:
            LexicalSearchError: If the full-text backend fails
        """
        start_time = time.time()
        status = "error"
        try:
            response = await self._lexical.search(query)
            status = "success"
            return response
        finally:
            self._observe(SearchType.LEXICAL, status, start_time)

    async def semantic_search(self, query: SemanticQuery) -> SemanticSearchResult:
        """
        Perform semantic search if the circuit breaker admits it.

        Raises:
            SemanticSearchUnavailableError: If the circuit breaker blocks the call
            SemanticSearchError: If the semantic backend fails
        """
        start_time = time.time()
        status = "error"
        try:
            if not self.breaker.can_execute():
                raise SemanticSearchUnavailableError(
                    f"Semantic search unavailable: circuit '{self.breaker.name}' is "
                    f"{self.breaker.current_state().value}"
                )
            result = await self._semantic.search(query)
            status = "success"
            return result
        finally:
            self._observe(SearchType.SEMANTIC, status, start_time)

    async def hybrid_search(self, query: HybridSearchQuery) -> SearchResponse:
        """
        Normalize the query text and perform hybrid search.

        Semantic failures degrade to lexical-only results; the response is
        then marked ``degraded`` and recorded with status ``partial``.

        Raises:
            LexicalSearchError: If the full-text backend fails
        """
        normalized = normalize_query(query.q) or query.q.strip()
        if normalized != query.q:
            query = query.model_copy(update={"q": normalized})

        start_time = time.time()
        status = "error"
        try:
            response = await self._hybrid.search(query)
            status = "partial" if response.degraded else "success"
            return response
        finally:
            self._observe(SearchType.HYBRID, status, start_time)

    async def log_search(
        self,
        tenant_id: str,
        user_id: str,
        query: str,
        search_type: SearchType,
        result_count: int,
        duration_ms: float,
        status: SearchLogStatus = SearchLogStatus.SUCCESS
    ) -> None:
        """
        Record a search analytics entry.

        Failures of the sink are logged and never raised, so analytics
        cannot affect search requests.
        """
        if self._search_log is None:
            return

        entry = SearchLogEntry(
            tenant_id=tenant_id,
            user_id=user_id,
            query=query,
            search_type=SearchType(search_type),
            result_count=result_count,
            duration_ms=duration_ms,
            status=SearchLogStatus(status),
        )
        try:
            await self._search_log.write(entry)
        except Exception as e:
            logger.error(
                f"Failed to log search event - tenant: {tenant_id}, "
                f"user: {user_id}, error: {str(e)}"
            )

    def breaker_state(self) -> CircuitState:
        """Get the state of the semantic circuit breaker."""
        return self.breaker.current_state()

    async def get_metrics_summary(self) -> Dict[str, Any]:
        summary = await self._hybrid.get_metrics_summary()
        summary["circuit_breaker"] = self.breaker.get_metrics()
        return summary

    async def health_check(self) -> Dict[str, Any]:
        return await self._hybrid.health_check()

    def _observe(self, search_type: SearchType, status: str, start_time: float) -> None:
        if self._metrics is not None:
            self._metrics.observe_search(search_type.value, status, time.time() - start_time)


def create_search_service(
    store: DocumentStore,
    embedding_provider: EmbeddingProvider,
    reranker: ReRanker,
    settings: Optional[SearchHubSettings] = None,
    search_log: Optional[SearchLogSink] = None,
    metrics: Optional[SearchHubMetrics] = None,
    registry: Optional[CollectorRegistry] = None,
    clock: Callable[[], float] = time.monotonic
) -> SearchService:
    """
    Build a search service from settings.

    Args:
        store: Document store
        embedding_provider: Query embedding service
        reranker: Rerank service
        settings: Settings (loaded from the environment if not provided)
        search_log: Sink for search analytics entries
        metrics: Prometheus metrics; when metrics are enabled and none are
            given, the metrics of ``registry`` are used (created on first use)
        registry: Registry holding the metrics (default: global registry)
        clock: Time source for the circuit breaker

    Returns:
        Configured SearchService
    """
    settings = settings or load_settings()

    breaker = CircuitBreaker(
        CircuitBreakerConfig(
            failure_threshold=settings.breaker.failure_threshold,
            reset_timeout=settings.breaker.reset_timeout,
            half_open_timeout=settings.breaker.half_open_timeout,
        ),
        name=settings.breaker.service_name,
        clock=clock,
    )

    if metrics is None and settings.monitoring.enable_metrics:
        metrics = SearchHubMetrics.for_registry(registry)
    if metrics is not None:
        metrics.track_breaker(breaker)

    lexical = LexicalSearch(store)
    semantic = SemanticSearch(
        store,
        embedding_provider,
        reranker,
        breaker,
        settings=settings.semantic,
        metrics=metrics,
    )
    hybrid = HybridSearchEngine(
        lexical,
        semantic,
        store,
        breaker,
        settings=settings.hybrid,
        metrics=metrics,
        max_metrics_history=settings.monitoring.max_metrics_history,
    )

    logger.info(
        f"SearchService created - breaker: {breaker!r}, "
        f"metrics: {'enabled' if metrics is not None else 'disabled'}, "
        f"search_log: {'enabled' if search_log is not None else 'disabled'}"
    )

    return SearchService(lexical, semantic, hybrid, breaker, search_log=search_log, metrics=metrics)
