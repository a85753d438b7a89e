"""
Prometheus Metrics

This module defines the Prometheus metrics exported by the search operations:
- Circuit breaker state per protected service (0=closed, 1=open, 2=half-open)
- Embedding and rerank request latency
- Search request counts and latency per search type
- Semantic fallbacks by reason

Metrics are grouped in a ``SearchHubMetrics`` object bound to a registry so
that each service (or test) can own an isolated ``CollectorRegistry``.
A registry accepts each collector name once, so services sharing a registry
share its ``SearchHubMetrics`` through ``for_registry``.
"""

import logging
import threading
import weakref
from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, REGISTRY

from resilience.circuit_breaker import CircuitBreaker

logger = logging.getLogger(__name__)

_instances = weakref.WeakKeyDictionary()
_instances_lock = threading.Lock()


class FallbackReason:
    """Reasons recorded when hybrid search serves lexical-only results."""
    BREAKER_OPEN = "breaker_open"
    SEMANTIC_ERROR = "semantic_error"
    NO_SEMANTIC_RESULTS = "no_semantic_results"


class SearchHubMetrics:
    """
    Container for the Prometheus collectors used by search operations.

    Example:
        >>> metrics = SearchHubMetrics(registry=CollectorRegistry())
        >>> metrics.track_breaker(breaker)
        >>> metrics.observe_ai_request("voyage", "embed", 0.12)
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """
        Create and register the collectors.

        Args:
            registry: Registry to register collectors with (default: global registry)
        """
        self.registry = registry if registry is not None else REGISTRY

        self.circuit_breaker_state = Gauge(
            "circuit_breaker_state",
            "Circuit breaker state (0=closed, 1=open, 2=half-open)",
            ["service"],
            registry=self.registry,
        )
        self.ai_request_duration = Histogram(
            "ai_request_duration_seconds",
            "AI service request duration",
            ["provider", "operation"],
            buckets=(0.1, 0.5, 1, 2, 5, 10, 30),
            registry=self.registry,
        )
        self.search_requests = Counter(
            "search_requests_total",
            "Total search requests",
            ["search_type"],
            registry=self.registry,
        )
        self.search_duration = Histogram(
            "search_duration_seconds",
            "Search request duration in seconds",
            ["search_type", "status"],
            buckets=(0.1, 0.5, 1, 2, 5, 10),
            registry=self.registry,
        )
        self.semantic_fallbacks = Counter(
            "semantic_fallbacks_total",
            "Hybrid searches served from lexical results only",
            ["reason"],
            registry=self.registry,
        )

    @classmethod
    def for_registry(cls, registry: Optional[CollectorRegistry] = None) -> "SearchHubMetrics":
        """
        Get the metrics registered on a registry, creating them on first use.

        Args:
            registry: Registry holding the collectors (default: global registry)

        Returns:
            The SearchHubMetrics bound to ``registry``
        """
        registry = registry if registry is not None else REGISTRY
        with _instances_lock:
            metrics = _instances.get(registry)
            if metrics is None:
                metrics = cls(registry=registry)
                _instances[registry] = metrics
            return metrics

    def track_breaker(self, breaker: CircuitBreaker) -> None:
        """
        Export a breaker's live state as the ``circuit_breaker_state`` gauge.

        The gauge reads ``breaker.current_state()`` at scrape time.

        Args:
            breaker: Breaker to track, labelled by its name
        """
        self.circuit_breaker_state.labels(service=breaker.name).set_function(
            lambda: breaker.current_state().gauge_value
        )
        logger.debug(f"Tracking circuit breaker state for service: {breaker.name}")

    def observe_ai_request(self, provider: str, operation: str, seconds: float) -> None:
        self.ai_request_duration.labels(provider=provider, operation=operation).observe(seconds)

    def observe_search(self, search_type: str, status: str, seconds: float) -> None:
        self.search_requests.labels(search_type=search_type).inc()
        self.search_duration.labels(search_type=search_type, status=status).observe(seconds)

    def record_fallback(self, reason: str) -> None:
        self.semantic_fallbacks.labels(reason=reason).inc()
