"""
Tests for the search service facade and search analytics logging.
"""

import asyncio
import logging

import pytest

from config.settings import BreakerSettings, SearchHubSettings, SemanticSettings
from resilience import CircuitState
from search_operations import (
    HybridSearchQuery,
    InMemorySearchLog,
    SearchLogEntry,
    SearchLogSink,
    SearchLogStatus,
    SearchQuery,
    SearchType,
    SemanticQuery,
    SemanticSearchUnavailableError,
    create_search_service,
)

from conftest import FakeClock, FakeDocumentStore, FakeEmbedder, FakeReRanker, candidate, lexical_item


class FailingSink(SearchLogSink):
    async def write(self, entry: SearchLogEntry) -> None:
        raise RuntimeError("analytics table locked")


@pytest.fixture
def service_parts(registry):
    store = FakeDocumentStore(lexical=[lexical_item("A"), lexical_item("B")])
    embedder = FakeEmbedder()
    reranker = FakeReRanker()
    clock = FakeClock()
    search_log = InMemorySearchLog()
    settings = SearchHubSettings(
        breaker=BreakerSettings(failure_threshold=2, reset_timeout=10.0),
        semantic=SemanticSettings(context_window=0),
    )
    service = create_search_service(
        store, embedder, reranker,
        settings=settings,
        search_log=search_log,
        registry=registry,
        clock=clock,
    )
    return service, store, embedder, reranker, clock, search_log


def test_lexical_search_reshapes_store_result(service_parts, registry):
    service, store, *_ = service_parts

    response = asyncio.run(service.lexical_search(SearchQuery(tenant_id="t1", q="invoices", limit=1, offset=1)))

    assert response.total == 2
    assert [item.id for item in response.items] == ["B"]
    assert response.page == 2
    assert response.page_size == 1
    assert response.to_dict()["pageSize"] == 1
    assert registry.get_sample_value("search_requests_total", {"search_type": "lexical"}) == 1.0


def test_semantic_search_blocked_when_breaker_open(service_parts):
    service, store, embedder, *_ = service_parts
    embedder.error = RuntimeError("down")
    query = SemanticQuery(tenant_id="t1", q="invoices")

    for _ in range(2):
        with pytest.raises(Exception):
            asyncio.run(service.semantic_search(query))

    assert service.breaker_state() == CircuitState.OPEN
    with pytest.raises(SemanticSearchUnavailableError):
        asyncio.run(service.semantic_search(query))
    assert len(embedder.calls) == 2


def test_hybrid_search_normalizes_query(service_parts):
    service, store, embedder, reranker, *_ = service_parts
    store.candidates = [candidate("A", content="a")]

    asyncio.run(service.hybrid_search(HybridSearchQuery(tenant_id="t1", q="Hello   What is RRF???")))

    assert store.calls["lexical_search"][0]["q"] == "what is rrf?"
    assert embedder.calls == ["what is rrf?"]


def test_hybrid_search_degraded_is_recorded_as_partial(service_parts, registry):
    service, store, embedder, *_ = service_parts
    embedder.error = RuntimeError("down")

    response = asyncio.run(service.hybrid_search(HybridSearchQuery(tenant_id="t1", q="invoices")))

    assert response.degraded
    assert [item.id for item in response.items] == ["A", "B"]
    assert registry.get_sample_value(
        "search_duration_seconds_count", {"search_type": "hybrid", "status": "partial"}
    ) == 1.0
    assert registry.get_sample_value("semantic_fallbacks_total", {"reason": "semantic_error"}) == 1.0


def test_breaker_recovers_after_reset_timeout(service_parts):
    service, store, embedder, reranker, clock, _ = service_parts
    embedder.error = RuntimeError("down")
    query = HybridSearchQuery(tenant_id="t1", q="invoices")
    for _ in range(2):
        asyncio.run(service.hybrid_search(query))
    assert service.breaker_state() == CircuitState.OPEN

    embedder.error = None
    store.candidates = [candidate("C", content="c")]
    reranker.scores = {"c": 0.9}
    clock.advance(11)

    response = asyncio.run(service.hybrid_search(query))

    assert service.breaker_state() == CircuitState.CLOSED
    assert not response.degraded
    assert "C" in [item.id for item in response.items]


def test_breaker_state_gauge_is_exported(service_parts, registry):
    service, *_ = service_parts
    assert registry.get_sample_value("circuit_breaker_state", {"service": "semantic"}) == 0


def test_log_search_writes_entry(service_parts):
    service, *_, search_log = service_parts

    asyncio.run(service.log_search(
        tenant_id="t1",
        user_id="u1",
        query="invoices",
        search_type=SearchType.HYBRID,
        result_count=2,
        duration_ms=12.5,
    ))

    assert len(search_log.entries) == 1
    entry = search_log.entries[0]
    assert entry.to_dict()["search_type"] == "hybrid"
    assert entry.status == SearchLogStatus.SUCCESS
    assert entry.duration_ms == 12.5


def test_log_search_swallows_sink_errors(registry, caplog):
    service = create_search_service(
        FakeDocumentStore(), FakeEmbedder(), FakeReRanker(),
        settings=SearchHubSettings(),
        search_log=FailingSink(),
        registry=registry,
    )

    with caplog.at_level(logging.ERROR):
        asyncio.run(service.log_search("t1", "u1", "invoices", "lexical", 0, 3.0, "error"))

    assert "Failed to log search event" in caplog.text


def test_metrics_can_be_disabled(registry):
    settings = SearchHubSettings()
    settings.monitoring.enable_metrics = False

    service = create_search_service(FakeDocumentStore(), FakeEmbedder(), FakeReRanker(), settings=settings)

    response = asyncio.run(service.lexical_search(SearchQuery(tenant_id="t1", q="invoices")))
    assert response.total == 0


def test_metrics_summary_includes_breaker(service_parts):
    service, *_ = service_parts
    asyncio.run(service.hybrid_search(HybridSearchQuery(tenant_id="t1", q="invoices")))

    summary = asyncio.run(service.get_metrics_summary())

    assert summary["total_searches"] == 1
    assert summary["circuit_breaker"]["name"] == "semantic"
    health = asyncio.run(service.health_check())
    assert health["status"] == "healthy"


def test_services_share_metrics_per_registry(registry):
    first = create_search_service(FakeDocumentStore(), FakeEmbedder(), FakeReRanker(), registry=registry,
                                  settings=SearchHubSettings())
    second = create_search_service(FakeDocumentStore(), FakeEmbedder(), FakeReRanker(), registry=registry,
                                   settings=SearchHubSettings(breaker=BreakerSettings(service_name="semantic-eu")))

    assert first._metrics is second._metrics
    asyncio.run(first.lexical_search(SearchQuery(tenant_id="t1", q="invoices")))
    asyncio.run(second.lexical_search(SearchQuery(tenant_id="t2", q="invoices")))
    assert registry.get_sample_value("search_requests_total", {"search_type": "lexical"}) == 2.0
    assert registry.get_sample_value("circuit_breaker_state", {"service": "semantic-eu"}) == 0


def test_services_on_default_registry_can_be_built_twice():
    services = [
        create_search_service(FakeDocumentStore(), FakeEmbedder(), FakeReRanker(), settings=SearchHubSettings())
        for _ in range(2)
    ]

    assert services[0]._metrics is services[1]._metrics
