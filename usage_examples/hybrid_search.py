"""
Hybrid Search Example

Demonstrates hybrid search over an in-memory document store, and the
fallback to lexical-only results when the semantic backend fails and the
circuit breaker opens.
"""

import sys
import os
import asyncio
import hashlib
from typing import List, Sequence

import numpy as np

# Add parent directory to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from config import SearchHubSettings, BreakerSettings
from monitoring import configure_logging
from search_operations import (
    EmbeddingProvider,
    HybridSearchQuery,
    InMemoryDocumentStore,
    InMemorySearchLog,
    ReRanker,
    RerankScore,
    SearchType,
    create_search_service,
)

TENANT_ID = "demo-tenant"
VECTOR_DIM = 64

DOCUMENTS = [
    ("billing", "Billing guide", [
        "Invoices are generated on the first day of each month.",
        "Each invoice lists every charge for the previous billing period.",
    ]),
    ("security", "Security guide", [
        "Rotate API keys every quarter and revoke unused keys.",
        "Audit logs record every key rotation.",
    ]),
    ("onboarding", "Onboarding checklist", [
        "New users should enable two-factor authentication.",
        "Invite teammates from the workspace settings page.",
    ]),
]


def print_section(title: str):
    print("\n" + "=" * 80)
    print(f"  {title}")
    print("=" * 80)


def hashed_vector(text: str) -> List[float]:
    """Bag-of-words vector with hashed token positions."""
    vector = np.zeros(VECTOR_DIM)
    for token in text.lower().split():
        vector[int(hashlib.md5(token.encode()).hexdigest(), 16) % VECTOR_DIM] += 1.0
    return vector.tolist()


class HashingEmbedder(EmbeddingProvider):
    name = "hashing"

    def __init__(self):
        self.fail = False

    async def embed_query(self, text: str) -> List[float]:
        if self.fail:
            raise ConnectionError("embedding service unavailable")
        return hashed_vector(text)


class OverlapReRanker(ReRanker):
    name = "overlap"

    async def rerank(self, query: str, documents: Sequence[str]) -> List[RerankScore]:
        terms = set(query.lower().split())
        return [
            RerankScore(index=i, score=len(terms & set(doc.lower().split())) / max(len(terms), 1))
            for i, doc in enumerate(documents)
        ]


def print_response(response):
    print(f"  total={response.total} page={response.page} degraded={response.degraded}")
    for item in response.items:
        print(f"  - {item.id:<12} score={item.score:<10} {item.title}")


async def main():
    """Main function to demonstrate hybrid search."""
    settings = SearchHubSettings(breaker=BreakerSettings(failure_threshold=2, reset_timeout=5.0))
    configure_logging(settings.monitoring)

    store = InMemoryDocumentStore()
    for doc_id, title, chunks in DOCUMENTS:
        store.add_document(
            TENANT_ID, doc_id, title, " ".join(chunks),
            chunks=[(chunk, hashed_vector(chunk)) for chunk in chunks],
        )

    embedder = HashingEmbedder()
    search_log = InMemorySearchLog()
    service = create_search_service(store, embedder, OverlapReRanker(), settings=settings, search_log=search_log)

    print_section("Hybrid search")
    query = HybridSearchQuery(tenant_id=TENANT_ID, q="How often should I rotate API keys?")
    response = await service.hybrid_search(query)
    print_response(response)
    await service.log_search(TENANT_ID, "demo-user", query.q, SearchType.HYBRID, len(response.items), 0.0)

    print_section("Semantic backend failing")
    embedder.fail = True
    for attempt in range(3):
        response = await service.hybrid_search(query)
        print(f"  attempt {attempt + 1}: breaker={service.breaker_state().value}")
        print_response(response)

    print_section("Metrics summary")
    summary = await service.get_metrics_summary()
    for key in ("total_searches", "degraded", "fallback_reasons", "circuit_breaker_state"):
        print(f"  {key}: {summary[key]}")
    print(f"  search log entries: {len(search_log.entries)}")


if __name__ == "__main__":
    asyncio.run(main())
