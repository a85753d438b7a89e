"""
Metrics Module

This module provides metrics tracking for hybrid search operations,
including status enumerations and per-search metrics records.
"""

import time
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional


class SearchStatus(Enum):
    """
    Enumeration of search operation states.

    Used to track the final status of search operations for monitoring
    and observability purposes.
    """
    SUCCESS = "success"
    FAILURE = "failure"
    DEGRADED = "degraded"


@dataclass
class HybridSearchMetrics:
    """
    Metrics for a single hybrid search operation.

    Attributes:
        query_hash: Hash of the query for identification
        tenant_id: Tenant the search ran for
        lexical_time_ms: Time taken by lexical search
        semantic_time_ms: Time taken by semantic search (0 when skipped)
        fusion_time_ms: Time taken for fusion and metadata back-fill
        total_time_ms: Total end-to-end time
        lexical_results: Number of lexical hits fetched
        semantic_results: Number of semantic hits returned
        results_count: Number of items returned to the caller
        expanded_window: Whether the lexical window was widened to start at 0
        semantic_attempted: Whether the breaker admitted the semantic path
        fallback_reason: Why lexical-only results were served, if they were
        status: Final status of the search operation
        error_message: Error message if search failed or degraded
        timestamp: Unix timestamp when search was initiated
    """
    query_hash: str
    tenant_id: str = ""
    lexical_time_ms: float = 0.0
    semantic_time_ms: float = 0.0
    fusion_time_ms: float = 0.0
    total_time_ms: float = 0.0
    lexical_results: int = 0
    semantic_results: int = 0
    results_count: int = 0
    expanded_window: bool = False
    semantic_attempted: bool = False
    fallback_reason: Optional[str] = None
    status: SearchStatus = SearchStatus.SUCCESS
    error_message: Optional[str] = None
    timestamp: float = field(default_factory=time.time)

    def to_dict(self):
        """
        Convert metrics to dictionary format.

        Returns:
            Dictionary representation of metrics
        """
        return {
            "query_hash": self.query_hash,
            "tenant_id": self.tenant_id,
            "lexical_time_ms": round(self.lexical_time_ms, 2),
            "semantic_time_ms": round(self.semantic_time_ms, 2),
            "fusion_time_ms": round(self.fusion_time_ms, 2),
            "total_time_ms": round(self.total_time_ms, 2),
            "lexical_results": self.lexical_results,
            "semantic_results": self.semantic_results,
            "results_count": self.results_count,
            "expanded_window": self.expanded_window,
            "semantic_attempted": self.semantic_attempted,
            "fallback_reason": self.fallback_reason,
            "status": self.status.value,
            "error_message": self.error_message,
            "timestamp": self.timestamp,
        }
