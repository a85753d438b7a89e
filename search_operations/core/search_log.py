"""
Search Analytics Log

This module defines the search analytics record written after each search
and the sink interface that persists it.
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Dict, Any


class SearchType(str, Enum):
    """Search types recorded in the analytics log."""
    LEXICAL = "lexical"
    SEMANTIC = "semantic"
    HYBRID = "hybrid"


class SearchLogStatus(str, Enum):
    """Outcome of a logged search."""
    SUCCESS = "success"
    ERROR = "error"
    PARTIAL = "partial"


@dataclass
class SearchLogEntry:
    """
    A single search analytics event.

    Attributes:
        tenant_id: Tenant the search ran for
        user_id: User who issued the search
        query: Query text as submitted
        search_type: Lexical, semantic or hybrid
        result_count: Number of items returned
        duration_ms: End-to-end duration in milliseconds
        status: Outcome of the search
        timestamp: Unix timestamp when the entry was created
    """
    tenant_id: str
    user_id: str
    query: str
    search_type: SearchType
    result_count: int
    duration_ms: float
    status: SearchLogStatus = SearchLogStatus.SUCCESS
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["search_type"] = self.search_type.value
        data["status"] = self.status.value
        return data


class SearchLogSink(ABC):
    """Interface for persisting search analytics entries."""

    @abstractmethod
    async def write(self, entry: SearchLogEntry) -> None:
        """Persist one entry."""
        pass
