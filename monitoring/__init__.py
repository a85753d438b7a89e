"""
Monitoring Module

This module provides monitoring capabilities for search operations:
- Prometheus metrics for breaker state, AI request latency and search latency
- Fallback counters for degraded (lexical-only) responses
- Logging configuration driven by settings
"""

from .metrics import SearchHubMetrics, FallbackReason
from .logging_setup import configure_logging

__all__ = [
    "SearchHubMetrics",
    "FallbackReason",
    "configure_logging",
]
