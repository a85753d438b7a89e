"""
Resilience Module

This module provides fault tolerance patterns for calls to unreliable
downstream services:
- Circuit breaker gating with a single half-open probe
- Bounded timeouts for remote calls

Both are used by the search operations to protect the semantic backend
(embedding and rerank APIs) and degrade to lexical-only results.
"""

from .circuit_breaker import CircuitBreaker, CircuitBreakerConfig, CircuitState
from .timeout import run_with_timeout

__all__ = [
    "CircuitBreaker",
    "CircuitBreakerConfig",
    "CircuitState",
    "run_with_timeout",
]
