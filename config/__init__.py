"""
Configuration Module

This module provides centralized configuration management for search operations:
- Circuit breaker thresholds and timeouts
- Semantic backend timeouts and relevance cut-offs
- Hybrid fusion window and snippet shaping
- Logging and metrics settings

Settings load from environment variables and YAML files with validation
using Pydantic.
"""

from .settings import (
    SearchHubSettings,
    BreakerSettings,
    SemanticSettings,
    HybridSettings,
    MonitoringSettings,
    load_settings,
)

__all__ = [
    'SearchHubSettings',
    'BreakerSettings',
    'SemanticSettings',
    'HybridSettings',
    'MonitoringSettings',
    'load_settings',
]
