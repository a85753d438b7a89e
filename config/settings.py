"""
Pydantic Settings for Search Hub Operations

This module provides strongly-typed configuration settings using Pydantic,
with support for environment variables and YAML configuration files.
"""

from typing import Optional, Union
from pathlib import Path
import os

import yaml
from pydantic import Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_yaml import to_yaml_str

from search_hub_exceptions import ConfigurationError


class BreakerSettings(BaseSettings):
    """
    Circuit breaker settings for the semantic backend.

    These settings control how quickly the semantic path is disabled after
    consecutive failures and how it is probed for recovery:
    - The failure threshold decides when the circuit opens
    - The reset timeout decides when a single probe is let through
    - The half-open timeout bounds every semantic call, so the probe always reports
    """
    failure_threshold: int = Field(5, ge=1,
                                   description="Consecutive semantic failures before the circuit opens")
    reset_timeout: float = Field(30.0, ge=0,
                                 description="Seconds the circuit stays open before a probe is allowed")
    half_open_timeout: float = Field(15.0, gt=0,
                                     description="Upper bound in seconds on one semantic call, the half-open probe included")
    service_name: str = Field("semantic",
                              description="Name of the protected service, used in logs and the state gauge")

    model_config = SettingsConfigDict(env_prefix="SEARCH_HUB_BREAKER_", case_sensitive=False)


class SemanticSettings(BaseSettings):
    """
    Semantic (embedding + rerank) search settings.

    These settings bound the latency of the remote calls and decide which
    semantic hits are trusted enough to take part in fusion.
    """
    embed_timeout: float = Field(5.0, ge=0,
                                 description="Timeout in seconds for the query embedding call (0 disables)")
    rerank_timeout: float = Field(5.0, ge=0,
                                  description="Timeout in seconds for the rerank call (0 disables)")
    context_window: int = Field(1, ge=0,
                                description="Adjacent chunks fetched before and after each hit (0 disables stitching)")
    rerank_threshold: float = Field(0.0,
                                    description="Minimum rerank score for a semantic hit to take part in fusion")
    top_score_cutoff: float = Field(0.0,
                                    description="Minimum best rerank score required when lexical search found nothing")
    empty_candidates_is_failure: bool = Field(True,
                                              description="Whether zero nearest-neighbor candidates counts as a semantic failure")

    model_config = SettingsConfigDict(env_prefix="SEARCH_HUB_SEMANTIC_", case_sensitive=False)


class HybridSettings(BaseSettings):
    """
    Hybrid search (fusion) settings.

    These settings control the fusion window and the shape of fused results.
    """
    max_window: int = Field(50, ge=1, le=50,
                            description="Deepest rank fetched from either source for fusion")
    default_rrf_k: int = Field(60, ge=1, le=100,
                               description="Reciprocal Rank Fusion constant used when the query omits it")
    snippet_max_length: int = Field(280, ge=1,
                                    description="Maximum snippet length in fused results before truncation")
    filter_short_queries: bool = Field(False,
                                       description="Return an empty page for queries without any meaningful token")
    min_token_length: int = Field(4, ge=1,
                                  description="Minimum token length counted as meaningful by the short-query guard")

    model_config = SettingsConfigDict(env_prefix="SEARCH_HUB_HYBRID_", case_sensitive=False)


class MonitoringSettings(BaseSettings):
    """
    Monitoring settings for logging and metrics.
    """
    enable_metrics: bool = Field(True,
                                 description="Whether to export Prometheus metrics")
    log_level: str = Field("INFO",
                           description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)")
    max_metrics_history: int = Field(1000, ge=1,
                                     description="Number of per-search metrics records kept in memory")

    model_config = SettingsConfigDict(env_prefix="SEARCH_HUB_MONITORING_", case_sensitive=False)


class SearchHubSettings(BaseSettings):
    """
    Main settings class that consolidates all configuration categories.

    Usage:
        # Load from environment variables and defaults
        settings = SearchHubSettings()

        # Load from YAML file
        settings = SearchHubSettings.from_yaml('config.yaml')

        # Access nested settings
        threshold = settings.breaker.failure_threshold
        rrf_k = settings.hybrid.default_rrf_k
    """
    breaker: BreakerSettings = Field(default_factory=BreakerSettings,
                                     description="Circuit breaker settings for the semantic backend")
    semantic: SemanticSettings = Field(default_factory=SemanticSettings,
                                       description="Semantic search settings")
    hybrid: HybridSettings = Field(default_factory=HybridSettings,
                                   description="Hybrid fusion settings")
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings,
                                           description="Logging and metrics settings")

    model_config = SettingsConfigDict(
        env_prefix="SEARCH_HUB_",
        case_sensitive=False,
        env_nested_delimiter="__",
    )

    @model_validator(mode="after")
    def validate_semantic_call_bound(self) -> "SearchHubSettings":
        """The semantic call bound must leave room for both remote calls"""
        remote_budget = self.semantic.embed_timeout + self.semantic.rerank_timeout
        if self.breaker.half_open_timeout <= remote_budget:
            raise ValueError(
                f"breaker.half_open_timeout ({self.breaker.half_open_timeout}s) must exceed "
                f"semantic.embed_timeout + semantic.rerank_timeout ({remote_budget}s)"
            )
        return self

    @classmethod
    def from_yaml(cls, yaml_file: Union[str, Path]) -> "SearchHubSettings":
        """Load settings from YAML file"""
        with open(yaml_file, 'r') as f:
            data = yaml.safe_load(f) or {}
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration in {yaml_file}: {e}") from e

    def to_yaml(self) -> str:
        """Serialize settings to a YAML document"""
        return to_yaml_str(self)


def load_settings(config_path: Optional[str] = None) -> SearchHubSettings:
    """
    Load settings from file and/or environment variables.

    Args:
        config_path: Path to YAML configuration file. If None or file doesn't exist,
                    falls back to environment variables and default values.

    Returns:
        SearchHubSettings object with loaded configuration

    Raises:
        ConfigurationError: If the configuration is invalid
    """
    if config_path and os.path.exists(config_path):
        return SearchHubSettings.from_yaml(config_path)
    try:
        return SearchHubSettings()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
