"""
Tests for settings loading and logging configuration.
"""

import logging

import pytest
import yaml
from pydantic import ValidationError

from config.settings import (
    BreakerSettings,
    HybridSettings,
    MonitoringSettings,
    SearchHubSettings,
    SemanticSettings,
    load_settings,
)
from monitoring.logging_setup import configure_logging
from search_hub_exceptions import ConfigurationError


def test_defaults():
    settings = SearchHubSettings()
    assert settings.breaker.failure_threshold == 5
    assert settings.breaker.reset_timeout == 30.0
    assert settings.breaker.half_open_timeout == 15.0
    assert settings.hybrid.max_window == 50
    assert settings.hybrid.default_rrf_k == 60
    assert settings.hybrid.snippet_max_length == 280
    assert settings.semantic.empty_candidates_is_failure is True
    assert settings.hybrid.filter_short_queries is False


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("SEARCH_HUB_BREAKER_FAILURE_THRESHOLD", "7")
    monkeypatch.setenv("SEARCH_HUB_HYBRID_FILTER_SHORT_QUERIES", "true")

    assert BreakerSettings().failure_threshold == 7
    assert HybridSettings().filter_short_queries is True


def test_from_yaml(tmp_path):
    config_file = tmp_path / "search_hub.yaml"
    config_file.write_text(yaml.safe_dump({
        "breaker": {"failure_threshold": 3, "reset_timeout": 5},
        "semantic": {"rerank_threshold": 0.35, "top_score_cutoff": 0.55},
    }))

    settings = load_settings(str(config_file))

    assert settings.breaker.failure_threshold == 3
    assert settings.breaker.reset_timeout == 5.0
    assert settings.semantic.rerank_threshold == 0.35
    assert settings.hybrid.max_window == 50


def test_invalid_yaml_values_raise_configuration_error(tmp_path):
    config_file = tmp_path / "bad.yaml"
    config_file.write_text(yaml.safe_dump({"breaker": {"failure_threshold": 0}}))

    with pytest.raises(ConfigurationError):
        SearchHubSettings.from_yaml(config_file)


def test_missing_file_falls_back_to_defaults(tmp_path):
    settings = load_settings(str(tmp_path / "missing.yaml"))
    assert settings.breaker.failure_threshold == 5


def test_to_yaml_round_trips_values():
    settings = SearchHubSettings(breaker=BreakerSettings(failure_threshold=4))
    data = yaml.safe_load(settings.to_yaml())
    assert data["breaker"]["failure_threshold"] == 4


def test_configure_logging_applies_level():
    root = logging.getLogger()
    previous = root.level
    try:
        configure_logging(MonitoringSettings(log_level="warning"))
        assert root.level == logging.WARNING
    finally:
        root.setLevel(previous)


def test_configure_logging_rejects_unknown_level():
    with pytest.raises(ValueError):
        configure_logging(MonitoringSettings(log_level="chatty"))


def test_semantic_call_bound_must_exceed_remote_timeouts():
    with pytest.raises(ValidationError):
        SearchHubSettings(
            breaker=BreakerSettings(half_open_timeout=8.0),
            semantic=SemanticSettings(embed_timeout=5.0, rerank_timeout=5.0),
        )

    settings = SearchHubSettings(
        breaker=BreakerSettings(half_open_timeout=8.0),
        semantic=SemanticSettings(embed_timeout=3.0, rerank_timeout=3.0),
    )
    assert settings.breaker.half_open_timeout == 8.0


def test_semantic_call_bound_checked_in_yaml(tmp_path):
    config_file = tmp_path / "search_hub.yaml"
    config_file.write_text(yaml.safe_dump({"breaker": {"half_open_timeout": 10}}))

    with pytest.raises(ConfigurationError):
        load_settings(str(config_file))
