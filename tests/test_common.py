"""Tests for common utilities."""

import structlog

from edgebinder_vector.common.config import AdapterSettings
from edgebinder_vector.common.logging import (
    configure_logging,
    configure_logging_from_settings,
    get_logger,
    log_performance,
)


def test_config_defaults(monkeypatch):
    """Test configuration defaults."""
    for name in ("EDGEBINDER_COLLECTION_NAME", "EDGEBINDER_OPENSEARCH_HOSTS", "EDGEBINDER_DEBUG"):
        monkeypatch.delenv(name, raising=False)

    config = AdapterSettings(_env_file=None)
    assert config.collection_name == "edge_bindings"
    assert config.schema_auto_create is True
    assert config.host_list() == ["http://localhost:9200"]
    assert config.max_metadata_bytes == 65536
    assert "env" not in AdapterSettings.model_fields


def test_config_reads_environment(monkeypatch):
    """EDGEBINDER_* variables override defaults."""
    monkeypatch.setenv("EDGEBINDER_COLLECTION_NAME", "rag_bindings")
    monkeypatch.setenv("EDGEBINDER_OPENSEARCH_HOSTS", "http://a:9200,http://b:9200")
    monkeypatch.setenv("EDGEBINDER_SCHEMA_AUTO_CREATE", "false")
    monkeypatch.setenv("EDGEBINDER_DEBUG", "true")

    config = AdapterSettings(_env_file=None)
    assert config.collection_name == "rag_bindings"
    assert config.host_list() == ["http://a:9200", "http://b:9200"]

    adapter_config = config.to_adapter_config()
    assert adapter_config["collection_name"] == "rag_bindings"
    assert adapter_config["schema"]["auto_create"] is False
    assert adapter_config["debug"] is True


def test_adapter_config_omits_debug_by_default():
    assert "debug" not in AdapterSettings(_env_file=None, debug=False).to_adapter_config()


def test_logging_configuration():
    """Test logging configuration."""
    # This should not raise an exception
    configure_logging("test-service", "INFO", "json")
    configure_logging("test-service", "debug", "console")


def test_logging_from_settings_binds_context():
    """Settings-driven setup binds the service and collection on every event."""
    settings = AdapterSettings(_env_file=None, collection_name="rag_bindings", debug=True)
    configure_logging_from_settings(settings, "bootstrap-index")
    try:
        context = structlog.contextvars.get_contextvars()
        assert context["service"] == "bootstrap-index"
        assert context["collection_name"] == "rag_bindings"
    finally:
        structlog.contextvars.clear_contextvars()


def test_log_performance_emits_event():
    """log_performance records the operation and its duration."""
    with structlog.testing.capture_logs() as captured:
        log_performance("execute_query", 12.5, results_count=3)

    assert len(captured) == 1
    entry = captured[0]
    assert entry["event"] == "Operation execute_query completed"
    assert entry["operation"] == "execute_query"
    assert entry["duration_ms"] == 12.5
    assert entry["results_count"] == 3
    assert entry["log_level"] == "info"


def test_get_logger_returns_bound_logger():
    assert get_logger("vector_store.test") is not None
