from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from docbridge.config import DocBridgeSettings, get_settings
from docbridge.connectors import MongoDBConnectorConfig
from docbridge.utils.logger import get_root_logger, setup_logging


def test_settings_read_prefixed_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DOCBRIDGE_SCHEMA_SAMPLE_SIZE", "25")
    monkeypatch.setenv("DOCBRIDGE_PUSHDOWN_ENABLED", "false")
    monkeypatch.setenv("DOCBRIDGE_MONGODB_DATABASE", "analytics")

    settings = DocBridgeSettings()

    assert settings.SCHEMA_SAMPLE_SIZE == 25
    assert settings.PUSHDOWN_ENABLED is False
    assert MongoDBConnectorConfig.from_settings(settings).database == "analytics"


def test_settings_reject_non_positive_sample_size() -> None:
    with pytest.raises(ValidationError):
        DocBridgeSettings(SCHEMA_SAMPLE_SIZE=0)


def test_connector_config_validation() -> None:
    config = MongoDBConnectorConfig(connection_uri="mongodb+srv://cluster.example.net", database="app")
    assert config.database == "app"

    with pytest.raises(ValidationError):
        MongoDBConnectorConfig(connection_uri="postgresql://localhost", database="app")
    with pytest.raises(ValidationError):
        MongoDBConnectorConfig(connection_uri="mongodb://localhost:27017", database="")


def test_setup_logging_adds_handlers_once() -> None:
    root = get_root_logger()
    previous_level = root.level
    try:
        setup_logging(level="DEBUG", with_console=False)
        handler_count = len(root.handlers)

        setup_logging(level="WARNING")

        assert len(root.handlers) == handler_count
        assert root.level == logging.WARNING
    finally:
        root.setLevel(previous_level)


def test_setup_logging_defaults_to_configured_level(monkeypatch: pytest.MonkeyPatch) -> None:
    root = get_root_logger()
    previous_level = root.level
    monkeypatch.setenv("DOCBRIDGE_LOG_LEVEL", "ERROR")
    get_settings.cache_clear()
    try:
        setup_logging(with_console=False)

        assert root.level == logging.ERROR
    finally:
        get_settings.cache_clear()
        root.setLevel(previous_level)
