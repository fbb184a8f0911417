"""Unit tests for strata.infra.observability.logging."""

from __future__ import annotations

import logging
from unittest.mock import patch

import pytest
import structlog

from strata.infra.observability.logging import (
    REDACTED_VALUE,
    LoggingSettings,
    SensitiveDataProcessor,
    bind_identity_context,
    clear_identity_context,
    configure_logging,
    get_logger,
    get_logging_settings,
)


class TestLoggingSettings:
    @pytest.mark.unit
    def test_default_values(self) -> None:
        with patch.dict("os.environ", {}, clear=True):
            settings = LoggingSettings()
            assert settings.log_level == "INFO"
            assert settings.environment == "development"
            assert settings.use_json_logs is False

    @pytest.mark.unit
    def test_production_uses_json(self) -> None:
        assert LoggingSettings(environment="production").use_json_logs is True

    @pytest.mark.unit
    def test_normalizes_and_converts_level(self) -> None:
        settings = LoggingSettings(log_level="debug")
        assert settings.log_level == "DEBUG"
        assert settings.log_level_int == logging.DEBUG

    @pytest.mark.unit
    def test_invalid_log_level(self) -> None:
        with pytest.raises(ValueError, match="log_level"):
            LoggingSettings(log_level="VERBOSE")

    @pytest.mark.unit
    def test_from_env_vars(self) -> None:
        env = {"LOG_LEVEL": "warning", "ENVIRONMENT": "production"}
        with patch.dict("os.environ", env, clear=True):
            settings = LoggingSettings()
        assert settings.log_level == "WARNING"
        assert settings.use_json_logs

    @pytest.mark.unit
    def test_accessor_is_cached(self) -> None:
        get_logging_settings.cache_clear()
        try:
            assert get_logging_settings() is get_logging_settings()
        finally:
            get_logging_settings.cache_clear()


class TestSensitiveDataProcessor:
    @pytest.mark.unit
    @pytest.mark.parametrize(
        "key", ["password", "password_hash", "new_password", "Secret", "hash", "reset_token"]
    )
    def test_redacts_credential_fields(self, key: str) -> None:
        result = SensitiveDataProcessor()(None, "info", {"event": "x", key: "value"})
        assert result[key] == REDACTED_VALUE

    @pytest.mark.unit
    def test_keeps_ordinary_fields(self) -> None:
        event = {"event": "user_registered", "user_id": "123", "email": "a@b.io"}
        assert SensitiveDataProcessor()(None, "info", dict(event)) == event


class TestConfigureLogging:
    @pytest.mark.unit
    def test_configures_console_renderer(self) -> None:
        configure_logging(LoggingSettings(log_level="DEBUG", environment="development"))
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
        assert any(isinstance(p, SensitiveDataProcessor) for p in processors)
        structlog.reset_defaults()

    @pytest.mark.unit
    def test_configures_json_renderer(self) -> None:
        configure_logging(LoggingSettings(environment="production"))
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        structlog.reset_defaults()

    @pytest.mark.unit
    def test_get_logger_binds_name(self) -> None:
        with structlog.testing.capture_logs() as captured:
            get_logger("strata.test").info("assignment_revoked", assignment_id="a1")
        assert captured[0]["event"] == "assignment_revoked"
        assert captured[0]["logger"] == "strata.test"


class TestIdentityContext:
    @pytest.mark.unit
    def test_binds_and_clears_tenant_and_actor(self) -> None:
        bind_identity_context(tenant_id="t-1", actor_id=None)
        try:
            bound = structlog.contextvars.get_contextvars()
            assert bound == {"tenant_id": "t-1"}
        finally:
            clear_identity_context()
        assert structlog.contextvars.get_contextvars() == {}
