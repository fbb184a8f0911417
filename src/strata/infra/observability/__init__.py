"""Strata Infra Observability -- structlog configuration and redaction."""

from strata.infra.observability.logging import (
    LoggingSettings,
    SensitiveDataProcessor,
    bind_identity_context,
    clear_identity_context,
    configure_logging,
    get_logger,
    get_logging_settings,
)

__all__ = [
    "LoggingSettings",
    "SensitiveDataProcessor",
    "bind_identity_context",
    "clear_identity_context",
    "configure_logging",
    "get_logger",
    "get_logging_settings",
]
