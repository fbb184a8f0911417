"""Structured logging for the identity kernel, built on structlog.

Console rendering is used outside production and JSON rendering in
production. Tenant and actor identifiers bound with
:func:`bind_identity_context` are merged into every entry of the current
context. Password material never reaches the output.

Usage:
    from strata.infra.observability import configure_logging, get_logger

    configure_logging()
    logger = get_logger(__name__)
    logger.info("user_registered", user_id=str(user.id))
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from collections.abc import MutableMapping
    from uuid import UUID

Processor = structlog.types.Processor

SENSITIVE_FIELDS: frozenset[str] = frozenset(
    {
        "password",
        "password_hash",
        "old_password",
        "new_password",
        "plain_password",
        "secret",
        "token",
        "credential",
        "hash",
    }
)

REDACTED_VALUE: str = "***REDACTED***"

_VALID_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


class LoggingSettings(BaseSettings):
    """Logging configuration from the environment.

    Environment Variables:
        LOG_LEVEL: Minimum level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        ENVIRONMENT: Environment name; ``production`` selects JSON output.

    Example:
        >>> LoggingSettings(environment="production").use_json_logs
        True
    """

    model_config = SettingsConfigDict(
        env_prefix="",
        extra="ignore",
        populate_by_name=True,
    )

    log_level: str = Field(
        default="INFO",
        alias="LOG_LEVEL",
        description="Minimum log level to output",
    )
    environment: str = Field(
        default="development",
        alias="ENVIRONMENT",
        description="Environment name for format selection",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> str:
        return v.upper() if isinstance(v, str) else str(v)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        if v not in _VALID_LEVELS:
            msg = f"log_level must be one of {sorted(_VALID_LEVELS)}"
            raise ValueError(msg)
        return v

    @property
    def use_json_logs(self) -> bool:
        return self.environment == "production"

    @property
    def log_level_int(self) -> int:
        return getattr(logging, self.log_level, logging.INFO)


class SensitiveDataProcessor:
    """Structlog processor that masks password material in log entries.

    Keys listed in ``SENSITIVE_FIELDS`` are masked, as is any key that
    contains ``password`` or ``token``.

    Example:
        >>> processor = SensitiveDataProcessor()
        >>> processor(None, "info", {"event": "reset", "new_password": "x"})["new_password"]
        '***REDACTED***'
    """

    def __call__(
        self,
        logger: Any,
        method_name: str,
        event_dict: MutableMapping[str, Any],
    ) -> MutableMapping[str, Any]:
        for key in list(event_dict.keys()):
            if self._is_sensitive(key):
                event_dict[key] = REDACTED_VALUE
        return event_dict

    @staticmethod
    def _is_sensitive(key: str) -> bool:
        key_lower = key.lower()
        if key_lower in SENSITIVE_FIELDS:
            return True
        return "password" in key_lower or "token" in key_lower


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Cached LoggingSettings. Call ``cache_clear()`` in tests."""
    return LoggingSettings()


def configure_logging(settings: LoggingSettings | None = None) -> None:
    """Configure structlog once at process startup.

    Args:
        settings: Explicit settings; loaded from the environment when omitted.
    """
    if settings is None:
        settings = get_logging_settings()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        SensitiveDataProcessor(),
        structlog.processors.format_exc_info,
    ]

    if settings.use_json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(settings.log_level_int),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def bind_identity_context(
    *, tenant_id: UUID | str | None = None, actor_id: UUID | str | None = None
) -> None:
    """Bind tenant and actor ids to every log entry of the current context.

    None values are skipped, so an anonymous system call binds only the tenant.
    """
    values = {
        key: str(value)
        for key, value in (("tenant_id", tenant_id), ("actor_id", actor_id))
        if value is not None
    }
    if values:
        structlog.contextvars.bind_contextvars(**values)


def clear_identity_context() -> None:
    structlog.contextvars.unbind_contextvars("tenant_id", "actor_id")


def get_logger(name: str | None = None) -> structlog.typing.WrappedLogger:
    """Return a structlog logger, bound to ``name`` when given.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("assignment_revoked", assignment_id="...")
    """
    logger = structlog.get_logger()
    if name is not None:
        logger = logger.bind(logger=name)
    return logger
