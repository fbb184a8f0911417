"""Eventsourcing library configuration using Pydantic settings.

This module provides type-safe configuration for the event store behind
the identity applications. The in-memory POPO backend is the default;
PostgreSQL is selected with ``PERSISTENCE_MODULE=eventsourcing.postgres``
and then requires connection credentials.
"""

from __future__ import annotations

import os
import warnings
from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

POPO_MODULE = "eventsourcing.popo"
POSTGRES_MODULE = "eventsourcing.postgres"


class EventSourcingSettings(BaseSettings):
    """Configuration for the eventsourcing library.

    Environment Variables:
        PERSISTENCE_MODULE: Module path for persistence backend
            (default: eventsourcing.popo)

        PostgreSQL Connection (required when the backend is postgres):
        POSTGRES_DBNAME: Database name
        POSTGRES_HOST: PostgreSQL host (default: localhost)
        POSTGRES_PORT: PostgreSQL port (default: 5432)
        POSTGRES_USER: Database user
        POSTGRES_PASSWORD: Database password (hidden in logs)
        POSTGRES_POOL_SIZE: Base pool size (default: 5)
        POSTGRES_MAX_OVERFLOW: Additional connections for bursts (default: 10)
        POSTGRES_SCHEMA: PostgreSQL schema name (default: public)

        Table Management:
        CREATE_TABLE: Auto-create tables if not exist (default: true)

    Example:
        >>> settings = EventSourcingSettings()
        >>> settings.to_env_dict()
        {'PERSISTENCE_MODULE': 'eventsourcing.popo'}
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Persistence backend
    persistence_module: str = POPO_MODULE

    # PostgreSQL connection (individual variables required by eventsourcing)
    postgres_dbname: str | None = Field(default=None, description="PostgreSQL database name")
    postgres_host: str = Field(default="localhost", description="PostgreSQL host")
    postgres_port: int = Field(default=5432, description="PostgreSQL port")
    postgres_user: str | None = Field(default=None, description="PostgreSQL user")
    postgres_password: str | None = Field(
        default=None,
        repr=False,
        description="PostgreSQL password (hidden in logs)",
    )

    # Connection pooling
    postgres_pool_size: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Base connection pool size (lazily created)",
    )
    postgres_max_overflow: int = Field(
        default=10,
        ge=0,
        le=100,
        description="Additional connections beyond pool size",
    )
    postgres_schema: str = Field(
        default="public",
        description="PostgreSQL schema for event store tables",
    )

    # Table management
    create_table: bool = Field(
        default=True,
        description="Auto-create tables if not exist (dev: true, prod: false)",
    )

    @field_validator("postgres_port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate PostgreSQL port is in valid range."""
        if not 1 <= v <= 65535:
            msg = "postgres_port must be between 1 and 65535"
            raise ValueError(msg)
        return v

    @field_validator("create_table")
    @classmethod
    def validate_create_table_for_production(cls, v: bool) -> bool:
        """Warn if CREATE_TABLE=true in production environment."""
        environment = os.getenv("ENVIRONMENT", "development")

        if environment == "production" and v:
            warnings.warn(
                "CREATE_TABLE=true in production environment. Consider using migrations instead.",
                UserWarning,
                stacklevel=2,
            )

        return v

    @model_validator(mode="after")
    def validate_postgres_credentials(self) -> EventSourcingSettings:
        """Require connection credentials for the PostgreSQL backend."""
        if self.persistence_module != POSTGRES_MODULE:
            return self
        missing = [
            name
            for name in ("postgres_dbname", "postgres_user", "postgres_password")
            if not getattr(self, name)
        ]
        if missing:
            msg = f"PostgreSQL backend requires: {', '.join(missing)}"
            raise ValueError(msg)
        return self

    @property
    def is_postgres(self) -> bool:
        return self.persistence_module == POSTGRES_MODULE

    def to_env_dict(self) -> dict[str, str]:
        """Convert settings to an ``Application(env=...)`` dictionary.

        Returns:
            Dictionary with uppercase keys. PostgreSQL keys are included
            only for the PostgreSQL backend.
        """
        env = {"PERSISTENCE_MODULE": self.persistence_module}
        if not self.is_postgres:
            return env
        env.update(
            {
                "POSTGRES_DBNAME": self.postgres_dbname or "",
                "POSTGRES_HOST": self.postgres_host,
                "POSTGRES_PORT": str(self.postgres_port),
                "POSTGRES_USER": self.postgres_user or "",
                "POSTGRES_PASSWORD": self.postgres_password or "",
                "POSTGRES_POOL_SIZE": str(self.postgres_pool_size),
                "POSTGRES_MAX_OVERFLOW": str(self.postgres_max_overflow),
                "POSTGRES_SCHEMA": self.postgres_schema,
                "CREATE_TABLE": str(self.create_table).lower(),
            }
        )
        return env


@lru_cache(maxsize=1)
def get_event_sourcing_settings() -> EventSourcingSettings:
    """Cached settings accessor. Call ``cache_clear()`` in tests."""
    return EventSourcingSettings()
