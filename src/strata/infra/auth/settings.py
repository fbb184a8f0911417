"""Password hashing configuration.

Loaded from environment variables with the PASSWORD_ prefix.

Environment Variables:
    PASSWORD_BCRYPT_ROUNDS: bcrypt cost factor (4-31, default 12)
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PasswordHashingSettings(BaseSettings):
    """bcrypt parameters loaded from the environment.

    Example:
        >>> PasswordHashingSettings().bcrypt_rounds
        12
    """

    model_config = SettingsConfigDict(
        env_prefix="PASSWORD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    bcrypt_rounds: int = Field(
        default=12,
        ge=4,
        le=31,
        description="bcrypt cost factor (log2 of the iteration count)",
    )


@lru_cache(maxsize=1)
def get_password_hashing_settings() -> PasswordHashingSettings:
    """Cached PasswordHashingSettings. Call ``cache_clear()`` in tests."""
    return PasswordHashingSettings()
