"""Strata Infra Auth -- password hashing adapters."""

from strata.infra.auth.password_hasher import BcryptPasswordHasher
from strata.infra.auth.settings import (
    PasswordHashingSettings,
    get_password_hashing_settings,
)

__all__ = [
    "BcryptPasswordHasher",
    "PasswordHashingSettings",
    "get_password_hashing_settings",
]
