"""Port interface for credential hashing.

This module defines the PasswordHasherPort protocol so that aggregates can
hash and verify passwords without coupling to a specific algorithm.
Operations that need a hasher raise ``InfrastructureRequiredError`` when
none is supplied.

Example:
    >>> from strata.foundation.domain.ports import PasswordHasherPort
    >>> def check(hasher: PasswordHasherPort, plain: str, stored: str) -> bool:
    ...     return hasher.verify(plain, stored)
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class PasswordHasherPort(Protocol):
    """Port for one-way password hashing.

    The protocol is runtime_checkable to enable isinstance() verification
    in tests and dependency injection validation.
    """

    def hash(self, plain_password: str) -> str:
        """Hash a plaintext password for storage.

        Args:
            plain_password: The plaintext password.

        Returns:
            The hash string suitable for persistent storage.
        """
        ...

    def verify(self, plain_password: str, password_hash: str) -> bool:
        """Check a plaintext password against a stored hash.

        Returns:
            True if the password matches. An empty hash never matches.
        """
        ...
