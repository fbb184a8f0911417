"""bcrypt adapter for PasswordHasherPort.

Hashing stays out of the domain layer: the User aggregate only stores the
encoded hash and asks the port to compare.
"""

from __future__ import annotations

import bcrypt

from strata.infra.auth.settings import get_password_hashing_settings

# bcrypt only reads the first 72 bytes of its input.
_MAX_PASSWORD_BYTES = 72


class BcryptPasswordHasher:
    """PasswordHasherPort implementation backed by bcrypt.

    Args:
        rounds: Cost factor. Defaults to ``PASSWORD_BCRYPT_ROUNDS``.

    Example:
        >>> hasher = BcryptPasswordHasher(rounds=4)
        >>> encoded = hasher.hash("Sup3r$ecret")
        >>> encoded.startswith("$2b$")
        True
        >>> hasher.verify("Sup3r$ecret", encoded)
        True
    """

    def __init__(self, rounds: int | None = None) -> None:
        if rounds is None:
            rounds = get_password_hashing_settings().bcrypt_rounds
        self._rounds = rounds

    @property
    def rounds(self) -> int:
        return self._rounds

    def hash(self, plain_password: str) -> str:
        """Hash a password with a fresh salt.

        Returns:
            Encoded bcrypt hash (``$2b$<rounds>$...``).
        """
        return bcrypt.hashpw(
            _encode(plain_password),
            bcrypt.gensalt(rounds=self._rounds),
        ).decode("utf-8")

    def verify(self, plain_password: str, password_hash: str) -> bool:
        """Compare a password against a stored hash.

        An empty or malformed hash never matches.
        """
        if not password_hash:
            return False
        try:
            return bcrypt.checkpw(_encode(plain_password), password_hash.encode("utf-8"))
        except ValueError:
            return False


def _encode(plain_password: str) -> bytes:
    return plain_password.encode("utf-8")[:_MAX_PASSWORD_BYTES]
