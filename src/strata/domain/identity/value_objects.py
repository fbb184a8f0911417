"""Value objects for the identity aggregates.

Immutable, validated domain primitives. All validation occurs at
construction time; normalisation (trimming, lower-casing) is applied to
the stored value.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from enum import StrEnum
from typing import ClassVar

from strata.domain.identity.exceptions import (
    InvalidEmailError,
    InvalidNicknameError,
    InvalidPasswordError,
    InvalidRoleError,
    InvalidUsernameError,
)
from strata.foundation.domain.exceptions import InvalidStateTransitionError

__all__ = [
    "AssignmentStatus",
    "DepartmentRole",
    "Email",
    "Nickname",
    "OrganizationRole",
    "TenantRole",
    "UserSource",
    "UserState",
    "UserStatus",
    "Username",
    "validate_password_policy",
]

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]+$")
_SPECIAL_CHARS = re.compile(r"[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>/?]")

MIN_PASSWORD_LENGTH = 8


class UserStatus(StrEnum):
    """User lifecycle states.

    Uses StrEnum for native JSON serialization.
    """

    PENDING_ACTIVATION = "PENDING_ACTIVATION"
    ACTIVE = "ACTIVE"
    DISABLED = "DISABLED"
    LOCKED = "LOCKED"
    EXPIRED = "EXPIRED"


class UserSource(StrEnum):
    """Where a user account originates."""

    PLATFORM = "PLATFORM"
    TENANT = "TENANT"
    SYSTEM = "SYSTEM"


class AssignmentStatus(StrEnum):
    """Assignment lifecycle states. ACTIVE is initial."""

    ACTIVE = "ACTIVE"
    REVOKED = "REVOKED"
    EXPIRED = "EXPIRED"


@dataclass(frozen=True, slots=True)
class Email:
    """Validated email address.

    Format: ``local@domain.tld``, max 100 characters. Stored trimmed and
    lower-cased.

    Raises:
        InvalidEmailError: If the address is empty, too long or malformed.
    """

    value: str

    MAX_LENGTH: ClassVar[int] = 100

    def __post_init__(self) -> None:
        normalized = self.value.strip().lower() if isinstance(self.value, str) else ""
        if not normalized:
            raise InvalidEmailError("Email cannot be empty")
        if len(normalized) > self.MAX_LENGTH:
            raise InvalidEmailError(
                f"Email too long: {len(normalized)} chars (max {self.MAX_LENGTH})"
            )
        if not _EMAIL_PATTERN.match(normalized):
            raise InvalidEmailError(f"Invalid email format: '{normalized}'")
        object.__setattr__(self, "value", normalized)

    @property
    def domain(self) -> str:
        return self.value.split("@", 1)[1]


@dataclass(frozen=True, slots=True)
class Username:
    """Validated username: 3-30 characters of letters, digits and underscore.

    Leading and trailing whitespace is removed; case is preserved.

    Raises:
        InvalidUsernameError: If the username breaks the format rules.
    """

    value: str

    def __post_init__(self) -> None:
        stripped = self.value.strip() if isinstance(self.value, str) else ""
        if not 3 <= len(stripped) <= 30:
            raise InvalidUsernameError(
                f"Username must be 3-30 characters (got {len(stripped)})"
            )
        if not _USERNAME_PATTERN.match(stripped):
            raise InvalidUsernameError(
                f"Username may only contain letters, digits and underscore: '{stripped}'"
            )
        object.__setattr__(self, "value", stripped)


@dataclass(frozen=True, slots=True)
class Nickname:
    """Validated nickname: 1-50 characters after whitespace stripping.

    Raises:
        InvalidNicknameError: If the nickname is blank or too long.
    """

    value: str

    def __post_init__(self) -> None:
        stripped = self.value.strip() if isinstance(self.value, str) else ""
        if not stripped:
            raise InvalidNicknameError("Nickname cannot be empty")
        if len(stripped) > 50:
            raise InvalidNicknameError(
                f"Nickname too long: {len(stripped)} chars (max 50)"
            )
        object.__setattr__(self, "value", stripped)


def validate_password_policy(password: str) -> None:
    """Enforce the password policy on a plaintext password.

    At least 8 characters with an upper-case letter, a lower-case letter,
    a digit and a special character.

    Raises:
        InvalidPasswordError: Naming the first rule that is broken.
    """
    if not password:
        raise InvalidPasswordError("Password cannot be empty")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise InvalidPasswordError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )
    if not re.search(r"[A-Z]", password):
        raise InvalidPasswordError("Password must contain an upper-case letter")
    if not re.search(r"[a-z]", password):
        raise InvalidPasswordError("Password must contain a lower-case letter")
    if not re.search(r"[0-9]", password):
        raise InvalidPasswordError("Password must contain a digit")
    if not _SPECIAL_CHARS.search(password):
        raise InvalidPasswordError("Password must contain a special character")


@dataclass(frozen=True, slots=True)
class _Role:
    """Validated role name. Stored trimmed and lower-cased, 1-50 characters."""

    value: str

    SCOPE: ClassVar[str] = "role"

    def __post_init__(self) -> None:
        normalized = self.value.strip().lower() if isinstance(self.value, str) else ""
        if not normalized:
            raise InvalidRoleError(f"{self.SCOPE} cannot be empty")
        if len(normalized) > 50:
            raise InvalidRoleError(
                f"{self.SCOPE} too long: {len(normalized)} chars (max 50)"
            )
        object.__setattr__(self, "value", normalized)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class TenantRole(_Role):
    SCOPE: ClassVar[str] = "Tenant role"


@dataclass(frozen=True, slots=True)
class OrganizationRole(_Role):
    SCOPE: ClassVar[str] = "Organization role"


@dataclass(frozen=True, slots=True)
class DepartmentRole(_Role):
    SCOPE: ClassVar[str] = "Department role"


@dataclass(frozen=True, slots=True)
class UserState:
    """User status together with its reason and lock expiry.

    Transition methods return the next state, or ``self`` when the
    transition is an idempotent no-op.

    State machine::

                          activate()
        PENDING_ACTIVATION ----------> ACTIVE
                                       |  ^
                               lock()  |  |  unlock()
                                       v  |
                                      LOCKED

        disable(): ACTIVE, PENDING_ACTIVATION or LOCKED -> DISABLED
        expire():  ACTIVE, PENDING_ACTIVATION or LOCKED -> EXPIRED
        DISABLED and EXPIRED cannot be activated.

    Attributes:
        status: Current lifecycle state.
        reason: Reason recorded with DISABLED or LOCKED.
        locked_until: Optional lock expiry. Never auto-applied.
    """

    status: UserStatus
    reason: str | None = None
    locked_until: datetime | None = None

    def activate(self) -> UserState:
        if self.status == UserStatus.ACTIVE:
            return self
        if self.status != UserStatus.PENDING_ACTIVATION:
            raise InvalidStateTransitionError(
                f"Cannot activate user: current state is {self.status}, "
                "expected PENDING_ACTIVATION",
                current_state=str(self.status),
                target_state=UserStatus.ACTIVE.value,
            )
        return UserState(UserStatus.ACTIVE)

    def disable(self, reason: str | None = None) -> UserState:
        if self.status == UserStatus.DISABLED:
            return self
        return UserState(UserStatus.DISABLED, reason=reason)

    def lock(
        self, locked_until: datetime | None = None, reason: str | None = None
    ) -> UserState:
        if self.status == UserStatus.LOCKED:
            return self
        if self.status != UserStatus.ACTIVE:
            raise InvalidStateTransitionError(
                f"Cannot lock user: current state is {self.status}, expected ACTIVE",
                current_state=str(self.status),
                target_state=UserStatus.LOCKED.value,
            )
        return UserState(UserStatus.LOCKED, reason=reason, locked_until=locked_until)

    def unlock(self) -> UserState:
        if self.status == UserStatus.ACTIVE:
            return self
        if self.status != UserStatus.LOCKED:
            raise InvalidStateTransitionError(
                f"Cannot unlock user: current state is {self.status}, expected LOCKED",
                current_state=str(self.status),
                target_state=UserStatus.ACTIVE.value,
            )
        return replace(self, status=UserStatus.ACTIVE, reason=None, locked_until=None)

    def expire(self) -> UserState:
        if self.status == UserStatus.EXPIRED:
            return self
        if self.status == UserStatus.DISABLED:
            raise InvalidStateTransitionError(
                f"Cannot expire user: current state is {self.status}",
                current_state=str(self.status),
                target_state=UserStatus.EXPIRED.value,
            )
        return UserState(UserStatus.EXPIRED)

    def is_lock_expired(self, now: datetime | None = None) -> bool:
        """Whether a lock's expiry has passed. False without an expiry."""
        if self.status != UserStatus.LOCKED or self.locked_until is None:
            return False
        return (now or datetime.now(tz=UTC)) > self.locked_until
