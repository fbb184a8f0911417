"""Event-sourced User aggregate with a five-state lifecycle.

Users are created through named factories that establish every invariant
up front (format rules, password policy, nickname default) and record a
single ``User.Registered`` event. Afterwards the user changes only through
intention-revealing commands, each recorded as one event.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from eventsourcing.domain import event

from strata.domain.identity.exceptions import InvalidPasswordError
from strata.domain.identity.value_objects import (
    Email,
    Nickname,
    UserSource,
    UserState,
    UserStatus,
    Username,
    validate_password_policy,
)
from strata.foundation.domain.aggregates import UNSET, BaseAggregate, actor_value
from strata.foundation.domain.exceptions import InfrastructureRequiredError
from strata.foundation.domain.identifiers import TenantId, UserId

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from strata.foundation.domain.aggregates import Actor, Unset
    from strata.foundation.domain.ports.password_hasher import PasswordHasherPort


def _require_hasher(
    hasher: PasswordHasherPort | None, operation: str
) -> PasswordHasherPort:
    if hasher is None:
        raise InfrastructureRequiredError("password_hasher", operation=operation)
    return hasher


class User(BaseAggregate):
    """Event-sourced User aggregate.

    State machine (see :class:`UserState`)::

                          activate()
        PENDING_ACTIVATION ----------> ACTIVE
                                       |  ^
                               lock()  |  |  unlock()
                                       v  |
                                      LOCKED

        disable(): any state except DISABLED -> DISABLED
        expire():  ACTIVE, PENDING_ACTIVATION or LOCKED -> EXPIRED

    Attributes:
        tenant_id: Home tenant UUID (immutable, inherited from BaseAggregate).
        username: Validated username (immutable).
        email: Validated, lower-cased email (immutable).
        password_hash: Stored credential hash. Empty for system users.
        nickname: Display nickname, unique platform-wide (mutable).
        status: Current lifecycle state (UserStatus enum value).
        status_reason: Reason recorded with DISABLED or LOCKED.
        locked_until: Optional lock expiry. Never applied automatically.
        source: Account origin (UserSource enum value).
    """

    # -- Creation (records User.Registered event) -------------------------------

    @event("Registered")
    def __init__(
        self,
        *,
        tenant_id: UUID,
        username: str,
        email: str,
        password_hash: str,
        nickname: str,
        status: str,
        source: str,
        created_by: UUID | None,
    ) -> None:
        self._init_audit(tenant_id=tenant_id, created_by=created_by)
        self.username: str = username
        self.email: str = email
        self.password_hash: str = password_hash
        self.nickname: str = nickname
        self.status: str = status
        self.status_reason: str | None = None
        self.locked_until: datetime | None = None
        self.source: str = source

    @classmethod
    def create_platform_user(
        cls,
        *,
        tenant_id: TenantId,
        username: str | Username,
        email: str | Email,
        password: str,
        hasher: PasswordHasherPort | None,
        nickname: str | None = None,
        created_by: Actor = None,
    ) -> User:
        """Register a platform user in PENDING_ACTIVATION state.

        Args:
            tenant_id: Home tenant.
            username: 3-30 characters of letters, digits and underscore.
            email: Email address (trimmed and lower-cased).
            password: Plaintext password, checked against the policy and
                hashed through ``hasher``.
            hasher: Credential port implementation.
            nickname: Optional nickname; defaults to the username.
            created_by: Acting user, if any.

        Raises:
            InvalidUsernameError, InvalidEmailError, InvalidNicknameError:
                If a field breaks its format rules.
            InvalidPasswordError: If the password breaks the policy.
            InfrastructureRequiredError: If no hasher is supplied.
        """
        return cls._register(
            tenant_id=tenant_id,
            username=username,
            email=email,
            password=password,
            hasher=hasher,
            nickname=nickname,
            created_by=created_by,
            source=UserSource.PLATFORM,
        )

    @classmethod
    def create_tenant_user(
        cls,
        *,
        tenant_id: TenantId,
        username: str | Username,
        email: str | Email,
        password: str,
        hasher: PasswordHasherPort | None,
        nickname: str | None = None,
        created_by: Actor = None,
    ) -> User:
        """Register a tenant-local user. Same rules as a platform user."""
        return cls._register(
            tenant_id=tenant_id,
            username=username,
            email=email,
            password=password,
            hasher=hasher,
            nickname=nickname,
            created_by=created_by,
            source=UserSource.TENANT,
        )

    @classmethod
    def create_system_user(
        cls,
        *,
        tenant_id: TenantId,
        username: str | Username,
        email: str | Email,
        created_by: Actor = None,
    ) -> User:
        """Create a passwordless system user, ACTIVE immediately.

        The nickname is the username. The password hash is empty and never
        verifies.
        """
        validated_username = _username(username)
        return cls(
            tenant_id=tenant_id.value,
            username=validated_username.value,
            email=_email(email).value,
            password_hash="",
            nickname=Nickname(validated_username.value).value,
            status=UserStatus.ACTIVE.value,
            source=UserSource.SYSTEM.value,
            created_by=actor_value(created_by),
        )

    @classmethod
    def _register(
        cls,
        *,
        tenant_id: TenantId,
        username: str | Username,
        email: str | Email,
        password: str,
        hasher: PasswordHasherPort | None,
        nickname: str | None,
        created_by: Actor,
        source: UserSource,
    ) -> User:
        validated_username = _username(username)
        validated_email = _email(email)
        validated_nickname = Nickname(nickname or validated_username.value)
        validate_password_policy(password)
        password_hash = _require_hasher(hasher, "create_user").hash(password)
        return cls(
            tenant_id=tenant_id.value,
            username=validated_username.value,
            email=validated_email.value,
            password_hash=password_hash,
            nickname=validated_nickname.value,
            status=UserStatus.PENDING_ACTIVATION.value,
            source=source.value,
            created_by=actor_value(created_by),
        )

    # -- Queries ------------------------------------------------------------------

    @property
    def user_id(self) -> UserId:
        return UserId(self.id, TenantId(self.tenant_id))

    @property
    def state(self) -> UserState:
        return UserState(
            UserStatus(self.status),
            reason=self.status_reason,
            locked_until=self.locked_until,
        )

    @property
    def is_system_user(self) -> bool:
        return self.source == UserSource.SYSTEM.value

    def is_available(self) -> bool:
        """True only for an ACTIVE user that is not soft-deleted."""
        return self.status == UserStatus.ACTIVE.value and self.deleted_at is None

    def is_lock_expired(self, now: datetime | None = None) -> bool:
        """Whether a lock has run past ``locked_until``.

        Informational only: the user stays LOCKED until ``unlock()``.
        """
        return self.state.is_lock_expired(now)

    def verify_password(
        self, plain_password: str, hasher: PasswordHasherPort | None
    ) -> bool:
        checked = _require_hasher(hasher, "verify_password")
        if not self.password_hash:
            return False
        return checked.verify(plain_password, self.password_hash)

    # -- Public command methods (validate then delegate) --------------------------

    def activate(self, actor: Actor | Unset = UNSET) -> None:
        """PENDING_ACTIVATION -> ACTIVE. Idempotent when already ACTIVE.

        Raises:
            InvalidStateTransitionError: From DISABLED, EXPIRED or LOCKED.
        """
        current = self.state
        if current.activate() is current:
            return  # idempotent
        self._apply_activated(updated_by=self._resolve_actor(actor))

    def disable(self, reason: str | None = None, actor: Actor | Unset = UNSET) -> None:
        """Any state -> DISABLED. Idempotent when already DISABLED."""
        current = self.state
        if current.disable(reason) is current:
            return  # idempotent
        self._apply_disabled(reason=reason, updated_by=self._resolve_actor(actor))

    def lock(
        self,
        locked_until: datetime | None = None,
        reason: str | None = None,
        actor: Actor | Unset = UNSET,
    ) -> None:
        """ACTIVE -> LOCKED. Idempotent when already LOCKED.

        Raises:
            InvalidStateTransitionError: From any state other than ACTIVE.
        """
        current = self.state
        if current.lock(locked_until, reason) is current:
            return  # idempotent
        self._apply_locked(
            locked_until=locked_until,
            reason=reason,
            updated_by=self._resolve_actor(actor),
        )

    def unlock(self, actor: Actor | Unset = UNSET) -> None:
        """LOCKED -> ACTIVE. Idempotent when already ACTIVE.

        Raises:
            InvalidStateTransitionError: From any state other than LOCKED.
        """
        current = self.state
        if current.unlock() is current:
            return  # idempotent
        self._apply_unlocked(updated_by=self._resolve_actor(actor))

    def expire(self, actor: Actor | Unset = UNSET) -> None:
        """Mark the account EXPIRED. Idempotent when already EXPIRED.

        Raises:
            InvalidStateTransitionError: From DISABLED.
        """
        current = self.state
        if current.expire() is current:
            return  # idempotent
        self._apply_expired(updated_by=self._resolve_actor(actor))

    def update_nickname(self, nickname: str, updated_by: Actor) -> None:
        """Change the nickname. Uniqueness is checked by the caller.

        Raises:
            InvalidNicknameError: If the nickname is blank or too long.
        """
        validated = Nickname(nickname)
        self._apply_nickname_updated(
            nickname=validated.value, updated_by=actor_value(updated_by)
        )

    def change_password(
        self,
        old_password: str,
        new_password: str,
        hasher: PasswordHasherPort | None,
        actor: Actor | Unset = UNSET,
    ) -> None:
        """Replace the password after verifying the current one.

        Raises:
            InfrastructureRequiredError: If no hasher is supplied.
            InvalidPasswordError: If the old password does not match or the
                new one breaks the policy.
        """
        checked = _require_hasher(hasher, "change_password")
        if not self.verify_password(old_password, checked):
            raise InvalidPasswordError("Current password is incorrect")
        validate_password_policy(new_password)
        self._apply_password_changed(
            password_hash=checked.hash(new_password),
            updated_by=self._resolve_actor(actor),
        )

    def reset_password(
        self,
        new_password: str,
        reset_by: Actor,
        hasher: PasswordHasherPort | None,
    ) -> None:
        """Set a new password without knowing the current one.

        Raises:
            InfrastructureRequiredError: If no hasher is supplied.
            InvalidPasswordError: If the new password breaks the policy.
        """
        checked = _require_hasher(hasher, "reset_password")
        validate_password_policy(new_password)
        self._apply_password_reset(
            password_hash=checked.hash(new_password),
            reset_by=actor_value(reset_by),
        )

    # -- Private @event mutators --------------------------------------------------

    @event("Activated")
    def _apply_activated(self, updated_by: UUID | None) -> None:
        self.status = UserStatus.ACTIVE.value
        self.status_reason = None
        self.locked_until = None
        self._stamp(updated_by)

    @event("Disabled")
    def _apply_disabled(self, reason: str | None, updated_by: UUID | None) -> None:
        self.status = UserStatus.DISABLED.value
        self.status_reason = reason
        self.locked_until = None
        self._stamp(updated_by)

    @event("Locked")
    def _apply_locked(
        self,
        locked_until: datetime | None,
        reason: str | None,
        updated_by: UUID | None,
    ) -> None:
        self.status = UserStatus.LOCKED.value
        self.status_reason = reason
        self.locked_until = locked_until
        self._stamp(updated_by)

    @event("Unlocked")
    def _apply_unlocked(self, updated_by: UUID | None) -> None:
        self.status = UserStatus.ACTIVE.value
        self.status_reason = None
        self.locked_until = None
        self._stamp(updated_by)

    @event("Expired")
    def _apply_expired(self, updated_by: UUID | None) -> None:
        self.status = UserStatus.EXPIRED.value
        self.status_reason = None
        self.locked_until = None
        self._stamp(updated_by)

    @event("NicknameUpdated")
    def _apply_nickname_updated(self, nickname: str, updated_by: UUID | None) -> None:
        self.nickname = nickname
        self._stamp(updated_by)

    @event("PasswordChanged")
    def _apply_password_changed(
        self, password_hash: str, updated_by: UUID | None
    ) -> None:
        self.password_hash = password_hash
        self._stamp(updated_by)

    @event("PasswordReset")
    def _apply_password_reset(self, password_hash: str, reset_by: UUID | None) -> None:
        self.password_hash = password_hash
        self._stamp(reset_by)


def _username(username: str | Username) -> Username:
    return username if isinstance(username, Username) else Username(username)


def _email(email: str | Email) -> Email:
    return email if isinstance(email, Email) else Email(email)
