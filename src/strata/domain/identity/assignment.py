"""Shared lifecycle for user assignment aggregates.

An assignment binds a user to a tenant, organization or department for an
optional period. Assignments reference users and scopes by identifier
value only, never by object.

State machine::

                    revoke()
        ACTIVE --------------------> REVOKED
          |                            ^
          | expire()                   | revoke()
          v                            |
        EXPIRED -----------------------+
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from eventsourcing.domain import event

from strata.domain.identity.value_objects import AssignmentStatus
from strata.foundation.domain.aggregates import UNSET, BaseAggregate, actor_value, utcnow
from strata.foundation.domain.exceptions import InvalidStateTransitionError
from strata.foundation.domain.identifiers import EntityId, TenantId, UserId

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from strata.foundation.domain.aggregates import Actor, Unset

__all__ = ["Assignment"]


class Assignment(BaseAggregate):
    """Base class for assignment aggregates.

    Subclasses decorate ``__init__`` with ``@event("Assigned")`` and call
    ``_init_assignment`` from its body.

    Attributes:
        user_uuid: Assigned user's identifier value.
        user_tenant_id: Assigned user's home tenant, if known.
        status: AssignmentStatus enum value.
        assigned_at: When the assignment was made.
        assigned_by: Acting user who made the assignment.
        expires_at: Optional end of validity.
        revoked_at / revoked_by / revoke_reason: Revocation stamps.
    """

    def _init_assignment(
        self,
        *,
        tenant_id: UUID,
        user_uuid: UUID,
        user_tenant_id: UUID | None,
        assigned_at: datetime,
        assigned_by: UUID | None,
        expires_at: datetime | None,
    ) -> None:
        self._init_audit(tenant_id=tenant_id, created_by=assigned_by)
        self.user_uuid: UUID = user_uuid
        self.user_tenant_id: UUID | None = user_tenant_id
        self.status: str = AssignmentStatus.ACTIVE.value
        self.assigned_at: datetime = assigned_at
        self.assigned_by: UUID | None = assigned_by
        self.expires_at: datetime | None = expires_at
        self.revoked_at: datetime | None = None
        self.revoked_by: UUID | None = None
        self.revoke_reason: str | None = None

    # -- Queries ------------------------------------------------------------------

    @property
    def entity_id(self) -> EntityId:
        return EntityId(self.id)

    @property
    def user_id(self) -> UserId:
        tenant = TenantId(self.user_tenant_id) if self.user_tenant_id else None
        return UserId(self.user_uuid, tenant)

    @property
    def is_revoked(self) -> bool:
        return self.status == AssignmentStatus.REVOKED.value

    def is_expired(self, now: datetime | None = None) -> bool:
        """Whether the expiry has passed (or the assignment was marked EXPIRED)."""
        if self.status == AssignmentStatus.EXPIRED.value:
            return True
        return self.expires_at is not None and (now or utcnow()) > self.expires_at

    def is_valid(self, now: datetime | None = None) -> bool:
        """ACTIVE, not revoked, and not past its expiry."""
        if self.status != AssignmentStatus.ACTIVE.value:
            return False
        if self.revoked_at is not None:
            return False
        return self.expires_at is None or self.expires_at > (now or utcnow())

    def is_for_user(self, user_id: UserId) -> bool:
        return self.user_uuid == user_id.value

    # -- Public command methods ---------------------------------------------------

    def revoke(self, revoked_by: Actor, reason: str | None = None) -> None:
        """Revoke the assignment. Idempotent: no event when already revoked."""
        if self.is_revoked:
            return  # idempotent
        self._apply_unassigned(
            revoked_at=utcnow(),
            revoked_by=actor_value(revoked_by),
            reason=reason,
        )

    def expire(self, actor: Actor | Unset = UNSET) -> None:
        """ACTIVE -> EXPIRED. Idempotent when already EXPIRED.

        Raises:
            InvalidStateTransitionError: If the assignment was revoked.
        """
        if self.status == AssignmentStatus.EXPIRED.value:
            return  # idempotent
        if self.is_revoked:
            raise InvalidStateTransitionError(
                f"Cannot expire assignment {self.id}: it has been revoked",
                current_state=self.status,
            )
        self._apply_expired(updated_by=self._resolve_actor(actor))

    # -- Private @event mutators --------------------------------------------------

    @event("Unassigned")
    def _apply_unassigned(
        self,
        revoked_at: datetime,
        revoked_by: UUID | None,
        reason: str | None,
    ) -> None:
        self.status = AssignmentStatus.REVOKED.value
        self.revoked_at = revoked_at
        self.revoked_by = revoked_by
        self.revoke_reason = reason
        self._stamp(revoked_by)

    @event("Expired")
    def _apply_expired(self, updated_by: UUID | None) -> None:
        self.status = AssignmentStatus.EXPIRED.value
        self._stamp(updated_by)
