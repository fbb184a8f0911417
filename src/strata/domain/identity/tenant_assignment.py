"""User-to-tenant assignment with a non-empty role set."""

from __future__ import annotations

from typing import TYPE_CHECKING

from eventsourcing.domain import event

from strata.domain.identity.assignment import Assignment
from strata.domain.identity.exceptions import (
    EmptyRoleSetError,
    InvalidRoleError,
    LastRoleError,
)
from strata.domain.identity.value_objects import TenantRole
from strata.foundation.domain.aggregates import actor_value, utcnow
from strata.foundation.domain.identifiers import TenantId

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime
    from uuid import UUID

    from strata.foundation.domain.aggregates import Actor
    from strata.foundation.domain.identifiers import UserId


def _tenant_role(role: TenantRole | str) -> TenantRole:
    return role if isinstance(role, TenantRole) else TenantRole(role)


class UserTenantAssignment(Assignment):
    """Event-sourced binding of a user to a tenant.

    The role set is ordered and never empty. ``role`` returns the first
    role for callers that expect a single role.

    Attributes:
        tenant_id: Assigned tenant (inherited from BaseAggregate).
        roles: Normalised role names in assignment order.
    """

    @event("Assigned")
    def __init__(
        self,
        *,
        tenant_id: UUID,
        user_uuid: UUID,
        user_tenant_id: UUID | None,
        roles: list[str],
        assigned_at: datetime,
        assigned_by: UUID | None,
        expires_at: datetime | None,
    ) -> None:
        self._init_assignment(
            tenant_id=tenant_id,
            user_uuid=user_uuid,
            user_tenant_id=user_tenant_id,
            assigned_at=assigned_at,
            assigned_by=assigned_by,
            expires_at=expires_at,
        )
        self._roles: list[str] = list(roles)

    @classmethod
    def create(
        cls,
        *,
        user_id: UserId,
        tenant_id: TenantId,
        assigned_by: Actor,
        role: TenantRole | str | None = None,
        roles: Sequence[TenantRole | str] | None = None,
        expires_at: datetime | None = None,
    ) -> UserTenantAssignment:
        """Assign a user to a tenant.

        ``roles`` takes precedence over ``role`` when both are given.
        Duplicate roles are collapsed, keeping the first occurrence.

        Raises:
            EmptyRoleSetError: If neither a role nor a non-empty role list
                is supplied.
            InvalidRoleError: If a role name is blank or too long.
        """
        if roles is not None:
            candidates = [_tenant_role(r) for r in roles]
        elif role is not None:
            candidates = [_tenant_role(role)]
        else:
            candidates = []
        if not candidates:
            raise EmptyRoleSetError()
        unique = list(dict.fromkeys(r.value for r in candidates))
        return cls(
            tenant_id=tenant_id.value,
            user_uuid=user_id.value,
            user_tenant_id=user_id.tenant_id.value if user_id.tenant_id else None,
            roles=unique,
            assigned_at=utcnow(),
            assigned_by=actor_value(assigned_by),
            expires_at=expires_at,
        )

    # -- Queries ------------------------------------------------------------------

    @property
    def tenant(self) -> TenantId:
        return TenantId(self.tenant_id)

    @property
    def roles(self) -> list[TenantRole]:
        """Copy of the role set; changing it does not affect the assignment."""
        return [TenantRole(r) for r in self._roles]

    @property
    def role(self) -> TenantRole:
        return TenantRole(self._roles[0])

    def has_role(self, role: TenantRole) -> bool:
        return role.value in self._roles

    def has_role_value(self, role_value: str) -> bool:
        """Compare after the same trimming and lower-casing as ``add_role``."""
        try:
            return TenantRole(role_value).value in self._roles
        except InvalidRoleError:
            return False

    # -- Public command methods ---------------------------------------------------

    def add_role(self, role: TenantRole | str, updated_by: Actor) -> None:
        """Add a role. Idempotent for a role already held."""
        validated = _tenant_role(role)
        if validated.value in self._roles:
            return  # idempotent
        self._apply_role_added(role=validated.value, updated_by=actor_value(updated_by))

    def remove_role(self, role: TenantRole | str, updated_by: Actor) -> None:
        """Remove a role. No-op for a role not held.

        Raises:
            LastRoleError: If the role is the only one left.
        """
        validated = _tenant_role(role)
        if validated.value not in self._roles:
            return
        if len(self._roles) == 1:
            raise LastRoleError(validated.value, assignment_id=str(self.id))
        self._apply_role_removed(
            role=validated.value, updated_by=actor_value(updated_by)
        )

    # -- Private @event mutators --------------------------------------------------

    @event("RoleAdded")
    def _apply_role_added(self, role: str, updated_by: UUID | None) -> None:
        self._roles.append(role)
        self._stamp(updated_by)

    @event("RoleRemoved")
    def _apply_role_removed(self, role: str, updated_by: UUID | None) -> None:
        self._roles.remove(role)
        self._stamp(updated_by)
