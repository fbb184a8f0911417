"""User-to-department assignment with a single role."""

from __future__ import annotations

from typing import TYPE_CHECKING

from eventsourcing.domain import event

from strata.domain.identity.assignment import Assignment
from strata.domain.identity.value_objects import DepartmentRole
from strata.foundation.domain.aggregates import actor_value, utcnow
from strata.foundation.domain.identifiers import DepartmentId, OrganizationId, TenantId

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from strata.foundation.domain.aggregates import Actor
    from strata.foundation.domain.identifiers import UserId


class UserDepartmentAssignment(Assignment):
    """Event-sourced binding of a user to a department.

    A user holds at most one valid department assignment per organization;
    :class:`UserAssignmentService` enforces this together with the
    organization-assignment prerequisite.

    Attributes:
        tenant_id: Tenant owning the organization (inherited from BaseAggregate).
        organization_uuid: Owning organization's identifier value.
        department_uuid: Assigned department's identifier value.
        role_value: Normalised role name.
    """

    @event("Assigned")
    def __init__(
        self,
        *,
        tenant_id: UUID,
        organization_uuid: UUID,
        department_uuid: UUID,
        user_uuid: UUID,
        user_tenant_id: UUID | None,
        role: str,
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
        self.organization_uuid: UUID = organization_uuid
        self.department_uuid: UUID = department_uuid
        self.role_value: str = role

    @classmethod
    def create(
        cls,
        *,
        user_id: UserId,
        department_id: DepartmentId,
        role: DepartmentRole | str,
        assigned_by: Actor,
        expires_at: datetime | None = None,
    ) -> UserDepartmentAssignment:
        """Assign a user to a department.

        Raises:
            InvalidRoleError: If the role name is blank or too long.
        """
        validated = role if isinstance(role, DepartmentRole) else DepartmentRole(role)
        organization_id = department_id.organization_id
        return cls(
            tenant_id=organization_id.tenant_id.value,
            organization_uuid=organization_id.value,
            department_uuid=department_id.value,
            user_uuid=user_id.value,
            user_tenant_id=user_id.tenant_id.value if user_id.tenant_id else None,
            role=validated.value,
            assigned_at=utcnow(),
            assigned_by=actor_value(assigned_by),
            expires_at=expires_at,
        )

    @property
    def organization_id(self) -> OrganizationId:
        return OrganizationId(self.organization_uuid, TenantId(self.tenant_id))

    @property
    def department_id(self) -> DepartmentId:
        return DepartmentId(self.department_uuid, self.organization_id)

    @property
    def role(self) -> DepartmentRole:
        return DepartmentRole(self.role_value)
