"""Event-sourced implementations of the assignment repository ports.

All three repositories share one :class:`UserAssignmentApplication`.
"Active" finders return assignments that are valid now (ACTIVE, not
revoked, not expired) and not soft-deleted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING
from uuid import UUID

from strata.domain.identity.department_assignment import UserDepartmentAssignment
from strata.domain.identity.infrastructure.event_sourced_repository import (
    EventSourcedRepository,
)
from strata.domain.identity.organization_assignment import UserOrganizationAssignment
from strata.domain.identity.tenant_assignment import UserTenantAssignment

if TYPE_CHECKING:
    from strata.domain.identity.assignment import Assignment
    from strata.foundation.domain.identifiers import (
        EntityId,
        OrganizationId,
        TenantId,
        UserId,
    )


@dataclass(frozen=True, slots=True)
class AssignmentIndexRow:
    """Scope keys of one assignment. Unused scopes are None."""

    assignment_id: UUID
    user_uuid: UUID
    tenant_id: UUID
    organization_uuid: UUID | None = None
    department_uuid: UUID | None = None


def _usable(assignment: Assignment) -> bool:
    return assignment.is_valid() and not assignment.is_deleted


class EventSourcedTenantAssignmentRepository(
    EventSourcedRepository[UserTenantAssignment, AssignmentIndexRow]
):
    """UserTenantAssignmentRepository backed by the event store."""

    aggregate_type = UserTenantAssignment

    def _row(self, aggregate: UserTenantAssignment) -> AssignmentIndexRow:
        return AssignmentIndexRow(
            assignment_id=aggregate.id,
            user_uuid=aggregate.user_uuid,
            tenant_id=aggregate.tenant_id,
        )

    def find_by_id(self, assignment_id: EntityId) -> UserTenantAssignment | None:
        return self._get(assignment_id.value)

    def get_by_id(self, assignment_id: EntityId) -> UserTenantAssignment:
        return self._require(assignment_id.value)

    def find_active_by_user(self, user_id: UserId) -> list[UserTenantAssignment]:
        candidates = self._matching(lambda row: row.user_uuid == user_id.value)
        return [a for a in candidates if _usable(a)]

    def find_active_by_user_and_tenant(
        self, user_id: UserId, tenant_id: TenantId
    ) -> UserTenantAssignment | None:
        candidates = self._matching(
            lambda row: row.user_uuid == user_id.value and row.tenant_id == tenant_id.value
        )
        return next((a for a in candidates if _usable(a)), None)

    def save(self, assignment: UserTenantAssignment) -> UserTenantAssignment:
        return self._save(assignment)

    def delete(self, assignment_id: EntityId) -> bool:
        return self._delete(assignment_id.value)


class EventSourcedOrganizationAssignmentRepository(
    EventSourcedRepository[UserOrganizationAssignment, AssignmentIndexRow]
):
    """UserOrganizationAssignmentRepository backed by the event store."""

    aggregate_type = UserOrganizationAssignment

    def _row(self, aggregate: UserOrganizationAssignment) -> AssignmentIndexRow:
        return AssignmentIndexRow(
            assignment_id=aggregate.id,
            user_uuid=aggregate.user_uuid,
            tenant_id=aggregate.tenant_id,
            organization_uuid=aggregate.organization_uuid,
        )

    def find_by_id(self, assignment_id: EntityId) -> UserOrganizationAssignment | None:
        return self._get(assignment_id.value)

    def get_by_id(self, assignment_id: EntityId) -> UserOrganizationAssignment:
        return self._require(assignment_id.value)

    def find_active_by_user(
        self, user_id: UserId, tenant_id: TenantId
    ) -> list[UserOrganizationAssignment]:
        candidates = self._matching(
            lambda row: row.user_uuid == user_id.value and row.tenant_id == tenant_id.value
        )
        return [a for a in candidates if _usable(a)]

    def find_active_by_user_and_organization(
        self,
        user_id: UserId,
        tenant_id: TenantId,
        organization_id: OrganizationId,
    ) -> UserOrganizationAssignment | None:
        candidates = self._matching(
            lambda row: row.user_uuid == user_id.value
            and row.tenant_id == tenant_id.value
            and row.organization_uuid == organization_id.value
        )
        return next((a for a in candidates if _usable(a)), None)

    def save(self, assignment: UserOrganizationAssignment) -> UserOrganizationAssignment:
        return self._save(assignment)

    def delete(self, assignment_id: EntityId) -> bool:
        return self._delete(assignment_id.value)


class EventSourcedDepartmentAssignmentRepository(
    EventSourcedRepository[UserDepartmentAssignment, AssignmentIndexRow]
):
    """UserDepartmentAssignmentRepository backed by the event store."""

    aggregate_type = UserDepartmentAssignment

    def _row(self, aggregate: UserDepartmentAssignment) -> AssignmentIndexRow:
        return AssignmentIndexRow(
            assignment_id=aggregate.id,
            user_uuid=aggregate.user_uuid,
            tenant_id=aggregate.tenant_id,
            organization_uuid=aggregate.organization_uuid,
            department_uuid=aggregate.department_uuid,
        )

    def find_by_id(self, assignment_id: EntityId) -> UserDepartmentAssignment | None:
        return self._get(assignment_id.value)

    def get_by_id(self, assignment_id: EntityId) -> UserDepartmentAssignment:
        return self._require(assignment_id.value)

    def find_by_user_and_organization(
        self,
        user_id: UserId,
        tenant_id: TenantId,
        organization_id: OrganizationId,
    ) -> UserDepartmentAssignment | None:
        candidates = self._matching(
            lambda row: row.user_uuid == user_id.value
            and row.tenant_id == tenant_id.value
            and row.organization_uuid == organization_id.value
        )
        current = [a for a in candidates if not a.is_revoked and not a.is_deleted]
        return max(current, key=lambda a: a.assigned_at, default=None)

    def find_active_by_user(
        self, user_id: UserId, tenant_id: TenantId
    ) -> list[UserDepartmentAssignment]:
        candidates = self._matching(
            lambda row: row.user_uuid == user_id.value and row.tenant_id == tenant_id.value
        )
        return [a for a in candidates if _usable(a)]

    def save(self, assignment: UserDepartmentAssignment) -> UserDepartmentAssignment:
        return self._save(assignment)

    def delete(self, assignment_id: EntityId) -> bool:
        return self._delete(assignment_id.value)
