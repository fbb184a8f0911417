"""Domain service enforcing the tenant -> organization -> department layering.

A user may join an organization only while holding a valid assignment to
the organization's tenant, and a department only while holding a valid
assignment to the department's organization. A user holds at most one
valid department assignment per organization.

Multi-step operations save each aggregate separately. They are not atomic;
callers that need atomicity wrap them in an outer transaction.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from strata.domain.identity.department_assignment import UserDepartmentAssignment
from strata.domain.identity.exceptions import (
    UserAlreadyAssignedToDepartmentInOrganizationError,
    UserAlreadyAssignedToOrganizationError,
    UserAlreadyAssignedToTenantError,
    UserNotAssignedToOrganizationError,
    UserNotAssignedToTenantError,
)
from strata.domain.identity.organization_assignment import UserOrganizationAssignment
from strata.domain.identity.tenant_assignment import UserTenantAssignment
from strata.foundation.domain.exceptions import HierarchyError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from strata.domain.identity.repositories import (
        UserDepartmentAssignmentRepository,
        UserOrganizationAssignmentRepository,
        UserTenantAssignmentRepository,
    )
    from strata.domain.identity.value_objects import (
        DepartmentRole,
        OrganizationRole,
        TenantRole,
    )
    from strata.foundation.domain.identifiers import (
        DepartmentId,
        OrganizationId,
        TenantId,
        UserId,
    )

DEPARTMENT_CHANGE_REASON = "department change"


@dataclass(frozen=True)
class AssignUserToTenant:
    """Parameters for assigning a user to a tenant."""

    user_id: UserId
    tenant_id: TenantId
    roles: Sequence[TenantRole | str]
    assigned_by: UserId
    expires_at: datetime | None = None


@dataclass(frozen=True)
class AssignUserToOrganization:
    """Parameters for assigning a user to an organization."""

    user_id: UserId
    tenant_id: TenantId
    organization_id: OrganizationId
    role: OrganizationRole | str
    assigned_by: UserId
    expires_at: datetime | None = None


@dataclass(frozen=True)
class AssignUserToDepartment:
    """Parameters for assigning a user to a department.

    Also used by ``change_user_department_in_organization``.
    """

    user_id: UserId
    tenant_id: TenantId
    organization_id: OrganizationId
    department_id: DepartmentId
    role: DepartmentRole | str
    assigned_by: UserId
    expires_at: datetime | None = None


ChangeUserDepartmentInOrganization = AssignUserToDepartment


class UserAssignmentService:
    """Cross-aggregate assignment rules.

    Persists through the injected repository ports; each save is a version
    compare-and-swap and may raise ``ConcurrencyConflictError``.
    """

    def __init__(
        self,
        tenant_assignments: UserTenantAssignmentRepository,
        organization_assignments: UserOrganizationAssignmentRepository,
        department_assignments: UserDepartmentAssignmentRepository,
    ) -> None:
        self._tenant_assignments = tenant_assignments
        self._organization_assignments = organization_assignments
        self._department_assignments = department_assignments

    def assign_user_to_tenant(self, params: AssignUserToTenant) -> UserTenantAssignment:
        """Create and persist a tenant assignment.

        Raises:
            UserAlreadyAssignedToTenantError: If a valid assignment exists.
            EmptyRoleSetError: If no role is given.
        """
        existing = self._tenant_assignments.find_active_by_user_and_tenant(
            params.user_id, params.tenant_id
        )
        if existing is not None and existing.is_valid():
            raise UserAlreadyAssignedToTenantError(params.user_id, params.tenant_id)
        assignment = UserTenantAssignment.create(
            user_id=params.user_id,
            tenant_id=params.tenant_id,
            roles=params.roles,
            assigned_by=params.assigned_by,
            expires_at=params.expires_at,
        )
        return self._tenant_assignments.save(assignment)

    def assign_user_to_organization(
        self, params: AssignUserToOrganization
    ) -> UserOrganizationAssignment:
        """Create and persist an organization assignment.

        Raises:
            HierarchyError: If the organization belongs to another tenant.
            UserNotAssignedToTenantError: Without a valid tenant assignment.
            UserAlreadyAssignedToOrganizationError: If a valid organization
                assignment exists.
        """
        _check_organization_in_tenant(params.organization_id, params.tenant_id)
        self._require_tenant_assignment(params.user_id, params.tenant_id)
        existing = self._organization_assignments.find_active_by_user_and_organization(
            params.user_id, params.tenant_id, params.organization_id
        )
        if existing is not None and existing.is_valid():
            raise UserAlreadyAssignedToOrganizationError(
                params.user_id, params.organization_id
            )
        assignment = UserOrganizationAssignment.create(
            user_id=params.user_id,
            organization_id=params.organization_id,
            role=params.role,
            assigned_by=params.assigned_by,
            expires_at=params.expires_at,
        )
        return self._organization_assignments.save(assignment)

    def assign_user_to_department(
        self, params: AssignUserToDepartment
    ) -> UserDepartmentAssignment:
        """Create and persist a department assignment.

        Raises:
            HierarchyError: If the identifiers do not nest.
            UserNotAssignedToOrganizationError: Without a valid organization
                assignment.
            UserAlreadyAssignedToDepartmentInOrganizationError: If a valid
                department assignment exists in the same organization.
        """
        _check_department_in_organization(params)
        self._require_organization_assignment(params)
        existing = self._department_assignments.find_by_user_and_organization(
            params.user_id, params.tenant_id, params.organization_id
        )
        if existing is not None and existing.is_valid():
            raise UserAlreadyAssignedToDepartmentInOrganizationError(
                params.user_id, params.organization_id, existing.department_id
            )
        return self._department_assignments.save(_new_department_assignment(params))

    def change_user_department_in_organization(
        self, params: ChangeUserDepartmentInOrganization
    ) -> UserDepartmentAssignment:
        """Move a user to another department within the same organization.

        Revokes any valid department assignment in the organization (reason
        ``"department change"``) and saves it, then creates and saves the
        new assignment. The two saves are independent.

        Raises:
            HierarchyError: If the identifiers do not nest.
            UserNotAssignedToOrganizationError: Without a valid organization
                assignment.
        """
        _check_department_in_organization(params)
        self._require_organization_assignment(params)
        existing = self._department_assignments.find_by_user_and_organization(
            params.user_id, params.tenant_id, params.organization_id
        )
        if existing is not None and existing.is_valid():
            existing.revoke(params.assigned_by, DEPARTMENT_CHANGE_REASON)
            self._department_assignments.save(existing)
        return self._department_assignments.save(_new_department_assignment(params))

    # -- Helpers ------------------------------------------------------------------

    def _require_tenant_assignment(self, user_id: UserId, tenant_id: TenantId) -> None:
        assignment = self._tenant_assignments.find_active_by_user_and_tenant(
            user_id, tenant_id
        )
        if assignment is None or not assignment.is_valid():
            raise UserNotAssignedToTenantError(user_id, tenant_id)

    def _require_organization_assignment(self, params: AssignUserToDepartment) -> None:
        assignment = self._organization_assignments.find_active_by_user_and_organization(
            params.user_id, params.tenant_id, params.organization_id
        )
        if assignment is None or not assignment.is_valid():
            raise UserNotAssignedToOrganizationError(
                params.user_id, params.organization_id
            )


def _check_organization_in_tenant(
    organization_id: OrganizationId, tenant_id: TenantId
) -> None:
    if organization_id.tenant_id != tenant_id:
        raise HierarchyError(
            "organization_id",
            "Organization does not belong to the tenant",
            organization_id=str(organization_id),
            tenant_id=str(tenant_id),
        )


def _check_department_in_organization(params: AssignUserToDepartment) -> None:
    _check_organization_in_tenant(params.organization_id, params.tenant_id)
    if params.department_id.organization_id != params.organization_id:
        raise HierarchyError(
            "department_id",
            "Department does not belong to the organization",
            department_id=str(params.department_id),
            organization_id=str(params.organization_id),
        )


def _new_department_assignment(params: AssignUserToDepartment) -> UserDepartmentAssignment:
    return UserDepartmentAssignment.create(
        user_id=params.user_id,
        department_id=params.department_id,
        role=params.role,
        assigned_by=params.assigned_by,
        expires_at=params.expires_at,
    )
