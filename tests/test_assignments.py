"""Unit tests for the tenant, organization and department assignment aggregates."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from strata.domain.identity.department_assignment import UserDepartmentAssignment
from strata.domain.identity.exceptions import (
    EmptyRoleSetError,
    InvalidRoleError,
    LastRoleError,
)
from strata.domain.identity.organization_assignment import UserOrganizationAssignment
from strata.domain.identity.tenant_assignment import UserTenantAssignment
from strata.domain.identity.value_objects import (
    AssignmentStatus,
    DepartmentRole,
    OrganizationRole,
    TenantRole,
)
from strata.foundation.domain.exceptions import InvalidStateTransitionError
from strata.foundation.domain.identifiers import (
    DepartmentId,
    EntityId,
    OrganizationId,
    TenantId,
    UserId,
)


def _new_tenant_assignment(
    tenant: TenantId,
    member: UserId,
    admin: UserId,
    *,
    roles: list[str] | None = None,
    expires_at: datetime | None = None,
) -> UserTenantAssignment:
    return UserTenantAssignment.create(
        user_id=member,
        tenant_id=tenant,
        assigned_by=admin,
        roles=roles if roles is not None else ["admin", "member"],
        expires_at=expires_at,
    )


@pytest.mark.unit
class TestTenantAssignmentCreation:
    def test_records_assigned_event(self, tenant: TenantId, member: UserId, admin: UserId) -> None:
        assignment = _new_tenant_assignment(tenant, member, admin)
        assert assignment.status == AssignmentStatus.ACTIVE
        assert assignment.version == 1
        assert type(assignment.domain_events[0]).__name__ == "Assigned"
        assert assignment.tenant == tenant
        assert assignment.user_id == member
        assert assignment.assigned_by == admin.value
        assert assignment.created_by == admin.value
        assert assignment.is_valid()

    def test_role_returns_first_role(self, tenant: TenantId, member: UserId, admin: UserId) -> None:
        assignment = _new_tenant_assignment(tenant, member, admin, roles=["admin", "member"])
        assert assignment.role == TenantRole("admin")
        assert assignment.has_role_value("member")
        assert assignment.has_role(TenantRole("ADMIN"))
        assert not assignment.has_role_value("owner")

    def test_has_role_value_normalizes_input(
        self, tenant: TenantId, member: UserId, admin: UserId
    ) -> None:
        assignment = _new_tenant_assignment(tenant, member, admin, roles=["Admin"])
        assert assignment.has_role_value("Admin")
        assert assignment.has_role_value("  ADMIN ")
        assert not assignment.has_role_value("")

    def test_single_role_argument(self, tenant: TenantId, member: UserId, admin: UserId) -> None:
        assignment = UserTenantAssignment.create(
            user_id=member, tenant_id=tenant, assigned_by=admin, role="viewer"
        )
        assert assignment.roles == [TenantRole("viewer")]

    def test_roles_take_precedence_over_role(
        self, tenant: TenantId, member: UserId, admin: UserId
    ) -> None:
        assignment = UserTenantAssignment.create(
            user_id=member,
            tenant_id=tenant,
            assigned_by=admin,
            role="viewer",
            roles=["editor"],
        )
        assert [r.value for r in assignment.roles] == ["editor"]

    def test_duplicate_roles_collapse(
        self, tenant: TenantId, member: UserId, admin: UserId
    ) -> None:
        assignment = _new_tenant_assignment(tenant, member, admin, roles=["Admin", "admin", "x"])
        assert [r.value for r in assignment.roles] == ["admin", "x"]

    @pytest.mark.parametrize("roles", [[], None])
    def test_empty_role_set_rejected(
        self, tenant: TenantId, member: UserId, admin: UserId, roles: list[str] | None
    ) -> None:
        with pytest.raises(EmptyRoleSetError):
            UserTenantAssignment.create(
                user_id=member, tenant_id=tenant, assigned_by=admin, roles=roles
            )

    def test_invalid_role_rejected(self, tenant: TenantId, member: UserId, admin: UserId) -> None:
        with pytest.raises(InvalidRoleError):
            _new_tenant_assignment(tenant, member, admin, roles=["  "])

    def test_roles_property_is_a_copy(
        self, tenant: TenantId, member: UserId, admin: UserId
    ) -> None:
        assignment = _new_tenant_assignment(tenant, member, admin)
        roles = assignment.roles
        roles.clear()
        assert len(assignment.roles) == 2


@pytest.mark.unit
class TestTenantAssignmentRoles:
    def test_add_role(self, tenant: TenantId, member: UserId, admin: UserId) -> None:
        assignment = _new_tenant_assignment(tenant, member, admin, roles=["member"])
        assignment.add_role("Billing", admin)
        assert assignment.has_role_value("billing")
        assert assignment.version == 2
        assert type(assignment.domain_events[-1]).__name__ == "RoleAdded"

    def test_add_existing_role_is_noop(
        self, tenant: TenantId, member: UserId, admin: UserId
    ) -> None:
        assignment = _new_tenant_assignment(tenant, member, admin, roles=["member"])
        assignment.add_role("member", admin)
        assert assignment.version == 1

    def test_remove_role(self, tenant: TenantId, member: UserId, admin: UserId) -> None:
        assignment = _new_tenant_assignment(tenant, member, admin, roles=["admin", "member"])
        assignment.remove_role("admin", admin)
        assert assignment.role == TenantRole("member")
        assert type(assignment.domain_events[-1]).__name__ == "RoleRemoved"

    def test_remove_last_role_fails(self, tenant: TenantId, member: UserId, admin: UserId) -> None:
        assignment = _new_tenant_assignment(tenant, member, admin, roles=["member"])
        with pytest.raises(LastRoleError):
            assignment.remove_role("member", admin)
        assert assignment.roles == [TenantRole("member")]

    def test_remove_absent_role_is_noop(
        self, tenant: TenantId, member: UserId, admin: UserId
    ) -> None:
        assignment = _new_tenant_assignment(tenant, member, admin, roles=["member"])
        assignment.remove_role("owner", admin)
        assert assignment.version == 1


@pytest.mark.unit
class TestAssignmentLifecycle:
    def test_revoke(self, tenant: TenantId, member: UserId, admin: UserId) -> None:
        assignment = _new_tenant_assignment(tenant, member, admin)
        assignment.revoke(admin, "offboarding")
        assert assignment.is_revoked
        assert assignment.status == AssignmentStatus.REVOKED
        assert assignment.revoked_by == admin.value
        assert assignment.revoke_reason == "offboarding"
        assert assignment.revoked_at is not None
        assert not assignment.is_valid()
        assert type(assignment.domain_events[-1]).__name__ == "Unassigned"

    def test_revoke_is_idempotent(self, tenant: TenantId, member: UserId, admin: UserId) -> None:
        assignment = _new_tenant_assignment(tenant, member, admin)
        assignment.revoke(admin)
        version = assignment.version
        events = assignment.domain_event_count
        assignment.revoke(admin, "again")
        assert assignment.version == version
        assert assignment.domain_event_count == events
        assert assignment.revoke_reason is None

    def test_past_expiry_is_not_valid(
        self, tenant: TenantId, member: UserId, admin: UserId
    ) -> None:
        past = datetime.now(tz=UTC) - timedelta(seconds=1)
        assignment = _new_tenant_assignment(tenant, member, admin, expires_at=past)
        assert assignment.status == AssignmentStatus.ACTIVE
        assert assignment.is_expired()
        assert not assignment.is_valid()

    def test_future_expiry_is_valid_until_reached(
        self, tenant: TenantId, member: UserId, admin: UserId
    ) -> None:
        expires_at = datetime.now(tz=UTC) + timedelta(days=1)
        assignment = _new_tenant_assignment(tenant, member, admin, expires_at=expires_at)
        assert assignment.is_valid()
        assert not assignment.is_valid(expires_at + timedelta(seconds=1))

    def test_expire(self, tenant: TenantId, member: UserId, admin: UserId) -> None:
        assignment = _new_tenant_assignment(tenant, member, admin)
        assignment.expire(admin)
        assert assignment.status == AssignmentStatus.EXPIRED
        assert assignment.is_expired()
        version = assignment.version
        assignment.expire()
        assert assignment.version == version

    def test_expired_assignment_can_be_revoked(
        self, tenant: TenantId, member: UserId, admin: UserId
    ) -> None:
        assignment = _new_tenant_assignment(tenant, member, admin)
        assignment.expire()
        assignment.revoke(admin)
        assert assignment.status == AssignmentStatus.REVOKED

    def test_revoked_assignment_cannot_expire(
        self, tenant: TenantId, member: UserId, admin: UserId
    ) -> None:
        assignment = _new_tenant_assignment(tenant, member, admin)
        assignment.revoke(admin)
        with pytest.raises(InvalidStateTransitionError):
            assignment.expire()

    def test_identity_queries(self, tenant: TenantId, member: UserId, admin: UserId) -> None:
        assignment = _new_tenant_assignment(tenant, member, admin)
        assert assignment.entity_id == EntityId(assignment.id)
        assert assignment.is_for_user(member)
        assert not assignment.is_for_user(admin)
        assert assignment.belongs_to_tenant(tenant)


@pytest.mark.unit
class TestOrganizationAssignment:
    def test_create(
        self, organization: OrganizationId, member: UserId, admin: UserId
    ) -> None:
        assignment = UserOrganizationAssignment.create(
            user_id=member, organization_id=organization, role="Manager", assigned_by=admin
        )
        assert assignment.organization_id == organization
        assert assignment.tenant_id == organization.tenant_id.value
        assert assignment.role == OrganizationRole("manager")
        assert assignment.is_valid()

    def test_rejects_invalid_role(
        self, organization: OrganizationId, member: UserId, admin: UserId
    ) -> None:
        with pytest.raises(InvalidRoleError):
            UserOrganizationAssignment.create(
                user_id=member, organization_id=organization, role="", assigned_by=admin
            )


@pytest.mark.unit
class TestDepartmentAssignment:
    def test_create(self, department: DepartmentId, member: UserId, admin: UserId) -> None:
        assignment = UserDepartmentAssignment.create(
            user_id=member, department_id=department, role="Engineer", assigned_by=admin
        )
        assert assignment.department_id == department
        assert assignment.organization_id == department.organization_id
        assert assignment.tenant_id == department.tenant_id.value
        assert assignment.role == DepartmentRole("engineer")

    def test_revoke_with_reason(
        self, department: DepartmentId, member: UserId, admin: UserId
    ) -> None:
        assignment = UserDepartmentAssignment.create(
            user_id=member, department_id=department, role="engineer", assigned_by=admin
        )
        assignment.revoke(admin, "department change")
        assert assignment.revoke_reason == "department change"
        assert assignment.version == 2
