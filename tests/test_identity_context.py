"""End-to-end identity flows through the wired context."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from strata.domain.identity.assignment_service import (
    AssignUserToDepartment,
    AssignUserToOrganization,
    AssignUserToTenant,
)
from strata.domain.identity.exceptions import UsernameAlreadyExistsError
from strata.domain.identity.infrastructure import IdentityContext, build_identity_context
from strata.domain.identity.user import User
from strata.domain.identity.value_objects import Email, UserStatus, Username
from strata.foundation.application import InMemoryEventPublisher
from strata.foundation.domain.identifiers import (
    DepartmentId,
    OrganizationId,
    TenantId,
)
from strata.infra.auth import BcryptPasswordHasher
from strata.infra.eventsourcing import EventSourcingSettings

if TYPE_CHECKING:
    from strata.foundation.domain.ports import PasswordHasherPort


@pytest.fixture()
def publisher() -> InMemoryEventPublisher:
    return InMemoryEventPublisher()


@pytest.fixture()
def context(publisher: InMemoryEventPublisher, hasher: PasswordHasherPort) -> IdentityContext:
    return build_identity_context(
        EventSourcingSettings(persistence_module="eventsourcing.popo"),
        publisher=publisher,
        hasher=hasher,
    )


def _register(context: IdentityContext, tenant: TenantId, username: str) -> User:
    email = Email(f"{username}@example.com")
    context.validation_service.ensure_registration_unique(email, Username(username))
    user = User.create_platform_user(
        tenant_id=tenant,
        username=username,
        email=email,
        password="Str0ng!Pass",
        hasher=context.hasher,
    )
    return context.committer.commit(context.users, user)


@pytest.mark.integration
class TestIdentityContext:
    def test_defaults(self) -> None:
        context = build_identity_context(
            EventSourcingSettings(persistence_module="eventsourcing.popo")
        )
        assert isinstance(context.publisher, InMemoryEventPublisher)
        assert isinstance(context.hasher, BcryptPasswordHasher)

    def test_register_activate_and_assign(
        self, context: IdentityContext, publisher: InMemoryEventPublisher
    ) -> None:
        tenant = TenantId.generate()
        organization = OrganizationId.generate(tenant)
        department = DepartmentId.generate(organization)
        admin = _register(context, tenant, "admin_user")
        member = _register(context, tenant, "member_user")

        member.activate(actor=admin.user_id)
        context.committer.commit(context.users, member)

        context.assignment_service.assign_user_to_tenant(
            AssignUserToTenant(
                user_id=member.user_id,
                tenant_id=tenant,
                roles=["member"],
                assigned_by=admin.user_id,
            )
        )
        context.assignment_service.assign_user_to_organization(
            AssignUserToOrganization(
                user_id=member.user_id,
                tenant_id=tenant,
                organization_id=organization,
                role="staff",
                assigned_by=admin.user_id,
            )
        )
        assignment = context.assignment_service.assign_user_to_department(
            AssignUserToDepartment(
                user_id=member.user_id,
                tenant_id=tenant,
                organization_id=organization,
                department_id=department,
                role="engineer",
                assigned_by=admin.user_id,
            )
        )
        context.committer.commit(context.department_assignments, assignment)

        loaded = context.users.get_by_id(member.user_id)
        assert loaded.status == UserStatus.ACTIVE
        assert loaded.updated_by == admin.id
        assert publisher.event_types() == [
            "UserRegistered",
            "UserRegistered",
            "UserActivated",
            "UserDepartmentAssignmentAssigned",
        ]
        assert all(e.tenant_id == tenant.value for e in publisher.published)

    def test_duplicate_registration_rejected(self, context: IdentityContext) -> None:
        tenant = TenantId.generate()
        _register(context, tenant, "jane_doe")
        with pytest.raises(UsernameAlreadyExistsError):
            context.validation_service.ensure_registration_unique(
                Email("other@example.com"), Username("jane_doe")
            )
