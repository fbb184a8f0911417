"""Shared fixtures for strata tests."""

from __future__ import annotations

import pytest

from strata.domain.identity.assignment_app import UserAssignmentApplication
from strata.domain.identity.assignment_service import UserAssignmentService
from strata.domain.identity.infrastructure import (
    EventSourcedDepartmentAssignmentRepository,
    EventSourcedOrganizationAssignmentRepository,
    EventSourcedTenantAssignmentRepository,
    EventSourcedUserRepository,
)
from strata.domain.identity.user import User
from strata.domain.identity.user_app import UserApplication
from strata.foundation.domain.identifiers import (
    DepartmentId,
    OrganizationId,
    TenantId,
    UserId,
)

POPO_ENV = {"PERSISTENCE_MODULE": "eventsourcing.popo"}

VALID_PASSWORD = "Str0ng!Pass"


class FakeHasher:
    """Reversible stand-in for the credential port."""

    PREFIX = "hashed:"

    def __init__(self) -> None:
        self.hash_calls = 0

    def hash(self, plain_password: str) -> str:
        self.hash_calls += 1
        return f"{self.PREFIX}{plain_password}"

    def verify(self, plain_password: str, password_hash: str) -> bool:
        return password_hash == f"{self.PREFIX}{plain_password}"


@pytest.fixture()
def hasher() -> FakeHasher:
    return FakeHasher()


@pytest.fixture()
def tenant() -> TenantId:
    return TenantId.generate()


@pytest.fixture()
def organization(tenant: TenantId) -> OrganizationId:
    return OrganizationId.generate(tenant)


@pytest.fixture()
def department(organization: OrganizationId) -> DepartmentId:
    return DepartmentId.generate(organization)


@pytest.fixture()
def admin(tenant: TenantId) -> UserId:
    """Acting user for assignment operations."""
    return UserId.generate(tenant)


@pytest.fixture()
def member(tenant: TenantId) -> UserId:
    """User being assigned."""
    return UserId.generate(tenant)


@pytest.fixture()
def user(tenant: TenantId, hasher: FakeHasher) -> User:
    """Platform user in PENDING_ACTIVATION state."""
    return User.create_platform_user(
        tenant_id=tenant,
        username="john_doe",
        email="John.Doe@Example.com",
        password=VALID_PASSWORD,
        hasher=hasher,
    )


@pytest.fixture()
def active_user(user: User) -> User:
    user.activate()
    return user


@pytest.fixture()
def user_app() -> UserApplication:
    return UserApplication(env=POPO_ENV)


@pytest.fixture()
def assignment_app() -> UserAssignmentApplication:
    return UserAssignmentApplication(env=POPO_ENV)


@pytest.fixture()
def user_repository(user_app: UserApplication) -> EventSourcedUserRepository:
    return EventSourcedUserRepository(user_app)


@pytest.fixture()
def tenant_assignments(
    assignment_app: UserAssignmentApplication,
) -> EventSourcedTenantAssignmentRepository:
    return EventSourcedTenantAssignmentRepository(assignment_app)


@pytest.fixture()
def organization_assignments(
    assignment_app: UserAssignmentApplication,
) -> EventSourcedOrganizationAssignmentRepository:
    return EventSourcedOrganizationAssignmentRepository(assignment_app)


@pytest.fixture()
def department_assignments(
    assignment_app: UserAssignmentApplication,
) -> EventSourcedDepartmentAssignmentRepository:
    return EventSourcedDepartmentAssignmentRepository(assignment_app)


@pytest.fixture()
def assignment_service(
    tenant_assignments: EventSourcedTenantAssignmentRepository,
    organization_assignments: EventSourcedOrganizationAssignmentRepository,
    department_assignments: EventSourcedDepartmentAssignmentRepository,
) -> UserAssignmentService:
    return UserAssignmentService(
        tenant_assignments, organization_assignments, department_assignments
    )
