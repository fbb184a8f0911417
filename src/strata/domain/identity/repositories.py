"""Persistence ports for the identity aggregates.

Every ``save`` is a version compare-and-swap: it raises
``ConcurrencyConflictError`` when the stored aggregate has moved past the
version the caller read, and returns the saved aggregate otherwise.
``delete`` soft-deletes and returns False for an unknown identifier.

The protocols are runtime_checkable to enable isinstance() verification
in tests and dependency injection validation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from strata.domain.identity.department_assignment import UserDepartmentAssignment
    from strata.domain.identity.organization_assignment import (
        UserOrganizationAssignment,
    )
    from strata.domain.identity.tenant_assignment import UserTenantAssignment
    from strata.domain.identity.user import User
    from strata.domain.identity.value_objects import Email, Username
    from strata.foundation.domain.identifiers import (
        EntityId,
        OrganizationId,
        TenantId,
        UserId,
    )

__all__ = [
    "UserDepartmentAssignmentRepository",
    "UserOrganizationAssignmentRepository",
    "UserRepository",
    "UserTenantAssignmentRepository",
]


@runtime_checkable
class UserRepository(Protocol):
    """Port for User persistence and platform-wide uniqueness checks.

    Soft-deleted users still occupy their email, username and nickname.
    """

    def find_by_id(self, user_id: UserId) -> User | None: ...

    def find_by_email(self, email: Email) -> User | None: ...

    def find_by_username(self, username: Username) -> User | None: ...

    def find_by_nickname(self, nickname: str) -> User | None: ...

    def save(self, user: User) -> User: ...

    def delete(self, user_id: UserId) -> bool: ...

    def exists_by_email(self, email: Email) -> bool: ...

    def exists_by_username(self, username: Username) -> bool: ...

    def exists_by_nickname(self, nickname: str) -> bool: ...


@runtime_checkable
class UserTenantAssignmentRepository(Protocol):
    """Port for UserTenantAssignment persistence."""

    def find_by_id(self, assignment_id: EntityId) -> UserTenantAssignment | None: ...

    def find_active_by_user(self, user_id: UserId) -> list[UserTenantAssignment]:
        """Valid assignments of the user across all tenants."""
        ...

    def find_active_by_user_and_tenant(
        self, user_id: UserId, tenant_id: TenantId
    ) -> UserTenantAssignment | None: ...

    def save(self, assignment: UserTenantAssignment) -> UserTenantAssignment: ...

    def delete(self, assignment_id: EntityId) -> bool: ...


@runtime_checkable
class UserOrganizationAssignmentRepository(Protocol):
    """Port for UserOrganizationAssignment persistence."""

    def find_by_id(
        self, assignment_id: EntityId
    ) -> UserOrganizationAssignment | None: ...

    def find_active_by_user(
        self, user_id: UserId, tenant_id: TenantId
    ) -> list[UserOrganizationAssignment]:
        """Valid organization assignments of the user within one tenant."""
        ...

    def find_active_by_user_and_organization(
        self,
        user_id: UserId,
        tenant_id: TenantId,
        organization_id: OrganizationId,
    ) -> UserOrganizationAssignment | None: ...

    def save(
        self, assignment: UserOrganizationAssignment
    ) -> UserOrganizationAssignment: ...

    def delete(self, assignment_id: EntityId) -> bool: ...


@runtime_checkable
class UserDepartmentAssignmentRepository(Protocol):
    """Port for UserDepartmentAssignment persistence."""

    def find_by_id(
        self, assignment_id: EntityId
    ) -> UserDepartmentAssignment | None: ...

    def find_by_user_and_organization(
        self,
        user_id: UserId,
        tenant_id: TenantId,
        organization_id: OrganizationId,
    ) -> UserDepartmentAssignment | None:
        """Most recent non-revoked department assignment in the organization.

        The result may be expired; callers check ``is_valid()``.
        """
        ...

    def find_active_by_user(
        self, user_id: UserId, tenant_id: TenantId
    ) -> list[UserDepartmentAssignment]: ...

    def save(self, assignment: UserDepartmentAssignment) -> UserDepartmentAssignment: ...

    def delete(self, assignment_id: EntityId) -> bool: ...
