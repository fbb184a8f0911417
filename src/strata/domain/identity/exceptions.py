"""Identity domain errors.

Each error derives from the foundation hierarchy so the application
boundary can map it by kind: validation errors are ``ValidationError``,
relationship and uniqueness errors are ``ConflictError``, and state errors
are ``InvalidStateTransitionError``.
"""

from __future__ import annotations

from typing import Any

from strata.foundation.domain.exceptions import (
    ConflictError,
    InvalidStateTransitionError,
    ValidationError,
)

__all__ = [
    "EmailAlreadyExistsError",
    "EmptyRoleSetError",
    "InvalidEmailError",
    "InvalidNicknameError",
    "InvalidPasswordError",
    "InvalidRoleError",
    "InvalidUsernameError",
    "LastRoleError",
    "NicknameAlreadyExistsError",
    "UserAlreadyAssignedToDepartmentInOrganizationError",
    "UserAlreadyAssignedToOrganizationError",
    "UserAlreadyAssignedToTenantError",
    "UserNotAssignedToOrganizationError",
    "UserNotAssignedToTenantError",
    "UsernameAlreadyExistsError",
]


# -- Validation ----------------------------------------------------------------


class InvalidEmailError(ValidationError):
    error_code: str = "INVALID_EMAIL"

    def __init__(self, reason: str, **extra_context: Any) -> None:
        super().__init__("email", reason, **extra_context)


class InvalidUsernameError(ValidationError):
    error_code: str = "INVALID_USERNAME"

    def __init__(self, reason: str, **extra_context: Any) -> None:
        super().__init__("username", reason, **extra_context)


class InvalidNicknameError(ValidationError):
    error_code: str = "INVALID_NICKNAME"

    def __init__(self, reason: str, **extra_context: Any) -> None:
        super().__init__("nickname", reason, **extra_context)


class InvalidPasswordError(ValidationError):
    """Raised when a password breaks the policy or does not match."""

    error_code: str = "INVALID_PASSWORD"

    def __init__(self, reason: str) -> None:
        super().__init__("password", reason)


class InvalidRoleError(ValidationError):
    error_code: str = "INVALID_ROLE"

    def __init__(self, reason: str, **extra_context: Any) -> None:
        super().__init__("role", reason, **extra_context)


class EmptyRoleSetError(ValidationError):
    """Raised when an assignment would be created without any role."""

    error_code: str = "EMPTY_ROLE_SET"

    def __init__(self) -> None:
        super().__init__("roles", "At least one role is required")


# -- State ---------------------------------------------------------------------


class LastRoleError(InvalidStateTransitionError):
    """Raised when removing a role would leave a tenant assignment empty."""

    error_code: str = "LAST_ROLE"

    def __init__(self, role: str, **context: Any) -> None:
        self.role = role
        super().__init__(f"Cannot remove the last role '{role}'", role=role, **context)


# -- Relationships -------------------------------------------------------------


class UserNotAssignedToTenantError(ConflictError):
    error_code: str = "USER_NOT_ASSIGNED_TO_TENANT"

    def __init__(self, user_id: object, tenant_id: object) -> None:
        super().__init__(
            "User is not assigned to tenant",
            user_id=str(user_id),
            tenant_id=str(tenant_id),
        )


class UserNotAssignedToOrganizationError(ConflictError):
    error_code: str = "USER_NOT_ASSIGNED_TO_ORGANIZATION"

    def __init__(self, user_id: object, organization_id: object) -> None:
        super().__init__(
            "User is not assigned to organization",
            user_id=str(user_id),
            organization_id=str(organization_id),
        )


class UserAlreadyAssignedToTenantError(ConflictError):
    error_code: str = "USER_ALREADY_ASSIGNED_TO_TENANT"

    def __init__(self, user_id: object, tenant_id: object) -> None:
        super().__init__(
            "User is already assigned to tenant",
            user_id=str(user_id),
            tenant_id=str(tenant_id),
        )


class UserAlreadyAssignedToOrganizationError(ConflictError):
    error_code: str = "USER_ALREADY_ASSIGNED_TO_ORGANIZATION"

    def __init__(self, user_id: object, organization_id: object) -> None:
        super().__init__(
            "User is already assigned to organization",
            user_id=str(user_id),
            organization_id=str(organization_id),
        )


class UserAlreadyAssignedToDepartmentInOrganizationError(ConflictError):
    error_code: str = "USER_ALREADY_ASSIGNED_TO_DEPARTMENT_IN_ORGANIZATION"

    def __init__(
        self,
        user_id: object,
        organization_id: object,
        department_id: object,
    ) -> None:
        super().__init__(
            "User already has a department in this organization",
            user_id=str(user_id),
            organization_id=str(organization_id),
            department_id=str(department_id),
        )


# -- Uniqueness ----------------------------------------------------------------


class EmailAlreadyExistsError(ConflictError):
    error_code: str = "EMAIL_ALREADY_EXISTS"

    def __init__(self, email: str) -> None:
        super().__init__("Email is already registered", email=email)


class UsernameAlreadyExistsError(ConflictError):
    error_code: str = "USERNAME_ALREADY_EXISTS"

    def __init__(self, username: str) -> None:
        super().__init__("Username is already taken", username=username)


class NicknameAlreadyExistsError(ConflictError):
    error_code: str = "NICKNAME_ALREADY_EXISTS"

    def __init__(self, nickname: str) -> None:
        super().__init__("Nickname is already taken", nickname=nickname)
