"""Strata Domain Identity -- users and their tenant, organization and department assignments."""

from strata.domain.identity.assignment_app import UserAssignmentApplication
from strata.domain.identity.assignment_service import (
    AssignUserToDepartment,
    AssignUserToOrganization,
    AssignUserToTenant,
    ChangeUserDepartmentInOrganization,
    UserAssignmentService,
)
from strata.domain.identity.department_assignment import UserDepartmentAssignment
from strata.domain.identity.organization_assignment import UserOrganizationAssignment
from strata.domain.identity.tenant_assignment import UserTenantAssignment
from strata.domain.identity.user import User
from strata.domain.identity.user_app import UserApplication
from strata.domain.identity.validation_service import UserValidationService
from strata.domain.identity.value_objects import (
    AssignmentStatus,
    DepartmentRole,
    Email,
    Nickname,
    OrganizationRole,
    TenantRole,
    UserSource,
    UserState,
    UserStatus,
    Username,
)

__all__ = [
    "AssignUserToDepartment",
    "AssignUserToOrganization",
    "AssignUserToTenant",
    "AssignmentStatus",
    "ChangeUserDepartmentInOrganization",
    "DepartmentRole",
    "Email",
    "Nickname",
    "OrganizationRole",
    "TenantRole",
    "User",
    "UserApplication",
    "UserAssignmentApplication",
    "UserAssignmentService",
    "UserDepartmentAssignment",
    "UserOrganizationAssignment",
    "UserSource",
    "UserState",
    "UserStatus",
    "UserTenantAssignment",
    "UserValidationService",
    "Username",
]
