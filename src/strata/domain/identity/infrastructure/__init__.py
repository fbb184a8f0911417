"""Strata Domain Identity Infrastructure -- event-sourced repository adapters."""

from strata.domain.identity.infrastructure.assignment_repositories import (
    AssignmentIndexRow,
    EventSourcedDepartmentAssignmentRepository,
    EventSourcedOrganizationAssignmentRepository,
    EventSourcedTenantAssignmentRepository,
)
from strata.domain.identity.infrastructure.context import (
    IdentityContext,
    build_identity_context,
)
from strata.domain.identity.infrastructure.event_sourced_repository import (
    EventSourcedRepository,
)
from strata.domain.identity.infrastructure.user_repository import (
    EventSourcedUserRepository,
    UserIndexRow,
)

__all__ = [
    "AssignmentIndexRow",
    "EventSourcedDepartmentAssignmentRepository",
    "EventSourcedOrganizationAssignmentRepository",
    "EventSourcedRepository",
    "EventSourcedTenantAssignmentRepository",
    "EventSourcedUserRepository",
    "IdentityContext",
    "UserIndexRow",
    "build_identity_context",
]
