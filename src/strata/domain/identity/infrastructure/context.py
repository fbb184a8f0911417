"""Wiring of the identity applications, repositories and services.

One :class:`IdentityContext` is built per process. The event store backend
comes from :class:`EventSourcingSettings`; the in-memory POPO backend is
the default.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from strata.domain.identity.assignment_app import UserAssignmentApplication
from strata.domain.identity.assignment_service import UserAssignmentService
from strata.domain.identity.infrastructure.assignment_repositories import (
    EventSourcedDepartmentAssignmentRepository,
    EventSourcedOrganizationAssignmentRepository,
    EventSourcedTenantAssignmentRepository,
)
from strata.domain.identity.infrastructure.user_repository import (
    EventSourcedUserRepository,
)
from strata.domain.identity.user_app import UserApplication
from strata.domain.identity.validation_service import UserValidationService
from strata.foundation.application import AggregateCommitter, InMemoryEventPublisher
from strata.foundation.domain.ports import EventPublisherPort, PasswordHasherPort
from strata.infra.auth import BcryptPasswordHasher
from strata.infra.eventsourcing import EventSourcingSettings, get_event_sourcing_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IdentityContext:
    """Process-wide identity components sharing one event store."""

    user_app: UserApplication
    assignment_app: UserAssignmentApplication
    users: EventSourcedUserRepository
    tenant_assignments: EventSourcedTenantAssignmentRepository
    organization_assignments: EventSourcedOrganizationAssignmentRepository
    department_assignments: EventSourcedDepartmentAssignmentRepository
    assignment_service: UserAssignmentService
    validation_service: UserValidationService
    committer: AggregateCommitter
    publisher: EventPublisherPort
    hasher: PasswordHasherPort


def build_identity_context(
    settings: EventSourcingSettings | None = None,
    *,
    publisher: EventPublisherPort | None = None,
    hasher: PasswordHasherPort | None = None,
) -> IdentityContext:
    """Build the identity components.

    Args:
        settings: Event store configuration. Loaded from the environment
            when omitted.
        publisher: Outbound event channel. Defaults to an
            :class:`InMemoryEventPublisher`.
        hasher: Credential port. Defaults to :class:`BcryptPasswordHasher`.
    """
    settings = settings or get_event_sourcing_settings()
    env = settings.to_env_dict()
    user_app = UserApplication(env=env)
    assignment_app = UserAssignmentApplication(env=env)

    users = EventSourcedUserRepository(user_app)
    tenant_assignments = EventSourcedTenantAssignmentRepository(assignment_app)
    organization_assignments = EventSourcedOrganizationAssignmentRepository(assignment_app)
    department_assignments = EventSourcedDepartmentAssignmentRepository(assignment_app)
    channel = publisher if publisher is not None else InMemoryEventPublisher()

    logger.info(
        "identity_context_built",
        extra={"persistence_module": settings.persistence_module},
    )
    return IdentityContext(
        user_app=user_app,
        assignment_app=assignment_app,
        users=users,
        tenant_assignments=tenant_assignments,
        organization_assignments=organization_assignments,
        department_assignments=department_assignments,
        assignment_service=UserAssignmentService(
            tenant_assignments, organization_assignments, department_assignments
        ),
        validation_service=UserValidationService(users),
        committer=AggregateCommitter(channel),
        publisher=channel,
        hasher=hasher if hasher is not None else BcryptPasswordHasher(),
    )
