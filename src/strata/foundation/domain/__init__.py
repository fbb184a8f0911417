"""Strata Foundation Domain -- domain primitives for multi-tenant identity.

This package provides the foundational domain building blocks: hierarchical
identifiers, exceptions, entity capabilities, the event-sourced aggregate
base, the event envelope, and port interfaces.
"""

from strata.foundation.domain.aggregates import UNSET, BaseAggregate
from strata.foundation.domain.entities import Audited, EventSource, Identified
from strata.foundation.domain.events import EventEnvelope
from strata.foundation.domain.exceptions import (
    ConcurrencyConflictError,
    ConflictError,
    DomainError,
    FormatError,
    HierarchyError,
    InfrastructureRequiredError,
    InvalidStateTransitionError,
    NotFoundError,
    ValidationError,
)
from strata.foundation.domain.identifiers import (
    DepartmentId,
    EntityId,
    OrganizationId,
    TenantId,
    UserId,
)
from strata.foundation.domain.ports import EventPublisherPort, PasswordHasherPort

__all__ = [
    "UNSET",
    "Audited",
    "BaseAggregate",
    "ConcurrencyConflictError",
    "ConflictError",
    "DepartmentId",
    "DomainError",
    "EntityId",
    "EventEnvelope",
    "EventPublisherPort",
    "EventSource",
    "FormatError",
    "HierarchyError",
    "Identified",
    "InfrastructureRequiredError",
    "InvalidStateTransitionError",
    "NotFoundError",
    "OrganizationId",
    "PasswordHasherPort",
    "TenantId",
    "UserId",
    "ValidationError",
]
