"""Base aggregate classes for domain event sourcing.

This module provides the foundational aggregate infrastructure that all
domain aggregates across bounded contexts inherit from. BaseAggregate
extends the eventsourcing library's Aggregate class with multi-tenancy,
identity equality, audit stamps and a pending domain event buffer.

Example:
    >>> from strata.foundation.domain.aggregates import BaseAggregate
    >>> from eventsourcing.domain import event
    >>> from uuid import UUID
    >>>
    >>> class Team(BaseAggregate):
    ...     @event('Created')
    ...     def __init__(self, *, name: str, tenant_id: UUID, created_by: UUID | None):
    ...         self.name = name
    ...         self._init_audit(tenant_id=tenant_id, created_by=created_by)

"""

from __future__ import annotations

import enum
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Final
from uuid import UUID

from eventsourcing.domain import Aggregate, event

from strata.foundation.domain.entities import Audited, EventSource, Identified
from strata.foundation.domain.identifiers import UserId

if TYPE_CHECKING:
    from strata.foundation.domain.identifiers import TenantId

__all__ = ["UNSET", "Actor", "BaseAggregate", "Unset", "actor_value", "utcnow"]


class Unset(enum.Enum):
    """Marker for an actor argument that was not supplied at all."""

    UNSET = "UNSET"


UNSET: Final = Unset.UNSET

Actor = UserId | UUID | None


def actor_value(actor: Actor) -> UUID | None:
    """Reduce an acting user reference to the UUID stored in events."""
    if isinstance(actor, UserId):
        return actor.value
    return actor


def utcnow() -> datetime:
    return datetime.now(tz=UTC)


class BaseAggregate(Identified, Audited, EventSource, Aggregate):
    """Base class for all domain aggregates.

    Extends eventsourcing.domain.Aggregate with:
    - Multi-tenancy via required tenant_id field
    - Identity equality (type and id)
    - Audit stamps: actor attribution, activation and soft delete
    - Pending domain event buffer with explicit clearing

    All domain aggregates MUST inherit from this class.

    Attributes:
        tenant_id: Owning tenant UUID (required, immutable). Set by the
            subclass __init__ through ``_init_audit``.
        created_by: Acting user at creation, if any.
        updated_by: Acting user of the last attributed change.
        is_active: Record activation flag (default True). Independent of
            soft delete.
        activated_by / deactivated_at / deactivated_by: Activation stamps.
        deleted_at / deleted_by: Soft-delete stamps.

    Inherited from Aggregate (eventsourcing library):
        id: Aggregate identifier (UUID, auto-generated)
        version: Starts at 1, +1 per recorded event. Used for optimistic
            concurrency control by repositories.
        created_on: Timestamp of first event (exposed as ``created_at``)
        modified_on: Timestamp of last event (exposed as ``updated_at``)

    Usage Pattern:
        Subclasses must:
        1. Decorate __init__ with @event('<Created>')
        2. Call self._init_audit(...) in __init__
        3. Use @event decorator for all state-changing methods
        4. Keep state changes within decorated methods only
        5. Pass every event argument explicitly; timestamps a mutator
           needs are computed by the public command so replay is
           deterministic

    Command Pattern (with validation):
        Public command methods validate and short-circuit idempotent
        no-ops, then delegate to a private ``@event`` mutator:

        >>> class Resource(BaseAggregate):
        ...     def archive(self, archived_by: UUID) -> None:
        ...         '''Public command with validation.'''
        ...         if self.archived:
        ...             return  # idempotent
        ...         self._apply_archived(archived_by=archived_by)
        ...
        ...     @event('Archived')
        ...     def _apply_archived(self, archived_by: UUID) -> None:
        ...         '''Private mutator that triggers event.'''
        ...         self.archived = True
        ...         self._stamp(archived_by)

    See Also:
        - eventsourcing.domain.Aggregate: Library base class
        - strata.foundation.domain.entities: Composed capabilities
    """

    def _init_audit(self, *, tenant_id: UUID, created_by: UUID | None) -> None:
        """Initialise audit state. Called from the subclass __init__ body."""
        self.tenant_id = tenant_id
        self.created_by: UUID | None = created_by
        self.updated_by: UUID | None = created_by
        self.is_active: bool = True
        self._activated_at: datetime | None = None
        self.activated_by: UUID | None = created_by
        self.deactivated_at: datetime | None = None
        self.deactivated_by: UUID | None = None
        self.deleted_at: datetime | None = None
        self.deleted_by: UUID | None = None

    def _stamp(self, actor: UUID | None) -> None:
        """Attribute the change being applied to ``actor``."""
        self.updated_by = actor

    def _resolve_actor(self, actor: Actor | Unset) -> UUID | None:
        """Tri-state actor: UNSET keeps the previous ``updated_by``."""
        if actor is UNSET:
            return self.updated_by
        return actor_value(actor)

    # -- Queries ---------------------------------------------------------------

    @property
    def activated_at(self) -> datetime:
        """When the record was last activated (creation time by default)."""
        return self._activated_at or self.created_on

    def belongs_to_tenant(self, tenant_id: TenantId | UUID) -> bool:
        value = tenant_id if isinstance(tenant_id, UUID) else tenant_id.value
        return self.tenant_id == value

    # -- Audit commands --------------------------------------------------------

    def mark_as_updated(self, actor: Actor | Unset = UNSET) -> None:
        """Record an attributed change with no other state change.

        ``updated_by`` is overwritten only when an actor is supplied,
        including an explicit None.
        """
        self._apply_updated(updated_by=self._resolve_actor(actor))

    def soft_delete(self, actor: Actor | Unset = UNSET) -> None:
        """Mark the record deleted. Idempotent: no event if already deleted."""
        if self.deleted_at is not None:
            return  # idempotent
        deleted_by = None if actor is UNSET else actor_value(actor)
        self._apply_soft_deleted(
            deleted_at=utcnow(),
            deleted_by=deleted_by,
            updated_by=self._resolve_actor(actor),
        )

    def restore(self, actor: Actor | Unset = UNSET) -> None:
        """Undo a soft delete. Idempotent: no event if not deleted."""
        if self.deleted_at is None:
            return  # idempotent
        self._apply_restored(updated_by=self._resolve_actor(actor))

    def activate_record(self, actor: Actor | Unset = UNSET) -> None:
        """Activate the record unconditionally, clearing deactivation stamps."""
        activated_by = None if actor is UNSET else actor_value(actor)
        self._apply_record_activated(
            activated_at=utcnow(),
            activated_by=activated_by,
            updated_by=self._resolve_actor(actor),
        )

    def deactivate_record(self, actor: Actor | Unset = UNSET) -> None:
        """Deactivate the record unconditionally."""
        deactivated_by = None if actor is UNSET else actor_value(actor)
        self._apply_record_deactivated(
            deactivated_at=utcnow(),
            deactivated_by=deactivated_by,
            updated_by=self._resolve_actor(actor),
        )

    # -- Private @event mutators -----------------------------------------------

    @event("Updated")
    def _apply_updated(self, updated_by: UUID | None) -> None:
        self._stamp(updated_by)

    @event("SoftDeleted")
    def _apply_soft_deleted(
        self,
        deleted_at: datetime,
        deleted_by: UUID | None,
        updated_by: UUID | None,
    ) -> None:
        self.deleted_at = deleted_at
        self.deleted_by = deleted_by
        self._stamp(updated_by)

    @event("Restored")
    def _apply_restored(self, updated_by: UUID | None) -> None:
        self.deleted_at = None
        self.deleted_by = None
        self._stamp(updated_by)

    @event("RecordActivated")
    def _apply_record_activated(
        self,
        activated_at: datetime,
        activated_by: UUID | None,
        updated_by: UUID | None,
    ) -> None:
        self.is_active = True
        self._activated_at = activated_at
        self.activated_by = activated_by
        self.deactivated_at = None
        self.deactivated_by = None
        self._stamp(updated_by)

    @event("RecordDeactivated")
    def _apply_record_deactivated(
        self,
        deactivated_at: datetime,
        deactivated_by: UUID | None,
        updated_by: UUID | None,
    ) -> None:
        self.is_active = False
        self.deactivated_at = deactivated_at
        self.deactivated_by = deactivated_by
        self._stamp(updated_by)
