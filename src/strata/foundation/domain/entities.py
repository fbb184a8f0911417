"""Composable entity capabilities.

Aggregates are assembled from three capabilities:

- ``Identified``: equality and hashing derive solely from identity.
- ``Audited``: read-only queries over the audit stamps (timestamps, actor
  attribution, activation and soft-delete axes).
- ``EventSource``: an owned buffer of pending domain events, exposed as
  immutable snapshots and cleared only by explicit caller action.

The state-changing side of auditing lives on
:class:`strata.foundation.domain.aggregates.BaseAggregate`, because every
mutation there is recorded as an event.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from datetime import timedelta
    from uuid import UUID

    from eventsourcing.domain import DomainEvent

__all__ = ["Audited", "EventSource", "Identified"]


class Identified:
    """Identity-based equality.

    Two instances are equal when they are of the same type and share the
    same ``id``, regardless of any other state.
    """

    id: UUID

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.id == other.id  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.id))


class Audited:
    """Read-only audit queries.

    Expects the host class to provide the audit attributes set by
    ``BaseAggregate``. Every ``time_since_*`` helper returns None when the
    corresponding stamp is absent.
    """

    version: int
    created_on: datetime
    modified_on: datetime
    activated_at: datetime | None
    deactivated_at: datetime | None
    deleted_at: datetime | None

    @property
    def created_at(self) -> datetime:
        return self.created_on

    @property
    def updated_at(self) -> datetime:
        return self.modified_on

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def is_modified(self) -> bool:
        """True once any change has been recorded after creation."""
        return self.version > 1

    def age(self, now: datetime | None = None) -> timedelta:
        return _now(now) - self.created_at

    def time_since_last_update(self, now: datetime | None = None) -> timedelta:
        return _now(now) - self.updated_at

    def time_since_deleted(self, now: datetime | None = None) -> timedelta | None:
        return _since(self.deleted_at, now)

    def time_since_activated(self, now: datetime | None = None) -> timedelta | None:
        return _since(self.activated_at, now)

    def time_since_deactivated(self, now: datetime | None = None) -> timedelta | None:
        return _since(self.deactivated_at, now)


class EventSource:
    """Pending domain event buffer.

    Events are appended by the aggregate's own mutators, read as tuple
    snapshots, and removed only by ``clear_domain_events()``. Persistence
    adapters use ``uncommitted_events()`` and ``mark_events_committed()`` so
    that events kept queued until publication are never stored twice.
    """

    id: UUID
    version: int
    _pending_events: list[Any]

    @property
    def domain_events(self) -> tuple[DomainEvent, ...]:
        """Snapshot of pending events in emission order."""
        return tuple(self._pending_events)

    @property
    def has_domain_events(self) -> bool:
        return bool(self._pending_events)

    @property
    def domain_event_count(self) -> int:
        return len(self._pending_events)

    def add_domain_event(self, event: DomainEvent) -> None:
        """Apply an externally constructed event and append it to the buffer.

        The event must originate from this aggregate and carry the next
        version number.

        Raises:
            ValueError: If the event belongs to another aggregate or is out
                of sequence.
        """
        if event.originator_id != self.id:
            msg = (
                f"Event originator {event.originator_id} does not match "
                f"aggregate {self.id}"
            )
            raise ValueError(msg)
        if event.originator_version != self.version + 1:
            msg = (
                f"Event version {event.originator_version} is not the next "
                f"version after {self.version}"
            )
            raise ValueError(msg)
        declared = _declared_event(event)
        declared.mutate(self)  # type: ignore[attr-defined]
        self._pending_events.append(declared)

    def clear_domain_events(self) -> None:
        """Drop all pending events. Call only after publication."""
        self._pending_events.clear()

    def uncommitted_events(self) -> list[DomainEvent]:
        """Pending events that have not been persisted yet."""
        committed = getattr(self, "_committed_version", 0)
        return [e for e in self._pending_events if e.originator_version > committed]

    def mark_events_committed(self) -> None:
        """Record that every pending event is now persisted."""
        if self._pending_events:
            self._committed_version = self._pending_events[-1].originator_version


def _declared_event(event: DomainEvent) -> DomainEvent:
    """Re-type ``event`` as the class its @event mutator was declared on.

    Aggregate subclasses redefine inherited event classes under the same
    name (``User.Updated`` for ``BaseAggregate.Updated``), but the mutator is
    registered only for the declaring class.
    """
    event_type = type(event)
    same_name = [
        cls
        for cls in event_type.__mro__
        if cls.__name__ == event_type.__name__
        and not cls.__module__.startswith("eventsourcing")
    ]
    declared = same_name[-1] if same_name else event_type
    if declared is event_type:
        return event
    return declared(**vars(event))


def _now(now: datetime | None) -> datetime:
    return now if now is not None else datetime.now(tz=UTC)


def _since(stamp: datetime | None, now: datetime | None) -> timedelta | None:
    if stamp is None:
        return None
    return _now(now) - stamp
