"""Publication envelope for domain events.

Aggregate events are generated by the ``@event`` decorator as inner
classes (e.g. ``User.Activated``). Before they leave the process they are
wrapped in an :class:`EventEnvelope` keyed by ``event_type``,
``aggregate_id``, ``occurred_at`` and ``event_version``.

Event Schema Evolution Strategy:
    Events are immutable once persisted. Adding optional parameters with
    defaults to ``_apply_*`` mutators is the safest evolution strategy;
    renaming or removing fields requires a transcoder upcaster registered
    through the application's ``env["TRANSCODER_TOPIC"]``. Bump
    ``EVENT_SCHEMA_VERSION`` when the envelope payload shape changes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any
from uuid import UUID

if TYPE_CHECKING:
    from eventsourcing.domain import DomainEvent

    from strata.foundation.domain.aggregates import BaseAggregate

__all__ = ["EVENT_SCHEMA_VERSION", "EventEnvelope"]

EVENT_SCHEMA_VERSION = 1

_STANDARD_FIELDS = frozenset(
    {"originator_id", "originator_version", "originator_topic", "timestamp"}
)

# Credential material never leaves the event store.
_WITHHELD_FIELDS = frozenset({"password_hash"})


@dataclass(frozen=True, kw_only=True)
class EventEnvelope:
    """Transport form of a single domain event.

    Attributes:
        event_type: Aggregate class name plus event name, e.g. ``UserActivated``.
        aggregate_id: Originating aggregate UUID.
        aggregate_type: Originating aggregate class name.
        aggregate_version: Aggregate version after the event was applied.
        occurred_at: Event timestamp (UTC).
        event_version: Envelope schema version.
        tenant_id: Owning tenant of the aggregate.
        payload: Event-specific fields.
    """

    event_type: str
    aggregate_id: UUID
    aggregate_type: str
    aggregate_version: int
    occurred_at: datetime
    tenant_id: UUID | None = None
    event_version: int = EVENT_SCHEMA_VERSION
    payload: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def wrap(cls, aggregate: BaseAggregate, domain_event: DomainEvent) -> EventEnvelope:
        """Build an envelope for an event emitted by ``aggregate``."""
        aggregate_type = type(aggregate).__name__
        payload = {
            key: value
            for key, value in vars(domain_event).items()
            if key not in _STANDARD_FIELDS and key not in _WITHHELD_FIELDS
        }
        return cls(
            event_type=f"{aggregate_type}{type(domain_event).__name__}",
            aggregate_id=domain_event.originator_id,
            aggregate_type=aggregate_type,
            aggregate_version=domain_event.originator_version,
            occurred_at=domain_event.timestamp,
            tenant_id=aggregate.tenant_id,
            payload=payload,
        )

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly representation (UUIDs and datetimes as strings)."""
        return {
            "event_type": self.event_type,
            "aggregate_id": str(self.aggregate_id),
            "aggregate_type": self.aggregate_type,
            "aggregate_version": self.aggregate_version,
            "occurred_at": self.occurred_at.isoformat(),
            "event_version": self.event_version,
            "tenant_id": str(self.tenant_id) if self.tenant_id else None,
            "payload": {key: _plain(value) for key, value in self.payload.items()},
        }


def _plain(value: Any) -> Any:
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, list | tuple):
        return [_plain(item) for item in value]
    return value
