"""Persist-then-publish flow for aggregates with pending events.

The order is fixed: the aggregate is saved (version-checked), its pending
events are wrapped in envelopes and published, and only then is the
buffer cleared. If publishing fails the events stay queued on the
aggregate. They are already marked as persisted, so a retried commit
publishes them again without storing them twice (at-least-once).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, TypeVar

import structlog

from strata.foundation.domain.aggregates import BaseAggregate
from strata.foundation.domain.events import EventEnvelope

if TYPE_CHECKING:
    from strata.foundation.domain.ports.event_publisher import EventPublisherPort

logger = structlog.get_logger(__name__)

A = TypeVar("A", bound=BaseAggregate)


class SavingRepository(Protocol[A]):
    """Any repository that persists one aggregate type."""

    def save(self, aggregate: A) -> A: ...


class AggregateCommitter:
    """Saves aggregates and publishes their pending events.

    Args:
        publisher: Outbound event channel.
    """

    def __init__(self, publisher: EventPublisherPort) -> None:
        self._publisher = publisher

    def commit(self, repository: SavingRepository[A], aggregate: A) -> A:
        """Save ``aggregate``, publish its pending events, then clear them.

        Returns:
            The saved aggregate.

        Raises:
            ConcurrencyConflictError: If the store rejects the save. Nothing
                is published and the events stay queued.
            Exception: Any publisher failure propagates. The events stay
                queued for a retry.
        """
        saved = repository.save(aggregate)
        envelopes = [EventEnvelope.wrap(saved, event) for event in saved.domain_events]
        if not envelopes:
            return saved
        try:
            self._publisher.publish(envelopes)
        except Exception:
            logger.exception(
                "event_publish_failed",
                aggregate_type=type(saved).__name__,
                aggregate_id=str(saved.id),
                pending_events=len(envelopes),
            )
            raise
        saved.clear_domain_events()
        logger.info(
            "aggregate_committed",
            aggregate_type=type(saved).__name__,
            aggregate_id=str(saved.id),
            version=saved.version,
            event_types=[envelope.event_type for envelope in envelopes],
        )
        return saved

    def commit_all(self, repository: SavingRepository[A], *aggregates: A) -> list[A]:
        """Commit several aggregates of one type, in order."""
        return [self.commit(repository, aggregate) for aggregate in aggregates]
