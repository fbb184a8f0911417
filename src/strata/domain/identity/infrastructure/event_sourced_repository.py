"""Shared persistence for event-sourced aggregates.

Aggregates keep their pending events until the caller clears them after
publication, so the repository stores only the events that are not yet
persisted (``uncommitted_events()``) and then marks them committed. The
event store rejects a second event at an existing version, which is
reported as ``ConcurrencyConflictError``.

Scope finders and uniqueness checks are served from an in-process index.
The index is rebuilt from the notification log when the repository is
constructed, so aggregates stored by earlier processes are found, and is
updated on every successful save.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, ClassVar, Generic, TypeVar
from uuid import UUID

from eventsourcing.application import AggregateNotFoundError
from eventsourcing.persistence import IntegrityError

from strata.foundation.domain.aggregates import BaseAggregate
from strata.foundation.domain.exceptions import ConcurrencyConflictError, NotFoundError

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from eventsourcing.application import Application
    from eventsourcing.domain import DomainEvent

logger = logging.getLogger(__name__)

A = TypeVar("A", bound=BaseAggregate)
R = TypeVar("R")


class EventSourcedRepository(Generic[A, R]):
    """Version-checked persistence of one aggregate type.

    Subclasses set ``aggregate_type`` and implement ``_row`` to project an
    aggregate onto the index row used by their finders.

    Args:
        app: eventsourcing Application holding the event store.
    """

    aggregate_type: ClassVar[type[BaseAggregate]]
    rebuild_page_size: ClassVar[int] = 500

    def __init__(self, app: Application[UUID]) -> None:
        self._app = app
        self._lock = threading.Lock()
        self._rows: dict[UUID, R] = {}
        self._rebuild_index()

    def _row(self, aggregate: A) -> R:
        raise NotImplementedError

    # -- Persistence --------------------------------------------------------------

    def _get(self, aggregate_id: UUID) -> A | None:
        try:
            aggregate = self._app.repository.get(aggregate_id)
        except AggregateNotFoundError:
            return None
        if not isinstance(aggregate, self.aggregate_type):
            return None
        return aggregate  # type: ignore[return-value]

    def _require(self, aggregate_id: UUID) -> A:
        aggregate = self._get(aggregate_id)
        if aggregate is None:
            raise NotFoundError(self.aggregate_type.__name__, aggregate_id)
        return aggregate

    def _save(self, aggregate: A) -> A:
        events = aggregate.uncommitted_events()
        if not events:
            return aggregate
        expected_version = events[0].originator_version - 1
        try:
            self._app.save(*events)
        except IntegrityError as err:
            logger.warning(
                "aggregate_version_conflict",
                extra={
                    "aggregate_type": type(aggregate).__name__,
                    "aggregate_id": str(aggregate.id),
                    "expected_version": expected_version,
                },
            )
            raise ConcurrencyConflictError(
                type(aggregate).__name__, aggregate.id, expected_version
            ) from err
        aggregate.mark_events_committed()
        self._maybe_snapshot(aggregate, events)
        with self._lock:
            self._rows[aggregate.id] = self._row(aggregate)
        logger.debug(
            "aggregate_saved",
            extra={
                "aggregate_type": type(aggregate).__name__,
                "aggregate_id": str(aggregate.id),
                "version": aggregate.version,
                "event_count": len(events),
            },
        )
        return aggregate

    def _delete(self, aggregate_id: UUID) -> bool:
        aggregate = self._get(aggregate_id)
        if aggregate is None:
            return False
        aggregate.soft_delete()
        self._save(aggregate)
        return True

    def _maybe_snapshot(self, aggregate: A, events: Sequence[DomainEvent]) -> None:
        interval = (self._app.snapshotting_intervals or {}).get(type(aggregate))
        if not interval:
            return
        if any(e.originator_version % interval == 0 for e in events):
            self._app.take_snapshot(aggregate.id, version=aggregate.version)
            logger.info(
                "aggregate_snapshot_taken",
                extra={
                    "aggregate_type": type(aggregate).__name__,
                    "aggregate_id": str(aggregate.id),
                    "version": aggregate.version,
                },
            )

    # -- Index --------------------------------------------------------------------

    def _rebuild_index(self) -> None:
        """Index every stored aggregate of ``aggregate_type``.

        Creation events (version 1) in the notification log identify the
        stored aggregates; each is loaded once to project its row.
        """
        created: list[UUID] = []
        start = 1
        while True:
            page = self._app.notification_log.select(start, self.rebuild_page_size)
            created.extend(n.originator_id for n in page if n.originator_version == 1)
            if len(page) < self.rebuild_page_size:
                break
            start = page[-1].id + 1
        rows: dict[UUID, R] = {}
        for aggregate_id in created:
            aggregate = self._get(aggregate_id)
            if aggregate is not None:
                rows[aggregate.id] = self._row(aggregate)
        with self._lock:
            self._rows.update(rows)
        logger.info(
            "repository_index_rebuilt",
            extra={
                "aggregate_type": self.aggregate_type.__name__,
                "indexed": len(rows),
            },
        )

    def _matching(self, predicate: Callable[[R], bool]) -> list[A]:
        """Load every indexed aggregate whose row satisfies ``predicate``."""
        with self._lock:
            ids = [aggregate_id for aggregate_id, row in self._rows.items() if predicate(row)]
        loaded = (self._get(aggregate_id) for aggregate_id in ids)
        return [aggregate for aggregate in loaded if aggregate is not None]

    def _any(self, predicate: Callable[[R], bool]) -> bool:
        with self._lock:
            return any(predicate(row) for row in self._rows.values())
