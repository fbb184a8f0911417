"""In-process implementation of EventPublisherPort."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from strata.foundation.domain.events import EventEnvelope


class InMemoryEventPublisher:
    """Records published envelopes and fans them out to subscribers.

    Subscribers are called synchronously in registration order. A failing
    subscriber propagates its exception to the publisher's caller; the
    envelopes delivered before the failure stay recorded.

    Example:
        >>> publisher = InMemoryEventPublisher()
        >>> seen = []
        >>> publisher.subscribe(seen.append)
        >>> publisher.published
        ()
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._published: list[EventEnvelope] = []
        self._subscribers: list[Callable[[EventEnvelope], None]] = []

    def subscribe(self, handler: Callable[[EventEnvelope], None]) -> None:
        with self._lock:
            self._subscribers.append(handler)

    def publish(self, envelopes: Sequence[EventEnvelope]) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        for envelope in envelopes:
            with self._lock:
                self._published.append(envelope)
            for handler in subscribers:
                handler(envelope)

    @property
    def published(self) -> tuple[EventEnvelope, ...]:
        with self._lock:
            return tuple(self._published)

    def event_types(self) -> list[str]:
        """Published ``event_type`` values in publication order."""
        return [envelope.event_type for envelope in self.published]

    def clear(self) -> None:
        with self._lock:
            self._published.clear()
