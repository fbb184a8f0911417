"""Port interface for publishing domain events.

Events are published in batches of :class:`EventEnvelope` after the
originating aggregate has been persisted. Delivery is at-least-once:
a batch may be published again if the caller retries after a failure.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from strata.foundation.domain.events import EventEnvelope


@runtime_checkable
class EventPublisherPort(Protocol):
    """Port for the outbound event channel."""

    def publish(self, envelopes: Sequence[EventEnvelope]) -> None:
        """Publish a batch of envelopes in order.

        Raises:
            Exception: Any transport failure propagates to the caller so
                that pending events stay queued on the aggregate.
        """
        ...
