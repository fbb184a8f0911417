"""Strata Infra Eventsourcing -- event store configuration."""

from strata.infra.eventsourcing.settings import (
    EventSourcingSettings,
    get_event_sourcing_settings,
)

__all__ = [
    "EventSourcingSettings",
    "get_event_sourcing_settings",
]
