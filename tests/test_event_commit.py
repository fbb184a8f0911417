"""Tests for event envelopes, the in-memory publisher and the commit flow."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

import pytest

from strata.domain.identity.user import User
from strata.foundation.application import AggregateCommitter, InMemoryEventPublisher
from strata.foundation.domain.events import EVENT_SCHEMA_VERSION, EventEnvelope
from strata.foundation.domain.exceptions import ConcurrencyConflictError
from strata.foundation.domain.identifiers import TenantId
from strata.foundation.domain.ports import EventPublisherPort

if TYPE_CHECKING:
    from collections.abc import Sequence

    from strata.domain.identity.infrastructure import EventSourcedUserRepository


class FailingPublisher:
    """Publisher whose transport is down until ``recover()``."""

    def __init__(self) -> None:
        self.available = False
        self.batches: list[list[EventEnvelope]] = []

    def recover(self) -> None:
        self.available = True

    def publish(self, envelopes: Sequence[EventEnvelope]) -> None:
        if not self.available:
            raise ConnectionError("broker unavailable")
        self.batches.append(list(envelopes))


@pytest.mark.unit
class TestEventEnvelope:
    def test_wraps_creation_event(self, user: User) -> None:
        envelope = EventEnvelope.wrap(user, user.domain_events[0])
        assert envelope.event_type == "UserRegistered"
        assert envelope.aggregate_type == "User"
        assert envelope.aggregate_id == user.id
        assert envelope.aggregate_version == 1
        assert envelope.tenant_id == user.tenant_id
        assert envelope.event_version == EVENT_SCHEMA_VERSION == 1
        assert envelope.occurred_at == user.created_at
        assert envelope.payload["username"] == "john_doe"

    def test_payload_withholds_password_hash(self, user: User) -> None:
        envelope = EventEnvelope.wrap(user, user.domain_events[0])
        assert "password_hash" not in envelope.payload
        assert "originator_id" not in envelope.payload
        assert "timestamp" not in envelope.payload

    def test_to_dict_is_json_friendly(self, active_user: User) -> None:
        data = EventEnvelope.wrap(active_user, active_user.domain_events[-1]).to_dict()
        assert data["event_type"] == "UserActivated"
        assert data["aggregate_id"] == str(active_user.id)
        assert isinstance(data["occurred_at"], str)
        assert data["tenant_id"] == str(active_user.tenant_id)
        assert data["payload"] == {"updated_by": None}

    def test_envelope_is_immutable(self, user: User) -> None:
        envelope = EventEnvelope.wrap(user, user.domain_events[0])
        with pytest.raises(AttributeError):
            envelope.event_type = "Other"  # type: ignore[misc]


@pytest.mark.unit
class TestInMemoryEventPublisher:
    def test_implements_port(self) -> None:
        assert isinstance(InMemoryEventPublisher(), EventPublisherPort)

    def test_records_and_fans_out(self, active_user: User) -> None:
        publisher = InMemoryEventPublisher()
        received: list[EventEnvelope] = []
        publisher.subscribe(received.append)
        envelopes = [EventEnvelope.wrap(active_user, e) for e in active_user.domain_events]

        publisher.publish(envelopes)

        assert list(publisher.published) == envelopes
        assert received == envelopes
        assert publisher.event_types() == ["UserRegistered", "UserActivated"]

    def test_clear(self, user: User) -> None:
        publisher = InMemoryEventPublisher()
        publisher.publish([EventEnvelope.wrap(user, user.domain_events[0])])
        publisher.clear()
        assert publisher.published == ()


@pytest.mark.integration
class TestAggregateCommitter:
    def test_save_publish_clear(
        self, user_repository: EventSourcedUserRepository, active_user: User
    ) -> None:
        publisher = InMemoryEventPublisher()
        committer = AggregateCommitter(publisher)

        committed = committer.commit(user_repository, active_user)

        assert committed is active_user
        assert not active_user.has_domain_events
        assert publisher.event_types() == ["UserRegistered", "UserActivated"]
        loaded = user_repository.find_by_id(active_user.user_id)
        assert loaded is not None
        assert loaded.version == 2

    def test_nothing_pending_publishes_nothing(
        self, user_repository: EventSourcedUserRepository, user: User
    ) -> None:
        publisher = InMemoryEventPublisher()
        committer = AggregateCommitter(publisher)
        committer.commit(user_repository, user)
        committer.commit(user_repository, user)
        assert publisher.event_types() == ["UserRegistered"]

    def test_publish_failure_keeps_events_queued(
        self, user_repository: EventSourcedUserRepository, user: User
    ) -> None:
        publisher = FailingPublisher()
        committer = AggregateCommitter(publisher)

        with pytest.raises(ConnectionError):
            committer.commit(user_repository, user)
        assert user.domain_event_count == 1
        assert user_repository.find_by_id(user.user_id) is not None

        publisher.recover()
        committer.commit(user_repository, user)
        assert not user.has_domain_events
        assert [[e.event_type for e in batch] for batch in publisher.batches] == [
            ["UserRegistered"]
        ]
        loaded = user_repository.find_by_id(user.user_id)
        assert loaded is not None
        assert loaded.version == 1

    def test_concurrency_conflict_publishes_nothing(
        self,
        user_repository: EventSourcedUserRepository,
        user: User,
    ) -> None:
        publisher = InMemoryEventPublisher()
        committer = AggregateCommitter(publisher)
        committer.commit(user_repository, user)
        publisher.clear()

        stale = user_repository.find_by_id(user.user_id)
        assert stale is not None
        user.activate()
        committer.commit(user_repository, user)
        stale.disable("late")

        with pytest.raises(ConcurrencyConflictError):
            committer.commit(user_repository, stale)
        assert publisher.event_types() == ["UserActivated"]
        assert stale.has_domain_events

    def test_commit_all(self, user_repository: EventSourcedUserRepository) -> None:
        publisher = InMemoryEventPublisher()
        committer = AggregateCommitter(publisher)
        users = [
            User.create_system_user(
                tenant_id=TenantId.generate(), username=f"svc_{i}", email=f"svc{i}@x.io"
            )
            for i in range(3)
        ]
        committer.commit_all(user_repository, *users)
        assert len(publisher.published) == 3
        assert all(isinstance(e.aggregate_id, UUID) for e in publisher.published)
