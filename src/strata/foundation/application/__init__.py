"""Strata Foundation Application -- commit flow and in-process event channel."""

from strata.foundation.application.commit import AggregateCommitter, SavingRepository
from strata.foundation.application.publisher import InMemoryEventPublisher

__all__ = [
    "AggregateCommitter",
    "InMemoryEventPublisher",
    "SavingRepository",
]
