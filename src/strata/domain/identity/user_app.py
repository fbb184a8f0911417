"""Application service for User aggregate persistence.

Created once per process and shared by the user repository. Pass
``env=EventSourcingSettings().to_env_dict()`` to select the backend.
"""

from __future__ import annotations

from typing import ClassVar
from uuid import UUID

from eventsourcing.application import Application

from strata.domain.identity.user import User


class UserApplication(Application[UUID]):
    """Application service for User aggregate persistence.

    Attributes:
        snapshotting_intervals: Snapshot every 50 events for User.
    """

    snapshotting_intervals: ClassVar[dict[type, int]] = {User: 50}
