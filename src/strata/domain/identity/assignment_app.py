"""Application service for assignment aggregate persistence.

Tenant, organization and department assignments share one event store;
each assignment is its own aggregate stream.
"""

from __future__ import annotations

from typing import ClassVar
from uuid import UUID

from eventsourcing.application import Application

from strata.domain.identity.tenant_assignment import UserTenantAssignment


class UserAssignmentApplication(Application[UUID]):
    """Application service for assignment aggregate persistence.

    Attributes:
        snapshotting_intervals: Tenant assignments accumulate role changes,
            so they are snapshotted; the single-role assignments rarely
            exceed a handful of events.
    """

    snapshotting_intervals: ClassVar[dict[type, int]] = {UserTenantAssignment: 50}

