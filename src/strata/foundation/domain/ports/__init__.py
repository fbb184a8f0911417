"""Domain port interfaces for hexagonal architecture.

Ports define abstract interfaces that the domain layer uses to interact
with external services. Implementations (adapters) live in infrastructure.
"""

from strata.foundation.domain.ports.event_publisher import EventPublisherPort
from strata.foundation.domain.ports.password_hasher import PasswordHasherPort

__all__ = ["EventPublisherPort", "PasswordHasherPort"]
