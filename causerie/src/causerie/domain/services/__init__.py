"""Domain services."""

from causerie.domain.services.identity_resolver import (
    MAX_COLLISION_ATTEMPTS,
    IdentityResolver,
)
from causerie.domain.services.presence_tracker import (
    PresenceTracker,
    PresenceUpdate,
    SweepResult,
)

__all__ = [
    "MAX_COLLISION_ATTEMPTS",
    "IdentityResolver",
    "PresenceTracker",
    "PresenceUpdate",
    "SweepResult",
]
