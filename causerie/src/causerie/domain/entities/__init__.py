"""Domain entities."""

from causerie.domain.entities.local_identity import LocalIdentity
from causerie.domain.entities.peer import PeerRecord, PresenceStatus

__all__ = ["LocalIdentity", "PeerRecord", "PresenceStatus"]
