"""
Peer entity - one participant seen on the presence subject.
"""

from enum import Enum
from typing import List, Optional

from shared.identity import BaseClaims


class PresenceStatus(str, Enum):
    """Presence of a peer derived from its heartbeats."""

    FRESH = "fresh"  # Last heartbeat not yet expired
    STALE = "stale"  # Last heartbeat expired, waiting for a refresh


class PeerRecord:
    """
    Peer entity, one per public key.

    Attributes:
        public_key: Peer's user public key (identity)
        display_name: Locally resolved, collision-free name
        claim_name: Name the peer announced in its heartbeat
        position: Order in which the peer entered the directory
        last_seen: Time of the last accepted heartbeat (epoch seconds)
        expires_at: Expiry of the last heartbeat, None if it had none
        status: FRESH or STALE
        messages: Direct messages exchanged with the peer
        unread: Whether a DM arrived while the peer was not viewed
        is_self: Whether this record is the local user
    """

    def __init__(
        self,
        public_key: str,
        display_name: str,
        position: int,
        last_seen: float,
        claim_name: Optional[str] = None,
        expires_at: Optional[float] = None,
        is_self: bool = False,
    ):
        """
        Initialize PeerRecord.

        Args:
            public_key: Peer's user public key
            display_name: Resolved display name
            position: Directory position
            last_seen: Time of the first heartbeat
            claim_name: Announced name (defaults to display_name)
            expires_at: Heartbeat expiry
            is_self: Whether this is the local user
        """
        self.public_key: str = public_key
        self.display_name: str = display_name
        self.claim_name: str = claim_name if claim_name is not None else display_name
        self.position: int = position
        self.last_seen: float = last_seen
        self.expires_at: Optional[float] = expires_at
        self.status: PresenceStatus = PresenceStatus.FRESH
        self.messages: List[BaseClaims] = []
        self.unread: bool = False
        self.is_self: bool = is_self

    def refresh(self, seen_at: float, expires_at: Optional[float]) -> bool:
        """
        Record a new heartbeat.

        Returns:
            True if the peer was STALE and is FRESH again
        """
        revived = self.status == PresenceStatus.STALE
        self.last_seen = seen_at
        self.expires_at = expires_at
        self.status = PresenceStatus.FRESH
        return revived

    def is_expired(self, now: float) -> bool:
        """Check whether the last heartbeat has expired."""
        return self.expires_at is not None and self.expires_at < now

    def silent_for(self, now: float) -> float:
        """Seconds since the last heartbeat."""
        return max(0.0, now - self.last_seen)

    def mark_stale(self) -> None:
        self.status = PresenceStatus.STALE

    def append_message(self, claim: BaseClaims) -> None:
        self.messages.append(claim)

    def __eq__(self, other) -> bool:
        """Check equality based on public key."""
        if not isinstance(other, PeerRecord):
            return False
        return self.public_key == other.public_key

    def __hash__(self) -> int:
        """Hash based on public key."""
        return hash(self.public_key)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"PeerRecord(name={self.display_name}, "
            f"key={self.public_key[:8]}..., status={self.status.value})"
        )
