"""
Presence tracker - the peer directory built from heartbeat claims.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from causerie.domain.entities import PeerRecord, PresenceStatus
from causerie.domain.services.identity_resolver import IdentityResolver
from shared.identity import HeartbeatClaim


@dataclass(frozen=True)
class PresenceUpdate:
    """
    Outcome of one heartbeat.

    Attributes:
        public_key: Sender key
        display_name: Sender's resolved name
        is_new: The key was not in the directory before
        reannounce: Our own heartbeat should go out now
        revived: The peer was STALE and is FRESH again
    """

    public_key: str
    display_name: str
    is_new: bool = False
    reannounce: bool = False
    revived: bool = False


@dataclass(frozen=True)
class SweepResult:
    """Peers that went stale or were evicted during a sweep."""

    stale: List[str] = field(default_factory=list)
    evicted: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.stale or self.evicted)


class PresenceTracker:
    """
    Directory of peers keyed by public key.

    Every record's name comes from the IdentityResolver, so there is at
    most one record per key and per display name. Not thread-safe;
    SessionState serialises access.
    """

    def __init__(
        self,
        resolver: IdentityResolver,
        eviction_seconds: Optional[float] = None,
    ):
        """
        Initialize PresenceTracker.

        Args:
            resolver: Name registry shared with the session
            eviction_seconds: Drop peers silent for longer (None = never)
        """
        self.resolver = resolver
        self.eviction_seconds = eviction_seconds
        self._peers: Dict[str, PeerRecord] = {}
        self._next_position = 0
        self._self_key: Optional[str] = None

    def _add(
        self,
        public_key: str,
        proposed: str,
        now: float,
        expires_at: Optional[float],
        is_self: bool = False,
    ) -> PeerRecord:
        display_name = self.resolver.resolve(public_key, proposed)
        record = PeerRecord(
            public_key=public_key,
            display_name=display_name,
            position=self._next_position,
            last_seen=now,
            claim_name=proposed,
            expires_at=expires_at,
            is_self=is_self,
        )
        self._next_position += 1
        self._peers[public_key] = record
        return record

    def register_self(
        self,
        public_key: str,
        name: str,
        now: float,
        expires_at: Optional[float] = None,
    ) -> PeerRecord:
        """
        Put the local user first in the directory so it owns its name.

        Returns:
            The local user's record
        """
        existing = self._peers.get(public_key)
        if existing is not None:
            return existing
        self._self_key = public_key
        return self._add(public_key, name, now, expires_at, is_self=True)

    def observe(self, claim: HeartbeatClaim, now: float) -> PresenceUpdate:
        """
        Apply a validated heartbeat.

        A key never seen before is added and triggers a re-announce so
        the newcomer learns about us before our next regular heartbeat.
        A known key carrying the newcomer tag restarted and triggers one
        too.

        Args:
            claim: Validated heartbeat (``iss`` is the sender)
            now: Reception time

        Returns:
            PresenceUpdate

        Raises:
            NameSpaceExhaustedError: If no display name is available
        """
        public_key = claim.iss
        record = self._peers.get(public_key)

        if record is None:
            record = self._add(public_key, claim.name, now, claim.exp)
            return PresenceUpdate(
                public_key=public_key,
                display_name=record.display_name,
                is_new=True,
                reannounce=True,
            )

        if record.is_self:
            return PresenceUpdate(public_key, record.display_name)

        revived = record.refresh(now, claim.exp)
        return PresenceUpdate(
            public_key=public_key,
            display_name=record.display_name,
            reannounce=claim.newcomer,
            revived=revived,
        )

    def sweep(self, now: float) -> SweepResult:
        """
        Age the directory.

        Peers whose heartbeat expired become STALE. When an eviction
        delay is configured, peers silent for longer are removed along
        with their name binding and DM log. The local user is never
        aged.

        Returns:
            Names of peers that went stale and peers that were evicted
        """
        stale: List[str] = []
        evicted: List[str] = []

        for record in list(self._peers.values()):
            if record.is_self:
                continue

            if (
                self.eviction_seconds is not None
                and record.silent_for(now) > self.eviction_seconds
            ):
                self.remove(record.public_key)
                evicted.append(record.display_name)
                continue

            if record.status == PresenceStatus.FRESH and record.is_expired(now):
                record.mark_stale()
                stale.append(record.display_name)

        return SweepResult(stale=stale, evicted=evicted)

    def remove(self, public_key: str) -> Optional[PeerRecord]:
        """Drop a peer and release its name."""
        record = self._peers.pop(public_key, None)
        if record is not None:
            self.resolver.release(public_key)
        return record

    def get(self, public_key: str) -> Optional[PeerRecord]:
        return self._peers.get(public_key)

    def by_display_name(self, display_name: str) -> Optional[PeerRecord]:
        public_key = self.resolver.public_key_for(display_name)
        if public_key is None:
            return None
        return self._peers.get(public_key)

    @property
    def self_record(self) -> Optional[PeerRecord]:
        if self._self_key is None:
            return None
        return self._peers.get(self._self_key)

    def peers(self) -> List[PeerRecord]:
        """All records in directory order."""
        return sorted(self._peers.values(), key=lambda p: p.position)

    def __contains__(self, public_key: str) -> bool:
        return public_key in self._peers

    def __len__(self) -> int:
        return len(self._peers)
