"""
Session state - everything one chat client knows.

One object, one lock. Bus callbacks and the console input thread take
``lock`` for every read and write; the view is only ever handed
snapshots built under it.
"""

import threading
import time
from typing import Callable, Dict, Iterable, List, Optional

from causerie.application.dto import DirectoryEntry
from causerie.domain.entities import LocalIdentity, PeerRecord
from causerie.domain.exceptions import UnknownChannelError, UnknownPeerError
from causerie.domain.services import PresenceTracker
from causerie.domain.value_objects import MessageEntry, Selection
from causerie.infrastructure.dedup import SeenTokenSet
from shared.identity import BaseClaims


class SessionState:
    """
    In-memory chat session.

    Holds the local identity, the peer directory, one append-only log
    per configured channel, the seen-token set and the current
    selection. Methods other than the constructor expect the caller to
    hold ``lock``.

    Attributes:
        lock: Guards every field below
        identity: Local identity
        tracker: Peer directory (owns the name registry)
        seen_tokens: Token ids already accepted
        dedup_direct_messages: Apply replay protection to DMs
        selection: Current view, None before the first selection
    """

    def __init__(
        self,
        identity: LocalIdentity,
        channels: Iterable[str],
        tracker: PresenceTracker,
        seen_tokens: SeenTokenSet,
        dedup_direct_messages: bool = True,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize SessionState and register the local user.

        Args:
            identity: Local identity
            channels: Fixed channel list, in display order
            tracker: Peer directory
            seen_tokens: Seen-token set
            dedup_direct_messages: Apply replay protection to DMs
            clock: Time source (epoch seconds)
        """
        self.lock = threading.Lock()
        self.identity = identity
        self.tracker = tracker
        self.seen_tokens = seen_tokens
        self.dedup_direct_messages = dedup_direct_messages
        self.selection: Optional[Selection] = None
        self._channels: Dict[str, List[BaseClaims]] = {name: [] for name in channels}

        with self.lock:
            self.tracker.register_self(
                identity.public_key,
                identity.display_name,
                now=clock(),
                expires_at=identity.expires_at,
            )

    # ================================================================
    # Channels
    # ================================================================

    @property
    def channel_names(self) -> List[str]:
        return list(self._channels)

    def has_channel(self, name: str) -> bool:
        return name in self._channels

    def channel_log(self, name: str) -> List[BaseClaims]:
        """
        Live log of a channel.

        Raises:
            UnknownChannelError: If the channel is not configured
        """
        log = self._channels.get(name)
        if log is None:
            raise UnknownChannelError(name)
        return log

    def append_post(self, claim: BaseClaims) -> None:
        self.channel_log(claim.sub).append(claim)

    # ================================================================
    # Peers
    # ================================================================

    @property
    def self_record(self) -> PeerRecord:
        return self.tracker.self_record

    def peer(self, public_key: str) -> Optional[PeerRecord]:
        return self.tracker.get(public_key)

    def peer_by_name(self, display_name: str) -> PeerRecord:
        """
        Raises:
            UnknownPeerError: If no peer has this display name
        """
        record = self.tracker.by_display_name(display_name)
        if record is None:
            raise UnknownPeerError(display_name)
        return record

    def directory(self) -> List[DirectoryEntry]:
        return [
            DirectoryEntry(
                display_name=p.display_name,
                status=p.status,
                unread=p.unread,
                is_self=p.is_self,
            )
            for p in self.tracker.peers()
        ]

    # ================================================================
    # Rendering
    # ================================================================

    def entry_for(self, claim: BaseClaims) -> MessageEntry:
        """Render a post or DM with the sender's local name."""
        sender = self.tracker.resolver.lookup_display_name(claim.iss, claim.name)
        return MessageEntry(
            sent_at=claim.iat,
            sender=sender,
            text=getattr(claim, "msg", ""),
            token_id=claim.jti,
        )

    def entries_for(self, claims: Iterable[BaseClaims]) -> List[MessageEntry]:
        return [self.entry_for(c) for c in claims]
