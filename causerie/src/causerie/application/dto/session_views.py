"""
Results handed from the session to the presentation layer.

Everything here is a snapshot taken under the session lock; the view
never touches live session data.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from causerie.domain.entities import PresenceStatus
from causerie.domain.value_objects import MessageEntry, Selection
from shared.identity import ChannelPostClaim, DirectMessageClaim


class DeliveryStatus(str, Enum):
    """What happened to an incoming post or DM."""

    ACCEPTED = "accepted"
    DUPLICATE = "duplicate"
    UNKNOWN_CHANNEL = "unknown_channel"
    UNKNOWN_SENDER = "unknown_sender"
    MISROUTED = "misrouted"


@dataclass(frozen=True)
class Delivery:
    """
    Outcome of an incoming post or DM.

    Attributes:
        status: Accepted or why it was dropped
        entry: Rendered entry when accepted
        visible: The entry belongs to the current view
        peer_name: DM sender's display name
        unread: The DM set the sender's unread flag
    """

    status: DeliveryStatus
    entry: Optional[MessageEntry] = None
    visible: bool = False
    peer_name: Optional[str] = None
    unread: bool = False

    @property
    def accepted(self) -> bool:
        return self.status == DeliveryStatus.ACCEPTED


@dataclass(frozen=True)
class ViewSnapshot:
    """A selected view and a copy of its log."""

    selection: Selection
    entries: List[MessageEntry] = field(default_factory=list)


@dataclass(frozen=True)
class DirectoryEntry:
    """One line of the peer list."""

    display_name: str
    status: PresenceStatus
    unread: bool = False
    is_self: bool = False


@dataclass(frozen=True)
class DirectoryListing:
    """Channels, peers in directory order and the current selection."""

    channels: List[str]
    peers: List[DirectoryEntry]
    selection: Optional[Selection] = None


@dataclass(frozen=True)
class SentPost:
    """A claim we signed and published."""

    claim: Union[ChannelPostClaim, DirectMessageClaim]
    entry: MessageEntry
    subject: str
