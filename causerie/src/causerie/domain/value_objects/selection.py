"""
Selection value object - what the user is currently looking at.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ViewKind(str, Enum):
    """Kind of view."""

    CHANNEL = "channel"
    DIRECT = "direct"


@dataclass(frozen=True)
class Selection:
    """
    Current view: a channel or a peer's DM log.

    Attributes:
        kind: CHANNEL or DIRECT
        name: Channel name or peer display name
        public_key: Peer public key (DIRECT only)
    """

    kind: ViewKind
    name: str
    public_key: Optional[str] = None

    @classmethod
    def channel(cls, name: str) -> "Selection":
        return cls(ViewKind.CHANNEL, name)

    @classmethod
    def direct(cls, name: str, public_key: str) -> "Selection":
        return cls(ViewKind.DIRECT, name, public_key)

    def is_channel(self, name: Optional[str] = None) -> bool:
        """Whether this selects a channel (a specific one if name is given)."""
        if self.kind != ViewKind.CHANNEL:
            return False
        return name is None or self.name == name

    def is_peer(self, public_key: Optional[str] = None) -> bool:
        """Whether this selects a peer (a specific one if key is given)."""
        if self.kind != ViewKind.DIRECT:
            return False
        return public_key is None or self.public_key == public_key

    def __str__(self) -> str:
        return f"#{self.name}" if self.kind == ViewKind.CHANNEL else f"@{self.name}"
