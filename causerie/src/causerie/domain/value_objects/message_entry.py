"""
Message entry value object - one rendered line of a log.
"""

from dataclasses import dataclass
from datetime import datetime

NAME_COLUMN_WIDTH = 9


@dataclass(frozen=True)
class MessageEntry:
    """
    A channel post or DM as shown to the user.

    Attributes:
        sent_at: Issue time of the claim (epoch seconds)
        sender: Sender name resolved locally
        text: Message text
        token_id: Token id of the claim
    """

    sent_at: int
    sender: str
    text: str
    token_id: str = ""

    @property
    def time_label(self) -> str:
        """Local wall-clock time as HH:MM."""
        return datetime.fromtimestamp(self.sent_at).strftime("%H:%M")

    def render(self) -> str:
        """
        Format as ``HH:MM <name>    text``.

        Example:
            >>> MessageEntry(0, "sam", "hi").render()[5:]
            ' <sam>     hi'
        """
        sender = f"<{self.sender}>"
        return f"{self.time_label} {sender:<{NAME_COLUMN_WIDTH}} {self.text}"
