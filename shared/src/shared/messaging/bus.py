"""
Message bus port.

Contract expected from any transport:

- Subjects are dot-separated tokens; subscriptions accept ``*`` (one
  token) and ``>`` (one or more trailing tokens) wildcards.
- Delivery is at-least-once; handlers must tolerate duplicates.
- Subscribers sharing a queue group receive each message exactly once
  between them.
- A connection never receives its own publications (no-echo).
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Protocol


@dataclass(frozen=True)
class BusMessage:
    """
    Message delivered by the bus.

    Attributes:
        subject: Subject the message was published on
        data: Raw payload
        reply: Reply subject, when the sender expects an answer
    """

    subject: str
    data: bytes
    reply: Optional[str] = None


MessageHandler = Callable[[BusMessage], Awaitable[None]]

# Called with the last transport error when a connection closes for good
ClosedCallback = Callable[[Optional[Exception]], Awaitable[None]]


class BusSubscription(Protocol):
    """Handle returned by ``MessageBus.subscribe``."""

    subject: str

    async def unsubscribe(self) -> None:
        ...


class MessageBus(Protocol):
    """Publish/subscribe transport used by the issuer and the chat client."""

    on_closed: Optional[ClosedCallback]

    @property
    def is_connected(self) -> bool:
        ...

    async def connect(self) -> None:
        ...

    async def publish(self, subject: str, data: bytes) -> None:
        ...

    async def subscribe(
        self,
        subject: str,
        handler: MessageHandler,
        queue: Optional[str] = None,
    ) -> BusSubscription:
        ...

    async def request(
        self, subject: str, data: bytes, timeout: float = 2.0
    ) -> BusMessage:
        ...

    async def drain(self) -> None:
        ...

    async def close(self) -> None:
        ...


class BusError(Exception):
    """Base exception for transport errors."""

    pass


class BusNotConnectedError(BusError):
    """Raised when an operation needs a connection that is not open."""

    pass


class BusRequestTimeoutError(BusError):
    """Raised when a request gets no reply in time."""

    def __init__(self, subject: str, timeout: float):
        """
        Initialize BusRequestTimeoutError.

        Args:
            subject: Request subject
            timeout: Timeout that elapsed (seconds)
        """
        super().__init__(f"No reply on {subject} within {timeout}s")
        self.subject = subject
        self.timeout = timeout


class BusConnectionError(BusError):
    """Raised when no server could be reached."""

    pass
