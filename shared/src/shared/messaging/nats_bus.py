"""
NATS adapter for the message bus port.
"""

import asyncio
from typing import List, Optional

import nats
import nkeys
from nats.aio.client import Client as NATS
from nats.aio.msg import Msg
from nats.errors import Error as NatsError
from nats.errors import NoRespondersError
from nats.errors import TimeoutError as NatsTimeoutError

from shared.messaging.bus import (
    BusConnectionError,
    BusMessage,
    BusNotConnectedError,
    BusRequestTimeoutError,
    ClosedCallback,
    MessageHandler,
)
from shared.reporter import SystemReporter
from shared.reporter.emojis import Emoji


class NatsSubscription:
    """Wrapper around a nats-py subscription."""

    def __init__(self, subject: str, subscription):
        self.subject = subject
        self._subscription = subscription

    async def unsubscribe(self) -> None:
        try:
            await self._subscription.unsubscribe()
        except NatsError as e:
            raise BusNotConnectedError(
                f"Could not unsubscribe from {self.subject}: {e}"
            ) from e


class NatsMessageBus:
    """
    Message bus backed by a NATS server.

    The connection never echoes our own publications and retries for
    ``reconnect_wait * max_reconnect_attempts`` seconds before giving up.
    A definitive close is reported through ``on_closed``.

    Attributes:
        servers: Server URLs
        credentials_file: Optional credentials document used to authenticate
    """

    def __init__(
        self,
        servers: str,
        credentials_file: Optional[str] = None,
        name: str = "causerie",
        reconnect_wait: float = 1.0,
        reconnect_total: float = 600.0,
        reporter: Optional[SystemReporter] = None,
        on_closed: Optional[ClosedCallback] = None,
    ):
        """
        Initialize NatsMessageBus.

        Args:
            servers: Comma-separated server URLs
            credentials_file: Path to a credentials document
            name: Connection name reported to the server
            reconnect_wait: Seconds between reconnect attempts
            reconnect_total: Total seconds to keep reconnecting
            reporter: Optional SystemReporter for logging
            on_closed: Coroutine called once the connection is closed for good
        """
        self.servers: List[str] = [s.strip() for s in servers.split(",") if s.strip()]
        self.credentials_file = credentials_file
        self.name = name
        self.reconnect_wait = reconnect_wait
        self.max_reconnect_attempts = max(1, int(reconnect_total / reconnect_wait))
        self.reporter = reporter
        self.on_closed = on_closed

        self._nc: Optional[NATS] = None
        self._closing = False

    @property
    def is_connected(self) -> bool:
        return self._nc is not None and self._nc.is_connected

    def _log(self, level: str, msg: str) -> None:
        if self.reporter:
            getattr(self.reporter, level)(msg, context="NatsMessageBus")

    async def connect(self) -> None:
        """
        Open the connection.

        Raises:
            BusConnectionError: If no server is reachable
        """
        options = {
            "servers": self.servers,
            "name": self.name,
            "no_echo": True,
            "reconnect_time_wait": self.reconnect_wait,
            "max_reconnect_attempts": self.max_reconnect_attempts,
            "error_cb": self._on_error,
            "disconnected_cb": self._on_disconnected,
            "reconnected_cb": self._on_reconnected,
            "closed_cb": self._on_closed,
        }
        if self.credentials_file:
            options["user_credentials"] = self.credentials_file

        self._log("info", f"{Emoji.NETWORK.CONNECTING} Connecting to {self.servers}")
        try:
            self._nc = await nats.connect(**options)
        except (NatsError, OSError, asyncio.TimeoutError) as e:
            raise BusConnectionError(f"Could not connect to {self.servers}: {e}") from e
        except nkeys.NkeysError as e:
            raise BusConnectionError(
                f"Could not sign in with {self.credentials_file}: {e}"
            ) from e
        self._log(
            "info",
            f"{Emoji.NETWORK.CONNECTED} Connected to {self._nc.connected_url.netloc}",
        )

    def _require_connection(self) -> NATS:
        if self._nc is None or self._nc.is_closed:
            raise BusNotConnectedError("NATS connection is not open")
        return self._nc

    async def publish(self, subject: str, data: bytes) -> None:
        nc = self._require_connection()
        await nc.publish(subject, data)

    async def subscribe(
        self,
        subject: str,
        handler: MessageHandler,
        queue: Optional[str] = None,
    ) -> NatsSubscription:
        """
        Subscribe a handler to a subject (optionally in a queue group).

        Args:
            subject: Subject or wildcard
            handler: Coroutine receiving BusMessage
            queue: Queue group name

        Returns:
            Subscription handle
        """
        nc = self._require_connection()

        async def _callback(msg: Msg) -> None:
            await handler(BusMessage(msg.subject, msg.data, msg.reply or None))

        subscription = await nc.subscribe(subject, queue=queue or "", cb=_callback)
        self._log(
            "debug",
            f"{Emoji.NETWORK.SUBSCRIPTION} Subscribed to {subject}"
            + (f" (queue {queue})" if queue else ""),
        )
        return NatsSubscription(subject, subscription)

    async def request(
        self, subject: str, data: bytes, timeout: float = 2.0
    ) -> BusMessage:
        """
        Publish a request and wait for the first reply.

        Raises:
            BusRequestTimeoutError: If nobody answers in time
        """
        nc = self._require_connection()
        try:
            msg = await nc.request(subject, data, timeout=timeout)
        except (NatsTimeoutError, NoRespondersError):
            raise BusRequestTimeoutError(subject, timeout)
        return BusMessage(msg.subject, msg.data, msg.reply or None)

    async def drain(self) -> None:
        """Stop receiving, let in-flight handlers finish, then close."""
        if self._nc is None or self._nc.is_closed:
            return
        self._closing = True
        self._log("info", f"{Emoji.NETWORK.DRAIN} Draining connection")
        await self._nc.drain()

    async def close(self) -> None:
        if self._nc is None or self._nc.is_closed:
            return
        self._closing = True
        await self._nc.close()

    # ============================================================
    # Connection callbacks
    # ============================================================

    async def _on_error(self, e: Exception) -> None:
        self._log("warning", f"{Emoji.ERROR.WARNING} NATS error: {e}")

    async def _on_disconnected(self) -> None:
        self._log("warning", f"{Emoji.NETWORK.DISCONNECTED} Disconnected")

    async def _on_reconnected(self) -> None:
        url = self._nc.connected_url.netloc if self._nc else "?"
        self._log("info", f"{Emoji.NETWORK.RECONNECTING} Reconnected to {url}")

    async def _on_closed(self) -> None:
        last_error = self._nc.last_error if self._nc else None
        if self._closing:
            self._log("info", f"{Emoji.NETWORK.CLOSED} Connection closed")
        else:
            self._log(
                "critical",
                f"{Emoji.NETWORK.CLOSED} Connection closed: {last_error}",
            )
        if self.on_closed and not self._closing:
            await self.on_closed(last_error)
