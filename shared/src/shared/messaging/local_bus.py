"""
In-process message bus.

Follows the same contract as the NATS adapter (wildcards, queue groups,
no-echo, request/reply through inbox subjects) so services can run
against each other inside one event loop, in tests and demos.
"""

import asyncio
import itertools
import uuid
from typing import Dict, List, Optional, Tuple

from shared.identity.subjects import subject_matches
from shared.messaging.bus import (
    BusMessage,
    BusNotConnectedError,
    BusRequestTimeoutError,
    ClosedCallback,
    MessageHandler,
)
from shared.reporter import SystemReporter
from shared.reporter.emojis import Emoji

INBOX_PREFIX = "_INBOX."


class LocalSubscription:
    """Subscription registered on a LocalBroker."""

    def __init__(
        self,
        broker: "LocalBroker",
        owner: "LocalMessageBus",
        subject: str,
        handler: MessageHandler,
        queue: Optional[str],
    ):
        self.broker = broker
        self.owner = owner
        self.subject = subject
        self.handler = handler
        self.queue = queue

    async def unsubscribe(self) -> None:
        self.broker.remove(self)


class LocalBroker:
    """
    Routes messages between LocalMessageBus connections.

    Delivery is inline: ``publish`` returns once every matching handler
    has run. Handler failures are logged and do not reach the publisher.
    """

    def __init__(self, reporter: Optional[SystemReporter] = None):
        """
        Initialize LocalBroker.

        Args:
            reporter: Optional SystemReporter for logging
        """
        self.reporter = reporter
        self._subscriptions: List[LocalSubscription] = []
        self._queue_cursors: Dict[Tuple[str, str], itertools.count] = {}
        self.published: List[BusMessage] = []

    def add(self, subscription: LocalSubscription) -> None:
        self._subscriptions.append(subscription)

    def remove(self, subscription: LocalSubscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def remove_owner(self, owner: "LocalMessageBus") -> None:
        self._subscriptions = [s for s in self._subscriptions if s.owner is not owner]

    def subscribers(self, subject: str) -> List[LocalSubscription]:
        """List subscriptions whose pattern matches a subject."""
        return [s for s in self._subscriptions if subject_matches(s.subject, subject)]

    def _select_targets(
        self, sender: "LocalMessageBus", subject: str
    ) -> List[LocalSubscription]:
        plain: List[LocalSubscription] = []
        groups: Dict[Tuple[str, str], List[LocalSubscription]] = {}

        for sub in self.subscribers(subject):
            if sub.owner is sender and sender.no_echo:
                continue
            if sub.queue:
                groups.setdefault((sub.subject, sub.queue), []).append(sub)
            else:
                plain.append(sub)

        # One member per queue group, round robin
        for key, members in groups.items():
            cursor = self._queue_cursors.setdefault(key, itertools.count())
            plain.append(members[next(cursor) % len(members)])

        return plain

    async def route(self, sender: "LocalMessageBus", message: BusMessage) -> int:
        """
        Deliver a message to every matching subscription.

        Returns:
            Number of handlers the message was delivered to
        """
        self.published.append(message)
        targets = self._select_targets(sender, message.subject)

        for sub in targets:
            await sub.owner.dispatch(sub, message)

        return len(targets)

    async def sever(self, connection: "LocalMessageBus", error: Exception) -> None:
        """Close a connection from the server side (definitive close)."""
        await connection.force_close(error)

    def log_handler_error(self, subject: str, error: Exception) -> None:
        if self.reporter:
            self.reporter.error(
                f"{Emoji.ERROR.ERROR} Handler failed for {subject}: "
                f"{type(error).__name__}: {error}",
                context="LocalBroker",
            )


class LocalMessageBus:
    """
    Connection to a LocalBroker.

    Attributes:
        broker: Broker this connection is attached to
        name: Connection name
        no_echo: Whether our own publications are filtered out
    """

    def __init__(
        self,
        broker: LocalBroker,
        name: str = "local",
        no_echo: bool = True,
        on_closed: Optional[ClosedCallback] = None,
    ):
        """
        Initialize LocalMessageBus.

        Args:
            broker: Shared broker
            name: Connection name
            no_echo: Filter out our own publications
            on_closed: Coroutine called when the broker severs the connection
        """
        self.broker = broker
        self.name = name
        self.no_echo = no_echo
        self.on_closed = on_closed

        self._connected = False
        self._closed = False
        self._in_flight = 0
        self._idle = asyncio.Event()
        self._idle.set()

    @property
    def is_connected(self) -> bool:
        return self._connected and not self._closed

    async def connect(self) -> None:
        if self._closed:
            raise BusNotConnectedError(f"Connection {self.name} is closed")
        self._connected = True

    def _require_connection(self) -> None:
        if not self.is_connected:
            raise BusNotConnectedError(f"Connection {self.name} is not open")

    async def publish(self, subject: str, data: bytes) -> None:
        self._require_connection()
        await self.broker.route(self, BusMessage(subject, bytes(data)))

    async def publish_request(self, subject: str, data: bytes, reply: str) -> None:
        self._require_connection()
        await self.broker.route(self, BusMessage(subject, bytes(data), reply))

    async def subscribe(
        self,
        subject: str,
        handler: MessageHandler,
        queue: Optional[str] = None,
    ) -> LocalSubscription:
        self._require_connection()
        subscription = LocalSubscription(self.broker, self, subject, handler, queue)
        self.broker.add(subscription)
        return subscription

    async def request(
        self, subject: str, data: bytes, timeout: float = 2.0
    ) -> BusMessage:
        """
        Publish a request and wait for the first reply on a fresh inbox.

        Raises:
            BusRequestTimeoutError: If nobody answers in time
        """
        self._require_connection()
        inbox = f"{INBOX_PREFIX}{uuid.uuid4().hex}"
        future: asyncio.Future = asyncio.get_running_loop().create_future()

        async def _on_reply(msg: BusMessage) -> None:
            if not future.done():
                future.set_result(msg)

        subscription = await self.subscribe(inbox, _on_reply)
        try:
            await self.publish_request(subject, data, inbox)
            return await asyncio.wait_for(future, timeout)
        except asyncio.TimeoutError:
            raise BusRequestTimeoutError(subject, timeout)
        finally:
            await subscription.unsubscribe()

    async def dispatch(self, subscription: LocalSubscription, message: BusMessage) -> None:
        """Run a handler for a delivered message."""
        if self._closed:
            return

        self._in_flight += 1
        self._idle.clear()
        try:
            await subscription.handler(message)
        except Exception as e:
            self.broker.log_handler_error(message.subject, e)
        finally:
            self._in_flight -= 1
            if self._in_flight == 0:
                self._idle.set()

    async def drain(self) -> None:
        """Stop receiving, wait for running handlers, then close."""
        if self._closed:
            return
        self.broker.remove_owner(self)
        await self._idle.wait()
        await self.close()

    async def close(self) -> None:
        self.broker.remove_owner(self)
        self._closed = True
        self._connected = False

    async def force_close(self, error: Optional[Exception] = None) -> None:
        """Close because the broker dropped us, notifying ``on_closed``."""
        if self._closed:
            return
        await self.close()
        if self.on_closed:
            await self.on_closed(error)
