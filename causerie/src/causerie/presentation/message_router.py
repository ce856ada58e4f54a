"""
Message router - bus subscriptions to use cases to view updates.

Three subscriptions feed the session: the presence subject, the
channel post wildcard and our own DM inbox. Every payload goes through
the ClaimValidator first; only typed claims reach the use cases. View
updates happen after the session lock is released.
"""

from typing import Awaitable, Callable, List, Optional

from causerie.application.use_cases import (
    ProcessChannelPostUseCase,
    ProcessDirectMessageUseCase,
    ProcessHeartbeatUseCase,
)
from causerie.domain.exceptions import NameSpaceExhaustedError
from causerie.infrastructure.auth import ClaimValidator
from causerie.presentation.view import ChatView
from shared.identity import (
    ChannelPostClaim,
    DirectMessageClaim,
    HeartbeatClaim,
    SubjectScheme,
)
from shared.messaging import BusError, BusMessage, MessageBus
from shared.reporter import SystemReporter
from shared.reporter.emojis import Emoji

FatalCallback = Callable[[Exception], None]


class MessageRouter:
    """
    Dispatches bus messages to the chat use cases.
    """

    def __init__(
        self,
        bus: MessageBus,
        scheme: SubjectScheme,
        own_public_key: str,
        validator: ClaimValidator,
        process_heartbeat: ProcessHeartbeatUseCase,
        process_post: ProcessChannelPostUseCase,
        process_direct: ProcessDirectMessageUseCase,
        view: ChatView,
        announce: Callable[[], Awaitable[None]],
        on_fatal: Optional[FatalCallback] = None,
        reporter: Optional[SystemReporter] = None,
    ):
        """
        Initialize MessageRouter.

        Args:
            bus: Message bus
            scheme: Subject scheme
            own_public_key: Local user's key (selects our DM inbox)
            validator: Claim validator
            process_heartbeat: Heartbeat use case
            process_post: Channel post use case
            process_direct: Direct message use case
            view: Chat view receiving updates
            announce: Coroutine publishing our heartbeat out of cycle
            on_fatal: Called when the session can not continue
            reporter: Optional SystemReporter for logging
        """
        self.bus = bus
        self.scheme = scheme
        self.own_public_key = own_public_key
        self.validator = validator
        self.process_heartbeat = process_heartbeat
        self.process_post = process_post
        self.process_direct = process_direct
        self.view = view
        self.announce = announce
        self.on_fatal = on_fatal
        self.reporter = reporter

        self._subscriptions: List = []

    async def start(self) -> None:
        """Subscribe to posts, our DM inbox and presence."""
        routes = [
            (self.scheme.posts_wildcard, self.handle_post),
            (self.scheme.dm_subject(self.own_public_key), self.handle_direct),
            (self.scheme.presence, self.handle_presence),
        ]
        for subject, handler in routes:
            self._subscriptions.append(await self.bus.subscribe(subject, handler))

        if self.reporter:
            self.reporter.info(
                f"{Emoji.NETWORK.SUBSCRIPTION} Listening on "
                f"{', '.join(subject for subject, _ in routes)}",
                context="MessageRouter",
                verbose_level=2,
            )

    async def stop(self) -> None:
        for subscription in self._subscriptions:
            await subscription.unsubscribe()
        self._subscriptions.clear()

    async def handle_presence(self, msg: BusMessage) -> None:
        outcome = self.validator.validate(msg.data, HeartbeatClaim, msg.subject)
        if not outcome.ok:
            return

        try:
            update = self.process_heartbeat.execute(outcome.claim)
        except NameSpaceExhaustedError as e:
            if self.reporter:
                self.reporter.critical(
                    f"{Emoji.ERROR.CRITICAL} {e}", context="MessageRouter"
                )
            if self.on_fatal:
                self.on_fatal(e)
            return

        if update.is_new:
            self.view.peer_joined(update.display_name)

        if update.reannounce:
            try:
                await self.announce()
            except BusError as e:
                if self.reporter:
                    self.reporter.warning(
                        f"{Emoji.ERROR.WARNING} Re-announce failed: {e}",
                        context="MessageRouter",
                    )

    async def handle_post(self, msg: BusMessage) -> None:
        outcome = self.validator.validate(msg.data, ChannelPostClaim, msg.subject)
        if not outcome.ok:
            return

        delivery = self.process_post.execute(outcome.claim)
        if delivery.visible:
            self.view.append_entry(delivery.entry)

    async def handle_direct(self, msg: BusMessage) -> None:
        outcome = self.validator.validate(msg.data, DirectMessageClaim, msg.subject)
        if not outcome.ok:
            return

        delivery = self.process_direct.execute(outcome.claim)
        if not delivery.accepted:
            return

        if delivery.visible:
            self.view.append_entry(delivery.entry)
        else:
            self.view.mark_unread(delivery.peer_name)
