"""
Heartbeat loop - periodic presence announcements.

The first heartbeat goes out immediately with the newcomer tag, so
peers that already run answer with their own heartbeat. After that one
heartbeat is published every interval; each emission schedules the
next only once it is done, so emissions never overlap.
"""

import asyncio
import math
import time
from typing import Awaitable, Callable, Optional

from causerie.domain.entities import LocalIdentity
from shared.identity import NEWCOMER_TAG, ClaimCodec, HeartbeatClaim, SubjectScheme
from shared.messaging import BusError, MessageBus
from shared.reporter import SystemReporter
from shared.reporter.emojis import Emoji

TickCallback = Callable[[float], Awaitable[None]]


class HeartbeatLoop:
    """
    Publishes signed heartbeat claims on the presence subject.

    Attributes:
        interval: Seconds between regular heartbeats
        ttl: Lifetime of each heartbeat claim in seconds
    """

    def __init__(
        self,
        bus: MessageBus,
        codec: ClaimCodec,
        identity: LocalIdentity,
        scheme: SubjectScheme,
        interval: float = 30.0,
        ttl_factor: float = 2.0,
        reporter: Optional[SystemReporter] = None,
        on_tick: Optional[TickCallback] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize HeartbeatLoop.

        Args:
            bus: Message bus to publish on
            codec: Claim codec
            identity: Local identity (signs the heartbeats)
            scheme: Subject scheme
            interval: Seconds between heartbeats
            ttl_factor: Heartbeat lifetime as a multiple of the interval
            reporter: Optional SystemReporter for logging
            on_tick: Coroutine run after every regular emission
            clock: Time source (epoch seconds)
        """
        self.bus = bus
        self.codec = codec
        self.identity = identity
        self.scheme = scheme
        self.interval = interval
        self.ttl = interval * ttl_factor
        self.reporter = reporter
        self.on_tick = on_tick
        self.clock = clock

        self._task: Optional[asyncio.Task] = None
        self.sent = 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def build_claim(self, newcomer: bool = False) -> HeartbeatClaim:
        """Heartbeat claim for the local user, expiring after one TTL."""
        now = self.clock()
        return HeartbeatClaim(
            sub=self.identity.public_key,
            name=self.identity.display_name,
            iat=int(now),
            exp=math.ceil(now + self.ttl),
            tags=[NEWCOMER_TAG] if newcomer else [],
        )

    async def announce(self, newcomer: bool = False) -> None:
        """
        Sign and publish one heartbeat.

        Raises:
            BusError: If the bus refuses the publication
        """
        token = self.codec.encode(self.build_claim(newcomer), self.identity.key_pair)
        await self.bus.publish(self.scheme.presence, token.encode("ascii"))
        self.sent += 1

        if self.reporter:
            self.reporter.debug(
                f"{Emoji.SYSTEM.HEARTBEAT} Heartbeat sent"
                + (" (newcomer)" if newcomer else ""),
                context="HeartbeatLoop",
                verbose_level=3,
            )

    async def reannounce(self) -> None:
        """Out-of-cycle heartbeat so a newcomer learns about us now."""
        if self.reporter:
            self.reporter.debug(
                f"{Emoji.MESSAGE.ANNOUNCE} Re-announcing presence",
                context="HeartbeatLoop",
                verbose_level=2,
            )
        await self.announce(newcomer=False)

    def _report_failure(self, what: str, e: Exception) -> None:
        if self.reporter:
            self.reporter.error(
                f"{Emoji.ERROR.ERROR} {what}: {type(e).__name__}: {e}",
                context="HeartbeatLoop",
            )

    async def _run(self) -> None:
        newcomer = True
        while True:
            try:
                await self.announce(newcomer=newcomer)
                newcomer = False
            except BusError as e:
                # Reconnecting; the next tick retries
                if self.reporter:
                    self.reporter.warning(
                        f"{Emoji.ERROR.WARNING} Heartbeat not sent: {e}",
                        context="HeartbeatLoop",
                    )
            except Exception as e:
                self._report_failure("Heartbeat not sent", e)

            if self.on_tick:
                try:
                    await self.on_tick(self.clock())
                except Exception as e:
                    self._report_failure("Tick callback failed", e)

            await asyncio.sleep(self.interval)

    async def start(self) -> None:
        """Send the first heartbeat and keep sending in the background."""
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run())
        # Let the first emission happen before returning
        await asyncio.sleep(0)

    async def stop(self) -> None:
        """Stop emitting."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
