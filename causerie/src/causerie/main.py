"""
Causerie - chat client core

Orchestrates Clean Architecture components: loads the local identity,
joins the chat subjects, announces presence and runs until the user
quits, the credentials expire or the connection is lost for good.
"""

import asyncio
import signal
import time
from typing import Callable, Optional, TextIO

from causerie.config.settings import Settings
from causerie.di import Container
from causerie.domain.entities import LocalIdentity
from causerie.presentation import ChatView, Console
from shared.messaging import BusError, MessageBus
from shared.reporter import SystemReporter, parse_level
from shared.reporter.emojis import Emoji


class CauserieApp:
    """
    Causerie application orchestrator.

    Responsibilities:
        - Initialize DI container
        - Refuse to start with unusable or expired credentials
        - Subscribe, select the first channel and start heartbeats
        - Stop when the credentials expire
        - Stop immediately on quit, SIGINT/SIGTERM or a definitive close

    Attributes:
        exit_code: 0 after a requested quit, 1 after a fatal stop
        exit_reason: Why the client stopped
    """

    def __init__(
        self,
        settings: Settings,
        bus: Optional[MessageBus] = None,
        reporter: Optional[SystemReporter] = None,
        view: Optional[ChatView] = None,
        input_stream: Optional[TextIO] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize Causerie application.

        Args:
            settings: Application settings
            bus: Optional message bus (default: NATS from settings)
            reporter: Optional reporter (default: built from settings)
            view: Optional chat view (default: ConsoleView)
            input_stream: Line source for the console (None = no console)
            clock: Time source (epoch seconds)
        """
        self.settings = settings
        self.reporter = reporter or self._create_reporter()
        self.input_stream = input_stream
        self.clock = clock
        self.container = Container(
            settings,
            reporter=self.reporter,
            bus=bus,
            view=view,
            clock=clock,
            on_fatal=self._on_fatal,
            on_closed=self._on_connection_closed,
            on_tick=self._on_heartbeat_tick,
        )

        self.exit_code = 0
        self.exit_reason: Optional[str] = None
        self._stop_event: Optional[asyncio.Event] = None
        self._expiry_handle: Optional[asyncio.TimerHandle] = None
        self._started = False

        self.reporter.info(
            "Causerie initialized",
            context="Causerie",
            verbose_level=1,
        )

    def _create_reporter(self) -> SystemReporter:
        """
        Create SystemReporter instance.

        The terminal belongs to the chat view, so the reporter only
        writes to the console when no log directory is configured.

        Returns:
            Configured SystemReporter
        """
        return SystemReporter(
            name="causerie",
            log_dir=self.settings.log_dir,
            level=parse_level(self.settings.log_level),
            verbose=self.settings.verbose,
            console=False,
        )

    @property
    def view(self) -> ChatView:
        return self.container.view

    @property
    def stopping(self) -> bool:
        return self._stop_event is not None and self._stop_event.is_set()

    async def start(self) -> None:
        """
        Load the identity, connect and join the chat.

        Raises:
            CredentialsLoadError: If the credentials can not be used
            CredentialsExpiredError: If the credentials have expired
            BusError: If the connection can not be opened
        """
        self._stop_event = asyncio.Event()

        self.reporter.info(
            f"{Emoji.SYSTEM.STARTUP} Causerie starting...",
            context="Causerie",
            verbose_level=1,
        )

        # Fail before connecting if the credentials are unusable
        identity = self.container.local_identity
        state = self.container.session_state

        await self.container.bus.connect()
        try:
            await self.container.message_router.start()

            select_view = self.container.get_select_view_use_case()
            self.view.show_view(select_view.select_channel(state.channel_names[0]))

            await self.container.heartbeat_loop.start()
        except Exception as e:
            await self._abort_start(e)
            raise
        self._schedule_expiry(identity)
        self._started = True

        self.reporter.info(
            f"{Emoji.SYSTEM.READY} Chatting as {identity.display_name!r} "
            f"({identity.public_key[:8]}...)",
            context="Causerie",
            verbose_level=1,
        )

    async def _abort_start(self, error: Exception) -> None:
        """Close the connection opened by a start that failed half way."""
        self.reporter.error(
            f"{Emoji.ERROR.ERROR} Start failed, closing connection: "
            f"{type(error).__name__}: {error}",
            context="Causerie",
        )
        await self.container.heartbeat_loop.stop()
        try:
            await self.container.bus.close()
        except BusError as e:
            self.reporter.warning(
                f"{Emoji.ERROR.WARNING} Close failed: {e}",
                context="Causerie",
            )

    def _schedule_expiry(self, identity: LocalIdentity) -> None:
        seconds_left = identity.seconds_left(self.clock())
        if seconds_left is None:
            return

        loop = asyncio.get_running_loop()
        self._expiry_handle = loop.call_later(
            max(0.0, seconds_left), self._on_credentials_expired
        )
        self.reporter.debug(
            f"{Emoji.SYSTEM.TIMER} Credentials expire in {int(seconds_left)}s",
            context="Causerie",
            verbose_level=2,
        )

    def request_stop(self, reason: str, exit_code: int = 0) -> None:
        """
        Ask the client to stop. The first request wins.

        Must be called on the event loop.
        """
        if self._stop_event is None or self._stop_event.is_set():
            return
        self.exit_reason = reason
        self.exit_code = exit_code
        self._stop_event.set()

    def _on_credentials_expired(self) -> None:
        self.view.notify("Your credentials have expired.")
        self.reporter.critical(
            f"{Emoji.SECURITY.EXPIRED} Credentials expired",
            context="Causerie",
        )
        self.request_stop("Your credentials have expired.", exit_code=1)

    def _on_fatal(self, error: Exception) -> None:
        self.request_stop(str(error), exit_code=1)

    async def _on_connection_closed(self, error: Optional[Exception]) -> None:
        self.request_stop(f"Exiting: {error}", exit_code=1)

    async def _on_heartbeat_tick(self, now: float) -> None:
        result = self.container.get_sweep_presence_use_case().execute(now)
        if result.changed:
            self.view.presence_changed(result)

    async def stop(self) -> None:
        """Stop heartbeats and close the connection without draining."""
        if self._expiry_handle is not None:
            self._expiry_handle.cancel()
            self._expiry_handle = None

        if not self._started:
            return
        self._started = False

        await self.container.heartbeat_loop.stop()
        try:
            await self.container.message_router.stop()
            await self.container.bus.close()
        except BusError as e:
            self.reporter.warning(
                f"{Emoji.ERROR.WARNING} Close failed: {e}",
                context="Causerie",
            )

        self.reporter.info(
            f"{Emoji.SYSTEM.SHUTDOWN} Causerie stopped"
            + (f" ({self.exit_reason})" if self.exit_reason else ""),
            context="Causerie",
            verbose_level=1,
        )

    def _setup_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> None:
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(
                    sig, self.request_stop, f"Received {signal.Signals(sig).name}"
                )
            except (NotImplementedError, RuntimeError):
                # Not on the main thread or not supported by the platform
                pass

    def _restore_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> None:
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.remove_signal_handler(sig)
            except (NotImplementedError, RuntimeError):
                pass

    async def serve(self) -> int:
        """
        Run until a stop is requested.

        Returns:
            Exit code
        """
        await self.start()

        loop = asyncio.get_running_loop()
        self._setup_signal_handlers(loop)

        if self.input_stream is not None:
            console = Console(
                select_view=self.container.get_select_view_use_case(),
                send_post=self.container.get_send_post_use_case(),
                view=self.view,
                on_quit=lambda: self.request_stop("Bye"),
                reporter=self.reporter,
            )
            console.start(loop, self.input_stream)

        try:
            await self._stop_event.wait()
        finally:
            self._restore_signal_handlers(loop)
            await self.stop()

        return self.exit_code

    def run(self) -> int:
        """Blocking entry point."""
        return asyncio.run(self.serve())
