"""
Shutdown manager - turns SIGTERM/SIGINT into a bus drain.

The issuer is stateless, so stopping only means: stop taking new
credential requests, let the replies already being signed go out, then
close the connection. Each step is a registered callback; the manager
runs them once, in order, and reports when the last one is done.
"""

import asyncio
import signal
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Union

from shared.reporter import SystemReporter
from shared.reporter.emojis import Emoji

ShutdownStep = Callable[[], Union[None, Awaitable[None]]]


class ShutdownState(Enum):
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"
    SHUTDOWN = "shutdown"


class ShutdownManager:
    """
    Runs the shutdown steps of the issuer exactly once.

    Attributes:
        state: RUNNING until the first request, SHUTDOWN once every step ran
        shutdown_timeout: Seconds an async step may take
        reason: Signal name or caller-supplied reason of the first request
    """

    SIGNALS = (signal.SIGTERM, signal.SIGINT)

    def __init__(
        self,
        shutdown_timeout: int = 30,
        reporter: Optional[SystemReporter] = None,
    ):
        """
        Initialize ShutdownManager.

        Args:
            shutdown_timeout: Seconds an async step may take before it is abandoned
            reporter: Optional SystemReporter for logging
        """
        self.shutdown_timeout = shutdown_timeout
        self.reporter = reporter

        self.state = ShutdownState.RUNNING
        self.reason: Optional[str] = None
        self._requested = asyncio.Event()
        self._done = asyncio.Event()
        self._steps: List[ShutdownStep] = []
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def is_shutting_down(self) -> bool:
        return self.state != ShutdownState.RUNNING

    def register_shutdown_callback(self, step: ShutdownStep) -> None:
        """Add a step (plain function or coroutine function) to run on shutdown."""
        self._steps.append(step)

    def setup_signal_handlers(self) -> None:
        """
        Route SIGTERM and SIGINT to ``initiate_shutdown``.

        Must be called on the running event loop.
        """
        self._loop = asyncio.get_running_loop()
        for sig in self.SIGNALS:
            self._loop.add_signal_handler(sig, self._on_signal, sig)

    def restore_signal_handlers(self) -> None:
        if self._loop is None:
            return
        for sig in self.SIGNALS:
            self._loop.remove_signal_handler(sig)
        self._loop = None

    def _on_signal(self, signum: int) -> None:
        asyncio.ensure_future(self.initiate_shutdown(signal.Signals(signum).name))

    async def initiate_shutdown(self, reason: str = "manual") -> None:
        """
        Run every registered step once.

        Later requests are ignored. A step that fails or times out is
        logged and the next one still runs, so the connection is always
        closed.

        Args:
            reason: Why the issuer is stopping (e.g. "SIGTERM")
        """
        if self.state != ShutdownState.RUNNING:
            return

        self.state = ShutdownState.SHUTTING_DOWN
        self.reason = reason
        self._requested.set()

        if self.reporter:
            self.reporter.info(
                f"{Emoji.SYSTEM.SHUTDOWN} Stopping issuer ({reason})",
                context="ShutdownManager",
            )

        for step in self._steps:
            await self._run_step(step)

        self.state = ShutdownState.SHUTDOWN
        self._done.set()

    async def _run_step(self, step: ShutdownStep) -> None:
        name = getattr(step, "__name__", repr(step))
        try:
            if asyncio.iscoroutinefunction(step):
                await asyncio.wait_for(step(), timeout=self.shutdown_timeout)
            else:
                step()
        except asyncio.TimeoutError:
            if self.reporter:
                self.reporter.error(
                    f"{Emoji.ERROR.ERROR} Shutdown step {name} timed out after "
                    f"{self.shutdown_timeout}s",
                    context="ShutdownManager",
                )
        except Exception as e:
            if self.reporter:
                self.reporter.error(
                    f"{Emoji.ERROR.ERROR} Shutdown step {name} failed: "
                    f"{type(e).__name__}: {e}",
                    context="ShutdownManager",
                )

    async def wait_for_shutdown(self) -> None:
        """Block until a shutdown has been requested."""
        await self._requested.wait()

    async def wait_for_shutdown_complete(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for every step to finish.

        Returns:
            False if ``timeout`` (default: shutdown_timeout) elapsed first
        """
        try:
            await asyncio.wait_for(
                self._done.wait(), timeout=timeout or self.shutdown_timeout
            )
        except asyncio.TimeoutError:
            return False
        return True
