"""
Console - line input for the chat client.

Plain lines are sent to the current view. Lines starting with ``/``
are commands:

    /join CHANNEL   switch to a channel       (/j)
    /dm NAME        switch to a peer's DMs    (/d, /msg)
    /peers          list channels and peers   (/who, /channels)
    /help           show this help
    /quit           leave                     (/q)

Input is read on a daemon thread; every line is handled on the event
loop, one at a time, in arrival order.
"""

import asyncio
import concurrent.futures
import threading
from typing import Callable, Optional, TextIO

from causerie.application.use_cases import SelectViewUseCase, SendPostUseCase
from causerie.domain.exceptions import SessionError
from causerie.presentation.view import ChatView
from shared.messaging import BusError
from shared.reporter import SystemReporter
from shared.reporter.emojis import Emoji

HELP_TEXT = (
    "/join CHANNEL, /dm NAME, /peers, /help, /quit; "
    "anything else is sent to the current view"
)


class Console:
    """
    Turns input lines into session operations.
    """

    def __init__(
        self,
        select_view: SelectViewUseCase,
        send_post: SendPostUseCase,
        view: ChatView,
        on_quit: Callable[[], None],
        reporter: Optional[SystemReporter] = None,
    ):
        """
        Initialize Console.

        Args:
            select_view: View selection use case
            send_post: Send use case
            view: Chat view
            on_quit: Called on /quit or end of input (on the event loop)
            reporter: Optional SystemReporter for logging
        """
        self.select_view = select_view
        self.send_post = send_post
        self.view = view
        self.on_quit = on_quit
        self.reporter = reporter

        self._thread: Optional[threading.Thread] = None

    async def handle_line(self, line: str) -> bool:
        """
        Handle one input line.

        Returns:
            False once the user asked to quit
        """
        line = line.strip()
        if not line:
            return True

        try:
            if line.startswith("/"):
                return self._run_command(line)
            sent = await self.send_post.execute(line)
            self.view.append_entry(sent.entry)
        except SessionError as e:
            self.view.notify(str(e))
        except BusError as e:
            self.view.notify(f"Not delivered: {e}")
            if self.reporter:
                self.reporter.warning(
                    f"{Emoji.ERROR.WARNING} Publish failed: {e}",
                    context="Console",
                )
        return True

    def _run_command(self, line: str) -> bool:
        command, _, argument = line[1:].partition(" ")
        command = command.lower()
        argument = argument.strip()

        if command in ("quit", "q"):
            self.on_quit()
            return False

        if command in ("join", "j"):
            if not argument:
                self.view.notify("Usage: /join CHANNEL")
            else:
                self.view.show_view(self.select_view.select_channel(argument))
        elif command in ("dm", "d", "msg"):
            if not argument:
                self.view.notify("Usage: /dm NAME")
            else:
                self.view.show_view(self.select_view.select_peer(argument))
        elif command in ("peers", "who", "channels"):
            self.view.show_directory(self.select_view.directory())
        elif command in ("help", "h", "?"):
            self.view.notify(HELP_TEXT)
        else:
            self.view.notify(f"Unknown command /{command} ({HELP_TEXT})")
        return True

    # ================================================================
    # Input thread
    # ================================================================

    def start(self, loop: asyncio.AbstractEventLoop, stream: TextIO) -> None:
        """Start reading lines from a stream on a daemon thread."""
        self._thread = threading.Thread(
            target=self._read_lines,
            args=(loop, stream),
            name="causerie-input",
            daemon=True,
        )
        self._thread.start()

    def _read_lines(self, loop: asyncio.AbstractEventLoop, stream: TextIO) -> None:
        for line in iter(stream.readline, ""):
            try:
                future = asyncio.run_coroutine_threadsafe(self.handle_line(line), loop)
                keep_going = future.result()
            except (RuntimeError, concurrent.futures.CancelledError):
                # Event loop already gone
                return
            if not keep_going:
                return

        try:
            loop.call_soon_threadsafe(self.on_quit)
        except RuntimeError:
            # Loop closed: the client is already stopping
            return
