"""
Unit tests for Console.
"""

import asyncio
import io

import pytest

from causerie.application.use_cases import SelectViewUseCase, SendPostUseCase
from causerie.presentation import Console
from causerie.presentation.console import HELP_TEXT
from shared.identity import KeyPair, KeyRole
from shared.messaging import LocalMessageBus


@pytest.fixture
def make_console(session, codec, scheme, view, reporter):
    """
    Factory for consoles over the shared session.

    Returns the console and the list of quit requests.
    """

    def _make(bus):
        quits = []
        console = Console(
            select_view=SelectViewUseCase(session),
            send_post=SendPostUseCase(session, bus, codec, scheme),
            view=view,
            on_quit=lambda: quits.append(True),
            reporter=reporter,
        )
        return console, quits

    return _make


class TestConsole:
    """Unit tests for Console."""

    # ================================================================
    # Command tests
    # ================================================================

    async def test_blank_line(self, make_console, connected_bus, view):
        """Test blank lines are ignored."""
        console, _ = make_console(connected_bus)

        assert await console.handle_line("   \n") is True
        assert view.calls == []

    async def test_join(self, make_console, connected_bus, view, session):
        """Test /join selects a channel and shows it."""
        console, _ = make_console(connected_bus)

        await console.handle_line("/join NATS")

        snapshot = view.named("show_view")[0]
        assert str(snapshot.selection) == "#NATS"
        assert session.selection.is_channel("NATS")

    async def test_join_alias(self, make_console, connected_bus, session):
        """Test /j is /join."""
        console, _ = make_console(connected_bus)

        await console.handle_line("/j General")

        assert session.selection.is_channel("General")

    async def test_join_without_argument(self, make_console, connected_bus, view):
        """Test /join without a channel prints usage."""
        console, _ = make_console(connected_bus)

        await console.handle_line("/join")

        assert view.named("notify") == ["Usage: /join CHANNEL"]

    async def test_join_unknown_channel(self, make_console, connected_bus, view):
        """Test an unknown channel is reported, not raised."""
        console, _ = make_console(connected_bus)

        await console.handle_line("/join random")

        assert view.named("notify") == ["Unknown channel: random"]

    async def test_dm(self, make_console, connected_bus, view, session, heartbeat):
        """Test /dm selects a peer."""
        zoe = KeyPair.create(KeyRole.USER)
        with session.lock:
            session.tracker.observe(heartbeat(zoe, "zoe"), 0)
        console, _ = make_console(connected_bus)

        await console.handle_line("/dm zoe")

        assert str(view.named("show_view")[0].selection) == "@zoe"

    async def test_dm_unknown_peer(self, make_console, connected_bus, view):
        """Test an unknown peer is reported."""
        console, _ = make_console(connected_bus)

        await console.handle_line("/msg nobody")

        assert view.named("notify") == ["Unknown peer: nobody"]

    async def test_peers(self, make_console, connected_bus, view):
        """Test /peers shows the directory."""
        console, _ = make_console(connected_bus)

        await console.handle_line("/who")

        listing = view.named("show_directory")[0]
        assert [p.display_name for p in listing.peers] == ["sam"]

    async def test_help(self, make_console, connected_bus, view):
        """Test /help prints the command summary."""
        console, _ = make_console(connected_bus)

        await console.handle_line("/help")

        assert view.named("notify") == [HELP_TEXT]

    async def test_unknown_command(self, make_console, connected_bus, view):
        """Test unknown commands are reported with the help text."""
        console, _ = make_console(connected_bus)

        await console.handle_line("/dance")

        assert view.named("notify")[0].startswith("Unknown command /dance")

    async def test_quit(self, make_console, connected_bus):
        """Test /quit asks the client to stop."""
        console, quits = make_console(connected_bus)

        assert await console.handle_line("/QUIT") is False
        assert quits == [True]

    # ================================================================
    # Send tests
    # ================================================================

    async def test_send_text(self, make_console, connected_bus, view, broker):
        """Test plain text is sent to the current view and echoed."""
        console, _ = make_console(connected_bus)
        await console.handle_line("/join NATS")

        await console.handle_line("hello there")

        assert [e.text for e in view.named("append_entry")] == ["hello there"]
        assert len(broker.published) == 1

    async def test_send_without_selection(self, make_console, connected_bus, view):
        """Test sending before joining is reported."""
        console, _ = make_console(connected_bus)

        await console.handle_line("hello")

        assert view.named("notify") == ["Nothing selected"]

    async def test_send_on_closed_bus(self, make_console, broker, view):
        """Test a failed publication is reported to the user."""
        console, _ = make_console(LocalMessageBus(broker))
        await console.handle_line("/join NATS")

        assert await console.handle_line("hello") is True

        assert view.named("notify")[0].startswith("Not delivered:")

    # ================================================================
    # Input thread tests
    # ================================================================

    async def test_reads_stream(self, make_console, connected_bus, view, wait_until):
        """Test lines are handled in order and end of input quits."""
        console, quits = make_console(connected_bus)

        console.start(asyncio.get_running_loop(), io.StringIO("/join NATS\nhello\n"))
        await wait_until(lambda: quits)

        assert str(view.named("show_view")[0].selection) == "#NATS"
        assert [e.text for e in view.named("append_entry")] == ["hello"]

    async def test_stops_after_quit(
        self, make_console, connected_bus, broker, wait_until
    ):
        """Test nothing after /quit is handled."""
        console, quits = make_console(connected_bus)

        stream = io.StringIO("/quit\n/join NATS\nhi\n")
        console.start(asyncio.get_running_loop(), stream)
        await wait_until(lambda: not console._thread.is_alive())

        assert quits == [True]
        assert broker.published == []
