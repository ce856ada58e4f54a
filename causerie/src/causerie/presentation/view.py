"""
Chat view - what the session shows to the user.

The session only ever calls a ChatView with snapshots. ConsoleView is
a line-oriented terminal rendition; richer front-ends implement the
same protocol.
"""

from typing import Protocol

import click

from causerie.application.dto import DirectoryListing, ViewSnapshot
from causerie.domain.entities import PresenceStatus
from causerie.domain.services import SweepResult
from causerie.domain.value_objects import MessageEntry


class ChatView(Protocol):
    """Display surface of the chat client."""

    def show_view(self, snapshot: ViewSnapshot) -> None:
        ...

    def append_entry(self, entry: MessageEntry) -> None:
        ...

    def peer_joined(self, display_name: str) -> None:
        ...

    def mark_unread(self, display_name: str) -> None:
        ...

    def show_directory(self, listing: DirectoryListing) -> None:
        ...

    def presence_changed(self, result: SweepResult) -> None:
        ...

    def notify(self, text: str) -> None:
        ...


class ConsoleView:
    """
    ChatView writing plain lines to the terminal through click.

    Usage:
        >>> view = ConsoleView()
        >>> view.notify("Connected")
        -- Connected
    """

    def __init__(self, color: bool = True):
        """
        Initialize ConsoleView.

        Args:
            color: Style notices and headers
        """
        self.color = color

    def _echo(self, text: str, **style) -> None:
        if self.color and style:
            text = click.style(text, **style)
        click.echo(text)

    def show_view(self, snapshot: ViewSnapshot) -> None:
        self._echo(f"== {snapshot.selection} ==", bold=True)
        for entry in snapshot.entries:
            self._echo(entry.render())

    def append_entry(self, entry: MessageEntry) -> None:
        self._echo(entry.render())

    def peer_joined(self, display_name: str) -> None:
        self._echo(f"-- {display_name} is online", fg="green")

    def mark_unread(self, display_name: str) -> None:
        self._echo(f"-- new message from @{display_name}", fg="yellow")

    def show_directory(self, listing: DirectoryListing) -> None:
        current = listing.selection
        self._echo("Channels", bold=True)
        for name in listing.channels:
            marker = "*" if current is not None and current.is_channel(name) else " "
            self._echo(f" {marker} #{name}")

        self._echo("Direct", bold=True)
        for peer in listing.peers:
            flags = []
            if peer.is_self:
                flags.append("you")
            if peer.status == PresenceStatus.STALE:
                flags.append("away")
            if peer.unread:
                flags.append("unread")
            suffix = f" ({', '.join(flags)})" if flags else ""
            selected = (
                current is not None
                and current.is_peer()
                and current.name == peer.display_name
            )
            self._echo(f" {'*' if selected else ' '} @{peer.display_name}{suffix}")

    def presence_changed(self, result: SweepResult) -> None:
        for name in result.stale:
            self._echo(f"-- {name} is away", dim=True)
        for name in result.evicted:
            self._echo(f"-- {name} left", dim=True)

    def notify(self, text: str) -> None:
        self._echo(f"-- {text}", fg="cyan")
