"""
Use case for switching the current view.
"""

from typing import Optional

from causerie.application.dto import DirectoryListing, ViewSnapshot
from causerie.application.session_state import SessionState
from causerie.domain.value_objects import Selection


class SelectViewUseCase:
    """
    Select a channel or a peer and hand back a copy of its log.

    Stored logs are never handed out or modified; the snapshot is a new
    list of rendered entries.
    """

    def __init__(self, state: SessionState):
        self.state = state

    def select_channel(self, name: str) -> ViewSnapshot:
        """
        Raises:
            UnknownChannelError: If the channel is not configured
        """
        with self.state.lock:
            log = self.state.channel_log(name)
            selection = Selection.channel(name)
            self.state.selection = selection
            return ViewSnapshot(selection, self.state.entries_for(log))

    def select_peer(self, display_name: str) -> ViewSnapshot:
        """
        Select a peer's DM log and clear its unread flag.

        Raises:
            UnknownPeerError: If no peer has this display name
        """
        with self.state.lock:
            peer = self.state.peer_by_name(display_name)
            peer.unread = False
            selection = Selection.direct(peer.display_name, peer.public_key)
            self.state.selection = selection
            return ViewSnapshot(selection, self.state.entries_for(peer.messages))

    def current(self) -> Optional[ViewSnapshot]:
        """Snapshot of the current view, None before the first selection."""
        with self.state.lock:
            selection = self.state.selection
            if selection is None:
                return None
            if selection.is_channel():
                log = self.state.channel_log(selection.name)
            else:
                peer = self.state.peer(selection.public_key)
                log = peer.messages if peer is not None else []
            return ViewSnapshot(selection, self.state.entries_for(log))

    def directory(self) -> DirectoryListing:
        with self.state.lock:
            return DirectoryListing(
                channels=self.state.channel_names,
                peers=self.state.directory(),
                selection=self.state.selection,
            )
