"""
Use case for sending a post to the current view.
"""

from typing import Optional

from causerie.application.dto import SentPost
from causerie.application.session_state import SessionState
from causerie.domain.exceptions import (
    NoSelectionError,
    PayloadTooLargeError,
    UnknownPeerError,
)
from shared.identity import (
    ChannelPostClaim,
    ClaimCodec,
    DirectMessageClaim,
    SubjectScheme,
)
from shared.messaging import MessageBus
from shared.reporter import SystemReporter
from shared.reporter.emojis import Emoji


class SendPostUseCase:
    """
    Sign a message for the selected channel or peer and publish it.

    The claim's token id is recorded as seen and a local copy is
    appended before publishing, so our own post is never admitted twice
    if it comes back to us.
    """

    def __init__(
        self,
        state: SessionState,
        bus: MessageBus,
        codec: ClaimCodec,
        scheme: SubjectScheme,
        reporter: Optional[SystemReporter] = None,
    ):
        """
        Initialize SendPostUseCase.

        Args:
            state: Session state
            bus: Message bus to publish on
            codec: Claim codec
            scheme: Subject scheme
            reporter: Optional SystemReporter for logging
        """
        self.state = state
        self.bus = bus
        self.codec = codec
        self.scheme = scheme
        self.reporter = reporter

    async def execute(self, text: str) -> SentPost:
        """
        Send a message.

        Args:
            text: Message text

        Returns:
            SentPost with the signed claim and its rendered entry

        Raises:
            NoSelectionError: If nothing is selected
            UnknownPeerError: If the selected peer has left the directory
            PayloadTooLargeError: If the token exceeds the identity's limit
            BusError: If publishing fails (the local copy is kept)
        """
        with self.state.lock:
            selection = self.state.selection
            if selection is None:
                raise NoSelectionError()

            identity = self.state.identity
            peer = None

            if selection.is_channel():
                claim = ChannelPostClaim(
                    sub=selection.name, name=identity.display_name, msg=text
                )
                subject = self.scheme.post_subject(selection.name)
            else:
                peer = self.state.peer(selection.public_key)
                if peer is None:
                    raise UnknownPeerError(selection.name)
                claim = DirectMessageClaim(
                    sub=peer.public_key, name=identity.display_name, msg=text
                )
                subject = self.scheme.dm_subject(peer.public_key)

            token = self.codec.encode(claim, identity.key_pair)
            data = token.encode("ascii")
            if 0 < identity.max_payload < len(data):
                raise PayloadTooLargeError(len(data), identity.max_payload)

            claim = claim.model_copy(update={"iss": identity.public_key})
            self.state.seen_tokens.register(claim.jti)
            if peer is None:
                self.state.append_post(claim)
            else:
                peer.append_message(claim)
            entry = self.state.entry_for(claim)

        await self.bus.publish(subject, data)

        if self.reporter:
            self.reporter.debug(
                f"{Emoji.NETWORK.SEND} {selection} {claim.jti}",
                context="SendPost",
                verbose_level=3,
            )

        return SentPost(claim=claim, entry=entry, subject=subject)
