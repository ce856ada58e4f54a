"""
Use case for accepting a channel post from a peer.
"""

from typing import Optional

from causerie.application.dto import Delivery, DeliveryStatus
from causerie.application.session_state import SessionState
from shared.identity import ChannelPostClaim
from shared.reporter import SystemReporter
from shared.reporter.emojis import Emoji


class ProcessChannelPostUseCase:
    """
    Append a validated post to its channel log.

    Posts for channels outside the configured list are dropped, and a
    token id is admitted at most once.
    """

    def __init__(self, state: SessionState, reporter: Optional[SystemReporter] = None):
        self.state = state
        self.reporter = reporter

    def execute(self, claim: ChannelPostClaim) -> Delivery:
        """
        Accept or drop a post.

        Args:
            claim: Validated channel post

        Returns:
            Delivery (visible when the channel is the current view)
        """
        channel = claim.channel

        with self.state.lock:
            if not self.state.has_channel(channel):
                delivery = Delivery(DeliveryStatus.UNKNOWN_CHANNEL)
            elif self.state.seen_tokens.is_duplicate(claim.jti):
                delivery = Delivery(DeliveryStatus.DUPLICATE)
            else:
                self.state.append_post(claim)
                selection = self.state.selection
                delivery = Delivery(
                    DeliveryStatus.ACCEPTED,
                    entry=self.state.entry_for(claim),
                    visible=selection is not None and selection.is_channel(channel),
                )

        if self.reporter:
            self._log(claim, delivery)

        return delivery

    def _log(self, claim: ChannelPostClaim, delivery: Delivery) -> None:
        if delivery.status == DeliveryStatus.ACCEPTED:
            self.reporter.debug(
                f"{Emoji.MESSAGE.POST} #{claim.channel} <{delivery.entry.sender}> "
                f"{claim.jti}",
                context="ChannelPost",
                verbose_level=3,
            )
        elif delivery.status == DeliveryStatus.DUPLICATE:
            self.reporter.debug(
                f"{Emoji.MESSAGE.DUPLICATE} Duplicate post {claim.jti}",
                context="ChannelPost",
                verbose_level=2,
            )
        else:
            self.reporter.debug(
                f"{Emoji.MESSAGE.DROPPED} Post for unknown channel "
                f"{claim.channel!r} dropped",
                context="ChannelPost",
                verbose_level=2,
            )
