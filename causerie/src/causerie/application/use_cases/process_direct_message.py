"""
Use case for accepting a direct message.
"""

from typing import Optional

from causerie.application.dto import Delivery, DeliveryStatus
from causerie.application.session_state import SessionState
from shared.identity import DirectMessageClaim
from shared.reporter import SystemReporter
from shared.reporter.emojis import Emoji


class ProcessDirectMessageUseCase:
    """
    Append a validated DM to the sender's log.

    Only peers already in the directory may message us; anything else
    is dropped silently. A DM for a peer that is not the current view
    sets that peer's unread flag.
    """

    def __init__(self, state: SessionState, reporter: Optional[SystemReporter] = None):
        self.state = state
        self.reporter = reporter

    def execute(self, claim: DirectMessageClaim) -> Delivery:
        """
        Accept or drop a DM.

        Args:
            claim: Validated direct message (``iss`` is the sender)

        Returns:
            Delivery
        """
        with self.state.lock:
            sender = self.state.peer(claim.iss)

            if claim.recipient != self.state.identity.public_key:
                delivery = Delivery(DeliveryStatus.MISROUTED)
            elif sender is None:
                delivery = Delivery(DeliveryStatus.UNKNOWN_SENDER)
            elif self.state.dedup_direct_messages and (
                self.state.seen_tokens.is_duplicate(claim.jti)
            ):
                delivery = Delivery(
                    DeliveryStatus.DUPLICATE, peer_name=sender.display_name
                )
            else:
                sender.append_message(claim)
                selection = self.state.selection
                visible = selection is not None and selection.is_peer(sender.public_key)
                if not visible:
                    sender.unread = True
                delivery = Delivery(
                    DeliveryStatus.ACCEPTED,
                    entry=self.state.entry_for(claim),
                    visible=visible,
                    peer_name=sender.display_name,
                    unread=not visible,
                )

        if self.reporter:
            self._log(claim, delivery)

        return delivery

    def _log(self, claim: DirectMessageClaim, delivery: Delivery) -> None:
        if delivery.status == DeliveryStatus.ACCEPTED:
            marker = Emoji.MESSAGE.UNREAD if delivery.unread else Emoji.MESSAGE.DIRECT
            self.reporter.debug(
                f"{marker} DM from {delivery.peer_name} {claim.jti}",
                context="DirectMessage",
                verbose_level=3,
            )
        elif delivery.status == DeliveryStatus.DUPLICATE:
            self.reporter.debug(
                f"{Emoji.MESSAGE.DUPLICATE} Duplicate DM {claim.jti}",
                context="DirectMessage",
                verbose_level=2,
            )
        else:
            self.reporter.debug(
                f"{Emoji.MESSAGE.DROPPED} DM from {claim.iss[:8]}... dropped "
                f"({delivery.status.value})",
                context="DirectMessage",
                verbose_level=2,
            )
