"""
Use case for applying a peer heartbeat.
"""

import time
from typing import Callable, Optional

from causerie.application.session_state import SessionState
from causerie.domain.services import PresenceUpdate
from shared.identity import HeartbeatClaim
from shared.reporter import SystemReporter
from shared.reporter.emojis import Emoji


class ProcessHeartbeatUseCase:
    """
    Update the peer directory from a validated heartbeat.

    The caller publishes our own heartbeat when the update asks for a
    re-announce.
    """

    def __init__(
        self,
        state: SessionState,
        clock: Callable[[], float] = time.time,
        reporter: Optional[SystemReporter] = None,
    ):
        self.state = state
        self.clock = clock
        self.reporter = reporter

    def execute(self, claim: HeartbeatClaim) -> PresenceUpdate:
        """
        Apply a heartbeat.

        Args:
            claim: Validated heartbeat claim

        Returns:
            PresenceUpdate

        Raises:
            NameSpaceExhaustedError: If no display name is left for a newcomer
        """
        with self.state.lock:
            update = self.state.tracker.observe(claim, self.clock())

        if self.reporter:
            if update.is_new:
                self.reporter.info(
                    f"{Emoji.MESSAGE.JOIN} {update.display_name} joined "
                    f"({update.public_key[:8]}...)",
                    context="Presence",
                    verbose_level=1,
                )
            elif update.revived:
                self.reporter.debug(
                    f"{Emoji.SYSTEM.HEARTBEAT} {update.display_name} is back",
                    context="Presence",
                    verbose_level=2,
                )

        return update
