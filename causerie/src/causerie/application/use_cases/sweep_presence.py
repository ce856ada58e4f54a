"""
Use case for ageing the peer directory.
"""

import time
from typing import Callable, Optional

from causerie.application.session_state import SessionState
from causerie.domain.services import SweepResult
from shared.reporter import SystemReporter
from shared.reporter.emojis import Emoji


class SweepPresenceUseCase:
    """
    Mark peers with expired heartbeats STALE and evict long-silent ones.

    When the selected peer is evicted the selection is cleared.
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

    def execute(self, now: Optional[float] = None) -> SweepResult:
        now = self.clock() if now is None else now

        with self.state.lock:
            result = self.state.tracker.sweep(now)
            selection = self.state.selection
            if (
                selection is not None
                and selection.is_peer()
                and self.state.peer(selection.public_key) is None
            ):
                self.state.selection = None

        if self.reporter:
            for name in result.stale:
                self.reporter.debug(
                    f"{Emoji.MESSAGE.STALE} {name} heartbeat expired",
                    context="Presence",
                    verbose_level=2,
                )
            for name in result.evicted:
                self.reporter.info(
                    f"{Emoji.MESSAGE.EVICT} {name} evicted after silence",
                    context="Presence",
                    verbose_level=1,
                )

        return result
