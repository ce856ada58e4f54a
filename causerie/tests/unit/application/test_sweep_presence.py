"""
Unit tests for SweepPresenceUseCase.
"""

import pytest

from causerie.application.use_cases import SelectViewUseCase, SweepPresenceUseCase
from causerie.domain.entities import PresenceStatus
from shared.identity import KeyPair, KeyRole

NOW = 1_700_000_000


@pytest.fixture
def zoe() -> KeyPair:
    return KeyPair.create(KeyRole.USER)


class TestSweepPresenceUseCase:
    """Unit tests for SweepPresenceUseCase."""

    def test_marks_stale(self, session, heartbeat, zoe, reporter):
        """Test expired peers become STALE."""
        with session.lock:
            session.tracker.observe(heartbeat(zoe, "zoe", exp=NOW + 60), NOW)

        result = SweepPresenceUseCase(session, reporter=reporter).execute(NOW + 61)

        assert result.stale == ["zoe"]
        with session.lock:
            assert session.peer(zoe.public_key).status == PresenceStatus.STALE

    def test_uses_clock(self, session, heartbeat, zoe):
        """Test the sweep time defaults to the clock."""
        with session.lock:
            session.tracker.observe(heartbeat(zoe, "zoe", exp=NOW + 60), NOW)

        result = SweepPresenceUseCase(session, clock=lambda: NOW + 10).execute()

        assert not result.changed

    def test_eviction_clears_selection(
        self, make_session, identity, heartbeat, zoe, reporter
    ):
        """Test evicting the selected peer clears the selection."""
        session = make_session(identity, eviction_seconds=120)
        with session.lock:
            session.tracker.observe(heartbeat(zoe, "zoe"), NOW)
        SelectViewUseCase(session).select_peer("zoe")

        result = SweepPresenceUseCase(session, reporter=reporter).execute(NOW + 121)

        assert result.evicted == ["zoe"]
        assert session.selection is None

    def test_eviction_keeps_channel_selection(
        self, make_session, identity, heartbeat, zoe
    ):
        """Test a channel selection survives evictions."""
        session = make_session(identity, eviction_seconds=120)
        with session.lock:
            session.tracker.observe(heartbeat(zoe, "zoe"), NOW)
        SelectViewUseCase(session).select_channel("NATS")

        SweepPresenceUseCase(session).execute(NOW + 121)

        assert session.selection.is_channel("NATS")
