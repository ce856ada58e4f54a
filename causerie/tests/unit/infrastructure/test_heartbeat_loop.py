"""
Unit tests for HeartbeatLoop.
"""

import pytest

from causerie.infrastructure.presence import HeartbeatLoop
from shared.identity import ClaimSigningError, HeartbeatClaim
from shared.messaging import LocalMessageBus

NOW = 1_700_000_000


@pytest.fixture
def make_loop(codec, identity, scheme, reporter):
    """Factory for heartbeat loops with a fixed clock."""

    def _make(bus, interval=60.0, ttl_factor=2.0, on_tick=None):
        return HeartbeatLoop(
            bus=bus,
            codec=codec,
            identity=identity,
            scheme=scheme,
            interval=interval,
            ttl_factor=ttl_factor,
            reporter=reporter,
            on_tick=on_tick,
            clock=lambda: NOW,
        )

    return _make


class TestHeartbeatLoop:
    """Unit tests for HeartbeatLoop."""

    # ================================================================
    # Claim tests
    # ================================================================

    def test_build_claim(self, make_loop, connected_bus, identity):
        """Test the heartbeat names us and expires after one TTL."""
        loop = make_loop(connected_bus, interval=30.0, ttl_factor=2.0)

        claim = loop.build_claim()

        assert loop.ttl == 60.0
        assert claim.sub == identity.public_key
        assert claim.name == identity.display_name
        assert claim.iat == NOW
        assert claim.exp == NOW + 60
        assert not claim.newcomer

    def test_newcomer_tag(self, make_loop, connected_bus):
        """Test the first heartbeat carries the newcomer tag."""
        assert make_loop(connected_bus).build_claim(newcomer=True).newcomer

    # ================================================================
    # Publication tests
    # ================================================================

    async def test_announce_publishes_signed_heartbeat(
        self, make_loop, connected_bus, broker, codec, scheme, identity
    ):
        """Test announce publishes on the presence subject."""
        loop = make_loop(connected_bus)

        await loop.announce()

        message = broker.published[-1]
        assert message.subject == scheme.presence
        claim = codec.decode(message.data)
        assert isinstance(claim, HeartbeatClaim)
        assert claim.iss == identity.public_key
        assert loop.sent == 1

    async def test_start_sends_newcomer_first(
        self, make_loop, connected_bus, broker, codec, wait_until
    ):
        """Test start emits a newcomer heartbeat right away."""
        ticks = []

        async def on_tick(now):
            ticks.append(now)

        loop = make_loop(connected_bus, on_tick=on_tick)
        await loop.start()
        await wait_until(lambda: ticks)

        assert loop.is_running
        assert codec.decode(broker.published[0].data).newcomer
        assert ticks == [NOW]

        await loop.stop()
        assert not loop.is_running

    async def test_emissions_repeat(
        self, make_loop, connected_bus, codec, broker, wait_until
    ):
        """Test only the first heartbeat is tagged as a newcomer."""
        loop = make_loop(connected_bus, interval=0.01)
        await loop.start()
        await wait_until(lambda: loop.sent >= 3)
        await loop.stop()

        claims = [codec.decode(m.data) for m in broker.published]
        assert claims[0].newcomer
        assert not any(c.newcomer for c in claims[1:])

    async def test_bus_error_does_not_stop_loop(
        self, make_loop, broker, wait_until
    ):
        """Test a failed publication is retried on the next tick."""
        ticks = []

        async def on_tick(now):
            ticks.append(now)

        bus = LocalMessageBus(broker)
        loop = make_loop(bus, interval=0.01, on_tick=on_tick)
        await loop.start()
        await wait_until(lambda: len(ticks) >= 2)

        assert loop.sent == 0
        assert loop.is_running
        await loop.stop()

    async def test_signing_error_does_not_stop_loop(
        self, make_loop, connected_bus, codec, reporter, caplog, monkeypatch, wait_until
    ):
        """Test a claim that fails to sign is logged and the loop keeps going."""
        reporter.logger.propagate = True
        encode = codec.encode
        calls = []

        def flaky_encode(claim, key_pair):
            calls.append(claim)
            if len(calls) == 1:
                raise ClaimSigningError("no key")
            return encode(claim, key_pair)

        monkeypatch.setattr(codec, "encode", flaky_encode)
        loop = make_loop(connected_bus, interval=0.01)
        await loop.start()
        await wait_until(lambda: loop.sent >= 1)

        assert loop.is_running
        assert any("no key" in r.getMessage() for r in caplog.records)
        await loop.stop()

    async def test_tick_error_does_not_stop_loop(
        self, make_loop, connected_bus, reporter, caplog, wait_until
    ):
        """Test a failing tick callback is logged and ticks continue."""
        reporter.logger.propagate = True
        ticks = []

        async def on_tick(now):
            ticks.append(now)
            raise RuntimeError("sweep broke")

        loop = make_loop(connected_bus, interval=0.01, on_tick=on_tick)
        await loop.start()
        await wait_until(lambda: len(ticks) >= 2)

        assert loop.is_running
        assert any("sweep broke" in r.getMessage() for r in caplog.records)
        await loop.stop()

    async def test_reannounce_is_not_newcomer(
        self, make_loop, connected_bus, broker, codec
    ):
        """Test an out-of-cycle heartbeat has no newcomer tag."""
        await make_loop(connected_bus).reannounce()

        assert not codec.decode(broker.published[-1].data).newcomer

    async def test_stop_without_start(self, make_loop, connected_bus):
        """Test stop on an idle loop is a no-op."""
        await make_loop(connected_bus).stop()
