"""
Integration tests: issuer answering requests over the in-process bus.
"""

import pytest

from guichet.config import Settings
from guichet.domain.exceptions import AuthorityLoadError
from guichet.main import GuichetApp
from shared.identity import ClaimCodec, is_error_reply, parse_credentials
from shared.messaging import BusRequestTimeoutError, LocalMessageBus


@pytest.fixture
def settings(authority_files) -> Settings:
    account_file, signing_key_file = authority_files
    return Settings(account_file=account_file, signing_key_file=signing_key_file)


async def _client(broker) -> LocalMessageBus:
    bus = LocalMessageBus(broker, name="requester")
    await bus.connect()
    return bus


class TestIssuerOverBus:
    """Integration tests for GuichetApp on a LocalBroker."""

    # ================================================================
    # Request/reply tests
    # ================================================================

    async def test_request_returns_credentials(self, broker, settings, reporter):
        """Test a request on the access subject yields valid credentials."""
        app = GuichetApp(settings, bus=LocalMessageBus(broker), reporter=reporter)
        await app.start()
        client = await _client(broker)

        reply = await client.request("chat.req.access", b"Sam Smith", timeout=1.0)

        creds = parse_credentials(reply.data)
        claims = ClaimCodec().verify(creds.token)
        assert claims.name == "sam"

    async def test_empty_request_gets_error(self, broker, settings, reporter):
        """Test an empty request is answered with the error line only."""
        app = GuichetApp(settings, bus=LocalMessageBus(broker), reporter=reporter)
        await app.start()
        client = await _client(broker)

        reply = await client.request("chat.req.access", b"", timeout=1.0)

        assert is_error_reply(reply.data)
        assert reply.data == b"-ERR 'Name can not be empty'"

    async def test_queue_group_single_answer(self, broker, settings, reporter):
        """Test two issuer instances answer each request exactly once."""
        first = GuichetApp(settings, bus=LocalMessageBus(broker), reporter=reporter)
        second = GuichetApp(settings, bus=LocalMessageBus(broker), reporter=reporter)
        await first.start()
        await second.start()
        client = await _client(broker)

        for name in (b"a", b"b", b"c", b"d"):
            await client.request("chat.req.access", name, timeout=1.0)

        first_stats = first.container.credential_service.stats
        second_stats = second.container.credential_service.stats
        assert first_stats["requests"] + second_stats["requests"] == 4
        assert first_stats["requests"] == 2

    # ================================================================
    # Lifecycle tests
    # ================================================================

    async def test_missing_authority_fails_before_connect(self, broker, reporter, tmp_path):
        """Test startup fails on a missing account file without connecting."""
        settings = Settings(
            account_file=str(tmp_path / "nope.jwt"),
            signing_key_file=str(tmp_path / "nope.nk"),
        )
        bus = LocalMessageBus(broker)
        app = GuichetApp(settings, bus=bus, reporter=reporter)

        with pytest.raises(AuthorityLoadError):
            await app.start()

        assert bus.is_connected is False

    async def test_shutdown_drains(self, broker, settings, reporter):
        """Test shutdown drains the connection so no more requests are answered."""
        app = GuichetApp(settings, bus=LocalMessageBus(broker), reporter=reporter)
        await app.start()
        manager = app.container.shutdown_manager
        manager.register_shutdown_callback(app._drain_callback)
        client = await _client(broker)

        await manager.initiate_shutdown("SIGINT")

        assert app.container.bus.is_connected is False
        with pytest.raises(BusRequestTimeoutError):
            await client.request("chat.req.access", b"late", timeout=0.05)
