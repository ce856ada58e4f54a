"""
Unit tests for MessageRouter.
"""

import pytest

from causerie.application.use_cases import (
    ProcessChannelPostUseCase,
    ProcessDirectMessageUseCase,
    ProcessHeartbeatUseCase,
    SelectViewUseCase,
)
from causerie.domain.exceptions import NameSpaceExhaustedError
from causerie.infrastructure.auth import ClaimValidator
from causerie.presentation import MessageRouter
from shared.identity import (
    ChannelPostClaim,
    DirectMessageClaim,
    HeartbeatClaim,
    KeyPair,
    KeyRole,
)
from shared.messaging import BusMessage, BusNotConnectedError, LocalMessageBus


@pytest.fixture
def zoe() -> KeyPair:
    return KeyPair.create(KeyRole.USER)


@pytest.fixture
def make_router(connected_bus, scheme, codec, view, reporter):
    """
    Factory wiring a router to a session.

    Returns the router, the list of re-announces and the list of fatal
    errors.
    """

    def _make(session, announce_error=None):
        announces = []
        fatals = []

        async def announce():
            announces.append(True)
            if announce_error:
                raise announce_error

        router = MessageRouter(
            bus=connected_bus,
            scheme=scheme,
            own_public_key=session.identity.public_key,
            validator=ClaimValidator(codec, reporter=reporter),
            process_heartbeat=ProcessHeartbeatUseCase(session, reporter=reporter),
            process_post=ProcessChannelPostUseCase(session, reporter=reporter),
            process_direct=ProcessDirectMessageUseCase(session, reporter=reporter),
            view=view,
            announce=announce,
            on_fatal=fatals.append,
            reporter=reporter,
        )
        return router, announces, fatals

    return _make


@pytest.fixture
def message(codec):
    """Build a bus message carrying a signed claim."""

    def _message(subject, claim, key_pair):
        return BusMessage(subject, codec.encode(claim, key_pair).encode("ascii"))

    return _message


@pytest.fixture
def online(scheme, message):
    """Build a heartbeat message."""

    def _online(key_pair, name, newcomer=False):
        claim = HeartbeatClaim(
            sub=key_pair.public_key, name=name, tags=["new"] if newcomer else []
        )
        return message(scheme.presence, claim, key_pair)

    return _online


class TestMessageRouter:
    """Unit tests for MessageRouter."""

    # ================================================================
    # Subscription tests
    # ================================================================

    async def test_start_subscribes(self, make_router, session, broker, scheme):
        """Test the router listens on presence, posts and our inbox only."""
        router, _, _ = make_router(session)
        own_inbox = scheme.dm_subject(session.identity.public_key)
        other_inbox = scheme.dm_subject(KeyPair.create(KeyRole.USER).public_key)

        await router.start()

        assert len(broker.subscribers(scheme.presence)) == 1
        assert len(broker.subscribers(scheme.post_subject("NATS"))) == 1
        assert len(broker.subscribers(own_inbox)) == 1
        assert broker.subscribers(other_inbox) == []

    async def test_stop_unsubscribes(self, make_router, session, broker, scheme):
        """Test stop removes every subscription."""
        router, _, _ = make_router(session)
        await router.start()

        await router.stop()

        assert broker.subscribers(scheme.presence) == []

    async def test_heartbeat_over_bus(
        self, make_router, session, broker, online, zoe, view
    ):
        """Test a heartbeat published by a peer reaches the session."""
        router, announces, _ = make_router(session)
        await router.start()
        peer = LocalMessageBus(broker, name="zoe")
        await peer.connect()

        message = online(zoe, "zoe", newcomer=True)
        await peer.publish(message.subject, message.data)

        assert view.named("peer_joined") == ["zoe"]
        assert announces == [True]

    # ================================================================
    # Presence tests
    # ================================================================

    async def test_new_peer_joins_and_reannounces(
        self, make_router, session, online, zoe, view
    ):
        """Test a first heartbeat shows the peer and re-announces us."""
        router, announces, _ = make_router(session)

        await router.handle_presence(online(zoe, "zoe"))

        assert view.named("peer_joined") == ["zoe"]
        assert announces == [True]

    async def test_regular_heartbeat_is_quiet(
        self, make_router, session, online, zoe, view
    ):
        """Test a known peer's regular heartbeat changes nothing visible."""
        router, announces, _ = make_router(session)
        await router.handle_presence(online(zoe, "zoe"))

        await router.handle_presence(online(zoe, "zoe"))

        assert view.named("peer_joined") == ["zoe"]
        assert announces == [True]

    async def test_invalid_heartbeat_ignored(
        self, make_router, session, scheme, view
    ):
        """Test garbage on the presence subject is dropped."""
        router, announces, _ = make_router(session)

        await router.handle_presence(BusMessage(scheme.presence, b"garbage"))

        assert view.calls == []
        assert announces == []

    async def test_post_on_presence_subject_ignored(
        self, make_router, session, scheme, message, zoe, view
    ):
        """Test a claim of the wrong type on the presence subject is dropped."""
        router, announces, _ = make_router(session)
        claim = ChannelPostClaim(sub="NATS", name="zoe", msg="hi")

        await router.handle_presence(message(scheme.presence, claim, zoe))

        assert view.calls == []
        with session.lock:
            assert len(session.tracker) == 1

    async def test_name_space_exhausted_is_fatal(
        self, make_router, make_session, identity, online, zoe
    ):
        """Test running out of display names stops the session."""
        session = make_session(identity, max_attempts=0)
        router, _, fatals = make_router(session)

        await router.handle_presence(online(zoe, "sam"))

        assert len(fatals) == 1
        assert isinstance(fatals[0], NameSpaceExhaustedError)

    async def test_reannounce_failure_logged(
        self, make_router, session, online, zoe, view
    ):
        """Test a failed re-announce does not break message handling."""
        router, announces, _ = make_router(
            session, announce_error=BusNotConnectedError("gone")
        )

        await router.handle_presence(online(zoe, "zoe"))

        assert announces == [True]
        assert view.named("peer_joined") == ["zoe"]

    # ================================================================
    # Post tests
    # ================================================================

    async def test_visible_post_appended(
        self, make_router, session, scheme, message, zoe, view
    ):
        """Test a post for the current channel is shown."""
        router, _, _ = make_router(session)
        SelectViewUseCase(session).select_channel("NATS")
        claim = ChannelPostClaim(sub="NATS", name="zoe", msg="hello")

        await router.handle_post(message(scheme.post_subject("NATS"), claim, zoe))

        entries = view.named("append_entry")
        assert [(e.sender, e.text) for e in entries] == [("zoe", "hello")]

    async def test_hidden_post_stored(
        self, make_router, session, scheme, message, zoe, view
    ):
        """Test a post for another channel is stored but not shown."""
        router, _, _ = make_router(session)
        SelectViewUseCase(session).select_channel("OSCON")
        claim = ChannelPostClaim(sub="NATS", name="zoe", msg="hello")

        await router.handle_post(message(scheme.post_subject("NATS"), claim, zoe))

        assert view.named("append_entry") == []
        with session.lock:
            assert len(session.channel_log("NATS")) == 1

    # ================================================================
    # Direct message tests
    # ================================================================

    async def test_dm_marks_unread(
        self, make_router, session, scheme, message, online, zoe, view
    ):
        """Test a DM from a peer not in view marks it unread."""
        router, _, _ = make_router(session)
        await router.handle_presence(online(zoe, "zoe"))
        inbox = scheme.dm_subject(session.identity.public_key)
        claim = DirectMessageClaim(sub=session.identity.public_key, msg="psst")

        await router.handle_direct(message(inbox, claim, zoe))

        assert view.named("mark_unread") == ["zoe"]
        assert view.named("append_entry") == []

    async def test_dm_in_view(
        self, make_router, session, scheme, message, online, zoe, view
    ):
        """Test a DM from the selected peer is shown."""
        router, _, _ = make_router(session)
        await router.handle_presence(online(zoe, "zoe"))
        SelectViewUseCase(session).select_peer("zoe")
        inbox = scheme.dm_subject(session.identity.public_key)
        claim = DirectMessageClaim(sub=session.identity.public_key, msg="psst")

        await router.handle_direct(message(inbox, claim, zoe))

        assert [e.text for e in view.named("append_entry")] == ["psst"]
        assert view.named("mark_unread") == []

    async def test_dm_from_stranger_dropped(
        self, make_router, session, scheme, message, zoe, view
    ):
        """Test a DM from a key we never heard from is dropped silently."""
        router, _, _ = make_router(session)
        inbox = scheme.dm_subject(session.identity.public_key)
        claim = DirectMessageClaim(sub=session.identity.public_key, msg="psst")

        await router.handle_direct(message(inbox, claim, zoe))

        assert view.calls == []
