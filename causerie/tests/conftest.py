"""
Causerie test fixtures.
"""

import asyncio
import time

import pytest

from causerie.application.session_state import SessionState
from causerie.domain.entities import LocalIdentity
from causerie.domain.services import IdentityResolver, PresenceTracker
from causerie.infrastructure.dedup import SeenTokenSet
from shared.identity import (
    ChannelPostClaim,
    DirectMessageClaim,
    HeartbeatClaim,
    IdentityClaims,
    KeyPair,
    KeyRole,
    format_credentials,
)
from shared.messaging import LocalMessageBus

CHANNELS = ["OSCON", "NATS", "General"]
FIXED_NOW = 1_700_000_000


class RecordingView:
    """ChatView that records every call."""

    def __init__(self):
        self.calls = []

    def _record(self, method, arg):
        self.calls.append((method, arg))

    def show_view(self, snapshot):
        self._record("show_view", snapshot)

    def append_entry(self, entry):
        self._record("append_entry", entry)

    def peer_joined(self, display_name):
        self._record("peer_joined", display_name)

    def mark_unread(self, display_name):
        self._record("mark_unread", display_name)

    def show_directory(self, listing):
        self._record("show_directory", listing)

    def presence_changed(self, result):
        self._record("presence_changed", result)

    def notify(self, text):
        self._record("notify", text)

    def named(self, method):
        """Arguments of every call to one method."""
        return [arg for name, arg in self.calls if name == method]


@pytest.fixture
def view() -> RecordingView:
    return RecordingView()


@pytest.fixture
def make_view():
    """Factory for extra recording views (one per client)."""
    return RecordingView


@pytest.fixture
def make_identity(account_key):
    """Factory for local identities (unsigned, for session tests)."""

    def _make(name="sam", expires_in=3600, max_payload=1024, key_pair=None):
        key_pair = key_pair or KeyPair.create(KeyRole.USER)
        claims = IdentityClaims(
            sub=key_pair.public_key,
            name=name,
            exp=int(time.time()) + expires_in,
            issuer_account=account_key.public_key,
            max_payload=max_payload,
        )
        return LocalIdentity(key_pair=key_pair, claims=claims, display_name=name)

    return _make


@pytest.fixture
def identity(make_identity) -> LocalIdentity:
    return make_identity("sam")


@pytest.fixture
def make_session():
    """Factory for session states over fresh trackers."""

    def _make(identity, eviction_seconds=None, dedup_direct_messages=True, **kwargs):
        tracker = PresenceTracker(
            IdentityResolver(**kwargs), eviction_seconds=eviction_seconds
        )
        return SessionState(
            identity=identity,
            channels=CHANNELS,
            tracker=tracker,
            seen_tokens=SeenTokenSet(),
            dedup_direct_messages=dedup_direct_messages,
            clock=lambda: FIXED_NOW,
        )

    return _make


@pytest.fixture
def session(make_session, identity) -> SessionState:
    return make_session(identity)


@pytest.fixture
def sign(codec):
    """Sign a claim and decode it back, as the validator would hand it over."""

    def _sign(claim, key_pair):
        return codec.decode(codec.encode(claim, key_pair))

    return _sign


@pytest.fixture
def heartbeat(sign):
    """Factory for signed heartbeats."""

    def _heartbeat(key_pair, name, newcomer=False, exp=None):
        claim = HeartbeatClaim(
            sub=key_pair.public_key,
            name=name,
            exp=exp,
            tags=["new"] if newcomer else [],
        )
        return sign(claim, key_pair)

    return _heartbeat


@pytest.fixture
def post(sign):
    """Factory for signed channel posts."""

    def _post(key_pair, channel, msg, name="peer"):
        return sign(ChannelPostClaim(sub=channel, name=name, msg=msg), key_pair)

    return _post


@pytest.fixture
def direct(sign):
    """Factory for signed direct messages."""

    def _direct(key_pair, recipient, msg, name="peer"):
        return sign(DirectMessageClaim(sub=recipient, name=name, msg=msg), key_pair)

    return _direct


@pytest.fixture
def write_creds(tmp_path, codec, signing_key, account_key):
    """
    Write a credentials document signed by the delegated signing key.

    Returns the file path and the user key pair.
    """

    def _write(name="sam", expires_at=None, filename=None, key_pair=None):
        key_pair = key_pair or KeyPair.create(KeyRole.USER)
        claims = IdentityClaims(
            sub=key_pair.public_key,
            name=name,
            exp=expires_at if expires_at is not None else int(time.time()) + 3600,
            issuer_account=account_key.public_key,
            max_payload=1024,
        )
        token = codec.encode(claims, signing_key)
        path = tmp_path / (filename or f"{name}.creds")
        path.write_text(format_credentials(token, key_pair.seed))
        return str(path), key_pair

    return _write


@pytest.fixture
async def connected_bus(broker) -> LocalMessageBus:
    """Connected in-process bus."""
    bus = LocalMessageBus(broker, name="test")
    await bus.connect()
    return bus


@pytest.fixture
def wait_until():
    """Poll a predicate on the event loop until it holds."""

    async def _wait(predicate, timeout=2.0, interval=0.01):
        deadline = time.monotonic() + timeout
        while not predicate():
            if time.monotonic() > deadline:
                raise AssertionError("condition not met in time")
            await asyncio.sleep(interval)

    return _wait
