"""
End-to-end tests: credentials from the issuer used by a chat client.
"""

import time

import pytest

from causerie.config import Settings as CauserieSettings
from causerie.main import CauserieApp
from guichet.config import Settings as GuichetSettings
from guichet.main import GuichetApp
from shared.identity import SubjectScheme
from shared.messaging import LocalMessageBus

DAY = 24 * 3600


@pytest.fixture
def guichet_settings(tmp_path, account_token, signing_key) -> GuichetSettings:
    account_file = tmp_path / "account.jwt"
    signing_key_file = tmp_path / "signing_key.nk"
    account_file.write_text(account_token + "\n")
    signing_key_file.write_text(signing_key.seed + "\n")
    return GuichetSettings(
        account_file=str(account_file), signing_key_file=str(signing_key_file)
    )


@pytest.fixture
def request_creds(broker, guichet_settings, reporter, tmp_path):
    """Start an issuer and ask it for credentials; returns the saved file."""

    async def _request(name: bytes) -> str:
        issuer = GuichetApp(
            guichet_settings,
            bus=LocalMessageBus(broker, name="guichet"),
            reporter=reporter,
        )
        await issuer.start()

        requester = LocalMessageBus(broker, name="requester")
        await requester.connect()
        reply = await requester.request("chat.req.access", name, timeout=1.0)
        await requester.close()

        path = tmp_path / "issued.creds"
        path.write_bytes(reply.data)
        return str(path)

    return _request


class TestIssueAndChat:
    """End-to-end tests for issuer and client together."""

    async def test_issued_credentials_start_a_client(
        self, request_creds, broker, reporter, view, account_key
    ):
        """Test a client starts with issued credentials under the canonical name."""
        before = time.time()
        creds = await request_creds(b"Derek Collison")

        app = CauserieApp(
            CauserieSettings(creds_file=creds, log_dir=None),
            bus=LocalMessageBus(broker, name="derek"),
            reporter=reporter,
            view=view,
        )
        await app.start()

        identity = app.container.local_identity
        assert identity.display_name == "derek"
        assert identity.claims.issuer_account == account_key.public_key
        assert before + DAY - 5 <= identity.expires_at <= time.time() + DAY + 5

        own_inbox = SubjectScheme().dm_subject(identity.public_key)
        assert own_inbox in identity.claims.permissions.pub.allow
        assert own_inbox in identity.claims.permissions.sub.allow

        state = app.container.session_state
        with state.lock:
            assert [p.display_name for p in state.tracker.peers()] == ["derek"]

        await app.stop()

    async def test_name_override(self, request_creds, broker, reporter, view):
        """Test the client-side name override is canonicalised."""
        creds = await request_creds(b"Derek Collison")

        app = CauserieApp(
            CauserieSettings(creds_file=creds, name="Kit Marlowe", log_dir=None),
            bus=LocalMessageBus(broker, name="kit"),
            reporter=reporter,
            view=view,
        )
        await app.start()

        assert app.container.local_identity.display_name == "kit"
        await app.stop()
