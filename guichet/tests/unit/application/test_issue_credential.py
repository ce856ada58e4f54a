"""
Unit tests for IssueCredentialUseCase.
"""

from unittest.mock import MagicMock

import pytest

from guichet.application.use_cases import IssueCredentialUseCase
from guichet.domain.exceptions import EmptyNameError, SigningError
from shared.identity import (
    ClaimSigningError,
    IdentityClaims,
    KeyPair,
    parse_credentials,
)

FIXED_NOW = 1_700_000_000


class TestIssueCredentialUseCase:
    """Unit tests for IssueCredentialUseCase."""

    # ================================================================
    # Happy path tests
    # ================================================================

    def test_token_binds_canonical_name(self, issue_use_case, codec):
        """Test the token carries the canonical display name."""
        bundle = issue_use_case.execute(b"Alexandria Smith")
        claims = codec.decode(bundle.token)

        assert isinstance(claims, IdentityClaims)
        assert claims.name == "alexandr"
        assert bundle.name == "alexandr"

    def test_token_subject_is_new_key(self, issue_use_case, codec):
        """Test the subject is the freshly generated key of the bundle."""
        bundle = issue_use_case.execute(b"sam")
        claims = codec.decode(bundle.token)

        assert claims.sub == bundle.public_key
        assert KeyPair.from_seed(bundle.seed).public_key == bundle.public_key

    def test_token_limits(self, issue_use_case, codec, authority):
        """Test expiry, payload limit and issuer account."""
        claims = codec.decode(issue_use_case.execute(b"sam").token)

        assert claims.iat == FIXED_NOW
        assert claims.exp == FIXED_NOW + 24 * 3600
        assert claims.max_payload == 1024
        assert claims.issuer_account == authority.account_id

    def test_signed_by_delegated_key(self, issue_use_case, codec, signing_key, account_key):
        """Test identities are signed with the signing key, not the account root."""
        claims = codec.decode(issue_use_case.execute(b"sam").token)

        assert claims.iss == signing_key.public_key
        assert claims.iss != account_key.public_key

    def test_own_inbox_in_allow_lists(self, issue_use_case, codec):
        """Test the allow-lists reference the new key's own inbox."""
        bundle = issue_use_case.execute(b"sam")
        claims = codec.decode(bundle.token)
        own_inbox = f"chat.OSCON2019.dms.{bundle.public_key}"

        assert own_inbox in claims.permissions.pub.allow
        assert own_inbox in claims.permissions.sub.allow
        assert "chat.OSCON2019.dms.*" not in claims.permissions.pub.allow

    def test_same_name_gets_distinct_identities(self, issue_use_case):
        """Test requests are stateless: same name, different keys."""
        first = issue_use_case.execute(b"sam")
        second = issue_use_case.execute(b"sam")

        assert first.name == second.name
        assert first.public_key != second.public_key

    def test_rendered_bundle_parses(self, issue_use_case):
        """Test the rendered document round-trips through the parser."""
        bundle = issue_use_case.execute(b"sam")
        creds = parse_credentials(bundle.render())

        assert creds.token == bundle.token
        assert bytes(creds.seed).decode() == bundle.seed

    def test_seed_hidden_from_repr(self, issue_use_case):
        """Test the seed never shows in the bundle repr."""
        bundle = issue_use_case.execute(b"sam")
        assert bundle.seed not in repr(bundle)

    def test_custom_limits(self, authority, scoper, codec):
        """Test validity, payload and name length are configurable."""
        use_case = IssueCredentialUseCase(
            authority=authority,
            scoper=scoper,
            codec=codec,
            validity_hours=1,
            max_payload=512,
            max_name_length=3,
            clock=lambda: FIXED_NOW,
        )
        bundle = use_case.execute(b"Alexandria")
        claims = codec.decode(bundle.token)

        assert claims.name == "ale"
        assert claims.exp == FIXED_NOW + 3600
        assert claims.max_payload == 512

    # ================================================================
    # Error tests
    # ================================================================

    @pytest.mark.parametrize("raw", [b"", b"   ", ""])
    def test_empty_name_rejected(self, issue_use_case, raw):
        """Test empty names are never defaulted."""
        with pytest.raises(EmptyNameError) as exc_info:
            issue_use_case.execute(raw)

        assert str(exc_info.value) == "Name can not be empty"

    def test_signing_failure(self, authority, scoper):
        """Test codec failures surface as SigningError."""
        codec = MagicMock()
        codec.encode.side_effect = ClaimSigningError("no key")
        use_case = IssueCredentialUseCase(authority=authority, scoper=scoper, codec=codec)

        with pytest.raises(SigningError):
            use_case.execute(b"sam")
