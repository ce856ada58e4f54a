"""
Guichet test fixtures.
"""

import pytest

from guichet.application.use_cases import IssueCredentialUseCase
from guichet.domain.entities import SigningAuthority
from guichet.domain.services import PermissionScoper

FIXED_NOW = 1_700_000_000


@pytest.fixture
def authority(account_claims, signing_key) -> SigningAuthority:
    return SigningAuthority(account=account_claims, signing_key=signing_key)


@pytest.fixture
def scoper(scheme) -> PermissionScoper:
    return PermissionScoper(scheme)


@pytest.fixture
def issue_use_case(authority, scoper, codec) -> IssueCredentialUseCase:
    """Issuance use case with a frozen clock."""
    return IssueCredentialUseCase(
        authority=authority,
        scoper=scoper,
        codec=codec,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def authority_files(tmp_path, account_token, signing_key):
    """Account document and signing key written to disk."""
    account_file = tmp_path / "account.jwt"
    signing_key_file = tmp_path / "signing_key.nk"
    account_file.write_text(account_token + "\n")
    signing_key_file.write_text(signing_key.seed + "\n")
    return str(account_file), str(signing_key_file)
