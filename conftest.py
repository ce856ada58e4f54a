"""
Common test fixtures for all parts of the monorepo.
"""

import pytest

from shared.identity import AccountClaims, ClaimCodec, KeyPair, KeyRole, SubjectScheme
from shared.messaging import LocalBroker
from shared.reporter import SystemReporter


@pytest.fixture
def reporter() -> SystemReporter:
    """Verbose reporter writing to stdout (captured by pytest)."""
    return SystemReporter(name="test", verbose=3)


@pytest.fixture
def codec() -> ClaimCodec:
    return ClaimCodec()


@pytest.fixture
def scheme() -> SubjectScheme:
    """Default subject scheme."""
    return SubjectScheme()


@pytest.fixture
def operator_key() -> KeyPair:
    return KeyPair.create(KeyRole.OPERATOR)


@pytest.fixture
def account_key() -> KeyPair:
    return KeyPair.create(KeyRole.ACCOUNT)


@pytest.fixture
def signing_key() -> KeyPair:
    """Delegated account signing key."""
    return KeyPair.create(KeyRole.ACCOUNT)


@pytest.fixture
def account_claims(account_key, signing_key) -> AccountClaims:
    """Account document declaring the delegated signing key."""
    return AccountClaims(
        sub=account_key.public_key,
        name="chat",
        signing_keys=[signing_key.public_key],
    )


@pytest.fixture
def account_token(account_claims, operator_key, codec) -> str:
    """Operator-signed account document."""
    return codec.encode(account_claims, operator_key)


@pytest.fixture
def broker(reporter) -> LocalBroker:
    """In-process message broker."""
    return LocalBroker(reporter=reporter)
