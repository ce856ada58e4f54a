"""
Loading and bootstrapping of the issuer's signing authority.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from guichet.domain.entities import SigningAuthority
from guichet.domain.exceptions import AuthorityLoadError
from shared.identity import (
    AccountClaims,
    ClaimCodec,
    ClaimError,
    KeyEncodingError,
    KeyPair,
    KeyRole,
)
from shared.reporter import SystemReporter
from shared.reporter.emojis import Emoji

ACCOUNT_FILE = "account.jwt"
ACCOUNT_SEED_FILE = "account.nk"
SIGNING_KEY_FILE = "signing_key.nk"
OPERATOR_SEED_FILE = "operator.nk"


def _read(path: str, what: str) -> bytes:
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise AuthorityLoadError(f"Could not load {what} file: {e}", path=path)


def load_signing_authority(
    account_file: str,
    signing_key_file: str,
    codec: Optional[ClaimCodec] = None,
    reporter: Optional[SystemReporter] = None,
) -> SigningAuthority:
    """
    Load the account document and the delegated signing key.

    Args:
        account_file: Path to the operator-signed account token
        signing_key_file: Path to the signing key seed
        codec: Claim codec (default: new ClaimCodec)
        reporter: Optional SystemReporter for logging

    Returns:
        SigningAuthority

    Raises:
        AuthorityLoadError: If either file is missing or unreadable, the
            account document is invalid or expired, or the key is not an
            account key
    """
    codec = codec or ClaimCodec()

    contents = _read(account_file, "account")
    try:
        account = codec.decode(contents.strip())
    except ClaimError as e:
        raise AuthorityLoadError(f"Could not decode account: {e}", path=account_file)

    if not isinstance(account, AccountClaims):
        raise AuthorityLoadError(
            f"Expected an account document, got a {account.type} claim",
            path=account_file,
        )
    if account.is_expired():
        raise AuthorityLoadError("Account document has expired", path=account_file)

    seed = _read(signing_key_file, "signing key")
    try:
        signing_key = KeyPair.from_seed(seed)
    except KeyEncodingError as e:
        raise AuthorityLoadError(
            f"Could not decode signing key: {e}", path=signing_key_file
        )

    if signing_key.role != KeyRole.ACCOUNT:
        raise AuthorityLoadError(
            f"Signing key must be an account key, got {signing_key.role.name}",
            path=signing_key_file,
        )

    authority = SigningAuthority(account=account, signing_key=signing_key)

    if reporter:
        reporter.info(
            f"{Emoji.SECURITY.KEY} Loaded account {authority.account_id} "
            f"({account.name or 'unnamed'})",
            context="AuthorityLoader",
        )
        if not authority.is_declared_signing_key():
            reporter.warning(
                f"{Emoji.ERROR.WARNING} Signing key {authority.signing_public_key} "
                f"is not declared by the account; issued identities may be rejected",
                context="AuthorityLoader",
            )

    return authority


@dataclass(frozen=True)
class BootstrapResult:
    """Files written by ``bootstrap_authority``."""

    account_file: Path
    signing_key_file: Path
    account_seed_file: Path
    operator_seed_file: Path
    account_id: str
    signing_public_key: str


def _write_secret(path: Path, text: str) -> None:
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
    with os.fdopen(fd, "w", encoding="ascii") as f:
        f.write(text + "\n")


def bootstrap_authority(
    directory: str,
    account_name: str = "chat",
    codec: Optional[ClaimCodec] = None,
) -> BootstrapResult:
    """
    Create an operator, an account and a delegated signing key.

    Writes the operator-signed account document and the seeds into
    ``directory`` so a local deployment can run without external tooling.
    Existing files are never overwritten.

    Args:
        directory: Target directory (created if missing)
        account_name: Name recorded in the account document
        codec: Claim codec (default: new ClaimCodec)

    Returns:
        BootstrapResult with the written paths

    Raises:
        AuthorityLoadError: If a target file already exists or cannot be written
    """
    codec = codec or ClaimCodec()
    target = Path(directory)

    paths = {
        "account": target / ACCOUNT_FILE,
        "signing": target / SIGNING_KEY_FILE,
        "account_seed": target / ACCOUNT_SEED_FILE,
        "operator_seed": target / OPERATOR_SEED_FILE,
    }
    for path in paths.values():
        if path.exists():
            raise AuthorityLoadError(f"Refusing to overwrite {path}", path=str(path))

    operator = KeyPair.create(KeyRole.OPERATOR)
    account_key = KeyPair.create(KeyRole.ACCOUNT)
    signing_key = KeyPair.create(KeyRole.ACCOUNT)

    account = AccountClaims(
        sub=account_key.public_key,
        name=account_name,
        signing_keys=[signing_key.public_key],
    )
    token = codec.encode(account, operator)

    try:
        target.mkdir(parents=True, exist_ok=True)
        paths["account"].write_text(token + "\n", encoding="ascii")
        _write_secret(paths["signing"], signing_key.seed)
        _write_secret(paths["account_seed"], account_key.seed)
        _write_secret(paths["operator_seed"], operator.seed)
    except OSError as e:
        raise AuthorityLoadError(f"Could not write authority files: {e}")

    return BootstrapResult(
        account_file=paths["account"],
        signing_key_file=paths["signing"],
        account_seed_file=paths["account_seed"],
        operator_seed_file=paths["operator_seed"],
        account_id=account_key.public_key,
        signing_public_key=signing_key.public_key,
    )
