"""
Credentials loader - builds the local identity from a credentials file.
"""

import os
import time
from pathlib import Path
from typing import Callable, Optional

from causerie.domain.entities import LocalIdentity
from causerie.domain.exceptions import CredentialsExpiredError, CredentialsLoadError
from shared.identity import (
    ClaimCodec,
    ClaimError,
    CredentialsFormatError,
    IdentityClaims,
    InvalidDisplayNameError,
    KeyEncodingError,
    KeyPair,
    canonicalize_display_name,
    parse_credentials,
    wipe_buffer,
)
from shared.reporter import SystemReporter
from shared.reporter.emojis import Emoji


def _read_into_buffer(path: Path) -> bytearray:
    with path.open("rb") as f:
        buffer = bytearray(os.fstat(f.fileno()).st_size)
        read = f.readinto(buffer)
    del buffer[read:]
    return buffer


def load_local_identity(
    creds_file: str,
    codec: ClaimCodec,
    name_override: Optional[str] = None,
    clock: Callable[[], float] = time.time,
    reporter: Optional[SystemReporter] = None,
) -> LocalIdentity:
    """
    Load the identity token and key pair from a credentials document.

    The file is read into a buffer that is wiped once parsed, and the
    parsed seed is wiped as soon as the key pair is built; the key pair
    keeps the only remaining copy. Expired credentials are refused.

    Args:
        creds_file: Path to the credentials document
        codec: Claim codec
        name_override: Display name to use instead of the token's name
        clock: Time source (epoch seconds)
        reporter: Optional SystemReporter for logging

    Returns:
        LocalIdentity

    Raises:
        CredentialsLoadError: If the file is unreadable or inconsistent
        CredentialsExpiredError: If the identity token has expired
    """
    path = Path(creds_file)
    try:
        contents = _read_into_buffer(path)
    except OSError as e:
        raise CredentialsLoadError(
            f"Could not read credentials file: {e}", path=str(path)
        )

    try:
        credentials = parse_credentials(contents)
    except CredentialsFormatError as e:
        raise CredentialsLoadError(str(e), path=str(path))
    finally:
        wipe_buffer(contents)

    try:
        key_pair = KeyPair.from_seed(credentials.seed)
    except KeyEncodingError as e:
        raise CredentialsLoadError(f"Could not decode seed: {e}", path=str(path))
    finally:
        credentials.wipe_seed()

    try:
        claims = codec.decode(credentials.token)
    except ClaimError as e:
        raise CredentialsLoadError(f"Could not decode user: {e}", path=str(path))

    if not isinstance(claims, IdentityClaims):
        raise CredentialsLoadError(
            f"Expected a user token, got {claims.type}", path=str(path)
        )

    if claims.sub != key_pair.public_key:
        raise CredentialsLoadError(
            "Seed does not match the identity token", path=str(path)
        )

    if claims.is_expired(clock()):
        raise CredentialsExpiredError(claims.exp)

    display_name = claims.name
    if name_override and name_override.strip():
        try:
            display_name = canonicalize_display_name(name_override)
        except InvalidDisplayNameError as e:
            raise CredentialsLoadError(str(e), path=str(path))

    if reporter:
        reporter.info(
            f"{Emoji.SECURITY.KEY} Loaded identity {key_pair.public_key[:8]}... "
            f"as {display_name!r}",
            context="Credentials",
            verbose_level=1,
        )

    return LocalIdentity(key_pair=key_pair, claims=claims, display_name=display_name)
