"""
Credentials document format.

A credentials document holds an identity token and the matching user
seed, each wrapped in dashed banner lines:

    -----BEGIN NATS USER JWT-----
    <token>
    ------END NATS USER JWT------

    ************************* IMPORTANT *************************
    NKEY Seed printed below can be used to sign and prove identity.
    NKEYs are sensitive and should be treated as secrets.

    -----BEGIN USER NKEY SEED-----
    <seed>
    ------END USER NKEY SEED------

    *************************************************************
"""

import re
from dataclasses import dataclass
from typing import Union

from shared.identity.exceptions import CredentialsFormatError

ERROR_PREFIX = "-ERR"

_CREDENTIALS_TEMPLATE = """-----BEGIN NATS USER JWT-----
{token}
------END NATS USER JWT------

************************* IMPORTANT *************************
NKEY Seed printed below can be used to sign and prove identity.
NKEYs are sensitive and should be treated as secrets.

-----BEGIN USER NKEY SEED-----
{seed}
------END USER NKEY SEED------

*************************************************************
"""

# Any line of three or more dashes, some text, three or more dashes,
# around a single line of content.
_DECORATED_RE = re.compile(
    rb"\s*(?:(?:[-]{3,}[^\n]*[-]{3,}\n)(.+)(?:\n\s*[-]{3,}[^\n]*[-]{3,}\n))"
)


_WHITESPACE = b" \t\r\n"


def wipe_buffer(buffer: bytearray) -> None:
    """Overwrite a secret-holding buffer in place."""
    buffer[:] = b"x" * len(buffer)


def _stripped_span(contents, start: int, end: int):
    while start < end and contents[start] in _WHITESPACE:
        start += 1
    while end > start and contents[end - 1] in _WHITESPACE:
        end -= 1
    return start, end


@dataclass
class Credentials:
    """
    Parsed credentials document.

    ``seed`` is a mutable buffer so the caller can wipe it once the key
    pair has been built.
    """

    token: str
    seed: bytearray

    def wipe_seed(self) -> None:
        """Overwrite the seed buffer in place."""
        wipe_buffer(self.seed)

    def __repr__(self) -> str:
        return f"Credentials(token={self.token[:16]}..., seed=<redacted>)"


def format_credentials(token: str, seed: str) -> str:
    """
    Render a credentials document.

    Args:
        token: Signed identity token
        seed: Encoded user seed

    Returns:
        Credentials text
    """
    return _CREDENTIALS_TEMPLATE.format(token=token, seed=seed)


def parse_credentials(contents: Union[str, bytes, bytearray]) -> Credentials:
    """
    Extract the token and seed from a credentials document.

    The seed is copied straight out of ``contents`` into its own buffer,
    so a caller holding the document in a bytearray can wipe both.

    Args:
        contents: Document text

    Returns:
        Credentials

    Raises:
        CredentialsFormatError: If the document does not hold exactly a
            token and a seed
    """
    if isinstance(contents, str):
        contents = contents.encode("utf-8")

    matches = list(_DECORATED_RE.finditer(contents))
    if len(matches) != 2:
        raise CredentialsFormatError("Expected user JWT and seed")

    token_start, token_end = _stripped_span(contents, *matches[0].span(1))
    seed_start, seed_end = _stripped_span(contents, *matches[1].span(1))
    return Credentials(
        token=bytes(contents[token_start:token_end]).decode("ascii", errors="replace"),
        seed=bytearray(memoryview(contents)[seed_start:seed_end]),
    )


def format_error(reason: str) -> str:
    """Render an error reply, e.g. ``-ERR 'Internal Error'``."""
    return f"{ERROR_PREFIX} '{reason}'"


def is_error_reply(data: Union[str, bytes]) -> bool:
    """Check whether a reply is an error reply."""
    if isinstance(data, (bytes, bytearray)):
        data = bytes(data).decode("utf-8", errors="replace")
    return data.startswith(ERROR_PREFIX)
