"""
Display name canonicalization.

Both the issuer and the chat client derive display names the same way:
first whitespace-delimited token, lower case, at most 8 characters.
"""

from typing import Union

from shared.identity.exceptions import InvalidDisplayNameError

MAX_NAME_LENGTH = 8


def canonicalize_display_name(
    raw: Union[str, bytes], max_length: int = MAX_NAME_LENGTH
) -> str:
    """
    Derive the canonical display name from a requested name.

    Args:
        raw: Requested name (UTF-8 bytes or text)
        max_length: Maximum name length in characters

    Returns:
        Canonical display name

    Raises:
        InvalidDisplayNameError: If nothing is left after normalization

    Example:
        >>> canonicalize_display_name("Alexandria Smith")
        'alexandr'
    """
    if isinstance(raw, (bytes, bytearray)):
        raw = bytes(raw).decode("utf-8", errors="replace")

    tokens = raw.lower().split()
    if not tokens:
        raise InvalidDisplayNameError(raw)

    return tokens[0][:max_length]
