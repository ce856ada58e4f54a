"""
Domain exceptions for Causerie.
"""

from causerie.domain.exceptions.session_exceptions import (
    CredentialsExpiredError,
    CredentialsLoadError,
    NameSpaceExhaustedError,
    NoSelectionError,
    PayloadTooLargeError,
    SessionError,
    UnknownChannelError,
    UnknownPeerError,
)

__all__ = [
    "CredentialsExpiredError",
    "CredentialsLoadError",
    "NameSpaceExhaustedError",
    "NoSelectionError",
    "PayloadTooLargeError",
    "SessionError",
    "UnknownChannelError",
    "UnknownPeerError",
]
