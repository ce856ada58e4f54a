"""
Chat session exceptions.
"""

from typing import Optional


class SessionError(Exception):
    """Base exception for chat session errors."""

    pass


class NameSpaceExhaustedError(SessionError):
    """Raised when no collision-free display name could be found (fatal)."""

    def __init__(self, name: str, attempts: int):
        """
        Initialize NameSpaceExhaustedError.

        Args:
            name: Proposed display name
            attempts: Number of suffixed candidates tried
        """
        super().__init__(
            f"Name collision error for {name!r}, "
            f"alternatives exhausted after {attempts} attempts"
        )
        self.name = name
        self.attempts = attempts


class UnknownChannelError(SessionError):
    """Raised when a channel is not in the configured channel list."""

    def __init__(self, channel: str):
        super().__init__(f"Unknown channel: {channel}")
        self.channel = channel


class UnknownPeerError(SessionError):
    """Raised when a display name is not bound to any known peer."""

    def __init__(self, name: str):
        super().__init__(f"Unknown peer: {name}")
        self.name = name


class NoSelectionError(SessionError):
    """Raised when sending without a selected channel or peer."""

    def __init__(self, message: str = "Nothing selected"):
        super().__init__(message)


class PayloadTooLargeError(SessionError):
    """Raised when an outgoing claim exceeds the identity's payload limit."""

    def __init__(self, size: int, limit: int):
        super().__init__(f"Message too large ({size} > {limit} bytes)")
        self.size = size
        self.limit = limit


class CredentialsLoadError(SessionError):
    """Raised when the credentials document cannot be used."""

    def __init__(self, message: str, path: Optional[str] = None):
        """
        Initialize CredentialsLoadError.

        Args:
            message: Error message
            path: Optional path of the credentials file
        """
        super().__init__(message)
        self.path = path


class CredentialsExpiredError(SessionError):
    """Raised when the local identity token has expired."""

    def __init__(self, expires_at: Optional[int] = None):
        super().__init__("I'm sorry, credentials have expired.")
        self.expires_at = expires_at
