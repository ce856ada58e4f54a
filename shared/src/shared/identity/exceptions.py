"""
Identity and claim exceptions.
"""

from typing import List, Optional


class IdentityError(Exception):
    """Base exception for identity, key and claim errors."""

    pass


class KeyEncodingError(IdentityError):
    """Raised when a public key or seed cannot be decoded."""

    pass


class InvalidDisplayNameError(IdentityError):
    """Raised when a requested display name is empty after normalization."""

    def __init__(self, raw_name: str = ""):
        """
        Initialize InvalidDisplayNameError.

        Args:
            raw_name: Name as it was requested
        """
        super().__init__("Name can not be empty")
        self.raw_name = raw_name


class ClaimError(IdentityError):
    """Base exception for signed claim errors."""

    pass


class ClaimDecodeError(ClaimError):
    """Raised when a token is not a well-formed signed claim."""

    pass


class ClaimSignatureError(ClaimError):
    """Raised when a claim signature does not match its issuer."""

    pass


class ClaimSchemaError(ClaimError):
    """Raised when a claim payload does not match the schema of its type."""

    def __init__(self, message: str, claim_type: Optional[str] = None):
        """
        Initialize ClaimSchemaError.

        Args:
            message: Error message
            claim_type: Claim type that failed validation, if known
        """
        super().__init__(message)
        self.claim_type = claim_type


class ClaimExpiredError(ClaimError):
    """Raised when a claim is past its expiry."""

    def __init__(self, expires_at: int):
        """
        Initialize ClaimExpiredError.

        Args:
            expires_at: Expiry timestamp (Unix epoch seconds)
        """
        super().__init__(f"Claim expired at {expires_at}")
        self.expires_at = expires_at


class ClaimValidationError(ClaimError):
    """Raised when a decoded claim has blocking validation issues."""

    def __init__(self, issues: List[str]):
        """
        Initialize ClaimValidationError.

        Args:
            issues: Descriptions of the blocking issues
        """
        super().__init__("Blocking issues: " + "; ".join(issues))
        self.issues = issues


class CredentialsFormatError(IdentityError):
    """Raised when a credentials document does not hold a token and a seed."""

    pass


class ClaimSigningError(ClaimError):
    """Raised when a claim cannot be signed."""

    pass
