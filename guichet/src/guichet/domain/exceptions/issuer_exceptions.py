"""
Credential issuance exceptions.
"""


class IssuerError(Exception):
    """Base exception for credential issuance errors."""

    pass


class EmptyNameError(IssuerError):
    """Raised when a credential request carries no usable name."""

    def __init__(self, message: str = "Name can not be empty"):
        super().__init__(message)


class SigningError(IssuerError):
    """Raised when an identity token cannot be signed."""

    pass


class AuthorityLoadError(IssuerError):
    """Raised when the account document or signing key cannot be loaded."""

    def __init__(self, message: str, path: str = None):
        """
        Initialize AuthorityLoadError.

        Args:
            message: Error message
            path: Optional path of the offending file
        """
        super().__init__(message)
        self.path = path
