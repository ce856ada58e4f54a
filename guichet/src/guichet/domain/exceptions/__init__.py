"""
Domain exceptions for Guichet.
"""

from guichet.domain.exceptions.issuer_exceptions import (
    AuthorityLoadError,
    EmptyNameError,
    IssuerError,
    SigningError,
)

__all__ = [
    "AuthorityLoadError",
    "EmptyNameError",
    "IssuerError",
    "SigningError",
]
