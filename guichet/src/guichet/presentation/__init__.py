"""Guichet presentation layer."""

from guichet.presentation.credential_service import CredentialService

__all__ = ["CredentialService"]
