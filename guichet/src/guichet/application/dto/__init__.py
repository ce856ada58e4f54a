"""
Data Transfer Objects for Guichet application layer.
"""

from guichet.application.dto.credential_bundle import CredentialBundle

__all__ = ["CredentialBundle"]
