"""Signing authority loading and bootstrap."""

from guichet.infrastructure.authority.authority_loader import (
    bootstrap_authority,
    load_signing_authority,
)

__all__ = ["bootstrap_authority", "load_signing_authority"]
