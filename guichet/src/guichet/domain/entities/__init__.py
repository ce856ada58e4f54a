"""Domain entities."""

from guichet.domain.entities.signing_authority import SigningAuthority

__all__ = ["SigningAuthority"]
