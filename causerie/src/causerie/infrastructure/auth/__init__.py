"""Claim validation and credentials loading."""

from causerie.infrastructure.auth.claim_validator import (
    ClaimValidator,
    ValidationOutcome,
)
from causerie.infrastructure.auth.credentials_loader import load_local_identity

__all__ = ["ClaimValidator", "ValidationOutcome", "load_local_identity"]
