"""
Claim validator - the single gate between the bus and the session.

Raw payloads go in, typed claims come out. Anything that fails to
decode, fails its signature, has an unknown type or a blocking
validation issue is logged and rejected here.
"""

import time
from dataclasses import dataclass
from typing import Callable, Optional, Type

from shared.identity import BaseClaims, ClaimCodec, ClaimError
from shared.reporter import SystemReporter
from shared.reporter.emojis import Emoji


@dataclass(frozen=True)
class ValidationOutcome:
    """
    Result of validating one payload.

    Attributes:
        claim: Typed claim when accepted
        ok: Whether the claim may be processed
        reason: Why it was rejected
    """

    claim: Optional[BaseClaims]
    ok: bool
    reason: Optional[str] = None

    @classmethod
    def accepted(cls, claim: BaseClaims) -> "ValidationOutcome":
        return cls(claim=claim, ok=True)

    @classmethod
    def rejected(
        cls, reason: str, claim: Optional[BaseClaims] = None
    ) -> "ValidationOutcome":
        return cls(claim=claim, ok=False, reason=reason)


class ClaimValidator:
    """
    Decodes and validates signed claims received from peers.
    """

    def __init__(
        self,
        codec: ClaimCodec,
        reporter: Optional[SystemReporter] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize ClaimValidator.

        Args:
            codec: Claim codec
            reporter: Optional SystemReporter for logging
            clock: Time source (epoch seconds)
        """
        self.codec = codec
        self.reporter = reporter
        self.clock = clock

    def validate(
        self,
        raw: bytes,
        expected: Optional[Type[BaseClaims]] = None,
        subject: str = "",
    ) -> ValidationOutcome:
        """
        Validate a raw payload.

        Args:
            raw: Payload as received
            expected: Claim class required on this subject
            subject: Subject the payload arrived on (for logging)

        Returns:
            ValidationOutcome, never raises for bad input
        """
        try:
            claim = self.codec.decode(raw)
        except ClaimError as e:
            return self._reject(f"bad claim: {e}", subject)

        if expected is not None and not isinstance(claim, expected):
            return self._reject(
                f"unexpected claim type {claim.type} from {claim.iss[:8]}...",
                subject,
                claim,
            )

        results = claim.validate_claim(self.clock())
        if results.is_blocking:
            return self._reject(
                f"blocking issues for {claim.type} from {claim.iss[:8]}...: "
                f"{'; '.join(results.blocking)}",
                subject,
                claim,
            )

        for warning in results.warnings:
            if self.reporter:
                self.reporter.debug(
                    f"{Emoji.ERROR.WARNING} {claim.type} {claim.jti}: {warning}",
                    context="ClaimValidator",
                    verbose_level=3,
                )

        return ValidationOutcome.accepted(claim)

    def _reject(
        self, reason: str, subject: str, claim: Optional[BaseClaims] = None
    ) -> ValidationOutcome:
        if self.reporter:
            where = f" on {subject}" if subject else ""
            self.reporter.warning(
                f"{Emoji.SECURITY.REJECTED} Rejected{where}: {reason}",
                context="ClaimValidator",
                verbose_level=1,
            )
        return ValidationOutcome.rejected(reason, claim)
