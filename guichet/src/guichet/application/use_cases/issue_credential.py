"""
Use case for issuing a credential to a requester.
"""

import time
from typing import Callable, Optional, Union

from guichet.application.dto import CredentialBundle
from guichet.domain.entities import SigningAuthority
from guichet.domain.exceptions import EmptyNameError, SigningError
from guichet.domain.services import PermissionScoper
from shared.identity import (
    ClaimCodec,
    ClaimSigningError,
    IdentityClaims,
    InvalidDisplayNameError,
    KeyPair,
    KeyRole,
    canonicalize_display_name,
)
from shared.reporter import SystemReporter
from shared.reporter.emojis import Emoji


class IssueCredentialUseCase:
    """
    Turn a requested name into a signed, capability-scoped identity.

    Stateless per request: every call generates a fresh key pair, so
    two requests for the same name get two distinct identities.
    """

    def __init__(
        self,
        authority: SigningAuthority,
        scoper: PermissionScoper,
        codec: Optional[ClaimCodec] = None,
        validity_hours: int = 24,
        max_payload: int = 1024,
        max_name_length: int = 8,
        clock: Callable[[], float] = time.time,
        reporter: Optional[SystemReporter] = None,
    ):
        """
        Initialize IssueCredentialUseCase.

        Args:
            authority: Account and delegated signing key
            scoper: Permission scoper
            codec: Claim codec (default: new ClaimCodec)
            validity_hours: Lifetime of issued identities
            max_payload: Payload limit baked into identities (bytes)
            max_name_length: Maximum display name length
            clock: Time source (Unix epoch seconds)
            reporter: Optional SystemReporter for logging
        """
        self.authority = authority
        self.scoper = scoper
        self.codec = codec or ClaimCodec()
        self.validity_seconds = validity_hours * 3600
        self.max_payload = max_payload
        self.max_name_length = max_name_length
        self.clock = clock
        self.reporter = reporter

    def execute(self, raw: Union[bytes, str]) -> CredentialBundle:
        """
        Issue a credential.

        Args:
            raw: Requested name as received

        Returns:
            CredentialBundle with the signed token and the new seed

        Raises:
            EmptyNameError: If the request carries no name
            SigningError: If the token cannot be signed
        """
        try:
            name = canonicalize_display_name(raw, self.max_name_length)
        except InvalidDisplayNameError as e:
            raise EmptyNameError() from e

        user_key = KeyPair.create(KeyRole.USER)
        public_key = user_key.public_key
        now = int(self.clock())

        claims = IdentityClaims(
            sub=public_key,
            name=name,
            iat=now,
            exp=now + self.validity_seconds,
            issuer_account=self.authority.account_id,
            max_payload=self.max_payload,
            permissions=self.scoper.scope(public_key).to_permissions(),
        )

        try:
            token = self.codec.encode(claims, self.authority.signing_key)
        except ClaimSigningError as e:
            raise SigningError(str(e)) from e

        if self.reporter:
            self.reporter.info(
                f"{Emoji.SECURITY.ISSUED} Registered {name!r} [{raw!r}] "
                f"as {public_key}",
                context="IssueCredential",
            )

        return CredentialBundle(
            name=name,
            public_key=public_key,
            token=token,
            seed=user_key.seed,
            expires_at=claims.exp,
        )
