"""
Local identity - the key pair and identity token this client runs with.
"""

from dataclasses import dataclass
from typing import Optional

from shared.identity import IdentityClaims, KeyPair


@dataclass(frozen=True)
class LocalIdentity:
    """
    Identity of the local user.

    Attributes:
        key_pair: User key pair rebuilt from the credentials seed
        claims: Identity token issued for the key
        display_name: Name used in our heartbeats and claims
    """

    key_pair: KeyPair
    claims: IdentityClaims
    display_name: str

    @property
    def public_key(self) -> str:
        return self.key_pair.public_key

    @property
    def expires_at(self) -> Optional[int]:
        return self.claims.exp

    @property
    def max_payload(self) -> int:
        """Payload limit in bytes (-1 means unlimited)."""
        return self.claims.max_payload

    def seconds_left(self, now: float) -> Optional[float]:
        """Seconds until the identity expires, None if it never does."""
        if self.claims.exp is None:
            return None
        return self.claims.exp - now

    def is_expired(self, now: float) -> bool:
        return self.claims.is_expired(now)
