"""
Signing authority entity.
"""

from dataclasses import dataclass

from shared.identity import AccountClaims, KeyPair


@dataclass(frozen=True)
class SigningAuthority:
    """
    Account identity and its delegated signing key.

    Held only by the issuer. Identities are signed with the delegated
    key, never with the account root key.

    Attributes:
        account: Decoded account document
        signing_key: Delegated signing key pair
    """

    account: AccountClaims
    signing_key: KeyPair

    @property
    def account_id(self) -> str:
        """Public key of the account."""
        return self.account.sub

    @property
    def signing_public_key(self) -> str:
        return self.signing_key.public_key

    def is_declared_signing_key(self) -> bool:
        """Whether the account document lists our signing key."""
        return self.signing_public_key in self.account.signing_keys
