"""
DTO for issued credentials.
"""

from pydantic import BaseModel, ConfigDict, Field

from shared.identity import format_credentials


class CredentialBundle(BaseModel):
    """
    Credentials handed to a requester.

    Attributes:
        name: Canonical display name bound into the token
        public_key: Public key of the new identity
        token: Signed identity token
        seed: Private seed of the new identity (secret)
        expires_at: Token expiry (Unix epoch seconds)
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Canonical display name")
    public_key: str = Field(..., description="Public key of the identity")
    token: str = Field(..., description="Signed identity token")
    seed: str = Field(..., repr=False, description="Private seed (secret)")
    expires_at: int = Field(..., description="Expiry (Unix epoch seconds)")

    def render(self) -> str:
        """Render the banner-delimited credentials document."""
        return format_credentials(self.token, self.seed)
