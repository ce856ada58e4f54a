"""
Typed claim schemas.

Every signed token carries a common header (token id, issue time,
issuer key, subject, display name, expiry) and a ``nats`` section
holding the type-specific fields plus the ``type`` that selects the
payload schema. Tokens are decoded once into one of these models;
nothing downstream ever looks at raw payload dictionaries.
"""

import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Type

from pydantic import BaseModel, ConfigDict, Field

CLAIM_TYPE_ACCOUNT = "account"
CLAIM_TYPE_USER = "user"
CLAIM_TYPE_HEARTBEAT = "chat-online"
CLAIM_TYPE_POST = "chat-post"
CLAIM_TYPE_DM = "chat-dm"

NEWCOMER_TAG = "new"

# NATS JWT v2: standard fields on top, the rest under "nats"
NATS_CLAIMS_VERSION = 2
HEADER_FIELDS = ("jti", "iat", "iss", "sub", "name", "exp")


def _now() -> int:
    return int(time.time())


def _new_token_id() -> str:
    return uuid.uuid4().hex


@dataclass
class ValidationIssue:
    """Single finding of claim validation."""

    description: str
    blocking: bool


@dataclass
class ValidationResults:
    """
    Collected validation findings.

    Blocking issues reject the claim; the rest are informational.
    """

    issues: List[ValidationIssue] = field(default_factory=list)

    def add(self, description: str, blocking: bool) -> None:
        """Record a finding."""
        self.issues.append(ValidationIssue(description, blocking))

    @property
    def is_blocking(self) -> bool:
        """Whether any blocking issue was found."""
        return any(issue.blocking for issue in self.issues)

    @property
    def blocking(self) -> List[str]:
        return [i.description for i in self.issues if i.blocking]

    @property
    def warnings(self) -> List[str]:
        return [i.description for i in self.issues if not i.blocking]


class BaseClaims(BaseModel):
    """
    Common claim header.

    Attributes:
        jti: Unique token id
        iat: Issue time (Unix epoch seconds)
        iss: Public key of the signer (set when encoding)
        sub: Subject of the claim (meaning depends on the type)
        name: Display name carried by the claim
        exp: Expiry (Unix epoch seconds), None when the claim never expires
        type: Claim type discriminator
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    jti: str = Field(default_factory=_new_token_id, min_length=1)
    iat: int = Field(default_factory=_now)
    iss: str = Field(default="")
    sub: str = Field(..., min_length=1)
    name: str = Field(default="")
    exp: Optional[int] = Field(default=None)
    type: str

    def is_expired(self, now: Optional[float] = None) -> bool:
        """Check whether the claim is past its expiry."""
        if self.exp is None:
            return False
        now = _now() if now is None else now
        return self.exp < now

    def validate_claim(self, now: Optional[float] = None) -> ValidationResults:
        """
        Run semantic checks on the decoded claim.

        Args:
            now: Reference time (defaults to current time)

        Returns:
            ValidationResults with blocking issues and warnings
        """
        now = _now() if now is None else now
        results = ValidationResults()

        if self.is_expired(now):
            results.add(f"claim is expired (exp={self.exp})", blocking=True)
        if self.iat > now + 1:
            results.add(f"claim issued in the future (iat={self.iat})", False)
        if not self.name:
            results.add("claim has an empty display name", blocking=False)

        self._validate_payload(results)
        return results

    def _validate_payload(self, results: ValidationResults) -> None:
        """Type-specific checks, overridden by variants."""
        pass

    def _nats_section(self) -> Dict[str, Any]:
        """Type-specific fields, as they appear under ``nats``."""
        return self.model_dump(mode="json", exclude={*HEADER_FIELDS, "type"})

    @classmethod
    def _fields_from_nats(cls, section: Dict[str, Any]) -> Dict[str, Any]:
        return {k: v for k, v in section.items() if k not in ("type", "version")}

    def to_payload(self) -> Dict[str, Any]:
        """Serialize to a NATS JWT payload dictionary."""
        payload = self.model_dump(
            mode="json", include=set(HEADER_FIELDS), exclude_none=True
        )
        section = self._nats_section()
        section["type"] = self.type
        section["version"] = NATS_CLAIMS_VERSION
        payload["nats"] = section
        return payload

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "BaseClaims":
        """
        Parse a NATS JWT payload dictionary.

        Raises:
            pydantic.ValidationError: If the payload does not fit the model
        """
        section = payload.get("nats")
        if not isinstance(section, dict):
            section = {}

        fields = {k: v for k, v in payload.items() if k in HEADER_FIELDS}
        fields.update(cls._fields_from_nats(section))
        if "type" in section:
            fields["type"] = section["type"]
        return cls.model_validate(fields)


class AccountClaims(BaseClaims):
    """
    Account document signed by an operator.

    Attributes:
        signing_keys: Keys delegated to sign identities for the account
    """

    type: Literal["account"] = CLAIM_TYPE_ACCOUNT
    signing_keys: List[str] = Field(default_factory=list)


class SubjectPermission(BaseModel):
    """Allow-list for one direction (publish or subscribe)."""

    model_config = ConfigDict(frozen=True)

    allow: List[str] = Field(default_factory=list)


class Permissions(BaseModel):
    """Publish and subscribe allow-lists."""

    model_config = ConfigDict(frozen=True)

    pub: SubjectPermission = Field(default_factory=SubjectPermission)
    sub: SubjectPermission = Field(default_factory=SubjectPermission)


class IdentityClaims(BaseClaims):
    """
    Identity token binding a user key to a name and capabilities.

    ``sub`` is the user public key, ``iss`` the account signing key.

    Attributes:
        issuer_account: Account on whose behalf the token was signed
        max_payload: Largest message the holder may publish (bytes)
        permissions: Publish and subscribe allow-lists
    """

    type: Literal["user"] = CLAIM_TYPE_USER
    issuer_account: str = Field(default="")
    max_payload: int = Field(default=-1)
    permissions: Permissions = Field(default_factory=Permissions)

    def _validate_payload(self, results: ValidationResults) -> None:
        if self.max_payload == 0 or self.max_payload < -1:
            results.add(f"invalid max_payload {self.max_payload}", True)

    def _nats_section(self) -> Dict[str, Any]:
        section: Dict[str, Any] = {
            "pub": self.permissions.pub.model_dump(),
            "sub": self.permissions.sub.model_dump(),
            "subs": -1,
            "data": -1,
            "payload": self.max_payload,
        }
        if self.issuer_account:
            section["issuer_account"] = self.issuer_account
        return section

    @classmethod
    def _fields_from_nats(cls, section: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "issuer_account": section.get("issuer_account", ""),
            "max_payload": section.get("payload", -1),
            "permissions": {
                "pub": section.get("pub") or {},
                "sub": section.get("sub") or {},
            },
        }


class HeartbeatClaim(BaseClaims):
    """
    Presence heartbeat. ``sub`` and ``iss`` are both the sender key.

    Attributes:
        tags: Free-form tags; ``new`` marks a freshly started client
    """

    type: Literal["chat-online"] = CLAIM_TYPE_HEARTBEAT
    tags: List[str] = Field(default_factory=list)

    @property
    def newcomer(self) -> bool:
        """Whether the sender just started."""
        return NEWCOMER_TAG in self.tags

    def _validate_payload(self, results: ValidationResults) -> None:
        if self.iss and self.sub != self.iss:
            results.add("heartbeat subject does not match its issuer", True)


class ChannelPostClaim(BaseClaims):
    """
    Message posted to a channel. ``sub`` is the channel name.

    Attributes:
        msg: Message text
    """

    type: Literal["chat-post"] = CLAIM_TYPE_POST
    msg: str = Field(default="")

    @property
    def channel(self) -> str:
        return self.sub


class DirectMessageClaim(BaseClaims):
    """
    Direct message. ``sub`` is the recipient public key.

    Attributes:
        msg: Message text
    """

    type: Literal["chat-dm"] = CLAIM_TYPE_DM
    msg: str = Field(default="")

    @property
    def recipient(self) -> str:
        return self.sub


# Claim type to model mapping
CLAIM_SCHEMAS: Dict[str, Type[BaseClaims]] = {
    CLAIM_TYPE_ACCOUNT: AccountClaims,
    CLAIM_TYPE_USER: IdentityClaims,
    CLAIM_TYPE_HEARTBEAT: HeartbeatClaim,
    CLAIM_TYPE_POST: ChannelPostClaim,
    CLAIM_TYPE_DM: DirectMessageClaim,
}
