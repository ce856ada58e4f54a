"""
Identity primitives shared by the issuer and the chat client.

Key pairs, subject naming, typed claims, the claim codec and the
credentials document format.
"""

from shared.identity.claims import (
    CLAIM_SCHEMAS,
    NEWCOMER_TAG,
    AccountClaims,
    BaseClaims,
    ChannelPostClaim,
    DirectMessageClaim,
    HeartbeatClaim,
    IdentityClaims,
    Permissions,
    SubjectPermission,
    ValidationResults,
)
from shared.identity.codec import ClaimCodec
from shared.identity.credentials import (
    Credentials,
    format_credentials,
    format_error,
    is_error_reply,
    parse_credentials,
    wipe_buffer,
)
from shared.identity.exceptions import (
    ClaimDecodeError,
    ClaimError,
    ClaimExpiredError,
    ClaimSchemaError,
    ClaimSignatureError,
    ClaimSigningError,
    ClaimValidationError,
    CredentialsFormatError,
    IdentityError,
    InvalidDisplayNameError,
    KeyEncodingError,
)
from shared.identity.keys import KeyPair, KeyRole, decode_public_key, is_public_key
from shared.identity.names import MAX_NAME_LENGTH, canonicalize_display_name
from shared.identity.subjects import SubjectScheme, subject_matches

__all__ = [
    # Claims
    "CLAIM_SCHEMAS",
    "NEWCOMER_TAG",
    "AccountClaims",
    "BaseClaims",
    "ChannelPostClaim",
    "DirectMessageClaim",
    "HeartbeatClaim",
    "IdentityClaims",
    "Permissions",
    "SubjectPermission",
    "ValidationResults",
    "ClaimCodec",
    # Credentials
    "Credentials",
    "format_credentials",
    "format_error",
    "is_error_reply",
    "parse_credentials",
    "wipe_buffer",
    # Exceptions
    "ClaimDecodeError",
    "ClaimError",
    "ClaimExpiredError",
    "ClaimSchemaError",
    "ClaimSignatureError",
    "ClaimSigningError",
    "ClaimValidationError",
    "CredentialsFormatError",
    "IdentityError",
    "InvalidDisplayNameError",
    "KeyEncodingError",
    # Keys and names
    "KeyPair",
    "KeyRole",
    "decode_public_key",
    "is_public_key",
    "MAX_NAME_LENGTH",
    "canonicalize_display_name",
    "SubjectScheme",
    "subject_matches",
]
