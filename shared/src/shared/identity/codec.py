"""
Signed claim codec.

Claims are encoded as NATS JWTs: ``alg`` is ``ed25519-nkey`` and the
signature is made with an nkeys key pair. The signer's public key
travels in ``iss``; a token is self-verifying, so decoding first reads
``iss`` without verification, then checks the signature against it.
"""

import json
import time
from typing import Any, Dict, Optional

import jwt
from jwt.algorithms import Algorithm
from pydantic import ValidationError

from shared.identity.claims import CLAIM_SCHEMAS, BaseClaims
from shared.identity.exceptions import (
    ClaimDecodeError,
    ClaimExpiredError,
    ClaimSchemaError,
    ClaimSignatureError,
    ClaimSigningError,
    ClaimValidationError,
    KeyEncodingError,
)
from shared.identity.keys import KeyPair, verify_signature

ALGORITHM = "ed25519-nkey"


class NkeyAlgorithm(Algorithm):
    """
    PyJWT algorithm signing with an nkeys KeyPair.

    Signing takes a KeyPair; verification takes the encoded public key.
    """

    def prepare_key(self, key: Any) -> Any:
        if isinstance(key, (KeyPair, str)):
            return key
        raise jwt.InvalidKeyError(f"Expected a KeyPair or public key, got {key!r}")

    def sign(self, msg: bytes, key: Any) -> bytes:
        if not isinstance(key, KeyPair):
            raise jwt.InvalidKeyError("Signing needs a KeyPair")
        return key.sign(msg)

    def verify(self, msg: bytes, key: Any, sig: bytes) -> bool:
        if isinstance(key, KeyPair):
            return key.verify(msg, sig)
        try:
            return verify_signature(key, msg, sig)
        except KeyEncodingError as e:
            raise jwt.InvalidKeyError(str(e)) from e

    @staticmethod
    def to_jwk(key_obj: Any, as_dict: bool = False):
        raise NotImplementedError()

    @staticmethod
    def from_jwk(jwk):
        raise NotImplementedError()


def _build_jws() -> jwt.PyJWS:
    jws = jwt.PyJWS(algorithms=[])
    jws.register_algorithm(ALGORITHM, NkeyAlgorithm())
    return jws


class ClaimCodec:
    """
    Encoder and decoder for signed claims.

    Usage:
        >>> codec = ClaimCodec()
        >>> token = codec.encode(claim, key_pair)
        >>> decoded = codec.decode(token)
    """

    def __init__(self):
        self._jws = _build_jws()

    def encode(self, claims: BaseClaims, key_pair: KeyPair) -> str:
        """
        Sign a claim.

        The issuer is always the signing key: any ``iss`` already set on
        the claim is replaced.

        Args:
            claims: Claim to sign
            key_pair: Signing key pair

        Returns:
            Signed token

        Raises:
            ClaimSigningError: If the token cannot be produced
        """
        signed = claims.model_copy(update={"iss": key_pair.public_key})
        try:
            payload = json.dumps(signed.to_payload(), separators=(",", ":"))
            return self._jws.encode(
                payload.encode("utf-8"),
                key_pair,
                algorithm=ALGORITHM,
            )
        except (jwt.PyJWTError, TypeError, ValueError) as e:
            raise ClaimSigningError(f"Could not sign {claims.type} claim: {e}") from e

    def _payload(self, raw: bytes) -> Dict[str, Any]:
        try:
            payload = json.loads(raw)
        except (ValueError, UnicodeDecodeError) as e:
            raise ClaimDecodeError(f"Payload is not JSON: {str(e)}")
        if not isinstance(payload, dict):
            raise ClaimDecodeError("Payload is not a JSON object")
        return payload

    def decode(self, token) -> BaseClaims:
        """
        Verify a token signature and parse it into its typed claim.

        Args:
            token: Signed token (str or bytes)

        Returns:
            Typed claim (one of CLAIM_SCHEMAS)

        Raises:
            ClaimDecodeError: If the token is malformed
            ClaimSignatureError: If the signature does not match ``iss``
            ClaimSchemaError: If the type is unknown or payload invalid
        """
        if isinstance(token, (bytes, bytearray)):
            try:
                token = bytes(token).decode("ascii").strip()
            except UnicodeDecodeError:
                raise ClaimDecodeError("Token is not ASCII")

        try:
            unverified = self._jws.decode_complete(
                token, options={"verify_signature": False}
            )
        except jwt.InvalidTokenError as e:
            raise ClaimDecodeError(f"Malformed token: {str(e)}")

        issuer = self._payload(unverified["payload"]).get("iss")
        if not isinstance(issuer, str):
            raise ClaimDecodeError("Token has no issuer")

        try:
            verified = self._jws.decode_complete(token, issuer, algorithms=[ALGORITHM])
        except jwt.InvalidSignatureError:
            raise ClaimSignatureError(f"Signature does not match issuer {issuer}")
        except jwt.InvalidKeyError as e:
            raise ClaimDecodeError(f"Issuer is not a public key: {str(e)}")
        except jwt.InvalidTokenError as e:
            raise ClaimDecodeError(f"Invalid token: {str(e)}")

        payload = self._payload(verified["payload"])
        section = payload.get("nats")
        claim_type = section.get("type") if isinstance(section, dict) else None
        schema_class = CLAIM_SCHEMAS.get(claim_type)
        if schema_class is None:
            raise ClaimSchemaError(
                f"Unknown claim type: {claim_type}. "
                f"Supported types: {list(CLAIM_SCHEMAS.keys())}",
                claim_type=claim_type,
            )

        try:
            return schema_class.from_payload(payload)
        except ValidationError as e:
            raise ClaimSchemaError(
                f"Claim validation failed for type {claim_type}: {e}",
                claim_type=claim_type,
            )

    def verify(self, token, now: Optional[float] = None) -> BaseClaims:
        """
        Decode a token and reject it on any blocking issue.

        Args:
            token: Signed token
            now: Reference time (defaults to current time)

        Returns:
            Typed claim

        Raises:
            ClaimError: Any decode or signature error
            ClaimExpiredError: If the claim is expired
            ClaimValidationError: On other blocking issues
        """
        now = time.time() if now is None else now
        claim = self.decode(token)

        if claim.is_expired(now):
            raise ClaimExpiredError(claim.exp)

        results = claim.validate_claim(now)
        if results.is_blocking:
            raise ClaimValidationError(results.blocking)

        return claim
