"""
NATS nkeys: Ed25519 key pairs and their text encoding.

Keys use the nkeys encoding (role prefix byte, raw key, CRC16, all in
base32), so they can be told apart at a glance, used verbatim inside a
subject token, and handed to a NATS client in a credentials file:

    O...  operator public key     SO...  operator seed
    A...  account public key      SA...  account seed
    U...  user public key         SU...  user seed
"""

import base64
import binascii
from enum import Enum
from typing import Tuple, Union

import nkeys
from nacl.exceptions import CryptoError
from nacl.signing import SigningKey, VerifyKey

from shared.identity.exceptions import KeyEncodingError

RAW_KEY_LENGTH = 32
CHECKSUM_LENGTH = 2


class KeyRole(str, Enum):
    """Role a key plays in the trust chain."""

    OPERATOR = "O"
    ACCOUNT = "A"
    USER = "U"

    @property
    def prefix_byte(self) -> int:
        """nkeys prefix byte of the role."""
        return _PREFIX_BYTES[self]


_PREFIX_BYTES = {
    KeyRole.OPERATOR: nkeys.PREFIX_BYTE_OPERATOR,
    KeyRole.ACCOUNT: nkeys.PREFIX_BYTE_ACCOUNT,
    KeyRole.USER: nkeys.PREFIX_BYTE_USER,
}
_ROLES = {prefix: role for role, prefix in _PREFIX_BYTES.items()}


def _to_bytes(text: Union[str, bytes, bytearray], what: str) -> bytearray:
    if isinstance(text, str):
        try:
            text = text.encode("ascii")
        except UnicodeEncodeError:
            raise KeyEncodingError(f"{what} is not ASCII")
    if not isinstance(text, (bytes, bytearray)):
        raise KeyEncodingError(f"{what} must be text")

    data = bytearray(text.strip())
    if not data:
        raise KeyEncodingError(f"{what} is empty")
    return data


def _b32decode_checked(data: bytearray, length: int, what: str) -> bytes:
    """Decode base32 key material and strip its verified CRC16."""
    padding = b"=" * (-len(data) % 8)
    try:
        raw = base64.b32decode(bytes(data) + padding)
    except (binascii.Error, ValueError) as e:
        raise KeyEncodingError(f"{what} is not valid base32: {e}")

    if len(raw) != length + CHECKSUM_LENGTH:
        raise KeyEncodingError(f"{what} has the wrong length")

    body, checksum = raw[:-CHECKSUM_LENGTH], raw[-CHECKSUM_LENGTH:]
    if nkeys.crc16_checksum(body) != checksum:
        raise KeyEncodingError(f"{what} checksum does not match")
    return body


def encode_public_key(role: KeyRole, raw: bytes) -> str:
    """
    Encode raw Ed25519 public key bytes.

    Args:
        role: Key role
        raw: 32 raw public key bytes

    Returns:
        nkeys public key text
    """
    if len(raw) != RAW_KEY_LENGTH:
        raise KeyEncodingError(f"Public key must be {RAW_KEY_LENGTH} bytes")

    src = bytearray([role.prefix_byte]) + bytes(raw)
    src += nkeys.crc16_checksum(src)
    return base64.b32encode(bytes(src)).decode("ascii")


def decode_public_key(text: str) -> Tuple[KeyRole, VerifyKey]:
    """
    Decode an nkeys public key.

    Args:
        text: Encoded public key

    Returns:
        Tuple of (role, verify key)

    Raises:
        KeyEncodingError: If the text is not a valid public key
    """
    body = _b32decode_checked(
        _to_bytes(text, "Public key"), 1 + RAW_KEY_LENGTH, "Public key"
    )

    role = _ROLES.get(body[0])
    if role is None:
        raise KeyEncodingError(f"Unknown public key prefix byte: {body[0]}")

    return role, VerifyKey(bytes(body[1:]))


def is_public_key(text: str, role: KeyRole = None) -> bool:
    """Check whether text decodes as a public key (of the given role)."""
    try:
        decoded_role, _ = decode_public_key(text)
    except KeyEncodingError:
        return False
    return role is None or decoded_role == role


def verify_signature(public_key: str, data: bytes, signature: bytes) -> bool:
    """
    Check a signature against an encoded public key.

    Raises:
        KeyEncodingError: If the public key is malformed
    """
    _, verify_key = decode_public_key(public_key)
    try:
        verify_key.verify(bytes(data), bytes(signature))
        return True
    except CryptoError:
        return False


class KeyPair:
    """
    nkeys signing key pair with a role.

    Attributes:
        role: Key role (operator, account or user)
    """

    def __init__(self, role: KeyRole, nkey: nkeys.KeyPair):
        """
        Initialize KeyPair.

        Args:
            role: Key role
            nkey: nkeys key pair holding the seed
        """
        self.role = role
        self._nkey = nkey
        self._public_key = nkey.public_key.decode("ascii")

    @classmethod
    def create(cls, role: KeyRole) -> "KeyPair":
        """Generate a fresh key pair."""
        raw = bytes(SigningKey.generate())
        return cls.from_seed(nkeys.encode_seed(raw, role.prefix_byte))

    @classmethod
    def from_seed(cls, seed: Union[str, bytes, bytearray]) -> "KeyPair":
        """
        Rebuild a key pair from its encoded seed.

        The seed is copied; callers may wipe their buffer afterwards.

        Args:
            seed: nkeys seed (``S`` + role letter + base32)

        Returns:
            KeyPair

        Raises:
            KeyEncodingError: If the seed is malformed
        """
        data = _to_bytes(seed, "Seed")
        _b32decode_checked(data, 2 + RAW_KEY_LENGTH, "Seed")

        try:
            prefix, _ = nkeys.decode_seed(data)
            nkey = nkeys.from_seed(data)
        except nkeys.NkeysError as e:
            raise KeyEncodingError(f"Invalid seed: {e}")

        role = _ROLES.get(prefix)
        if role is None:
            raise KeyEncodingError("Seed is not an operator, account or user key")

        return cls(role, nkey)

    @property
    def public_key(self) -> str:
        """Encoded public key."""
        return self._public_key

    @property
    def seed(self) -> str:
        """Encoded private seed. Treat as a secret."""
        return bytes(self._nkey.seed).decode("ascii")

    def sign(self, data: bytes) -> bytes:
        """Sign raw bytes."""
        return self._nkey.sign(bytes(data))

    def verify(self, data: bytes, signature: bytes) -> bool:
        """Verify a signature made by this key pair."""
        try:
            return self._nkey.verify(bytes(data), bytes(signature))
        except (nkeys.ErrInvalidSignature, CryptoError):
            return False

    def __repr__(self) -> str:
        """String representation (never shows the seed)."""
        return f"KeyPair(role={self.role.name}, public_key={self.public_key})"
