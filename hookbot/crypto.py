"""Ed25519 verification of Discord interaction requests."""
import logging
import re
from typing import Optional

from nacl.bindings import crypto_core_ed25519_is_valid_point
from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey

logger = logging.getLogger(__name__)

PUBLIC_KEY_LENGTH = 32
SIGNATURE_LENGTH = 64

_HEX_DIGITS = re.compile(r"[0-9a-fA-F]*")


class InvalidKeyError(ValueError):
    """The configured public key is not a usable Ed25519 verifying key."""


def decode_fixed_hex(value: str, length: int) -> Optional[bytes]:
    """
    Decode a hex string into exactly ``length`` bytes.

    Returns None unless ``value`` is made of exactly ``2 * length`` hex digits.
    """
    if len(value) != length * 2 or not _HEX_DIGITS.fullmatch(value):
        return None
    return bytes.fromhex(value)


def encode_hex(data: bytes) -> str:
    """Encode bytes as lowercase hex."""
    return data.hex()


def build_verify_key(raw: bytes) -> VerifyKey:
    """
    Build a verifying key from 32 raw bytes.

    Raises InvalidKeyError when the bytes are not a valid point on the curve.
    """
    if len(raw) != PUBLIC_KEY_LENGTH:
        raise InvalidKeyError(f"public key must be {PUBLIC_KEY_LENGTH} bytes, got {len(raw)}")
    if not crypto_core_ed25519_is_valid_point(raw):
        raise InvalidKeyError("public key is not a valid Ed25519 point")
    return VerifyKey(raw)


class Verifier:
    """Checks `X-Signature-Ed25519` signatures against the bot's public key."""

    def __init__(self, verify_key: VerifyKey) -> None:
        self._verify_key = verify_key

    @classmethod
    def from_hex(cls, public_key: str) -> "Verifier":
        """Create a verifier from the 64 digit hex public key in the app settings."""
        raw = decode_fixed_hex(public_key.strip(), PUBLIC_KEY_LENGTH)
        if raw is None:
            raise InvalidKeyError("public key must be a 64 digit hex string")
        return cls(build_verify_key(raw))

    @property
    def public_key(self) -> str:
        return encode_hex(bytes(self._verify_key))

    def verify(self, signature: str, timestamp: str, body: bytes) -> bool:
        """
        Verify a request given its signature and timestamp headers and raw body.

        Discord signs: timestamp + raw_body
        Every failure (bad hex, bad signature, wrong key) returns False.
        """
        signature_bytes = decode_fixed_hex(signature, SIGNATURE_LENGTH)
        if signature_bytes is None:
            logger.debug("signature header is not %d hex-encoded bytes", SIGNATURE_LENGTH)
            return False

        message = timestamp.encode("utf-8") + body
        try:
            self._verify_key.verify(message, signature_bytes)
        except BadSignatureError:
            logger.debug("signature does not match body and timestamp")
            return False

        logger.info("successfully validated request")
        return True
