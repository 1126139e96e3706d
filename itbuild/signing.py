"""Ed25519 challenge signing.

The identity service issues a URL-safe base64 challenge; the client proves
possession of its registered key by signing the raw challenge bytes.
"""

from __future__ import annotations

import base64
import binascii

from nacl.exceptions import CryptoError
from nacl.signing import SigningKey

from .exceptions import InvalidInputError

PRIVATE_KEY_LENGTH = 32


def b64url_encode(data: bytes) -> str:
    """Encode bytes as URL-safe base64 without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(value: str) -> bytes:
    """Decode URL-safe base64, with or without padding.

    Raises:
        InvalidInputError: If the value is not valid base64.
    """
    padded = value + "=" * (-len(value) % 4)
    try:
        return base64.b64decode(padded.replace("-", "+").replace("_", "/"), validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidInputError(f"Invalid base64url value: {e}") from None


def _load_signing_key(private_key_hex: str) -> SigningKey:
    try:
        seed = bytes.fromhex(private_key_hex)
    except ValueError:
        raise InvalidInputError("Private key is not a valid hex string") from None

    if len(seed) != PRIVATE_KEY_LENGTH:
        raise InvalidInputError(
            f"Private key must be {PRIVATE_KEY_LENGTH} bytes, got {len(seed)}"
        )

    try:
        return SigningKey(seed)
    except CryptoError as e:
        raise InvalidInputError(f"Invalid private key: {e}") from None


def sign_challenge(private_key_hex: str, challenge: str) -> tuple[str, str]:
    """Sign a server challenge with a hex-encoded Ed25519 private key.

    Args:
        private_key_hex: 32-byte Ed25519 seed, hex encoded.
        challenge: Challenge as issued by the server (URL-safe base64).

    Returns:
        Tuple of (public_key, signature), both URL-safe base64 without padding.

    Raises:
        InvalidInputError: If the key or the challenge cannot be decoded.
    """
    challenge_bytes = b64url_decode(challenge)
    signing_key = _load_signing_key(private_key_hex)

    signature = signing_key.sign(challenge_bytes).signature
    public_key = signing_key.verify_key.encode()

    return b64url_encode(public_key), b64url_encode(signature)
