"""VAPID application server key helpers.

Keys travel as URL-safe base64 without padding. The push API expects the raw
bytes of an uncompressed P-256 public key (65 bytes, leading 0x04).
"""

import base64

UNCOMPRESSED_P256_KEY_LENGTH = 65


def decode_vapid_key(key: str) -> bytes:
    """Decode a URL-safe base64 VAPID public key into raw bytes."""
    padding = "=" * ((4 - len(key) % 4) % 4)
    standard = (key + padding).replace("-", "+").replace("_", "/")
    return base64.b64decode(standard)


def encode_key(raw: bytes) -> str:
    """Standard base64 encoding used for p256dh/auth keys sent to the backend."""
    return base64.b64encode(raw).decode("ascii")


def is_uncompressed_p256(raw: bytes) -> bool:
    return len(raw) == UNCOMPRESSED_P256_KEY_LENGTH and raw[:1] == b"\x04"
