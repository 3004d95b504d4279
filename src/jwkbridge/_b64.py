"""Base64 helpers shared by the key and JWK modules.

Internal module: JWK members use unpadded base64url, ``x5c`` entries use
standard padded base64.
"""

import base64


def b64url_encode(data: bytes) -> str:
    """Base64url encode without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(s: str) -> bytes:
    """Base64url decode with padding restoration.

    Raises:
        TypeError: If ``s`` is not a string.
        ValueError: If ``s`` holds characters outside the base64url alphabet.
    """
    if not isinstance(s, str):
        raise TypeError(f"expected a base64url string, got {type(s).__name__}")
    s += "=" * (-len(s) % 4)
    return base64.b64decode(s, altchars=b"-_", validate=True)


def b64_encode(data: bytes) -> str:
    """Standard base64 encode (padded), as used by ``x5c``."""
    return base64.b64encode(data).decode("ascii")


def b64_decode(s: str) -> bytes:
    """Standard base64 decode, rejecting characters outside the alphabet."""
    return base64.b64decode(s, validate=True)


def int_to_bytes(value: int, length: int | None = None) -> bytes:
    """Big-endian bytes of ``value``, minimal unless ``length`` is given."""
    if length is None:
        length = max(1, (value.bit_length() + 7) // 8)
    return value.to_bytes(length, byteorder="big")


def bytes_to_int(data: bytes) -> int:
    return int.from_bytes(data, byteorder="big")
