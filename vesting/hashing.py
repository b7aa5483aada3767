"""
vesting.hashing — SHA3-256 wrappers and hex/bytes coercion

All digests are 32-byte SHA3-256. Public entrypoints accept either raw
bytes-like values or hex strings (with or without "0x"); everything is
normalised to immutable `bytes` at the boundary so the core only ever sees
bytes. `*_hex` helpers return lowercase "0x" hex.
"""

from __future__ import annotations

from hashlib import sha3_256 as _sha3_256
from typing import Union

from .errors import EncodingError

BytesLike = Union[bytes, bytearray, memoryview]
HexOrBytes = Union[bytes, bytearray, memoryview, str]

DIGEST_SIZE = 32


def sha3_256(data: BytesLike) -> bytes:
    """Return SHA3-256(bytes(data))."""
    return _sha3_256(bytes(data)).digest()


def sha3_256_hex(data: BytesLike) -> str:
    return "0x" + _sha3_256(bytes(data)).hexdigest()


# ------------------------------- coercion -----------------------------------


def _strip_0x(s: str) -> str:
    return s[2:] if s.startswith(("0x", "0X")) else s


def to_bytes(value: HexOrBytes) -> bytes:
    """
    Coerce `value` to bytes.
    - If str, interpret as hex (with or without '0x'); odd-length hex is rejected.
    - If a bytes-like object, copy to immutable bytes.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        h = _strip_0x(value.strip())
        if len(h) % 2 != 0:
            raise EncodingError(f"hex string must have even length, got {len(h)}")
        try:
            return bytes.fromhex(h)
        except ValueError as e:
            raise EncodingError(f"invalid hex string: {value!r}") from e
    raise EncodingError(f"cannot convert type {type(value).__name__} to bytes")


def to_hex(b: BytesLike) -> str:
    """Encode bytes as 0x-prefixed lowercase hex."""
    return "0x" + bytes(b).hex()


def to_digest(value: HexOrBytes, *, name: str = "digest") -> bytes:
    """Coerce to bytes and require exactly DIGEST_SIZE bytes."""
    b = to_bytes(value)
    if len(b) != DIGEST_SIZE:
        raise EncodingError(f"{name} must be {DIGEST_SIZE} bytes, got {len(b)}")
    return b


__all__ = [
    "BytesLike",
    "HexOrBytes",
    "DIGEST_SIZE",
    "sha3_256",
    "sha3_256_hex",
    "to_bytes",
    "to_hex",
    "to_digest",
]
