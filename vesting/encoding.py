"""
vesting.encoding — canonical, fixed-width leaf encoding.

A leaf commits to one beneficiary slot:

    leaf_preimage = u256(index) | account | u256(share)
    leaf          = SHA3-256(leaf_preimage)

`u256` is 32-byte big-endian. `account` is exactly `address_len` bytes
(see `vesting.config.Settings`). Every field has a fixed width, so no two
distinct (index, account, share) triples share a preimage, and a leaf
preimage (64 + address_len bytes) can never be mistaken for an inner node
preimage (64 bytes).
"""

from __future__ import annotations

from typing import Final, Optional

from .config import load_settings
from .errors import EncodingError
from .hashing import HexOrBytes, sha3_256, to_bytes

U256_MAX: Final[int] = (1 << 256) - 1
U256_BYTES: Final[int] = 32


def require_u256(value: int, *, name: str = "value") -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise EncodingError(f"{name} must be int, got {type(value).__name__}")
    if value < 0 or value > U256_MAX:
        raise EncodingError(f"{name} out of u256 range", details={name: str(value)})
    return value


def u256(value: int, *, name: str = "value") -> bytes:
    return require_u256(value, name=name).to_bytes(U256_BYTES, "big")


def address_len() -> int:
    return load_settings().address_len


def require_address(value: HexOrBytes, *, name: str = "address", length: Optional[int] = None) -> bytes:
    """Normalise `value` to bytes and require the configured address width."""
    b = to_bytes(value)
    want = address_len() if length is None else length
    if len(b) != want:
        raise EncodingError(f"{name} must be exactly {want} bytes, got {len(b)}")
    return b


def zero_address(length: Optional[int] = None) -> bytes:
    return b"\x00" * (address_len() if length is None else length)


def encode_leaf(index: int, account: HexOrBytes, share: int) -> bytes:
    return u256(index, name="index") + require_address(account, name="account") + u256(share, name="share")


def leaf_hash(index: int, account: HexOrBytes, share: int) -> bytes:
    return sha3_256(encode_leaf(index, account, share))


__all__ = [
    "U256_MAX",
    "require_u256",
    "u256",
    "address_len",
    "require_address",
    "zero_address",
    "encode_leaf",
    "leaf_hash",
]
