"""
Vesting test-suite package.

Tiny helpers shared across the tests. Addresses are derived from labels so
every run sees the same bytes.
"""
from __future__ import annotations

from typing import Dict

from vesting.hashing import sha3_256

DURATION = 100
POOL_FUNDS = 1_000_000

SHARES: Dict[str, int] = {"alice": 1000, "bob": 2500, "carol": 7, "dave": 10_000, "erin": 333}


def addr(label: str) -> bytes:
    """Deterministic 32-byte address for a human label."""
    return sha3_256(b"vesting-test/" + label.encode("utf-8"))


__all__ = ["DURATION", "POOL_FUNDS", "SHARES", "addr"]
