"""
Merkle-committed linear vesting positions.

A `MerkleVesting` instance is constructed with a Merkle root over
(index, account, share) allocations, a vesting duration and a reward asset
handle. Beneficiaries activate their slot lazily by presenting a proof; the
slot becomes a transferable position that accrues linearly until the
vesting horizon, and every change of holder settles the outgoing holder
first.

Quick start
-----------
    from vesting import Distribution, ManualClock, MerkleVesting, TokenLedger

    dist = Distribution.from_allocations([{"index": 0, "account": alice, "share": 1000}])
    ledger = TokenLedger()
    ledger.mint(pool, 1000)
    v = MerkleVesting(dist.merkle_root, 100, ledger.account(pool), clock=ManualClock(0))
    t = dist.claim(0)
    v.claim(t.account, t.index, t.share, t.proof)
"""

from __future__ import annotations

from .allocations import Allocation, ClaimTicket, Distribution
from .asset import AssetAccount, FungibleAsset, TokenLedger
from .clock import Clock, ManualClock, SystemClock
from .config import VestingConfig, load_settings
from .contract import MerkleVesting
from .encoding import leaf_hash
from .errors import (AssetError, ClockError, EncodingError,
                     InsufficientBalance, InvalidConfiguration, InvalidProof,
                     InvalidRecipient, NotActivated, NotAuthorized,
                     NotPositionOwner, PositionError, PositionExists,
                     PositionNotFound, TransferFailed, VestingError)
from .events import Event, EventLog
from .merkle import MerkleTree
from .positions import PositionLedger
from .records import AllocationRecord, VestingInfo
from .version import __version__


def version() -> str:
    """Return the package version string."""
    return __version__


__all__ = [
    "__version__",
    "version",
    "MerkleVesting",
    "VestingConfig",
    "load_settings",
    "AllocationRecord",
    "VestingInfo",
    "Allocation",
    "ClaimTicket",
    "Distribution",
    "MerkleTree",
    "leaf_hash",
    "FungibleAsset",
    "TokenLedger",
    "AssetAccount",
    "PositionLedger",
    "Event",
    "EventLog",
    "Clock",
    "ManualClock",
    "SystemClock",
    "VestingError",
    "InvalidConfiguration",
    "InvalidProof",
    "NotActivated",
    "TransferFailed",
    "EncodingError",
    "ClockError",
    "PositionError",
    "PositionNotFound",
    "PositionExists",
    "NotPositionOwner",
    "NotAuthorized",
    "InvalidRecipient",
    "AssetError",
    "InsufficientBalance",
]
