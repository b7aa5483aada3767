"""
vesting.errors
--------------

Error types for Merkle-committed vesting positions. Every error aborts the
operation that raised it; the journal rolls state back before the exception
leaves the public entrypoint.

Hierarchy
---------
VestingError (base)
 ├─ InvalidConfiguration : construction with a bad duration or root
 ├─ InvalidProof         : activation proof does not reach the committed root
 ├─ NotActivated         : settlement requested for an index with no record
 ├─ TransferFailed       : the reward asset refused the payout
 ├─ EncodingError        : malformed address / out-of-range integer / bad hex
 ├─ ClockError           : a manual clock was asked to move backwards
 ├─ PositionError        : ownership collaborator failures
 │   ├─ PositionNotFound
 │   ├─ PositionExists
 │   ├─ NotPositionOwner
 │   ├─ NotAuthorized
 │   └─ InvalidRecipient
 └─ AssetError           : reward-asset ledger failures
     └─ InsufficientBalance
"""

from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Optional


class VestingError(Exception):
    """Base class for vesting domain errors."""

    code: str = "VESTING_ERROR"

    def __init__(self, message: str = "", *, details: Optional[Mapping[str, Any]] = None) -> None:
        self.message = message or self.__class__.__name__
        self.details = dict(details or {})
        super().__init__(self.__str__())

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.details:
            try:
                packed = json.dumps(self.details, sort_keys=True, separators=(",", ":"))
            except (TypeError, ValueError):
                packed = str(self.details)
            return f"{self.code}: {self.message} [{packed}]"
        return f"{self.code}: {self.message}"


# --------------------------------------------------------------------------- #
# Core kinds
# --------------------------------------------------------------------------- #


class InvalidConfiguration(VestingError):
    """Construction parameters can never yield a usable vesting instance."""

    code = "VESTING_INVALID_CONFIGURATION"


class InvalidProof(VestingError):
    """The (index, account, share) leaf is not committed under the Merkle root."""

    code = "VESTING_INVALID_PROOF"

    def __init__(
        self,
        message: str = "merkle proof does not verify",
        *,
        index: Optional[int] = None,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        d = dict(details or {})
        if index is not None:
            d.setdefault("index", int(index))
        super().__init__(message, details=d)


class NotActivated(VestingError):
    code = "VESTING_NOT_ACTIVATED"

    def __init__(self, index: int, *, message: str = "position has not been activated") -> None:
        self.index = int(index)
        super().__init__(message, details={"index": self.index})


class TransferFailed(VestingError):
    """
    The reward asset did not complete the payout. Raised from inside the
    settlement checkpoint, so the accrual clock update is reverted with it.
    """

    code = "VESTING_TRANSFER_FAILED"

    def __init__(
        self,
        *,
        index: int,
        to: bytes,
        amount: int,
        message: str = "reward asset transfer failed",
    ) -> None:
        self.index = int(index)
        self.to = bytes(to)
        self.amount = int(amount)
        super().__init__(
            message,
            details={"index": self.index, "to": "0x" + self.to.hex(), "amount": self.amount},
        )


class EncodingError(VestingError, ValueError):
    code = "VESTING_ENCODING_ERROR"


class ClockError(VestingError):
    code = "VESTING_CLOCK_ERROR"


# --------------------------------------------------------------------------- #
# Position ownership collaborator
# --------------------------------------------------------------------------- #


class PositionError(VestingError):
    code = "VESTING_POSITION_ERROR"

    def __init__(
        self,
        message: str = "position operation failed",
        *,
        index: Optional[int] = None,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        d = dict(details or {})
        if index is not None:
            d.setdefault("index", int(index))
        super().__init__(message, details=d)


class PositionNotFound(PositionError):
    code = "VESTING_POSITION_NOT_FOUND"


class PositionExists(PositionError):
    code = "VESTING_POSITION_EXISTS"


class NotPositionOwner(PositionError):
    code = "VESTING_NOT_POSITION_OWNER"


class NotAuthorized(PositionError):
    """Caller is neither the holder, the approved address nor an operator."""

    code = "VESTING_NOT_AUTHORIZED"


class InvalidRecipient(PositionError):
    code = "VESTING_INVALID_RECIPIENT"


# --------------------------------------------------------------------------- #
# Reward asset ledger
# --------------------------------------------------------------------------- #


class AssetError(VestingError):
    code = "VESTING_ASSET_ERROR"


class InsufficientBalance(AssetError):
    code = "VESTING_INSUFFICIENT_BALANCE"

    def __init__(self, *, have: int, need: int, message: str = "insufficient balance") -> None:
        super().__init__(message, details={"have": int(have), "need": int(need)})


__all__ = [
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
