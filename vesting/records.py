"""
vesting.records — records shared by the registry, accrual and settlement.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict

from .state import JournaledMap


@dataclass(frozen=True)
class AllocationRecord:
    """
    Per-position allocation, created once at activation.

    share:           total owed over the full horizon; never changes.
    last_claimed_at: end of the last settled interval; non-decreasing.
    """

    share: int
    last_claimed_at: int

    def with_last_claimed_at(self, timestamp: int) -> "AllocationRecord":
        return AllocationRecord(share=self.share, last_claimed_at=timestamp)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class VestingInfo:
    """Diagnostic snapshot for one index; never a settlement path.

    elapsed is the unsettled accrual interval, min(now, vesting_end_time)
    minus last_claimed_at, floored at 0. It stops growing at the horizon.
    """

    share: int
    elapsed: int
    claimable: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


AllocationTable = JournaledMap[int, AllocationRecord]


def new_allocation_table() -> "JournaledMap[int, AllocationRecord]":
    return JournaledMap("allocations")


__all__ = ["AllocationRecord", "VestingInfo", "AllocationTable", "new_allocation_table"]
