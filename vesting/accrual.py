"""
vesting.accrual — linear-in-time vesting arithmetic.

For a record with `share` S and clock `last_claimed_at` L, at time `now`:

    effective = min(now, vesting_end_time)
    claimable = floor(S * (effective - L) / total_vesting_duration)

Integer-only; the product is formed before the division so nothing is lost
to intermediate rounding. An empty interval (effective <= L) accrues 0,
which covers positions activated after the horizon. Because the interval
is cut at the horizon and settlements never move L backwards, the sum of
all payouts for an index never exceeds S.

All functions here are pure: they read a record and a timestamp and
return numbers.
"""

from __future__ import annotations

from typing import Optional

from .config import VestingConfig
from .records import AllocationRecord, VestingInfo


def mul_div_down(x: int, y: int, d: int) -> int:
    if d <= 0:
        raise ZeroDivisionError("divisor must be positive")
    return (x * y) // d


def effective_time(config: VestingConfig, now: int) -> int:
    return min(now, config.vesting_end_time)


def accrual_interval(config: VestingConfig, record: AllocationRecord, now: int) -> int:
    """Length of the not-yet-settled vesting interval, clamped at the horizon."""
    return max(0, effective_time(config, now) - record.last_claimed_at)


def claimable_amount(config: VestingConfig, record: Optional[AllocationRecord], now: int) -> int:
    """
    Amount vested but unpaid at `now`. An unactivated index (no record)
    has zero share and therefore zero claimable.
    """
    if record is None:
        return 0
    return mul_div_down(record.share, accrual_interval(config, record, now), config.total_vesting_duration)


def next_clock(config: VestingConfig, record: AllocationRecord, now: int) -> int:
    """The `last_claimed_at` a settlement at `now` stores."""
    return max(record.last_claimed_at, effective_time(config, now))


def vesting_info(config: VestingConfig, record: Optional[AllocationRecord], now: int) -> VestingInfo:
    if record is None:
        return VestingInfo(share=0, elapsed=0, claimable=0)
    return VestingInfo(
        share=record.share,
        elapsed=accrual_interval(config, record, now),
        claimable=claimable_amount(config, record, now),
    )


__all__ = [
    "mul_div_down",
    "effective_time",
    "accrual_interval",
    "claimable_amount",
    "next_clock",
    "vesting_info",
]
