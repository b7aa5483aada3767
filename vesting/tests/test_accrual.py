from __future__ import annotations

import pytest
from hypothesis import given, strategies as st

from vesting import accrual
from vesting.config import VestingConfig
from vesting.records import AllocationRecord, VestingInfo


class _Asset:
    def transfer(self, to: bytes, amount: int) -> bool:
        return True


def _cfg(duration: int = 100, start: int = 0) -> VestingConfig:
    return VestingConfig.create(b"\x11" * 32, duration, _Asset(), start_time=start)


def test_linear_at_half_duration():
    cfg = _cfg()
    rec = AllocationRecord(share=1000, last_claimed_at=0)
    assert accrual.claimable_amount(cfg, rec, 50) == 500


def test_clamped_at_horizon():
    cfg = _cfg()
    rec = AllocationRecord(share=1000, last_claimed_at=0)
    assert accrual.claimable_amount(cfg, rec, 100) == 1000
    assert accrual.claimable_amount(cfg, rec, 10_000) == 1000


def test_after_partial_settlement():
    cfg = _cfg()
    rec = AllocationRecord(share=1000, last_claimed_at=50)
    assert accrual.claimable_amount(cfg, rec, 150) == 500


def test_rounds_down():
    cfg = _cfg(duration=3)
    rec = AllocationRecord(share=10, last_claimed_at=0)
    assert accrual.claimable_amount(cfg, rec, 1) == 3
    assert accrual.claimable_amount(cfg, rec, 2) == 6


def test_unactivated_index_accrues_nothing():
    cfg = _cfg()
    assert accrual.claimable_amount(cfg, None, 50) == 0
    assert accrual.vesting_info(cfg, None, 50) == VestingInfo(share=0, elapsed=0, claimable=0)


def test_activated_after_horizon_accrues_nothing():
    cfg = _cfg()
    rec = AllocationRecord(share=1000, last_claimed_at=120)
    assert accrual.accrual_interval(cfg, rec, 130) == 0
    assert accrual.claimable_amount(cfg, rec, 130) == 0
    assert accrual.next_clock(cfg, rec, 130) == 120


def test_next_clock_stops_at_horizon():
    cfg = _cfg(start=10)
    rec = AllocationRecord(share=1, last_claimed_at=10)
    assert accrual.next_clock(cfg, rec, 50) == 50
    assert accrual.next_clock(cfg, rec, 500) == 110


def test_vesting_info_snapshot():
    cfg = _cfg()
    info = accrual.vesting_info(cfg, AllocationRecord(share=1000, last_claimed_at=20), 70)
    assert info == VestingInfo(share=1000, elapsed=50, claimable=500)
    assert info.to_dict() == {"share": 1000, "elapsed": 50, "claimable": 500}


def test_mul_div_down_rejects_zero_divisor():
    with pytest.raises(ZeroDivisionError):
        accrual.mul_div_down(1, 1, 0)


# ---- properties ---------------------------------------------------------------

SHARE = st.integers(min_value=0, max_value=(1 << 128))
DURATION = st.integers(min_value=1, max_value=10**9)


@given(share=SHARE, duration=DURATION, t=st.integers(min_value=0, max_value=2 * 10**9))
def test_matches_floor_formula(share, duration, t):
    cfg = _cfg(duration)
    rec = AllocationRecord(share=share, last_claimed_at=0)
    assert accrual.claimable_amount(cfg, rec, t) == share * min(t, duration) // duration


@given(
    share=SHARE,
    duration=DURATION,
    cuts=st.lists(st.integers(min_value=0, max_value=2 * 10**9), min_size=1, max_size=12),
)
def test_settlement_sequence_never_exceeds_share(share, duration, cuts):
    cfg = _cfg(duration)
    rec = AllocationRecord(share=share, last_claimed_at=0)
    paid = 0
    for now in sorted(cuts):
        paid += accrual.claimable_amount(cfg, rec, now)
        rec = rec.with_last_claimed_at(accrual.next_clock(cfg, rec, now))
    assert paid <= share
    # everything is paid once the horizon is crossed, up to one unit per settlement
    if sorted(cuts)[-1] >= duration:
        assert share - paid <= len(cuts)


@given(share=SHARE, duration=DURATION, ts=st.tuples(st.integers(min_value=0), st.integers(min_value=0)).map(sorted))
def test_monotone_in_time(share, duration, ts):
    a, b = ts
    cfg = _cfg(duration)
    rec = AllocationRecord(share=share, last_claimed_at=0)
    assert accrual.claimable_amount(cfg, rec, a) <= accrual.claimable_amount(cfg, rec, b)


def test_vesting_info_elapsed_stops_at_horizon():
    cfg = _cfg()
    rec = AllocationRecord(share=1000, last_claimed_at=50)
    assert accrual.vesting_info(cfg, rec, 400) == VestingInfo(share=1000, elapsed=50, claimable=500)
