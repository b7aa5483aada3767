# -*- coding: utf-8 -*-
"""
Shared fixtures for the vesting test-suite.

- Hypothesis profiles (dev/ci/fast), selected by HYPOTHESIS_PROFILE or CI.
- Deterministic 32-byte addresses derived from labels.
- A funded pool, a small distribution and a ready MerkleVesting instance
  on a ManualClock starting at 0.
"""
from __future__ import annotations

import logging
import os
from typing import Callable, Dict, List

import pytest
from hypothesis import HealthCheck, Verbosity, settings

from vesting.allocations import Distribution
from vesting.asset import AssetAccount, TokenLedger
from vesting.clock import ManualClock
from vesting.config import load_settings
from vesting.contract import MerkleVesting
from vesting.tests import DURATION, POOL_FUNDS, SHARES, addr

# ---- hypothesis profiles -----------------------------------------------------

# Fixtures used here are cheap and stateless across examples.
_SUPPRESSED = (HealthCheck.too_slow, HealthCheck.filter_too_much, HealthCheck.function_scoped_fixture)

settings.register_profile(
    "dev",
    settings(
        max_examples=100,
        deadline=None,
        suppress_health_check=_SUPPRESSED,
        verbosity=Verbosity.normal,
    ),
)
settings.register_profile(
    "ci",
    settings(
        max_examples=200,
        deadline=None,
        suppress_health_check=_SUPPRESSED,
        verbosity=Verbosity.verbose,
        derandomize=True,
    ),
)
settings.register_profile("fast", settings(max_examples=25, deadline=None, suppress_health_check=_SUPPRESSED))


def _env_truthy(name: str) -> bool:
    return (os.getenv(name) or "").lower() not in ("", "0", "false", "no", "off")


settings.load_profile(os.getenv("HYPOTHESIS_PROFILE") or ("ci" if _env_truthy("CI") else "dev"))


# ---- fixtures ----------------------------------------------------------------


@pytest.fixture(autouse=True)
def _isolated_process_state():
    """Settings are re-read per test and CLI runs leave no handlers behind."""
    load_settings.cache_clear()
    yield
    load_settings.cache_clear()
    logger = logging.getLogger("vesting")
    for h in list(logger.handlers):
        logger.removeHandler(h)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(0)


@pytest.fixture
def ledger() -> TokenLedger:
    return TokenLedger()


@pytest.fixture
def pool_addr() -> bytes:
    return addr("pool")


@pytest.fixture
def pool(ledger: TokenLedger, pool_addr: bytes) -> AssetAccount:
    ledger.mint(pool_addr, POOL_FUNDS)
    return ledger.account(pool_addr)


@pytest.fixture
def rows() -> List[Dict[str, object]]:
    return [{"index": i, "account": addr(name), "share": share} for i, (name, share) in enumerate(SHARES.items())]


@pytest.fixture
def dist(rows) -> Distribution:
    return Distribution.from_allocations(rows)


@pytest.fixture
def make_vesting(clock: ManualClock) -> Callable[..., MerkleVesting]:
    def _make(root, asset, duration: int = DURATION) -> MerkleVesting:
        return MerkleVesting(root, duration, asset, clock=clock)

    return _make


@pytest.fixture
def vesting(dist: Distribution, pool: AssetAccount, make_vesting) -> MerkleVesting:
    return make_vesting(dist.merkle_root, pool)


@pytest.fixture
def activate(vesting: MerkleVesting, dist: Distribution) -> Callable[[int], None]:
    def _activate(index: int) -> None:
        t = dist.claim(index)
        vesting.activate(t.account, t.index, t.share, t.proof)

    return _activate
