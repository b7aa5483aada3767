"""
vesting.settlement — pay out vested amounts and advance the accrual clock.

settle(index) -> amount:
  1. amount = claimable_amount(index)
  2. last_claimed_at = max(last_claimed_at, min(now, vesting_end_time))
  3. reward_asset.transfer(current holder, amount)
  4. emit Settled {index, holder, amount}

Steps 2-4 run in one journal checkpoint: if the asset refuses the transfer
the clock update is reverted and `TransferFailed` propagates. Nothing is
retried here; resubmitting after the pool is refilled is the caller's job.

Settlement is permissionless. Payment always goes to the holder recorded
by the position ledger at the moment of settlement, whoever triggers it.
Zero-amount settlements still call the asset and still emit the event.
"""

from __future__ import annotations

import logging

from . import accrual
from .clock import Clock
from .config import VestingConfig
from .encoding import require_u256
from .errors import AssetError, NotActivated, TransferFailed
from .events import EVT_SETTLED, EventLog
from .hashing import to_hex
from .positions import PositionLedger
from .state import Journal
from .records import AllocationRecord, AllocationTable

log = logging.getLogger(__name__)


class SettlementEngine:
    def __init__(
        self,
        config: VestingConfig,
        records: AllocationTable,
        positions: PositionLedger,
        events: EventLog,
        clock: Clock,
        journal: Journal,
    ) -> None:
        self.config = config
        self.records = records
        self.positions = positions
        self.events = events
        self.clock = clock
        self.journal = journal

    def _record(self, index: int) -> AllocationRecord:
        rec = self.records.get(require_u256(index, name="index"))
        if rec is None:
            raise NotActivated(index)
        return rec

    def claimable(self, index: int) -> int:
        return accrual.claimable_amount(self.config, self.records.get(index), self.clock.now())

    def settle(self, index: int) -> int:
        rec = self._record(index)
        now = self.clock.now()
        amount = accrual.claimable_amount(self.config, rec, now)
        holder = self.positions.owner_of(index)

        with self.journal.atomic():
            self.records.set(index, rec.with_last_claimed_at(accrual.next_clock(self.config, rec, now)))
            try:
                ok = self.config.reward_asset.transfer(holder, amount)
            except AssetError as e:
                log.warning(
                    "settlement aborted, asset error",
                    extra={"index": index, "holder": to_hex(holder), "amount": amount},
                )
                raise TransferFailed(index=index, to=holder, amount=amount) from e
            if not ok:
                log.warning(
                    "settlement aborted, transfer refused",
                    extra={"index": index, "holder": to_hex(holder), "amount": amount},
                )
                raise TransferFailed(index=index, to=holder, amount=amount)
            self.events.emit(EVT_SETTLED, {"index": index, "holder": holder, "amount": amount})

        log.info("settled", extra={"index": index, "holder": to_hex(holder), "amount": amount})
        return amount


__all__ = ["SettlementEngine"]
