"""
vesting.contract — MerkleVesting, the external surface of the system.

Construction wires the components leaf-first:

    MerkleVerifier (vesting.merkle)
      └─ PositionRegistry  (activation)
    VestingAccrual (vesting.accrual)
      └─ SettlementEngine  (payout + clock)
           └─ TransferSettlementHook (settle, then move)

and enlists every stateful participant (allocation table, position ledger,
event log, and the reward asset when it supports checkpoints) in one
`Journal`, so each public mutation is all-or-nothing.

Example
-------
    ledger = TokenLedger()
    pool = ledger.account(POOL)
    v = MerkleVesting(root, 100, pool, clock=ManualClock(0))
    ledger.mint(POOL, 10_000)
    v.claim(alice, 0, 1000, proof)     # activates and settles
    v.get_claimable_amount(0)          # read-only

There is no administrative layer. Claims and settlements may be triggered by
anyone; value only ever flows to the current holder of a position.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence

from . import accrual
from .clock import Clock, SystemClock
from .config import VestingConfig
from .encoding import require_u256
from .events import EVT_SETTLED, Event, EventLog
from .hashing import HexOrBytes
from .hooks import TransferSettlementHook
from .positions import PositionLedger
from .registry import PositionRegistry
from .settlement import SettlementEngine
from .state import Checkpointable, Journal
from .records import AllocationRecord, VestingInfo, new_allocation_table

log = logging.getLogger(__name__)


class MerkleVesting:
    def __init__(
        self,
        merkle_root: HexOrBytes,
        total_vesting_duration: int,
        reward_asset: Any,
        *,
        clock: Optional[Clock] = None,
        positions: Optional[PositionLedger] = None,
        events: Optional[EventLog] = None,
    ) -> None:
        self.clock: Clock = clock if clock is not None else SystemClock()
        self.config = VestingConfig.create(
            merkle_root, total_vesting_duration, reward_asset, start_time=self.clock.now()
        )
        if positions is None:
            positions = PositionLedger(events)
        self.events = events if events is not None else positions.events
        self.positions = positions
        self.records = new_allocation_table()

        self.journal = Journal(self.records, self.positions, self.events, self.positions.events)
        if isinstance(reward_asset, Checkpointable):
            self.journal.enlist(reward_asset)

        self.registry = PositionRegistry(self.config, self.records, self.positions, self.clock, self.journal)
        self.engine = SettlementEngine(
            self.config, self.records, self.positions, self.events, self.clock, self.journal
        )
        self.hook = TransferSettlementHook(self.engine, self.positions, self.journal)
        log.info("vesting instance created", extra=self.config.as_dict())

    # ------------------------------------------------------------------ #
    # Configuration (immutable)
    # ------------------------------------------------------------------ #

    @property
    def merkle_root(self) -> bytes:
        return self.config.merkle_root

    @property
    def total_vesting_duration(self) -> int:
        return self.config.total_vesting_duration

    @property
    def vesting_start_time(self) -> int:
        return self.config.vesting_start_time

    @property
    def vesting_end_time(self) -> int:
        return self.config.vesting_end_time

    @property
    def reward_asset(self) -> Any:
        return self.config.reward_asset

    # ------------------------------------------------------------------ #
    # Mutations
    # ------------------------------------------------------------------ #

    def activate(self, account: HexOrBytes, index: int, share: int, proof: Sequence[HexOrBytes]) -> None:
        self.registry.activate(account, index, share, proof)

    def claim(self, account: HexOrBytes, index: int, share: int, proof: Sequence[HexOrBytes]) -> None:
        """Activate `index` if needed, then settle it to its current holder."""
        with self.journal.atomic():
            self.registry.activate(account, index, share, proof)
            self.engine.settle(index)

    def settle(self, index: int) -> int:
        return self.engine.settle(index)

    def transfer_from(self, caller: HexOrBytes, frm: HexOrBytes, to: HexOrBytes, index: int) -> None:
        self.hook.transfer(caller, frm, to, index)

    def approve(self, caller: HexOrBytes, to: HexOrBytes, index: int) -> None:
        with self.journal.atomic():
            self.positions.approve(caller, to, index)

    def set_approval_for_all(self, caller: HexOrBytes, operator: HexOrBytes, approved: bool) -> None:
        with self.journal.atomic():
            self.positions.set_approval_for_all(caller, operator, approved)

    # ------------------------------------------------------------------ #
    # Views
    # ------------------------------------------------------------------ #

    def allocation(self, index: int) -> Optional[AllocationRecord]:
        return self.records.get(require_u256(index, name="index"))

    def get_claimable_amount(self, index: int) -> int:
        return accrual.claimable_amount(self.config, self.allocation(index), self.clock.now())

    def vesting_info(self, index: int) -> VestingInfo:
        return accrual.vesting_info(self.config, self.allocation(index), self.clock.now())

    def owner_of(self, index: int) -> bytes:
        return self.positions.owner_of(index)

    def exists(self, index: int) -> bool:
        return self.positions.exists(index)

    def balance_of(self, holder: HexOrBytes) -> int:
        return self.positions.balance_of(holder)

    def get_approved(self, index: int) -> Optional[bytes]:
        return self.positions.get_approved(index)

    def is_approved_for_all(self, owner: HexOrBytes, operator: HexOrBytes) -> bool:
        return self.positions.is_approved_for_all(owner, operator)

    def settlements(self, index: Optional[int] = None) -> List[Event]:
        evs = self.events.all(EVT_SETTLED)
        if index is None:
            return evs
        return [e for e in evs if e.args.get("index") == index]


__all__ = ["MerkleVesting"]
