"""
vesting.registry — lazy, proof-gated activation of positions.

Nothing is stored per beneficiary up front: the Merkle root commits to every
(index, account, share) triple, and a position's allocation record is only
created the first time someone presents a valid proof for its index.

activate(account, index, share, proof):
  1. record exists for index      -> return, no mutation, no re-validation
  2. leaf = leaf_hash(index, account, share)
  3. verify(proof, root, leaf) fails -> InvalidProof, nothing created
  4. create {share, last_claimed_at = now}; mint position `index` to account
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from . import merkle
from .clock import Clock
from .config import VestingConfig
from .encoding import leaf_hash, require_address, require_u256
from .errors import InvalidProof
from .hashing import HexOrBytes, to_bytes, to_hex
from .positions import PositionLedger
from .state import Journal
from .records import AllocationRecord, AllocationTable

log = logging.getLogger(__name__)


class PositionRegistry:
    def __init__(
        self,
        config: VestingConfig,
        records: AllocationTable,
        positions: PositionLedger,
        clock: Clock,
        journal: Journal,
    ) -> None:
        self.config = config
        self.records = records
        self.positions = positions
        self.clock = clock
        self.journal = journal

    def record(self, index: int) -> Optional[AllocationRecord]:
        return self.records.get(index)

    def is_activated(self, index: int) -> bool:
        return index in self.records

    def activate(self, account: HexOrBytes, index: int, share: int, proof: Sequence[HexOrBytes]) -> bool:
        """
        Returns True when this call created the record, False for the
        idempotent no-op on an already activated index.
        """
        require_u256(index, name="index")
        if index in self.records:
            log.debug("activation skipped, already active", extra={"index": index})
            return False

        acct = require_address(account, name="account")
        leaf = leaf_hash(index, acct, share)
        siblings = [to_bytes(p) for p in proof]
        if not merkle.verify(siblings, self.config.merkle_root, leaf):
            raise InvalidProof(index=index, details={"account": to_hex(acct), "leaf": to_hex(leaf)})

        now = self.clock.now()
        with self.journal.atomic():
            self.records.set(index, AllocationRecord(share=share, last_claimed_at=now))
            self.positions.mint(acct, index)
        log.info("position activated", extra={"index": index, "holder": to_hex(acct), "share": share})
        return True


__all__ = ["PositionRegistry"]
