"""
vesting.hooks — settlement-before-transfer composition.

A position changes holder in exactly one way:

    authorize  ->  settle(index)  ->  positions.move(frm, to, index)

The outgoing holder is paid everything vested up to the transfer instant,
and because settlement advances the accrual clock to that instant the
incoming holder starts accruing from it. This is a fixed wrapper around the
ledger's base ownership-change primitive, not an override.
"""

from __future__ import annotations

import logging

from .hashing import HexOrBytes
from .positions import PositionLedger
from .settlement import SettlementEngine
from .state import Journal

log = logging.getLogger(__name__)


class TransferSettlementHook:
    def __init__(self, engine: SettlementEngine, positions: PositionLedger, journal: Journal) -> None:
        self.engine = engine
        self.positions = positions
        self.journal = journal

    def transfer(self, caller: HexOrBytes, frm: HexOrBytes, to: HexOrBytes, index: int) -> int:
        """Move position `index`; returns the amount settled to `frm`."""
        self.positions.authorize_transfer(caller, frm, to, index)
        with self.journal.atomic():
            paid = self.engine.settle(index)
            self.positions.move(frm, to, index)
        log.debug("transfer settled", extra={"index": index, "amount": paid})
        return paid


__all__ = ["TransferSettlementHook"]
