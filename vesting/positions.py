"""
vesting.positions — transferable-position ownership ledger.

Each activated allocation is represented by a position keyed by its leaf
index. This module owns the index → holder table together with the
approval bookkeeping that any standard transferable position carries.

It deliberately has no public transfer entrypoint. A transfer is split
into two primitives composed by `vesting.hooks.TransferSettlementHook`:

    authorize_transfer(caller, frm, to, index)   # pure check, raises on failure
    move(frm, to, index)                         # base ownership change

so every change of holder is preceded by a settlement of the outgoing
holder's vested amount.

Public interface
----------------
# views
exists(index) -> bool
owner_of(index) -> bytes
balance_of(holder) -> int
get_approved(index) -> Optional[bytes]
is_approved_for_all(owner, operator) -> bool

# mutations (explicit caller)
mint(holder, index) -> None
approve(caller, to, index) -> None
set_approval_for_all(caller, operator, approved) -> None
move(frm, to, index) -> None
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from .encoding import require_address, require_u256, zero_address
from .errors import (InvalidRecipient, NotAuthorized, NotPositionOwner,
                     PositionExists, PositionNotFound)
from .events import (EVT_APPROVAL, EVT_APPROVAL_FOR_ALL, EVT_TRANSFER,
                     EventLog)
from .hashing import HexOrBytes
from .state import JournaledMap

log = logging.getLogger(__name__)


class PositionLedger:
    def __init__(self, events: Optional[EventLog] = None) -> None:
        self.events = events if events is not None else EventLog()
        self._owners: JournaledMap[int, bytes] = JournaledMap("owners")
        self._balances: JournaledMap[bytes, int] = JournaledMap("position_balances")
        self._approvals: JournaledMap[int, bytes] = JournaledMap("approvals")
        self._operators: JournaledMap[Tuple[bytes, bytes], bool] = JournaledMap("operators")

    def _tables(self) -> List[JournaledMap]:
        return [self._owners, self._balances, self._approvals, self._operators]

    # ---- checkpoints ----

    def begin(self) -> None:
        for t in self._tables():
            t.begin()

    def commit(self) -> None:
        for t in self._tables():
            t.commit()

    def revert(self) -> None:
        for t in self._tables():
            t.revert()

    # ---- views ----

    def exists(self, index: int) -> bool:
        return require_u256(index, name="index") in self._owners

    def owner_of(self, index: int) -> bytes:
        owner = self._owners.get(require_u256(index, name="index"))
        if owner is None:
            raise PositionNotFound("position does not exist", index=index)
        return owner

    def balance_of(self, holder: HexOrBytes) -> int:
        return self._balances.get(require_address(holder, name="holder"), 0) or 0

    def get_approved(self, index: int) -> Optional[bytes]:
        self.owner_of(index)
        return self._approvals.get(index)

    def is_approved_for_all(self, owner: HexOrBytes, operator: HexOrBytes) -> bool:
        key = (require_address(owner, name="owner"), require_address(operator, name="operator"))
        return bool(self._operators.get(key, False))

    def __len__(self) -> int:
        return len(self._owners)

    def indices_of(self, holder: HexOrBytes) -> List[int]:
        h = require_address(holder, name="holder")
        return sorted(i for i, owner in self._owners.items() if owner == h)

    # ---- mutations ----

    def mint(self, holder: HexOrBytes, index: int) -> None:
        to = require_address(holder, name="holder")
        require_u256(index, name="index")
        if to == zero_address():
            raise InvalidRecipient("cannot mint to the zero address", index=index)
        if index in self._owners:
            raise PositionExists("position already minted", index=index)
        self._owners.set(index, to)
        self._balances.set(to, self.balance_of(to) + 1)
        self.events.emit(EVT_TRANSFER, {"from": zero_address(), "to": to, "index": index})

    def approve(self, caller: HexOrBytes, to: HexOrBytes, index: int) -> None:
        c = require_address(caller, name="caller")
        approved = require_address(to, name="to")
        owner = self.owner_of(index)
        if c != owner and not self.is_approved_for_all(owner, c):
            raise NotAuthorized("caller may not approve this position", index=index)
        if approved == owner:
            raise InvalidRecipient("approval to current owner", index=index)
        self._approvals.set(index, approved)
        self.events.emit(EVT_APPROVAL, {"owner": owner, "approved": approved, "index": index})

    def set_approval_for_all(self, caller: HexOrBytes, operator: HexOrBytes, approved: bool) -> None:
        owner = require_address(caller, name="caller")
        op = require_address(operator, name="operator")
        if op == owner:
            raise InvalidRecipient("operator cannot be the owner")
        self._operators.set((owner, op), bool(approved))
        self.events.emit(EVT_APPROVAL_FOR_ALL, {"owner": owner, "operator": op, "approved": bool(approved)})

    def authorize_transfer(self, caller: HexOrBytes, frm: HexOrBytes, to: HexOrBytes, index: int) -> None:
        """Raise unless `caller` may move position `index` from `frm` to `to`."""
        c = require_address(caller, name="caller")
        f = require_address(frm, name="from")
        t = require_address(to, name="to")
        owner = self.owner_of(index)
        if owner != f:
            raise NotPositionOwner("from is not the current holder", index=index)
        if t == zero_address():
            raise InvalidRecipient("cannot transfer to the zero address", index=index)
        if c != owner and self._approvals.get(index) != c and not self.is_approved_for_all(owner, c):
            raise NotAuthorized("caller is not holder, approved or operator", index=index)

    def move(self, frm: HexOrBytes, to: HexOrBytes, index: int) -> None:
        """Base ownership change. Clears the per-position approval."""
        f = require_address(frm, name="from")
        t = require_address(to, name="to")
        if self.owner_of(index) != f:
            raise NotPositionOwner("from is not the current holder", index=index)
        self._approvals.delete(index)
        self._balances.set(f, self.balance_of(f) - 1)
        self._balances.set(t, self.balance_of(t) + 1)
        self._owners.set(index, t)
        self.events.emit(EVT_TRANSFER, {"from": f, "to": t, "index": index})
        log.debug("position moved", extra={"index": index})


__all__ = ["PositionLedger"]
