"""
vesting.asset — the reward asset collaborator.

The vesting core only needs one primitive from the fungible asset it pays
out:

    transfer(to: bytes, amount: int) -> bool

called on a handle bound to the vesting pool. A falsy result (or an
`AssetError`) means nothing moved; the settlement then aborts with
`TransferFailed`.

`TokenLedger` is a minimal, deterministic balance ledger for local runs,
simulations and tests. Real deployments substitute their own handle.
Amounts are non-negative integers within 256 bits; no floats anywhere.

    ledger = TokenLedger()
    pool = ledger.account(pool_address)
    ledger.mint(pool_address, 1_000_000)     # fund the pool
    pool.transfer(beneficiary, 500)          # -> True
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from .encoding import U256_MAX, require_address, require_u256
from .errors import AssetError, InsufficientBalance
from .hashing import HexOrBytes
from .state import JournaledMap

log = logging.getLogger(__name__)


@runtime_checkable
class FungibleAsset(Protocol):
    def transfer(self, to: bytes, amount: int) -> bool: ...


def _add_checked(a: int, b: int) -> int:
    c = a + b
    if c > U256_MAX:
        raise AssetError("balance overflow", details={"a": str(a), "b": str(b)})
    return c


class TokenLedger:
    """In-memory balances with checkpoint support."""

    def __init__(self, symbol: str = "VEST") -> None:
        self.symbol = symbol
        self._balances: JournaledMap[bytes, int] = JournaledMap("balances")
        self._total: JournaledMap[str, int] = JournaledMap("supply")

    # ---- checkpoints (delegated) ----

    def begin(self) -> None:
        self._balances.begin()
        self._total.begin()

    def commit(self) -> None:
        self._balances.commit()
        self._total.commit()

    def revert(self) -> None:
        self._balances.revert()
        self._total.revert()

    # ---- views ----

    def balance_of(self, addr: HexOrBytes) -> int:
        return self._balances.get(require_address(addr), 0) or 0

    def total_supply(self) -> int:
        return self._total.get("total", 0) or 0

    # ---- mutations ----

    def mint(self, to: HexOrBytes, amount: int) -> None:
        to_b = require_address(to, name="to")
        require_u256(amount, name="amount")
        self._total.set("total", _add_checked(self.total_supply(), amount))
        self._balances.set(to_b, _add_checked(self.balance_of(to_b), amount))

    def burn(self, frm: HexOrBytes, amount: int) -> None:
        frm_b = require_address(frm, name="from")
        require_u256(amount, name="amount")
        have = self.balance_of(frm_b)
        if amount > have:
            raise InsufficientBalance(have=have, need=amount)
        self._balances.set(frm_b, have - amount)
        self._total.set("total", self.total_supply() - amount)

    def move(self, frm: HexOrBytes, to: HexOrBytes, amount: int) -> bool:
        """
        Debit `frm` and credit `to`. Returns False (and changes nothing) when
        `frm` cannot cover `amount`.
        """
        frm_b = require_address(frm, name="from")
        to_b = require_address(to, name="to")
        require_u256(amount, name="amount")
        if amount == 0:
            return True
        have = self.balance_of(frm_b)
        if amount > have:
            log.debug("transfer refused", extra={"have": have, "need": amount})
            return False
        self._balances.set(frm_b, have - amount)
        self._balances.set(to_b, _add_checked(self.balance_of(to_b), amount))
        return True

    def account(self, owner: HexOrBytes) -> "AssetAccount":
        return AssetAccount(self, require_address(owner, name="owner"))


class AssetAccount:
    """A `FungibleAsset` handle whose transfers debit one fixed holder."""

    def __init__(self, ledger: TokenLedger, owner: bytes) -> None:
        self.ledger = ledger
        self.owner = owner

    def transfer(self, to: bytes, amount: int) -> bool:
        return self.ledger.move(self.owner, to, amount)

    def balance(self) -> int:
        return self.ledger.balance_of(self.owner)

    def begin(self) -> None:
        self.ledger.begin()

    def commit(self) -> None:
        self.ledger.commit()

    def revert(self) -> None:
        self.ledger.revert()

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return f"AssetAccount(owner=0x{self.owner.hex()}, symbol={self.ledger.symbol!r})"


__all__ = ["FungibleAsset", "TokenLedger", "AssetAccount"]
