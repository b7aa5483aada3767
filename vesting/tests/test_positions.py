from __future__ import annotations

import pytest

from vesting.errors import (InvalidRecipient, NotAuthorized, NotPositionOwner,
                            PositionExists, PositionNotFound)
from vesting.events import EVT_APPROVAL, EVT_APPROVAL_FOR_ALL, EVT_TRANSFER
from vesting.positions import PositionLedger
from vesting.tests import addr

ALICE, BOB, CAROL = addr("alice"), addr("bob"), addr("carol")


@pytest.fixture
def ledger() -> PositionLedger:
    p = PositionLedger()
    p.mint(ALICE, 1)
    p.mint(ALICE, 2)
    return p


def test_mint_and_views(ledger):
    assert ledger.exists(1) and not ledger.exists(3)
    assert ledger.owner_of(1) == ALICE
    assert ledger.balance_of(ALICE) == 2
    assert ledger.indices_of(ALICE) == [1, 2]
    assert len(ledger) == 2
    ev = ledger.events.all(EVT_TRANSFER)[0]
    assert ev.args["from"] == bytes(32)


def test_mint_twice_or_to_zero(ledger):
    with pytest.raises(PositionExists):
        ledger.mint(BOB, 1)
    with pytest.raises(InvalidRecipient):
        ledger.mint(bytes(32), 9)


def test_owner_of_missing():
    with pytest.raises(PositionNotFound):
        PositionLedger().owner_of(0)


def test_approve_rules(ledger):
    with pytest.raises(NotAuthorized):
        ledger.approve(BOB, CAROL, 1)
    with pytest.raises(InvalidRecipient):
        ledger.approve(ALICE, ALICE, 1)
    ledger.approve(ALICE, BOB, 1)
    assert ledger.get_approved(1) == BOB
    assert ledger.events.last(EVT_APPROVAL).args["approved"] == BOB


def test_operator_may_approve(ledger):
    ledger.set_approval_for_all(ALICE, CAROL, True)
    ledger.approve(CAROL, BOB, 2)
    assert ledger.get_approved(2) == BOB
    ledger.set_approval_for_all(ALICE, CAROL, False)
    assert not ledger.is_approved_for_all(ALICE, CAROL)
    assert ledger.events.last(EVT_APPROVAL_FOR_ALL).args["approved"] is False


def test_operator_cannot_be_owner(ledger):
    with pytest.raises(InvalidRecipient):
        ledger.set_approval_for_all(ALICE, ALICE, True)


def test_authorize_transfer(ledger):
    ledger.authorize_transfer(ALICE, ALICE, BOB, 1)
    with pytest.raises(NotPositionOwner):
        ledger.authorize_transfer(ALICE, BOB, CAROL, 1)
    with pytest.raises(NotAuthorized):
        ledger.authorize_transfer(BOB, ALICE, BOB, 1)
    with pytest.raises(InvalidRecipient):
        ledger.authorize_transfer(ALICE, ALICE, bytes(32), 1)


def test_move_clears_approval_and_updates_balances(ledger):
    ledger.approve(ALICE, CAROL, 1)
    ledger.move(ALICE, BOB, 1)
    assert ledger.owner_of(1) == BOB
    assert ledger.get_approved(1) is None
    assert ledger.balance_of(ALICE) == 1
    assert ledger.balance_of(BOB) == 1
    with pytest.raises(NotPositionOwner):
        ledger.move(ALICE, CAROL, 1)


def test_revert_restores_ownership(ledger):
    ledger.begin()
    ledger.move(ALICE, BOB, 1)
    ledger.revert()
    assert ledger.owner_of(1) == ALICE
    assert ledger.balance_of(BOB) == 0
