from __future__ import annotations

import pytest

from vesting.errors import EncodingError, InvalidProof
from vesting.events import EVT_TRANSFER
from vesting.tests import SHARES, addr


def test_activation_creates_record_and_position(vesting, dist, clock):
    clock.set(30)
    t = dist.claim(1)
    vesting.activate(t.account, t.index, t.share, t.proof)

    rec = vesting.allocation(1)
    assert rec is not None
    assert rec.share == SHARES["bob"]
    assert rec.last_claimed_at == 30
    assert vesting.owner_of(1) == addr("bob")
    assert vesting.balance_of(addr("bob")) == 1
    ev = vesting.events.last(EVT_TRANSFER)
    assert ev is not None and ev.args["to"] == addr("bob") and ev.args["index"] == 1


def test_activation_accepts_hex_inputs(vesting, dist):
    t = dist.claim(0).to_dict()
    vesting.activate(t["account"], t["index"], t["share"], t["proof"])
    assert vesting.exists(0)


def test_second_activation_is_a_no_op(vesting, dist, clock):
    t = dist.claim(0)
    assert vesting.registry.activate(t.account, t.index, t.share, t.proof) is True
    clock.advance(40)
    n_events = len(vesting.events)

    # the record exists, so even a bogus proof is not re-validated
    assert vesting.registry.activate(addr("mallory"), 0, 1, []) is False
    assert vesting.allocation(0).last_claimed_at == 0
    assert vesting.allocation(0).share == SHARES["alice"]
    assert len(vesting.events) == n_events


def test_wrong_share_is_rejected(vesting, dist):
    t = dist.claim(0)
    with pytest.raises(InvalidProof) as ei:
        vesting.activate(t.account, t.index, t.share + 1, t.proof)
    assert ei.value.details["index"] == 0
    assert vesting.allocation(0) is None
    assert not vesting.exists(0)


def test_wrong_account_is_rejected(vesting, dist):
    t = dist.claim(2)
    with pytest.raises(InvalidProof):
        vesting.activate(addr("mallory"), t.index, t.share, t.proof)
    assert vesting.allocation(2) is None


def test_proof_for_another_index_is_rejected(vesting, dist):
    t = dist.claim(3)
    other = dist.claim(4)
    with pytest.raises(InvalidProof):
        vesting.activate(t.account, t.index, t.share, other.proof)
    assert len(vesting.events) == 0


def test_malformed_account_is_an_encoding_error(vesting, dist):
    t = dist.claim(0)
    with pytest.raises(EncodingError):
        vesting.activate(t.account[:20], t.index, t.share, t.proof)


def test_negative_index_rejected(vesting):
    with pytest.raises(EncodingError):
        vesting.activate(addr("alice"), -1, 1, [])
