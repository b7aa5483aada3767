from __future__ import annotations

import pytest
from hypothesis import given, strategies as st

from vesting.events import EventLog
from vesting.state import Journal, JournaledMap

KEYS = st.integers(min_value=0, max_value=20)
MAPS = st.dictionaries(KEYS, st.integers(), max_size=10)


def test_revert_discards_writes():
    m: JournaledMap[int, str] = JournaledMap("t", {1: "a"})
    m.begin()
    m.set(1, "b")
    m.set(2, "c")
    m.delete(1)
    assert 1 not in m and m.get(2) == "c"
    m.revert()
    assert dict(m.items()) == {1: "a"}


def test_nested_inner_revert_keeps_outer():
    m: JournaledMap[int, str] = JournaledMap("t")
    m.begin()
    m.set(1, "outer")
    m.begin()
    m.set(2, "inner")
    m.revert()
    m.commit()
    assert dict(m.items()) == {1: "outer"}
    assert m.depth() == 0


def test_inner_commit_then_outer_revert():
    m: JournaledMap[int, str] = JournaledMap("t")
    m.begin()
    m.begin()
    m.set(1, "x")
    m.commit()
    assert m[1] == "x"
    m.revert()
    assert 1 not in m
    with pytest.raises(KeyError):
        m[1]


def test_unbalanced_commit_and_revert():
    m: JournaledMap[int, int] = JournaledMap("t")
    with pytest.raises(RuntimeError):
        m.commit()
    with pytest.raises(RuntimeError):
        m.revert()


def test_journal_atomic_reverts_every_participant():
    a: JournaledMap[str, int] = JournaledMap("a")
    log = EventLog()
    j = Journal(a, log)
    with pytest.raises(ZeroDivisionError):
        with j.atomic():
            a.set("k", 1)
            log.emit(b"E", {"k": 1})
            1 // 0
    assert "k" not in a
    assert len(log) == 0

    with j.atomic():
        a.set("k", 2)
        log.emit(b"E", {"k": 2})
    assert a["k"] == 2
    assert [e.args["k"] for e in log] == [2]


def test_journal_enlist_dedupes_and_checks_type():
    a: JournaledMap[str, int] = JournaledMap("a")
    j = Journal(a, a)
    assert j.participants == (a,)
    with pytest.raises(TypeError):
        j.enlist(object())  # type: ignore[arg-type]


@given(base=MAPS, writes=MAPS, deletes=st.lists(KEYS, max_size=5))
def test_revert_restores_baseline(base, writes, deletes):
    m: JournaledMap[int, int] = JournaledMap("t", base)
    m.begin()
    for k, v in writes.items():
        m.set(k, v)
    for k in deletes:
        m.delete(k)
    m.revert()
    assert dict(m.items()) == base


@given(base=MAPS, writes=MAPS, deletes=st.lists(KEYS, max_size=5))
def test_commit_applies_last_wins(base, writes, deletes):
    m: JournaledMap[int, int] = JournaledMap("t", base)
    expected = dict(base)
    m.begin()
    m.begin()
    for k, v in writes.items():
        m.set(k, v)
        expected[k] = v
    for k in deletes:
        m.delete(k)
        expected.pop(k, None)
    m.commit()
    m.commit()
    assert dict(m.items()) == expected
    assert len(m) == len(expected)


def test_journal_atomic_reverts_on_base_exceptions():
    a: JournaledMap[str, int] = JournaledMap("a", {"k": 0})
    log = EventLog()
    j = Journal(a, log)
    for exc in (KeyboardInterrupt, SystemExit):
        with pytest.raises(exc):
            with j.atomic():
                a.set("k", 1)
                log.emit(b"E", {})
                raise exc
        assert a["k"] == 0
        assert a.depth() == 0
        assert len(log) == 0
