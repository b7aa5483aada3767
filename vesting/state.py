"""
vesting.state — journaled tables, nested checkpoints, atomic scopes.

Every state-changing vesting operation either commits all of its writes or
none of them. State lives in `JournaledMap` tables layered as a stack of
overlays over a base dict: writes go to the top overlay, reads consult
overlays from top → base. `commit()` merges the top overlay into its parent
(or the base when it is the last one); `revert()` discards it.

`Journal` groups every participant (allocation table, ownership tables,
event log, and the reward asset when it supports checkpoints) and exposes
`atomic()`, a context manager that begins a checkpoint on all of them,
commits on success and reverts on any exception before re-raising.

    j = Journal(records, events)
    with j.atomic():
        records.set(7, rec)
        events.emit(...)
        raise TransferFailed(...)   # both writes are discarded

Nested `atomic()` scopes behave as a stack: an inner commit merges into the
outer checkpoint, an inner revert keeps the outer writes.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import (Dict, Generic, Hashable, Iterator, List, Optional, Protocol,
                    Tuple, TypeVar, runtime_checkable)

log = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class _Deleted:
    __slots__ = ()

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return "<deleted>"


_DELETED = _Deleted()


@runtime_checkable
class Checkpointable(Protocol):
    def begin(self) -> None: ...

    def commit(self) -> None: ...

    def revert(self) -> None: ...


# =============================================================================
# JournaledMap
# =============================================================================


class JournaledMap(Generic[K, V]):
    """
    A copy-on-write mapping with nested checkpoints.

    Values are stored by reference; callers replace values (frozen
    dataclasses, ints, bytes) rather than mutating them in place.
    """

    def __init__(self, name: str = "table", base: Optional[Dict[K, V]] = None) -> None:
        self.name = name
        self._base: Dict[K, V] = dict(base or {})
        self._layers: List[Dict[K, object]] = []

    # --------------------------------------------------------------------- #
    # Checkpointing
    # --------------------------------------------------------------------- #

    def depth(self) -> int:
        return len(self._layers)

    def begin(self) -> None:
        self._layers.append({})

    def commit(self) -> None:
        if not self._layers:
            raise RuntimeError(f"{self.name}: commit without begin")
        top = self._layers.pop()
        if self._layers:
            self._layers[-1].update(top)
            return
        for k, v in top.items():
            if v is _DELETED:
                self._base.pop(k, None)
            else:
                self._base[k] = v  # type: ignore[assignment]

    def revert(self) -> None:
        if not self._layers:
            raise RuntimeError(f"{self.name}: revert without begin")
        self._layers.pop()

    # --------------------------------------------------------------------- #
    # Reads
    # --------------------------------------------------------------------- #

    def _lookup(self, key: K) -> object:
        for layer in reversed(self._layers):
            if key in layer:
                return layer[key]
        return self._base.get(key, _DELETED)

    def get(self, key: K, default: Optional[V] = None) -> Optional[V]:
        v = self._lookup(key)
        return default if v is _DELETED else v  # type: ignore[return-value]

    def __getitem__(self, key: K) -> V:
        v = self._lookup(key)
        if v is _DELETED:
            raise KeyError(key)
        return v  # type: ignore[return-value]

    def __contains__(self, key: object) -> bool:
        return self._lookup(key) is not _DELETED  # type: ignore[arg-type]

    def items(self) -> List[Tuple[K, V]]:
        merged: Dict[K, object] = dict(self._base)
        for layer in self._layers:
            merged.update(layer)
        return [(k, v) for k, v in merged.items() if v is not _DELETED]  # type: ignore[misc]

    def keys(self) -> List[K]:
        return [k for k, _ in self.items()]

    def __iter__(self) -> Iterator[K]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self.items())

    # --------------------------------------------------------------------- #
    # Writes
    # --------------------------------------------------------------------- #

    def set(self, key: K, value: V) -> None:
        if self._layers:
            self._layers[-1][key] = value
        else:
            self._base[key] = value

    def delete(self, key: K) -> None:
        if self._layers:
            self._layers[-1][key] = _DELETED
        else:
            self._base.pop(key, None)


# =============================================================================
# Journal
# =============================================================================


class Journal:
    """Coordinates checkpoints across every enlisted participant."""

    def __init__(self, *participants: Checkpointable) -> None:
        self._participants: List[Checkpointable] = []
        for p in participants:
            self.enlist(p)

    def enlist(self, participant: Checkpointable) -> None:
        if not isinstance(participant, Checkpointable):
            raise TypeError(f"{type(participant).__name__} does not support checkpoints")
        if any(p is participant for p in self._participants):
            return
        self._participants.append(participant)

    @property
    def participants(self) -> Tuple[Checkpointable, ...]:
        return tuple(self._participants)

    @contextmanager
    def atomic(self) -> Iterator[None]:
        parts = list(self._participants)
        for p in parts:
            p.begin()
        try:
            yield
        except BaseException:
            for p in reversed(parts):
                p.revert()
            log.debug("checkpoint reverted", extra={"participants": len(parts)})
            raise
        for p in parts:
            p.commit()


__all__ = ["Checkpointable", "JournaledMap", "Journal"]
