"""
vesting.clock — monotonic time sources.

The core never reads wall-clock time directly; it asks a clock for `now()`,
an integer timestamp in the unit the vesting duration is expressed in
(seconds for `SystemClock`). `ManualClock` is the deterministic source used
by simulations and tests; it only moves forward.
"""

from __future__ import annotations

import time
from typing import Protocol, runtime_checkable

from .errors import ClockError


@runtime_checkable
class Clock(Protocol):
    def now(self) -> int: ...


class SystemClock:
    """Unix seconds, never reported lower than a previous reading."""

    def __init__(self) -> None:
        self._last = 0

    def now(self) -> int:
        t = int(time.time())
        if t < self._last:
            return self._last
        self._last = t
        return t


class ManualClock:
    def __init__(self, start: int = 0) -> None:
        if isinstance(start, bool) or not isinstance(start, int) or start < 0:
            raise ClockError("start must be a non-negative integer", details={"start": repr(start)})
        self._now = start

    def now(self) -> int:
        return self._now

    def advance(self, delta: int) -> int:
        if isinstance(delta, bool) or not isinstance(delta, int) or delta < 0:
            raise ClockError("clock can only advance by a non-negative integer", details={"delta": repr(delta)})
        self._now += delta
        return self._now

    def set(self, timestamp: int) -> int:
        if isinstance(timestamp, bool) or not isinstance(timestamp, int):
            raise ClockError("timestamp must be an integer", details={"timestamp": repr(timestamp)})
        if timestamp < self._now:
            raise ClockError("clock cannot move backwards", details={"now": self._now, "requested": timestamp})
        self._now = timestamp
        return self._now

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return f"ManualClock(now={self._now})"


__all__ = ["Clock", "SystemClock", "ManualClock"]
