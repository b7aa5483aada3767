"""
vesting.events — event model and in-memory event log.

Events are `(name: bytes, args: dict)` pairs appended in emission order.
The log takes part in journal checkpoints: events emitted inside a reverted
scope disappear together with the state writes that produced them.

Names used by this package:
    b"Settled"         {index, holder, amount}
    b"Transfer"        {from, to, index}        (mint: from = zero address)
    b"Approval"        {owner, approved, index}
    b"ApprovalForAll"  {owner, operator, approved}
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Mapping, Optional

EVT_SETTLED = b"Settled"
EVT_TRANSFER = b"Transfer"
EVT_APPROVAL = b"Approval"
EVT_APPROVAL_FOR_ALL = b"ApprovalForAll"


@dataclass(frozen=True)
class Event:
    name: bytes
    args: Mapping[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe shape: bytes become 0x-hex."""
        return {
            "name": self.name.decode("ascii", "replace"),
            "args": {k: ("0x" + bytes(v).hex() if isinstance(v, (bytes, bytearray)) else v) for k, v in self.args.items()},
        }


class EventLog:
    def __init__(self) -> None:
        self._events: List[Event] = []
        self._marks: List[int] = []

    def emit(self, name: bytes, args: Mapping[str, Any]) -> Event:
        if not isinstance(name, (bytes, bytearray)) or not name:
            raise ValueError("event name must be non-empty bytes")
        ev = Event(name=bytes(name), args=dict(args))
        self._events.append(ev)
        return ev

    # ---- checkpoints ----

    def begin(self) -> None:
        self._marks.append(len(self._events))

    def commit(self) -> None:
        if not self._marks:
            raise RuntimeError("events: commit without begin")
        self._marks.pop()

    def revert(self) -> None:
        if not self._marks:
            raise RuntimeError("events: revert without begin")
        del self._events[self._marks.pop():]

    # ---- queries ----

    def __iter__(self) -> Iterator[Event]:
        return iter(list(self._events))

    def __len__(self) -> int:
        return len(self._events)

    def all(self, name: Optional[bytes] = None) -> List[Event]:
        if name is None:
            return list(self._events)
        return [e for e in self._events if e.name == name]

    def last(self, name: Optional[bytes] = None) -> Optional[Event]:
        matches = self.all(name)
        return matches[-1] if matches else None


__all__ = [
    "EVT_SETTLED",
    "EVT_TRANSFER",
    "EVT_APPROVAL",
    "EVT_APPROVAL_FOR_ALL",
    "Event",
    "EventLog",
]
