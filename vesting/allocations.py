"""
vesting.allocations — off-chain distribution builder.

Turns a list of beneficiary allocations into the Merkle commitment a
`MerkleVesting` instance is constructed with, plus one claim ticket
(account, share, proof) per index for beneficiaries to submit.

Inputs
------
JSON, either a list or `{"allocations": [...]}`, of objects
    {"index": 0, "account": "0x…", "share": 1000}
or CSV with an `index,account,share` header. `index` values must be unique;
the same account may appear under several indices.

Outputs
-------
`Distribution.to_json()`:
    {
      "merkle_root": "0x…",
      "total_share": 123,
      "count": 3,
      "claims": {"0": {"account": "0x…", "share": 1000, "leaf": "0x…", "proof": ["0x…", …]}, …}
    }

Leaves are placed in ascending index order, so the same allocation set
always yields the same root.
"""

from __future__ import annotations

import csv
import io
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from . import merkle
from .encoding import leaf_hash, require_address, require_u256
from .errors import EncodingError
from .hashing import HexOrBytes, to_bytes, to_digest, to_hex


@dataclass(frozen=True)
class Allocation:
    index: int
    account: bytes
    share: int

    @classmethod
    def create(cls, index: int, account: HexOrBytes, share: int) -> "Allocation":
        return cls(
            index=require_u256(index, name="index"),
            account=require_address(account, name="account"),
            share=require_u256(share, name="share"),
        )

    @property
    def leaf(self) -> bytes:
        return leaf_hash(self.index, self.account, self.share)


@dataclass(frozen=True)
class ClaimTicket:
    """Everything a beneficiary passes to `MerkleVesting.claim`."""

    index: int
    account: bytes
    share: int
    proof: List[bytes]

    @property
    def leaf(self) -> bytes:
        return leaf_hash(self.index, self.account, self.share)

    def verify(self, root: HexOrBytes) -> bool:
        return merkle.verify(self.proof, to_digest(root, name="merkle_root"), self.leaf)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "account": to_hex(self.account),
            "share": self.share,
            "leaf": to_hex(self.leaf),
            "proof": [to_hex(p) for p in self.proof],
        }


class Distribution:
    def __init__(self, allocations: Iterable[Allocation]) -> None:
        items = sorted(allocations, key=lambda a: a.index)
        if not items:
            raise EncodingError("allocation set is empty")
        seen: Dict[int, Allocation] = {}
        for a in items:
            if a.index in seen:
                raise EncodingError("duplicate allocation index", details={"index": a.index})
            seen[a.index] = a
        self._allocations = items
        self._by_index = seen
        self._position = {a.index: i for i, a in enumerate(items)}
        self._tree = merkle.MerkleTree([a.leaf for a in items])

    @classmethod
    def from_allocations(cls, rows: Iterable[Mapping[str, Any]]) -> "Distribution":
        out: List[Allocation] = []
        for n, row in enumerate(rows):
            try:
                out.append(Allocation.create(_as_int(row["index"]), row["account"], _as_int(row["share"])))
            except KeyError as e:
                raise EncodingError(f"allocation #{n} is missing field {e.args[0]!r}") from e
        return cls(out)

    # ---- views ----

    @property
    def merkle_root(self) -> bytes:
        return self._tree.root

    @property
    def total_share(self) -> int:
        return sum(a.share for a in self._allocations)

    def __len__(self) -> int:
        return len(self._allocations)

    def __contains__(self, index: object) -> bool:
        return index in self._by_index

    def allocations(self) -> List[Allocation]:
        return list(self._allocations)

    def allocation(self, index: int) -> Allocation:
        try:
            return self._by_index[index]
        except KeyError:
            raise KeyError(f"no allocation for index {index}") from None

    def proof(self, index: int) -> List[bytes]:
        self.allocation(index)
        return self._tree.proof(self._position[index])

    def claim(self, index: int) -> ClaimTicket:
        a = self.allocation(index)
        return ClaimTicket(index=a.index, account=a.account, share=a.share, proof=self.proof(index))

    # ---- (de)serialisation ----

    def to_json(self) -> Dict[str, Any]:
        return {
            "merkle_root": to_hex(self.merkle_root),
            "total_share": self.total_share,
            "count": len(self),
            "claims": {str(a.index): self.claim(a.index).to_dict() for a in self._allocations},
        }

    @classmethod
    def from_json(cls, obj: Mapping[str, Any]) -> "Distribution":
        claims = obj.get("claims")
        if not isinstance(claims, Mapping):
            raise EncodingError("distribution JSON has no 'claims' object")
        dist = cls.from_allocations(
            {"index": k, "account": v.get("account"), "share": v.get("share")} for k, v in claims.items()
        )
        stated = obj.get("merkle_root")
        if stated is not None and to_bytes(stated) != dist.merkle_root:
            raise EncodingError(
                "merkle_root does not match claims",
                details={"stated": str(stated), "computed": to_hex(dist.merkle_root)},
            )
        return dist


# --------------------------------------------------------------------------- #
# Loading
# --------------------------------------------------------------------------- #


def _as_int(v: Any) -> int:
    if isinstance(v, bool):
        raise EncodingError("boolean is not an integer")
    if isinstance(v, int):
        return v
    if isinstance(v, str):
        s = v.strip()
        try:
            return int(s, 16) if s.lower().startswith("0x") else int(s)
        except ValueError as e:
            raise EncodingError(f"not an integer: {v!r}") from e
    raise EncodingError(f"not an integer: {v!r}")


def parse_allocations(text: str, *, fmt: Optional[str] = None) -> List[Dict[str, Any]]:
    """Parse JSON or CSV allocation rows. `fmt` is 'json', 'csv' or None (sniff)."""
    stripped = text.lstrip()
    if fmt is None:
        fmt = "json" if stripped.startswith(("[", "{")) else "csv"
    if fmt == "json":
        try:
            obj = json.loads(text)
        except json.JSONDecodeError as e:
            raise EncodingError(f"invalid JSON: {e}") from e
        if isinstance(obj, Mapping):
            obj = obj.get("allocations")
        if not isinstance(obj, list):
            raise EncodingError("JSON allocations must be a list or {'allocations': [...]}")
        return [dict(r) for r in obj]
    if fmt == "csv":
        reader = csv.DictReader(io.StringIO(text))
        missing = {"index", "account", "share"} - set(reader.fieldnames or ())
        if missing:
            raise EncodingError(f"CSV header is missing {sorted(missing)}")
        return [dict(r) for r in reader]
    raise EncodingError(f"unknown allocation format: {fmt!r}")


def load_allocations(path: Path | str) -> Distribution:
    p = Path(path)
    fmt = "csv" if p.suffix.lower() == ".csv" else ("json" if p.suffix.lower() == ".json" else None)
    return Distribution.from_allocations(parse_allocations(p.read_text(encoding="utf-8"), fmt=fmt))


def load_distribution(path: Path | str) -> Distribution:
    try:
        obj = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise EncodingError(f"invalid JSON: {e}") from e
    return Distribution.from_json(obj)


__all__ = [
    "Allocation",
    "ClaimTicket",
    "Distribution",
    "parse_allocations",
    "load_allocations",
    "load_distribution",
]
