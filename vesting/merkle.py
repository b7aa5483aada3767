"""
vesting.merkle — sorted-pair Merkle trees

Membership verification and tree construction for the allocation commitment.

Design choices
--------------
• Leaves are provided as *already-hashed* 32-byte digests (see
  `vesting.encoding.leaf_hash`).
• Inner nodes use the **sorted-pair** rule: the two children are ordered so
  the numerically smaller digest comes first, then `sha3_256(lo || hi)`.
  Proofs therefore carry sibling digests only, no left/right flags.
• Odd-node handling duplicates the last node in a layer, so its parent is
  `hash_pair(x, x)`.
• A single-leaf tree has root == leaf and an empty proof.

Key functions
-------------
- hash_pair(a, b)
- process_proof(proof, leaf)
- verify(proof, root, leaf)
- merkle_root(leaf_hashes)
- build_proof(leaf_hashes, index)
- MerkleTree (layers cached, proofs by leaf position)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence

from .hashing import DIGEST_SIZE, BytesLike, sha3_256

Hash = bytes


# --------------------------------------------------------------------------- #
# Verifier
# --------------------------------------------------------------------------- #


def hash_pair(a: Hash, b: Hash) -> Hash:
    """
    Inner-node combiner: SHA3-256(min(a, b) || max(a, b)).

    Equal-length big-endian digests compare numerically under bytes ordering.
    """
    if len(a) != len(b):
        raise ValueError("left/right hash length mismatch")
    return sha3_256(a + b) if a <= b else sha3_256(b + a)


def process_proof(proof: Sequence[BytesLike], leaf: BytesLike) -> Hash:
    """Fold `proof` into `leaf` and return the reconstructed root."""
    acc = bytes(leaf)
    for sibling in proof:
        acc = hash_pair(acc, bytes(sibling))
    return acc


def verify(proof: Sequence[BytesLike], root: BytesLike, leaf: BytesLike) -> bool:
    """
    True iff folding `proof` into `leaf` reproduces `root`.

    Pure and O(len(proof)). Malformed inputs (wrong digest width) verify as
    False rather than raising.
    """
    if len(leaf) != DIGEST_SIZE or len(root) != DIGEST_SIZE:
        return False
    for sibling in proof:
        if len(sibling) != DIGEST_SIZE:
            return False
    return process_proof(proof, leaf) == bytes(root)


# --------------------------------------------------------------------------- #
# Builder
# --------------------------------------------------------------------------- #


def _next_layer(layer: Sequence[Hash]) -> List[Hash]:
    out: List[Hash] = []
    n = len(layer)
    for i in range(0, n, 2):
        left = layer[i]
        right = layer[i + 1] if i + 1 < n else left
        out.append(hash_pair(left, right))
    return out


def merkle_root(leaf_hashes: Sequence[Hash]) -> Hash:
    """
    Compute the sorted-pair Merkle root of pre-hashed leaves.

    Raises:
        ValueError if leaf_hashes is empty.
    """
    if not leaf_hashes:
        raise ValueError("cannot compute root over empty leaf set")
    layer: List[Hash] = [bytes(h) for h in leaf_hashes]
    while len(layer) > 1:
        layer = _next_layer(layer)
    return layer[0]


def build_proof(leaf_hashes: Sequence[Hash], index: int) -> List[Hash]:
    """Inclusion proof for `leaf_hashes[index]`, leaf layer first."""
    return MerkleTree(leaf_hashes).proof(index)


@dataclass
class MerkleTree:
    """
    A fully materialised sorted-pair tree. `layers[0]` holds the leaves and
    `layers[-1]` the root; building is O(n), each proof O(log n).
    """

    leaves: Sequence[Hash]
    layers: List[List[Hash]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not self.leaves:
            raise ValueError("cannot build tree over empty leaf set")
        for h in self.leaves:
            if len(h) != DIGEST_SIZE:
                raise ValueError(f"leaf hashes must be {DIGEST_SIZE} bytes")
        layer = [bytes(h) for h in self.leaves]
        self.layers = [layer]
        while len(layer) > 1:
            layer = _next_layer(layer)
            self.layers.append(layer)

    @property
    def root(self) -> Hash:
        return self.layers[-1][0]

    def __len__(self) -> int:
        return len(self.layers[0])

    def proof(self, index: int) -> List[Hash]:
        n = len(self.layers[0])
        if not (0 <= index < n):
            raise IndexError("leaf index out of range")
        proof: List[Hash] = []
        idx = index
        for layer in self.layers[:-1]:
            sib = idx ^ 1
            proof.append(layer[sib] if sib < len(layer) else layer[idx])
            idx //= 2
        return proof


__all__ = [
    "Hash",
    "hash_pair",
    "process_proof",
    "verify",
    "merkle_root",
    "build_proof",
    "MerkleTree",
]
