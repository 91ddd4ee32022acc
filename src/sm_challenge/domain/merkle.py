"""Merkle trees for the two-level storage commitment.

Scheme:
- SHA-256, 32-byte nodes.
- Leaves and internal nodes hash under different one-byte prefixes:
  leaf = H(0x00 || data), node = H(0x01 || min(a, b) || max(a, b)).
  An internal node can therefore never be passed off as leaf data. Sorted
  pairs keep proofs as plain sibling lists with no left/right flags and no
  leaf index.
- An unpaired node at the end of a level is promoted unchanged.
- A one-leaf tree's root is that leaf's digest (empty proof).

Top level: leaves are the per-piece hashes (`mhash`), root is the order's
merkle_root. Second level: leaves are the chunks of one piece, root is that
piece's mhash.
"""

import hashlib
from collections.abc import Sequence
from dataclasses import dataclass

HASH_SIZE = 32
LEAF_PREFIX = b"\x00"
NODE_PREFIX = b"\x01"


def sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def hash_leaf(data: bytes) -> bytes:
    """Leaf digest of a raw chunk, or of a piece's mhash in the top tree."""
    return sha256(LEAF_PREFIX + data)


def hash_pair(a: bytes, b: bytes) -> bytes:
    if a <= b:
        return sha256(NODE_PREFIX + a + b)
    return sha256(NODE_PREFIX + b + a)


def process_proof(proof: Sequence[bytes], leaf: bytes) -> bytes:
    """Fold `proof` onto the leaf digest `leaf` and return the implied root."""
    current = leaf
    for sibling in proof:
        if len(sibling) != HASH_SIZE:
            raise ValueError(f"proof node must be {HASH_SIZE} bytes, got {len(sibling)}")
        current = hash_pair(current, sibling)
    return current


def verify_proof(proof: Sequence[bytes], root: bytes, leaf: bytes) -> bool:
    """True if `proof` opens `leaf` under `root`. Malformed nodes never verify."""
    try:
        return process_proof(proof, leaf) == root
    except ValueError:
        return False


class MerkleTree:
    """Sorted-pair Merkle tree over 32-byte leaf digests (see hash_leaf)."""

    def __init__(self, leaves: Sequence[bytes]) -> None:
        if not leaves:
            raise ValueError("a Merkle tree needs at least one leaf")
        for leaf in leaves:
            if len(leaf) != HASH_SIZE:
                raise ValueError(f"leaf must be {HASH_SIZE} bytes, got {len(leaf)}")
        self.leaves: list[bytes] = list(leaves)
        self._levels: list[list[bytes]] = [self.leaves]
        level = self.leaves
        while len(level) > 1:
            nxt = [hash_pair(level[i], level[i + 1]) for i in range(0, len(level) - 1, 2)]
            if len(level) % 2 == 1:
                nxt.append(level[-1])
            self._levels.append(nxt)
            level = nxt

    @property
    def root(self) -> bytes:
        return self._levels[-1][0]

    def proof(self, index: int) -> list[bytes]:
        if not (0 <= index < len(self.leaves)):
            raise IndexError(f"leaf index {index} out of range [0, {len(self.leaves)})")
        path: list[bytes] = []
        for level in self._levels[:-1]:
            sibling = index ^ 1
            if sibling < len(level):
                path.append(level[sibling])
            index //= 2
        return path


def split_chunks(piece: bytes, chunk_size: int) -> list[bytes]:
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    if not piece:
        return [b""]
    return [piece[i:i + chunk_size] for i in range(0, len(piece), chunk_size)]


def build_piece_tree(chunks: Sequence[bytes]) -> MerkleTree:
    """Second-level tree of one piece; its root is the piece's mhash."""
    return MerkleTree([hash_leaf(c) for c in chunks])


@dataclass
class TwoLevelCommitment:
    """Client-side helper: commit to pieces and answer challenges on them."""

    piece_size: int
    piece_trees: list[MerkleTree]
    top: MerkleTree

    @classmethod
    def from_pieces(
        cls, pieces: Sequence[bytes], piece_size: int, chunk_size: int
    ) -> "TwoLevelCommitment":
        if not pieces:
            raise ValueError("at least one piece is required")
        trees = [build_piece_tree(split_chunks(p, chunk_size)) for p in pieces]
        return cls(
            piece_size=piece_size,
            piece_trees=trees,
            top=MerkleTree([hash_leaf(t.root) for t in trees]),
        )

    @property
    def merkle_root(self) -> bytes:
        return self.top.root

    @property
    def leaf_count(self) -> int:
        return len(self.piece_trees)

    def mhash(self, piece_index: int) -> bytes:
        return self.piece_trees[piece_index].root

    def piece_proof(self, piece_index: int) -> list[bytes]:
        return self.top.proof(piece_index)

    def chunk_proof(self, piece_index: int, chunk_index: int) -> list[bytes]:
        return self.piece_trees[piece_index].proof(chunk_index)
