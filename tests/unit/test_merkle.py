"""Unit tests for the sorted-pair Merkle scheme and the two-level commitment helper."""

import hashlib

import pytest

from src.sm_challenge.domain.merkle import (
    MerkleTree,
    TwoLevelCommitment,
    build_piece_tree,
    hash_leaf,
    hash_pair,
    process_proof,
    split_chunks,
    verify_proof,
)


def _h(label: str) -> bytes:
    return hashlib.sha256(label.encode()).digest()


class TestHashPair:
    def test_order_independent(self) -> None:
        a, b = _h("a"), _h("b")
        assert hash_pair(a, b) == hash_pair(b, a)

    def test_hashes_smaller_first(self) -> None:
        a, b = sorted([_h("x"), _h("y")])
        assert hash_pair(b, a) == hashlib.sha256(b"\x01" + a + b).digest()

    def test_leaf_and_node_digests_differ(self) -> None:
        a, b = sorted([_h("x"), _h("y")])
        assert hash_leaf(a + b) != hash_pair(a, b)
        assert hash_leaf(a) == hashlib.sha256(b"\x00" + a).digest()


class TestMerkleTree:
    def test_single_leaf_root_is_leaf(self) -> None:
        leaf = _h("only")
        tree = MerkleTree([leaf])
        assert tree.root == leaf
        assert tree.proof(0) == []
        assert verify_proof([], leaf, leaf)

    def test_two_leaves(self) -> None:
        a, b = _h("a"), _h("b")
        tree = MerkleTree([a, b])
        assert tree.root == hash_pair(a, b)
        assert tree.proof(0) == [b]
        assert tree.proof(1) == [a]

    def test_odd_leaf_promoted_unchanged(self) -> None:
        a, b, c = _h("a"), _h("b"), _h("c")
        tree = MerkleTree([a, b, c])
        assert tree.root == hash_pair(hash_pair(a, b), c)
        # c has no sibling on the first level
        assert tree.proof(2) == [hash_pair(a, b)]

    @pytest.mark.parametrize("count", [1, 2, 3, 4, 5, 8, 13])
    def test_every_leaf_verifies(self, count: int) -> None:
        leaves = [_h(f"leaf-{i}") for i in range(count)]
        tree = MerkleTree(leaves)
        for i, leaf in enumerate(leaves):
            assert verify_proof(tree.proof(i), tree.root, leaf)

    def test_foreign_leaf_rejected(self) -> None:
        leaves = [_h(f"leaf-{i}") for i in range(4)]
        tree = MerkleTree(leaves)
        assert not verify_proof(tree.proof(0), tree.root, _h("intruder"))

    def test_proof_out_of_range(self) -> None:
        tree = MerkleTree([_h("a"), _h("b")])
        with pytest.raises(IndexError):
            tree.proof(2)

    def test_empty_tree_rejected(self) -> None:
        with pytest.raises(ValueError):
            MerkleTree([])

    def test_leaf_size_enforced(self) -> None:
        with pytest.raises(ValueError):
            MerkleTree([b"short"])


class TestProofHandling:
    def test_malformed_sibling_does_not_verify(self) -> None:
        a, b = _h("a"), _h("b")
        root = hash_pair(a, b)
        assert not verify_proof([b"\x01" * 31], root, a)

    def test_process_proof_raises_on_malformed_sibling(self) -> None:
        with pytest.raises(ValueError):
            process_proof([b"\x00" * 33], _h("a"))

    def test_wrong_root(self) -> None:
        a, b = _h("a"), _h("b")
        assert not verify_proof([b], _h("not-the-root"), a)


class TestChunking:
    def test_split_exact(self) -> None:
        assert split_chunks(b"abcdef", 2) == [b"ab", b"cd", b"ef"]

    def test_split_tail(self) -> None:
        assert split_chunks(b"abcde", 2) == [b"ab", b"cd", b"e"]

    def test_split_empty_piece(self) -> None:
        assert split_chunks(b"", 4) == [b""]

    def test_split_rejects_non_positive_size(self) -> None:
        with pytest.raises(ValueError):
            split_chunks(b"abc", 0)

    def test_piece_tree_leaves_are_chunk_hashes(self) -> None:
        tree = build_piece_tree([b"ab", b"cd"])
        assert tree.leaves == [hash_leaf(b"ab"), hash_leaf(b"cd")]


class TestTwoLevelCommitment:
    def test_round_trip_opens_both_levels(self) -> None:
        pieces = [bytes([i]) * 64 + bytes(range(i)) for i in range(5)]
        c = TwoLevelCommitment.from_pieces(pieces, piece_size=128, chunk_size=16)
        assert c.leaf_count == 5

        for i in range(c.leaf_count):
            assert verify_proof(c.piece_proof(i), c.merkle_root, hash_leaf(c.mhash(i)))
            chunk = split_chunks(pieces[i], 16)[1]
            assert verify_proof(c.chunk_proof(i, 1), c.mhash(i), hash_leaf(chunk))

    def test_chunk_from_other_piece_rejected(self) -> None:
        pieces = [b"A" * 32, b"B" * 32]
        c = TwoLevelCommitment.from_pieces(pieces, piece_size=32, chunk_size=8)
        foreign = split_chunks(pieces[1], 8)[0]
        assert not verify_proof(c.chunk_proof(0, 0), c.mhash(0), hash_leaf(foreign))

    def test_requires_pieces(self) -> None:
        with pytest.raises(ValueError):
            TwoLevelCommitment.from_pieces([], piece_size=1, chunk_size=1)

    def test_internal_nodes_do_not_open_as_chunk_data(self) -> None:
        pieces = [bytes([i]) * 64 for i in range(1, 5)]
        c = TwoLevelCommitment.from_pieces(pieces, piece_size=64, chunk_size=16)
        leaves = c.piece_trees[2].leaves
        lo, hi = sorted([hash_pair(leaves[0], leaves[1]), hash_pair(leaves[2], leaves[3])])
        assert hash_pair(lo, hi) == c.mhash(2)
        assert not verify_proof([], c.mhash(2), hash_leaf(lo + hi))

    def test_internal_top_node_is_not_a_piece_hash(self) -> None:
        pieces = [bytes([i]) * 64 for i in range(1, 5)]
        c = TwoLevelCommitment.from_pieces(pieces, piece_size=64, chunk_size=16)
        top = c.top.leaves
        left, right = hash_pair(top[0], top[1]), hash_pair(top[2], top[3])
        assert verify_proof([right], c.merkle_root, left)
        assert not verify_proof([right], c.merkle_root, hash_leaf(left))
