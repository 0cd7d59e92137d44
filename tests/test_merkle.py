"""
btcspv Merkle Tests
"""

import pytest

from btcspv.core.types import Hash
from btcspv.crypto.hash import sha256d
from btcspv.crypto.merkle import MerkleProof, MerkleTree, merkle_root, verify_merkle_inclusion
from btcspv.core.transaction import parse_transaction
from btcspv.sample import SAMPLE_RAW_TX, SAMPLE_BLOCKS


def leaves(n):
    return [Hash(bytes([i + 1] * 32)) for i in range(n)]


class TestMerkleRoot:
    """Bitcoin-style root computation."""

    def test_empty(self):
        assert merkle_root([]) == Hash.zero()

    def test_single_leaf_is_root(self):
        leaf = leaves(1)[0]
        assert merkle_root([leaf]) == leaf

    def test_two_leaves(self):
        a, b = leaves(2)
        assert merkle_root([a, b]) == sha256d(a.data + b.data)

    def test_odd_count_duplicates_last(self):
        a, b, c = leaves(3)
        ab = sha256d(a.data + b.data)
        cc = sha256d(c.data + c.data)
        assert merkle_root([a, b, c]) == sha256d(ab.data + cc.data)


class TestVerifyInclusion:
    """Path reduction with position bits."""

    @pytest.mark.parametrize("count", [1, 2, 3, 5, 8, 13])
    def test_every_leaf_verifies(self, count):
        items = leaves(count)
        tree = MerkleTree(items)
        for i, leaf in enumerate(items):
            proof = tree.get_proof(i)
            assert verify_merkle_inclusion(leaf, proof, tree.root)

    def test_depth_zero(self):
        leaf = leaves(1)[0]
        assert verify_merkle_inclusion(leaf, MerkleProof(), leaf)
        assert not verify_merkle_inclusion(leaf, MerkleProof(), Hash.zero())

    def test_flipped_sibling_byte(self):
        items = leaves(8)
        tree = MerkleTree(items)
        proof = tree.get_proof(5)
        for level in range(proof.depth):
            siblings = list(proof.siblings)
            corrupted = bytearray(siblings[level].data)
            corrupted[0] ^= 0x01
            siblings[level] = Hash(bytes(corrupted))
            assert not verify_merkle_inclusion(items[5], MerkleProof(siblings, proof.pos), tree.root)

    def test_flipped_position_bit(self):
        items = leaves(8)
        tree = MerkleTree(items)
        proof = tree.get_proof(5)
        for bit in range(proof.depth):
            altered = MerkleProof(proof.siblings, proof.pos ^ (1 << bit))
            assert not verify_merkle_inclusion(items[5], altered, tree.root)

    def test_position_beyond_depth(self):
        items = leaves(4)
        tree = MerkleTree(items)
        proof = tree.get_proof(2)
        altered = MerkleProof(proof.siblings, proof.pos | (1 << proof.depth))
        assert not verify_merkle_inclusion(items[2], altered, tree.root)

    def test_negative_position(self):
        leaf = leaves(1)[0]
        assert not verify_merkle_inclusion(leaf, MerkleProof([], -1), leaf)

    def test_out_of_range_index(self):
        tree = MerkleTree(leaves(3))
        assert tree.get_proof(3) is None
        assert tree.get_proof(-1) is None

    def test_testnet_sample(self):
        """Real testnet deposit against its block's merkle root."""
        txid = parse_transaction(SAMPLE_RAW_TX).txid()
        proof = MerkleProof(
            siblings=[Hash.from_display_hex(
                "cc4522617a92f7b27416f3cedad721949df7aec91d6e87f23ef2895c760e6eee"
            )],
            pos=1,
        )
        root = Hash.from_display_hex(SAMPLE_BLOCKS[0]["merkle_root"])
        assert txid.display_hex() == "ac941651e23a54ae1f4b5a7f47287de8a9acd8b65064f263471c1dd74ec58536"
        assert verify_merkle_inclusion(txid, proof, root)
        assert not verify_merkle_inclusion(txid, MerkleProof(proof.siblings, 0), root)
