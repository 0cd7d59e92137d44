"""
Bitcoin Merkle Trees

Nodes are sha256d(left || right) over internal-order hashes. A level
with an odd number of nodes pairs its last node with itself.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from btcspv.core.types import Hash
from btcspv.crypto.hash import sha256d

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class MerkleProof:
    """
    Merkle inclusion path.

    siblings run leaf to root. Bit k of pos is the position bit for level k:
    0 means the current node is the left child, 1 the right child.
    For a block, pos is the transaction's index.
    """
    siblings: List[Hash] = field(default_factory=list)
    pos: int = 0

    @property
    def depth(self) -> int:
        return len(self.siblings)


def verify_merkle_inclusion(tx_hash: Hash, proof: MerkleProof, expected_root: Hash) -> bool:
    """
    Recompute the root from a leaf and its path.

    Args:
        tx_hash: Leaf (txid, internal order)
        proof: Sibling path and position bits
        expected_root: Root from the inclusion block header

    Returns:
        True if the path reduces to expected_root.
        Position bits beyond the path depth make the proof invalid.
    """
    if proof.pos < 0 or proof.pos >> proof.depth:
        logger.debug(f"Position {proof.pos} has bits beyond depth {proof.depth}")
        return False

    current = tx_hash
    pos = proof.pos

    for sibling in proof.siblings:
        if pos & 1:
            current = sha256d(sibling.data + current.data)
        else:
            current = sha256d(current.data + sibling.data)
        pos >>= 1

    return current == expected_root


def merkle_root(hashes: List[Hash]) -> Hash:
    """
    Compute the Bitcoin Merkle root of a list of txids.

    Empty list returns the zero hash; a single leaf is its own root.
    """
    if len(hashes) == 0:
        return Hash.zero()
    return MerkleTree(hashes).root


class MerkleTree:
    """
    Complete Bitcoin Merkle tree with proof generation.
    """

    def __init__(self, leaves: List[Hash]):
        """
        Build a Merkle tree from leaf hashes.

        Args:
            leaves: Transaction ids in block order (non-empty for proofs)
        """
        self._leaves = list(leaves)
        self._levels: List[List[Hash]] = []

        if len(leaves) == 0:
            self._root = Hash.zero()
            return

        current = list(leaves)
        self._levels.append(current)

        while len(current) > 1:
            if len(current) % 2 == 1:
                current = current + [current[-1]]
                self._levels[-1] = current
            next_level = [
                sha256d(current[i].data + current[i + 1].data)
                for i in range(0, len(current), 2)
            ]
            self._levels.append(next_level)
            current = next_level

        self._root = current[0]

    @property
    def root(self) -> Hash:
        """Return the Merkle root."""
        return self._root

    def get_proof(self, index: int) -> Optional[MerkleProof]:
        """
        Generate an inclusion path for the leaf at index.

        Returns:
            MerkleProof if index is valid, None otherwise
        """
        if index < 0 or index >= len(self._leaves):
            return None

        siblings = []
        current_index = index

        for level in self._levels[:-1]:  # Exclude root level
            siblings.append(level[current_index ^ 1])
            current_index //= 2

        return MerkleProof(siblings=siblings, pos=index)
