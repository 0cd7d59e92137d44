"""
btcspv Cryptographic Primitives
"""

from btcspv.crypto.hash import sha256d, keccak256
from btcspv.crypto.pow import compact_to_target, target_to_compact, check_proof_of_work
from btcspv.crypto.merkle import MerkleProof, MerkleTree, merkle_root, verify_merkle_inclusion

__all__ = [
    # Hash functions
    "sha256d",
    "keccak256",
    # Proof of work
    "compact_to_target",
    "target_to_compact",
    "check_proof_of_work",
    # Merkle tree
    "MerkleProof",
    "MerkleTree",
    "merkle_root",
    "verify_merkle_inclusion",
]
