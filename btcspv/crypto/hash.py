"""
Hash Functions

SHA-256d for Bitcoin structures, Keccak-256 for Ethereum address checksums.
"""

from __future__ import annotations
import hashlib
from typing import Union

from Crypto.Hash import keccak

from btcspv.core.types import Hash


def sha256d(data: Union[bytes, bytearray, memoryview]) -> Hash:
    """
    Double SHA-256 as used for txids, block hashes and Merkle nodes.

    Args:
        data: Input data to hash

    Returns:
        Hash: 32-byte digest in internal byte order
    """
    return Hash(hashlib.sha256(hashlib.sha256(data).digest()).digest())


def keccak256(data: Union[bytes, bytearray, memoryview]) -> bytes:
    """
    Keccak-256 (pre-standard SHA3 padding, as Ethereum uses it).

    Args:
        data: Input data

    Returns:
        bytes: 32-byte digest
    """
    return keccak.new(digest_bits=256, data=bytes(data)).digest()
