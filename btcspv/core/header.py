"""
Bitcoin Block Header

Standard 80-byte header:
    version (i32) || parent_hash (32) || merkle_root (32) ||
    timestamp (u32) || bits (u32) || nonce (u32)

All integers LITTLE-ENDIAN; hashes in internal byte order.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from btcspv.constants import HEADER_SIZE, HASH_SIZE
from btcspv.core.types import Hash
from btcspv.core.serialization import ByteReader, ByteWriter
from btcspv.crypto.hash import sha256d


@dataclass(slots=True)
class BlockHeader:
    """
    Bitcoin block header.

    SIZE: 80 bytes
    """
    version: int                        # i32 - Block version
    parent_hash: Hash                   # Previous header hash
    merkle_root: Hash                   # Root of the block's transactions
    timestamp: int                      # u32 - Unix seconds
    bits: int                           # u32 - Compact difficulty target
    nonce: int                          # u32

    def __post_init__(self):
        # Versions are sometimes reported unsigned; store the signed form
        if 0x80000000 <= self.version <= 0xFFFFFFFF:
            self.version -= 1 << 32

    def serialize(self) -> bytes:
        """Serialize block header."""
        writer = ByteWriter()

        writer.write_i32(self.version)
        writer.write_fixed_bytes(self.parent_hash.serialize())
        writer.write_fixed_bytes(self.merkle_root.serialize())
        writer.write_u32(self.timestamp)
        writer.write_u32(self.bits)
        writer.write_u32(self.nonce)

        return writer.to_bytes()

    @classmethod
    def deserialize(cls, data: bytes, offset: int = 0) -> Tuple["BlockHeader", int]:
        """Deserialize block header."""
        reader = ByteReader(data[offset:offset + HEADER_SIZE])

        version = reader.read_i32()
        parent_hash = Hash(reader.read_fixed_bytes(HASH_SIZE))
        merkle_root = Hash(reader.read_fixed_bytes(HASH_SIZE))
        timestamp = reader.read_u32()
        bits = reader.read_u32()
        nonce = reader.read_u32()

        return cls(
            version=version,
            parent_hash=parent_hash,
            merkle_root=merkle_root,
            timestamp=timestamp,
            bits=bits,
            nonce=nonce
        ), HEADER_SIZE

    @classmethod
    def size(cls) -> int:
        """Return fixed size in bytes."""
        return HEADER_SIZE

    def block_hash(self) -> Hash:
        """Compute block hash from header."""
        return sha256d(self.serialize())


@dataclass(slots=True)
class HeaderChain:
    """
    Ordered run of headers, oldest first.

    inclusion_index selects the header whose merkle_root commits to the
    proven transaction. claimed_hashes holds the block hashes a witness
    asserted for each header (None where nothing was asserted).
    """
    headers: List[BlockHeader]
    inclusion_index: int = 0
    claimed_hashes: List[Optional[Hash]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.headers)

    def claimed_hash(self, index: int) -> Optional[Hash]:
        if index < len(self.claimed_hashes):
            return self.claimed_hashes[index]
        return None

    def inclusion_header(self) -> BlockHeader:
        return self.headers[self.inclusion_index]
