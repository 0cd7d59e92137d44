"""
Core Types

Bitcoin hashes are stored in internal (wire) byte order. Explorers and
JSON witnesses print them reversed ("display" order).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum

from btcspv.constants import HASH_SIZE, LITTLE_ENDIAN


@dataclass(frozen=True, slots=True)
class Hash:
    """
    Double-SHA256 hash output.

    SIZE: 32 bytes
    SERIALIZATION: raw bytes, internal order
    """
    data: bytes = field(default_factory=lambda: bytes(HASH_SIZE))

    def __post_init__(self):
        if len(self.data) != HASH_SIZE:
            raise ValueError(f"Hash must be {HASH_SIZE} bytes, got {len(self.data)}")

    def __bytes__(self) -> bytes:
        return self.data

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Hash):
            return self.data == other.data
        if isinstance(other, bytes):
            return self.data == other
        return False

    def __hash__(self) -> int:
        return hash(self.data)

    def __repr__(self) -> str:
        return f"Hash({self.display_hex()[:16]}...)"

    def hex(self) -> str:
        """Internal byte order hex."""
        return self.data.hex()

    def display_hex(self) -> str:
        """Byte-reversed hex, as printed by block explorers."""
        return self.data[::-1].hex()

    def to_int(self) -> int:
        """Interpret as a little-endian 256-bit integer (for target comparison)."""
        return int.from_bytes(self.data, LITTLE_ENDIAN)

    @classmethod
    def from_hex(cls, hex_string: str) -> Hash:
        return cls(bytes.fromhex(hex_string))

    @classmethod
    def from_display_hex(cls, hex_string: str) -> Hash:
        return cls(bytes.fromhex(hex_string)[::-1])

    @classmethod
    def zero(cls) -> Hash:
        return cls(bytes(HASH_SIZE))

    def serialize(self) -> bytes:
        """Serialize to raw bytes."""
        return self.data

    @classmethod
    def deserialize(cls, data: bytes, offset: int = 0) -> tuple[Hash, int]:
        """Deserialize from bytes, return (Hash, bytes_consumed)."""
        return cls(data[offset:offset + HASH_SIZE]), HASH_SIZE


class CircuitVariant(str, Enum):
    """Which bridge direction a proof attests."""
    MINT = "mint"
    BURN = "burn"


class ProofSystem(str, Enum):
    """Proof wrapping requested from the backend."""
    CORE = "core"
    GROTH16 = "groth16"
    PLONK = "plonk"
