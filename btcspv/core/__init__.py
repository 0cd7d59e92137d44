"""
btcspv Core Data Structures

header, transaction and script depend on btcspv.crypto, which itself
imports btcspv.core.types; import them from their own modules.
"""

from btcspv.core.types import Hash, CircuitVariant, ProofSystem
from btcspv.core.serialization import (
    ByteReader,
    ByteWriter,
    serialize_varint,
    deserialize_varint,
)

__all__ = [
    # Types
    "Hash",
    "CircuitVariant",
    "ProofSystem",
    # Serialization
    "ByteReader",
    "ByteWriter",
    "serialize_varint",
    "deserialize_varint",
]
