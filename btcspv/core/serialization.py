"""
Bitcoin Wire Serialization

All multi-byte integers are LITTLE-ENDIAN. Variable-length integers use
the Bitcoin CompactSize encoding and must be canonical (minimal).

Every read is bounds-checked: running past the end of input raises a
ParseError instead of returning short data.
"""

from __future__ import annotations
from typing import Tuple
import struct

from btcspv.constants import LITTLE_ENDIAN
from btcspv.errors import MalformedTransactionError, TruncatedVarintError


# ==============================================================================
# Varint (CompactSize)
# ==============================================================================

def serialize_varint(value: int) -> bytes:
    """
    Serialize a CompactSize integer.

    Encoding:
    - 0x00-0xFC: 1 byte
    - 0xFD: 0xFD + 2 bytes
    - 0xFE: 0xFE + 4 bytes
    - 0xFF: 0xFF + 8 bytes
    """
    if value < 0:
        raise ValueError(f"varint cannot be negative: {value}")
    if value < 0xFD:
        return bytes([value])
    if value <= 0xFFFF:
        return b"\xfd" + value.to_bytes(2, LITTLE_ENDIAN)
    if value <= 0xFFFFFFFF:
        return b"\xfe" + value.to_bytes(4, LITTLE_ENDIAN)
    if value <= 0xFFFFFFFFFFFFFFFF:
        return b"\xff" + value.to_bytes(8, LITTLE_ENDIAN)
    raise ValueError(f"varint value too large: {value}")


def deserialize_varint(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """
    Deserialize a CompactSize integer.
    Returns (value, bytes_consumed).

    Raises:
        TruncatedVarintError: the encoding runs past the end of data
        MalformedTransactionError: the encoding is not minimal
    """
    available = len(data) - offset
    if available < 1:
        raise TruncatedVarintError(offset, 1, max(available, 0))

    prefix = data[offset]
    if prefix < 0xFD:
        return prefix, 1

    size = {0xFD: 2, 0xFE: 4, 0xFF: 8}[prefix]
    if available < 1 + size:
        raise TruncatedVarintError(offset, 1 + size, available)

    value = int.from_bytes(data[offset + 1:offset + 1 + size], LITTLE_ENDIAN)
    minimum = {2: 0xFD, 4: 0x10000, 8: 0x100000000}[size]
    if value < minimum:
        raise MalformedTransactionError(f"non-canonical varint {value}", offset)

    return value, 1 + size


# ==============================================================================
# Helper Classes
# ==============================================================================

class ByteReader:
    """
    Helper class for sequential, bounds-checked deserialization.
    """

    def __init__(self, data: bytes):
        self.data = bytes(data)
        self.offset = 0

    def _take(self, size: int, what: str) -> bytes:
        if size < 0 or self.remaining() < size:
            raise MalformedTransactionError(
                f"{what} needs {size} bytes, {self.remaining()} remaining",
                self.offset
            )
        value = self.data[self.offset:self.offset + size]
        self.offset += size
        return value

    def read_u8(self) -> int:
        return self._take(1, "u8")[0]

    def peek_u8(self) -> int:
        if self.remaining() < 1:
            raise MalformedTransactionError("unexpected end of data", self.offset)
        return self.data[self.offset]

    def read_u32(self) -> int:
        return int.from_bytes(self._take(4, "u32"), LITTLE_ENDIAN)

    def read_i32(self) -> int:
        return struct.unpack("<i", self._take(4, "i32"))[0]

    def read_u64(self) -> int:
        return int.from_bytes(self._take(8, "u64"), LITTLE_ENDIAN)

    def read_varint(self) -> int:
        value, size = deserialize_varint(self.data, self.offset)
        self.offset += size
        return value

    def read_count(self, min_item_size: int, what: str) -> int:
        """
        Read a varint item count that must fit in the remaining bytes.

        Each item occupies at least min_item_size bytes.
        """
        start = self.offset
        count = self.read_varint()
        if min_item_size > 0 and count > self.remaining() // min_item_size:
            raise MalformedTransactionError(
                f"{what} count {count} exceeds remaining data", start
            )
        return count

    def read_bytes(self) -> bytes:
        """Read variable-length byte array (varint-prefixed)."""
        start = self.offset
        length = self.read_varint()
        if length > self.remaining():
            raise MalformedTransactionError(
                f"declared length {length} exceeds {self.remaining()} remaining bytes",
                start
            )
        return self._take(length, "bytes")

    def read_fixed_bytes(self, size: int) -> bytes:
        """Read fixed-length byte array."""
        return self._take(size, f"{size}-byte field")

    def remaining(self) -> int:
        """Return number of bytes remaining."""
        return len(self.data) - self.offset

    def is_empty(self) -> bool:
        """Check if all bytes have been read."""
        return self.offset >= len(self.data)


class ByteWriter:
    """
    Helper class for sequential serialization.
    """

    def __init__(self):
        self.buffer = bytearray()

    def write_u8(self, value: int) -> "ByteWriter":
        if not 0 <= value <= 0xFF:
            raise ValueError(f"u8 value out of range: {value}")
        self.buffer.append(value)
        return self

    def write_u32(self, value: int) -> "ByteWriter":
        if not 0 <= value <= 0xFFFFFFFF:
            raise ValueError(f"u32 value out of range: {value}")
        self.buffer.extend(value.to_bytes(4, LITTLE_ENDIAN))
        return self

    def write_i32(self, value: int) -> "ByteWriter":
        if not -0x80000000 <= value <= 0x7FFFFFFF:
            raise ValueError(f"i32 value out of range: {value}")
        self.buffer.extend(struct.pack("<i", value))
        return self

    def write_u64(self, value: int) -> "ByteWriter":
        if not 0 <= value <= 0xFFFFFFFFFFFFFFFF:
            raise ValueError(f"u64 value out of range: {value}")
        self.buffer.extend(value.to_bytes(8, LITTLE_ENDIAN))
        return self

    def write_varint(self, value: int) -> "ByteWriter":
        self.buffer.extend(serialize_varint(value))
        return self

    def write_bytes(self, data: bytes) -> "ByteWriter":
        """Write variable-length byte array (varint-prefixed)."""
        self.write_varint(len(data))
        self.buffer.extend(data)
        return self

    def write_fixed_bytes(self, data: bytes) -> "ByteWriter":
        """Write fixed-length byte array."""
        self.buffer.extend(data)
        return self

    def to_bytes(self) -> bytes:
        """Return serialized bytes."""
        return bytes(self.buffer)
