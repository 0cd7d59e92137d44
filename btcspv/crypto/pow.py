"""
Bitcoin Proof of Work

Compact difficulty ("nBits") decoding and header work checks.

Only the per-header target check is performed. Difficulty retargeting
across epochs is outside this package.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional

from btcspv.core.types import Hash

logger = logging.getLogger(__name__)

_MANTISSA_MASK = 0x007FFFFF
_SIGN_BIT = 0x00800000


@dataclass(frozen=True, slots=True)
class CompactTarget:
    """Decoded compact difficulty."""
    target: int
    negative: bool
    overflow: bool

    @property
    def usable(self) -> bool:
        return not self.negative and not self.overflow and self.target > 0


def compact_to_target(bits: int) -> CompactTarget:
    """
    Decode a compact difficulty value.

    Layout: 1 byte exponent, 3 byte mantissa with a sign bit.
    target = mantissa * 256^(exponent - 3)

    Args:
        bits: 32-bit compact value

    Returns:
        CompactTarget with negative/overflow flags as Bitcoin Core computes them
    """
    if not 0 <= bits <= 0xFFFFFFFF:
        raise ValueError(f"bits out of range: {bits}")

    size = bits >> 24
    word = bits & _MANTISSA_MASK

    if size <= 3:
        word >>= 8 * (3 - size)
        target = word
    else:
        target = word << (8 * (size - 3))

    negative = word != 0 and (bits & _SIGN_BIT) != 0
    overflow = word != 0 and (
        size > 34
        or (word > 0xFF and size > 33)
        or (word > 0xFFFF and size > 32)
    )

    return CompactTarget(target=target, negative=negative, overflow=overflow)


def target_to_compact(target: int) -> int:
    """Encode a target as compact bits (inverse of compact_to_target for normalized values)."""
    if target < 0:
        raise ValueError("target cannot be negative")

    size = (target.bit_length() + 7) // 8
    if size <= 3:
        compact = target << (8 * (3 - size))
    else:
        compact = target >> (8 * (size - 3))

    # Mantissa must not look negative
    if compact & _SIGN_BIT:
        compact >>= 8
        size += 1

    return compact | (size << 24)


def block_work(bits: int) -> int:
    """Expected number of hashes to find a header at this difficulty."""
    decoded = compact_to_target(bits)
    if not decoded.usable:
        return 0
    return (1 << 256) // (decoded.target + 1)


def check_proof_of_work(
    block_hash: Hash,
    bits: int,
    pow_limit_bits: Optional[int] = None
) -> Optional[str]:
    """
    Check a header hash against its declared target.

    Args:
        block_hash: Header hash in internal byte order
        bits: Compact target from the header
        pow_limit_bits: Network limit; targets easier than this fail

    Returns:
        None if the work is sufficient, otherwise a short reason
    """
    decoded = compact_to_target(bits)

    if decoded.negative:
        return "negative target"
    if decoded.overflow:
        return "target overflow"
    if decoded.target == 0:
        return "zero target"

    if pow_limit_bits is not None:
        limit = compact_to_target(pow_limit_bits).target
        if decoded.target > limit:
            return "target above network proof-of-work limit"

    if block_hash.to_int() > decoded.target:
        logger.debug(f"Hash {block_hash.display_hex()} above target {decoded.target:064x}")
        return "hash above target"

    return None
