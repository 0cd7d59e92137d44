"""
btcspv Proof of Work Tests
"""

import pytest

from btcspv.core.types import Hash
from btcspv.crypto.pow import (
    compact_to_target,
    target_to_compact,
    check_proof_of_work,
    block_work,
)
from btcspv.constants import MAINNET_POW_LIMIT_BITS, REGTEST_POW_LIMIT_BITS


class TestCompact:
    """Compact difficulty decoding."""

    def test_genesis_bits(self):
        decoded = compact_to_target(0x1D00FFFF)
        assert decoded.target == 0xFFFF << (8 * 26)
        assert decoded.usable

    def test_sample_bits(self):
        assert compact_to_target(0x1A0FFFF0).target == 0x0FFFF0 << (8 * 23)

    def test_small_exponent(self):
        assert compact_to_target(0x01123456).target == 0x12
        assert compact_to_target(0x02123456).target == 0x1234

    def test_negative(self):
        assert compact_to_target(0x04923456).negative
        assert not compact_to_target(0x04923456).usable

    def test_zero_mantissa_not_negative(self):
        decoded = compact_to_target(0x04800000)
        assert not decoded.negative
        assert decoded.target == 0

    def test_overflow(self):
        assert compact_to_target(0xFF123456).overflow

    @pytest.mark.parametrize("bits", [0x1D00FFFF, 0x1A0FFFF0, 0x207FFFFF, 0x1B0404CB])
    def test_roundtrip(self, bits):
        assert target_to_compact(compact_to_target(bits).target) == bits

    def test_work(self):
        assert block_work(0x207FFFFF) == 2
        assert block_work(0x04923456) == 0


class TestCheckProofOfWork:
    """Header hash against target."""

    def test_zero_hash_meets_any_target(self):
        assert check_proof_of_work(Hash.zero(), 0x1D00FFFF) is None

    def test_hash_above_target(self):
        assert check_proof_of_work(Hash(bytes([0xFF] * 32)), 0x1D00FFFF) == "hash above target"

    def test_hash_equal_target(self):
        target = compact_to_target(REGTEST_POW_LIMIT_BITS).target
        h = Hash(target.to_bytes(32, "little"))
        assert check_proof_of_work(h, REGTEST_POW_LIMIT_BITS) is None

    def test_above_pow_limit(self):
        reason = check_proof_of_work(Hash.zero(), REGTEST_POW_LIMIT_BITS, MAINNET_POW_LIMIT_BITS)
        assert reason == "target above network proof-of-work limit"

    def test_negative_target(self):
        assert check_proof_of_work(Hash.zero(), 0x04923456) == "negative target"

    def test_zero_target(self):
        assert check_proof_of_work(Hash.zero(), 0x00000000) == "zero target"
