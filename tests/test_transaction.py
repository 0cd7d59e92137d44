"""
btcspv Transaction Parser Tests
"""

import pytest

from bitcointx.core import CTransaction

from btcspv.core.transaction import parse_transaction
from btcspv.crypto.hash import sha256d
from btcspv.sample import SAMPLE_RAW_TX
from btcspv.errors import ParseError, MalformedTransactionError, TruncatedVarintError

from conftest import make_tx, CHANGE_SCRIPT


# Legacy P2PKH spend (mainnet tx f4184fc5...e9e16, block 170)
LEGACY_TX = (
    "0100000001c997a5e56e104102fa209c6a852dd90660a20b2d9c352423edce25857fcd3704"
    "000000004847304402204e45e16932b8af514961a1d3a1a25fdf3f4f7732e9d624c6c61548ab"
    "5fb8cd410220181522ec8eca07de4860a4acdd12909d831cc56cbbac4622082221a8768d1d09"
    "01ffffffff0200ca9a3b00000000434104ae1a62fe09c5f51b13905f07f06b99a2f7159b2225"
    "f374cd378d71302fa28414e7aab37397f554a7df5f142c21c1b7303b8a0626f1baded5c72a70"
    "4f7e6cd84cac00286bee0000000043410411db93e1dcdb8a016b49840f8c53bc1eb68a382e97"
    "b1482ecad7b148a6909a5cb2e0eaddfb84ccf9744464f82e160bfa9b8b64f9d4c03f999b8643"
    "f656b412a3ac00000000"
)
LEGACY_TXID = "f4184fc596403b9d638783cf57adfe4c75c605f6356fbc91338530e9831e9e16"


class TestParseSegwit:
    """Witness serialization."""

    def test_sample_roundtrip(self):
        tx = parse_transaction(SAMPLE_RAW_TX)
        assert tx.segwit
        assert tx.serialize().hex() == SAMPLE_RAW_TX

    def test_sample_fields(self):
        tx = parse_transaction(SAMPLE_RAW_TX)
        assert tx.version == 1
        assert len(tx.inputs) == 1
        assert len(tx.outputs) == 3
        assert tx.outputs[0].value == 1000
        assert tx.outputs[0].script_pubkey.hex() == "00141240e21b1e7877f77bfe66cc59eefb02d17a0a3f"
        assert tx.outputs[1].value == 0
        assert tx.outputs[1].script_pubkey[:2] == bytes.fromhex("6a2a")
        assert len(tx.inputs[0].witness) == 2
        assert tx.locktime == 0

    def test_txid_excludes_witness(self):
        tx = parse_transaction(SAMPLE_RAW_TX)
        assert tx.txid() == sha256d(tx.serialize_legacy())
        assert tx.txid() != tx.wtxid()

    def test_txid_matches_bitcointx(self):
        """Cross-check the txid with python-bitcointx."""
        tx = parse_transaction(SAMPLE_RAW_TX)
        reference = CTransaction.deserialize(bytes.fromhex(SAMPLE_RAW_TX))
        assert tx.txid().data == reference.GetTxid()

    def test_accepts_bytes(self):
        tx = parse_transaction(bytes.fromhex(SAMPLE_RAW_TX))
        assert tx.serialize().hex() == SAMPLE_RAW_TX

    def test_built_tx_roundtrip(self):
        tx = make_tx([(1, CHANGE_SCRIPT), (2, CHANGE_SCRIPT)])
        raw = tx.serialize()
        assert parse_transaction(raw).serialize() == raw


class TestParseLegacy:
    """Non-witness serialization."""

    def test_roundtrip(self):
        tx = parse_transaction(LEGACY_TX)
        assert not tx.segwit
        assert tx.serialize().hex() == LEGACY_TX

    def test_txid(self):
        tx = parse_transaction(LEGACY_TX)
        assert tx.txid().display_hex() == LEGACY_TXID
        assert tx.txid() == sha256d(bytes.fromhex(LEGACY_TX))
        assert tx.txid() == tx.wtxid()

    def test_values(self):
        tx = parse_transaction(LEGACY_TX)
        assert [o.value for o in tx.outputs] == [10 * 10**8, 40 * 10**8]


class TestParseErrors:
    """Every structural problem is a typed ParseError."""

    def test_truncated_everywhere(self):
        """No prefix of a valid transaction parses."""
        raw = bytes.fromhex(SAMPLE_RAW_TX)
        for cut in range(len(raw)):
            with pytest.raises(ParseError):
                parse_transaction(raw[:cut])

    def test_trailing_bytes(self):
        with pytest.raises(MalformedTransactionError):
            parse_transaction(SAMPLE_RAW_TX + "00")

    def test_bad_hex(self):
        with pytest.raises(MalformedTransactionError):
            parse_transaction("zz" + SAMPLE_RAW_TX)

    def test_unknown_segwit_flag(self):
        raw = bytearray.fromhex(SAMPLE_RAW_TX)
        raw[5] = 0x02
        with pytest.raises(MalformedTransactionError):
            parse_transaction(bytes(raw))

    def test_script_length_overrun(self):
        """An output script length larger than the remaining data."""
        raw = bytearray.fromhex(LEGACY_TX)
        # First output script length (0x43) follows version, 1 input, count, value
        idx = raw.find(bytes.fromhex("434104ae1a"))
        raw[idx] = 0xFC
        with pytest.raises(MalformedTransactionError):
            parse_transaction(bytes(raw))

    def test_huge_input_count(self):
        raw = bytes.fromhex("01000000") + bytes.fromhex("fe00000001") + bytes(60)
        with pytest.raises(MalformedTransactionError):
            parse_transaction(raw)

    def test_truncated_varint(self):
        raw = bytes.fromhex("01000000") + bytes.fromhex("fd01")
        with pytest.raises(TruncatedVarintError):
            parse_transaction(raw)

    def test_sixty_four_byte_transaction(self):
        """A 64-byte transaction is rejected."""
        # 4 + 1 + 41 + 1 + (8 + 1 + 4) + 4 = 64
        raw = (
            bytes.fromhex("01000000")
            + bytes([1]) + bytes(32) + bytes(4) + bytes([0]) + bytes(4)
            + bytes([1]) + bytes(8) + bytes([4]) + bytes([0x6A, 0x02, 0xAA, 0xBB])
            + bytes(4)
        )
        assert len(raw) == 64
        with pytest.raises(MalformedTransactionError):
            parse_transaction(raw)
