"""
Bitcoin Transaction Parser

Legacy and segwit (BIP-144) serializations. Parsing is exact:
serialize(parse(raw)) == raw for every accepted input.

Layout:
    version (i32)
    [marker 0x00, flag 0x01]            segwit only
    varint n_in, inputs
    varint n_out, outputs
    [witness stack per input]           segwit only
    locktime (u32)
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import List, Tuple, Union

from btcspv.constants import (
    HASH_SIZE,
    FORBIDDEN_TX_SIZE,
    MIN_INPUT_SIZE,
    MIN_OUTPUT_SIZE,
    SEGWIT_MARKER,
    SEGWIT_FLAG,
)
from btcspv.core.types import Hash
from btcspv.core.serialization import ByteReader, ByteWriter
from btcspv.crypto.hash import sha256d
from btcspv.errors import MalformedTransactionError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TxInput:
    """Transaction input."""
    prev_txid: Hash                     # Spent transaction, internal order
    prev_vout: int                      # u32
    script_sig: bytes
    sequence: int                       # u32
    witness: List[bytes] = field(default_factory=list)

    def serialize(self) -> bytes:
        writer = ByteWriter()
        writer.write_fixed_bytes(self.prev_txid.serialize())
        writer.write_u32(self.prev_vout)
        writer.write_bytes(self.script_sig)
        writer.write_u32(self.sequence)
        return writer.to_bytes()


@dataclass(slots=True)
class TxOutput:
    """Transaction output."""
    value: int                          # u64 - Satoshis
    script_pubkey: bytes

    def serialize(self) -> bytes:
        writer = ByteWriter()
        writer.write_u64(self.value)
        writer.write_bytes(self.script_pubkey)
        return writer.to_bytes()


@dataclass(slots=True)
class BitcoinTransaction:
    """
    Parsed Bitcoin transaction.

    The segwit flag records how the transaction was serialized so the
    original bytes are reproduced exactly.
    """
    version: int
    inputs: List[TxInput]
    outputs: List[TxOutput]
    locktime: int
    segwit: bool = False

    def serialize_legacy(self) -> bytes:
        """Serialization without marker, flag and witness data."""
        writer = ByteWriter()
        writer.write_i32(self.version)
        self._write_body(writer)
        writer.write_u32(self.locktime)
        return writer.to_bytes()

    def serialize(self) -> bytes:
        """Full serialization in the form the transaction was parsed from."""
        if not self.segwit:
            return self.serialize_legacy()

        writer = ByteWriter()
        writer.write_i32(self.version)
        writer.write_u8(SEGWIT_MARKER)
        writer.write_u8(SEGWIT_FLAG)
        self._write_body(writer)
        for tx_in in self.inputs:
            writer.write_varint(len(tx_in.witness))
            for item in tx_in.witness:
                writer.write_bytes(item)
        writer.write_u32(self.locktime)
        return writer.to_bytes()

    def _write_body(self, writer: ByteWriter) -> None:
        writer.write_varint(len(self.inputs))
        for tx_in in self.inputs:
            writer.write_fixed_bytes(tx_in.serialize())
        writer.write_varint(len(self.outputs))
        for tx_out in self.outputs:
            writer.write_fixed_bytes(tx_out.serialize())

    def txid(self) -> Hash:
        """Transaction id: sha256d of the non-witness serialization."""
        return sha256d(self.serialize_legacy())

    def wtxid(self) -> Hash:
        """Witness transaction id: sha256d of the full serialization."""
        return sha256d(self.serialize())


def _coerce_raw(raw: Union[bytes, bytearray, str]) -> bytes:
    if isinstance(raw, str):
        text = raw.strip()
        if text.startswith(("0x", "0X")):
            text = text[2:]
        try:
            return bytes.fromhex(text)
        except ValueError:
            raise MalformedTransactionError("invalid hex encoding")
    return bytes(raw)


def _read_input(reader: ByteReader) -> TxInput:
    prev_txid = Hash(reader.read_fixed_bytes(HASH_SIZE))
    prev_vout = reader.read_u32()
    script_sig = reader.read_bytes()
    sequence = reader.read_u32()
    return TxInput(
        prev_txid=prev_txid,
        prev_vout=prev_vout,
        script_sig=script_sig,
        sequence=sequence
    )


def _read_output(reader: ByteReader) -> TxOutput:
    value = reader.read_u64()
    script_pubkey = reader.read_bytes()
    return TxOutput(value=value, script_pubkey=script_pubkey)


def parse_transaction(raw: Union[bytes, bytearray, str]) -> BitcoinTransaction:
    """
    Parse a raw Bitcoin transaction.

    Args:
        raw: Serialized transaction as bytes or hex

    Returns:
        BitcoinTransaction

    Raises:
        TruncatedVarintError: a varint runs past the end of input
        MalformedTransactionError: any other structural problem
    """
    data = _coerce_raw(raw)
    reader = ByteReader(data)

    version = reader.read_i32()

    segwit = False
    if reader.remaining() >= 2 and reader.peek_u8() == SEGWIT_MARKER:
        marker_offset = reader.offset
        reader.read_u8()
        flag = reader.read_u8()
        if flag != SEGWIT_FLAG:
            raise MalformedTransactionError(f"unknown segwit flag {flag:#04x}", marker_offset + 1)
        segwit = True

    n_in = reader.read_count(MIN_INPUT_SIZE, "input")
    if segwit and n_in == 0:
        raise MalformedTransactionError("segwit transaction without inputs", reader.offset)
    inputs = [_read_input(reader) for _ in range(n_in)]

    n_out = reader.read_count(MIN_OUTPUT_SIZE, "output")
    outputs = [_read_output(reader) for _ in range(n_out)]

    if segwit:
        has_witness = False
        for tx_in in inputs:
            n_items = reader.read_count(1, "witness item")
            tx_in.witness = [reader.read_bytes() for _ in range(n_items)]
            has_witness = has_witness or n_items > 0
        if not has_witness:
            raise MalformedTransactionError("segwit marker with empty witness", reader.offset)

    locktime = reader.read_u32()

    if not reader.is_empty():
        raise MalformedTransactionError(
            f"{reader.remaining()} trailing bytes", reader.offset
        )

    tx = BitcoinTransaction(
        version=version,
        inputs=inputs,
        outputs=outputs,
        locktime=locktime,
        segwit=segwit
    )

    if len(tx.serialize_legacy()) == FORBIDDEN_TX_SIZE:
        raise MalformedTransactionError(
            f"{FORBIDDEN_TX_SIZE}-byte transaction is indistinguishable from a Merkle node"
        )

    logger.debug(
        f"Parsed tx {tx.txid().display_hex()}: {n_in} inputs, {n_out} outputs, segwit={segwit}"
    )
    return tx
