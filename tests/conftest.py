"""
btcspv Test Fixtures
"""

import pytest
import asyncio
from typing import Callable, List, Optional, Tuple

from btcspv.config import ProverConfig
from btcspv.constants import REGTEST_POW_LIMIT_BITS
from btcspv.core.types import Hash
from btcspv.core.header import BlockHeader, HeaderChain
from btcspv.core.transaction import BitcoinTransaction, TxInput, TxOutput
from btcspv.core.script import address_to_script, script_to_address
from btcspv.crypto.pow import check_proof_of_work
from btcspv.crypto.merkle import MerkleTree

REGTEST = "bitcoin/regtest"

RECIPIENT = bytes.fromhex("5aaeb6053f3e94c9b9a09f33669435e7ef1beaed")
RECIPIENT_CHECKSUMMED = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"

BURNER_SCRIPT = bytes.fromhex("0014") + bytes(range(20))
CHANGE_SCRIPT = bytes.fromhex("0014") + bytes([0xAB] * 20)


def mine_header(
    parent: Hash,
    merkle_root: Hash,
    timestamp: int,
    bits: int = REGTEST_POW_LIMIT_BITS,
    version: int = 0x20000000,
) -> BlockHeader:
    """Grind the nonce until the header meets its target."""
    header = BlockHeader(
        version=version,
        parent_hash=parent,
        merkle_root=merkle_root,
        timestamp=timestamp,
        bits=bits,
        nonce=0,
    )
    while check_proof_of_work(header.block_hash(), bits) is not None:
        header.nonce += 1
    return header


def mine_chain(first_merkle_root: Hash, length: int, start_time: int = 1700000000) -> List[BlockHeader]:
    """Linked regtest chain whose first header commits to first_merkle_root."""
    headers = []
    parent = Hash(bytes([0x11] * 32))
    for i in range(length):
        root = first_merkle_root if i == 0 else Hash(bytes([i] * 32))
        header = mine_header(parent, root, start_time + 600 * i)
        headers.append(header)
        parent = header.block_hash()
    return headers


def op_return_script(payload: bytes) -> bytes:
    return bytes([0x6A, len(payload)]) + payload


def make_tx(outputs: List[Tuple[int, bytes]], segwit: bool = True, seed: int = 1) -> BitcoinTransaction:
    """One-input transaction paying the given (value, script) outputs."""
    tx_in = TxInput(
        prev_txid=Hash(bytes([seed] * 32)),
        prev_vout=0,
        script_sig=b"" if segwit else bytes([0x51]),
        sequence=0xFFFFFFFF,
        witness=[bytes([0x30] * 71), bytes([0x02] * 33)] if segwit else [],
    )
    return BitcoinTransaction(
        version=2,
        inputs=[tx_in],
        outputs=[TxOutput(value=v, script_pubkey=s) for v, s in outputs],
        locktime=0,
        segwit=segwit,
    )


def headers_to_blocks(headers: List[BlockHeader]) -> List[dict]:
    return [
        {
            "block_hash": h.block_hash().display_hex(),
            "version": h.version,
            "parent_hash": h.parent_hash.display_hex(),
            "merkle_root": h.merkle_root.display_hex(),
            "timestamp": h.timestamp,
            "difficulty": h.bits,
            "nonce": h.nonce,
        }
        for h in headers
    ]


def build_witness(
    tx: BitcoinTransaction,
    position: int = 1,
    block_size: int = 4,
    chain_length: int = 3,
    burner_btc_address: Optional[str] = None,
) -> dict:
    """Witness placing tx at position in a block of block_size transactions."""
    txids = [Hash(bytes([0xC0 + i] * 32)) for i in range(block_size)]
    txids[position] = tx.txid()
    tree = MerkleTree(txids)
    proof = tree.get_proof(position)

    witness = {
        "merkle_proof": {
            "siblings": [s.display_hex() for s in proof.siblings],
            "pos": proof.pos,
        },
        "chains": {"blocks": headers_to_blocks(mine_chain(tree.root, chain_length))},
        "bit_tx_info": {"raw_tx_hex": tx.serialize().hex()},
    }
    if burner_btc_address is not None:
        witness["burner_btc_address"] = burner_btc_address
    return witness


@pytest.fixture
def regtest_config(tmp_path) -> ProverConfig:
    """Regtest configuration with fixtures written under tmp_path."""
    config = ProverConfig.default_regtest()
    config.fixtures_dir = str(tmp_path / "fixtures")
    return config


@pytest.fixture
def bridge_script(regtest_config) -> bytes:
    return address_to_script(regtest_config.bridge_address, REGTEST)


@pytest.fixture
def burner_address() -> str:
    return script_to_address(BURNER_SCRIPT, REGTEST)


@pytest.fixture
def deposit_tx(bridge_script) -> BitcoinTransaction:
    """Deposit: change, bridge payment, recipient OP_RETURN."""
    return make_tx([
        (5_000, CHANGE_SCRIPT),
        (100_000, bridge_script),
        (0, op_return_script(RECIPIENT)),
    ])


@pytest.fixture
def payout_tx() -> BitcoinTransaction:
    """Redemption payout: burner first, change second."""
    return make_tx([
        (75_000, BURNER_SCRIPT),
        (1_000, CHANGE_SCRIPT),
    ], seed=2)


@pytest.fixture
def mint_witness(deposit_tx) -> dict:
    return build_witness(deposit_tx)


@pytest.fixture
def burn_witness(payout_tx, burner_address) -> dict:
    return build_witness(payout_tx, burner_btc_address=burner_address)


@pytest.fixture
def regtest_chain() -> HeaderChain:
    headers = mine_chain(Hash(bytes([0x42] * 32)), 3)
    return HeaderChain(headers=headers)


@pytest.fixture
def mock_hash() -> Hash:
    """Create a mock hash for testing."""
    return Hash(bytes([i % 256 for i in range(32)]))


# Async fixtures helper
@pytest.fixture
def async_runner() -> Callable:
    """Helper for running async functions in tests."""
    def runner(coro):
        loop = asyncio.new_event_loop()
        try:
            return loop.run_until_complete(coro)
        finally:
            loop.close()
    return runner
