"""
Mint and Burn Circuits

The statement a proof attests, evaluated natively:

    mint: header chain valid, deposit tx included in the inclusion block,
          tx pays the bridge and names an Ethereum recipient
    burn: header chain valid, payout tx included in the inclusion block,
          tx pays the burner's Bitcoin address

Every failed check raises its typed error; nothing is committed for a
witness that does not verify.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Callable, Dict

from btcspv.config import ProverConfig
from btcspv.core.types import Hash, CircuitVariant
from btcspv.core.transaction import BitcoinTransaction, parse_transaction
from btcspv.core.script import address_to_script
from btcspv.consensus.validation import validate_header_chain
from btcspv.crypto.merkle import verify_merkle_inclusion
from btcspv.protocol.outputs import locate_deposit_output, locate_payout_output
from btcspv.protocol.public_values import PublicValues, commit_mint, commit_burn
from btcspv.protocol.witness import Witness
from btcspv.errors import RootMismatchError, WitnessFormatError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CircuitResult:
    """Committed values plus what was learned on the way."""
    circuit: CircuitVariant
    public_values: PublicValues
    tx_id: Hash
    inclusion_block: Hash
    output_index: int

    def encoded(self) -> bytes:
        return self.public_values.encode()


def _verify_inclusion(witness: Witness, config: ProverConfig) -> tuple[BitcoinTransaction, Hash, Hash]:
    """Shared prefix of both circuits: chain, parse, Merkle."""
    inclusion_block = validate_header_chain(
        witness.chain,
        pow_limit=config.pow_limit,
        min_length=config.min_chain_length,
    )

    tx = parse_transaction(witness.raw_tx_hex)
    tx_id = tx.txid()

    root = witness.chain.inclusion_header().merkle_root
    if not verify_merkle_inclusion(tx_id, witness.merkle_proof, root):
        raise RootMismatchError(tx_id.display_hex(), root.display_hex())
    logger.info(f"Inclusion verified: {tx_id.display_hex()} in {inclusion_block.display_hex()}")

    return tx, tx_id, inclusion_block


def run_mint(witness: Witness, config: ProverConfig) -> CircuitResult:
    """Evaluate the mint statement."""
    tx, tx_id, inclusion_block = _verify_inclusion(witness, config)

    bridge_script = address_to_script(config.bridge_address, config.network)
    if witness.bridge_address:
        # The witness may restate the bridge, never replace it
        claimed = address_to_script(witness.bridge_address, config.network)
        if claimed != bridge_script:
            raise WitnessFormatError("bridge_address", "does not match configured bridge")
    deposit = locate_deposit_output(tx, bridge_script, config.output_match_policy)

    values = commit_mint(tx_id, deposit, chain_valid=True, merkle_valid=True)
    return CircuitResult(
        circuit=CircuitVariant.MINT,
        public_values=values,
        tx_id=tx_id,
        inclusion_block=inclusion_block,
        output_index=deposit.output_index,
    )


def run_burn(witness: Witness, config: ProverConfig) -> CircuitResult:
    """Evaluate the burn statement."""
    if not witness.burner_btc_address:
        raise WitnessFormatError("burner_btc_address", "required for burn")

    tx, tx_id, inclusion_block = _verify_inclusion(witness, config)

    payout_script = address_to_script(witness.burner_btc_address, config.network)
    payout = locate_payout_output(tx, payout_script, config.output_match_policy)

    values = commit_burn(witness.burner_btc_address, payout, chain_valid=True, merkle_valid=True)
    return CircuitResult(
        circuit=CircuitVariant.BURN,
        public_values=values,
        tx_id=tx_id,
        inclusion_block=inclusion_block,
        output_index=payout.output_index,
    )


CIRCUITS: Dict[CircuitVariant, Callable[[Witness, ProverConfig], CircuitResult]] = {
    CircuitVariant.MINT: run_mint,
    CircuitVariant.BURN: run_burn,
}


def run_circuit(circuit: CircuitVariant, witness: Witness, config: ProverConfig) -> CircuitResult:
    return CIRCUITS[CircuitVariant(circuit)](witness, config)
