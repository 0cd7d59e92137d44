"""
Output Location

Finds the outputs a bridge circuit cares about:
- mint: the deposit to the bridge script plus the OP_RETURN naming the
  Ethereum recipient
- burn: the payout to the burner's Bitcoin script

Policy "first" takes the first match of each criterion. Policy "unique"
additionally rejects transactions with a second match.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import List

from btcspv.constants import OUTPUT_POLICY_FIRST, OUTPUT_POLICY_UNIQUE
from btcspv.core.transaction import BitcoinTransaction
from btcspv.core.script import ScriptType, classify_script, decode_op_return
from btcspv.errors import (
    InvalidParameterError,
    NoDepositOutputError,
    NoOpReturnError,
    NoPayoutOutputError,
    AmbiguousMatchError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DepositOutput:
    """Deposit located in a mint transaction."""
    value: int                          # Satoshis paid to the bridge
    payload: bytes                      # 20-byte Ethereum recipient
    output_index: int
    op_return_index: int


@dataclass(frozen=True, slots=True)
class PayoutOutput:
    """Payout located in a burn transaction."""
    value: int                          # Satoshis paid to the burner
    output_index: int


def _check_policy(policy: str) -> None:
    if policy not in (OUTPUT_POLICY_FIRST, OUTPUT_POLICY_UNIQUE):
        raise InvalidParameterError("policy", f"unknown output match policy '{policy}'")


def _matching(tx: BitcoinTransaction, script: bytes) -> List[int]:
    return [i for i, out in enumerate(tx.outputs) if out.script_pubkey == script]


def _op_returns(tx: BitcoinTransaction) -> List[int]:
    return [
        i for i, out in enumerate(tx.outputs)
        if classify_script(out.script_pubkey) == ScriptType.OP_RETURN
    ]


def locate_deposit_output(
    tx: BitcoinTransaction,
    bridge_script: bytes,
    policy: str = OUTPUT_POLICY_FIRST
) -> DepositOutput:
    """
    Locate the bridge deposit and its recipient payload.

    Args:
        tx: Parsed mint transaction
        bridge_script: scriptPubKey of the bridge address
        policy: "first" or "unique"

    Returns:
        DepositOutput

    Raises:
        NoDepositOutputError: no output pays bridge_script
        NoOpReturnError: no OP_RETURN, or the first one carries no address
        AmbiguousMatchError: policy "unique" and a criterion matched twice
    """
    _check_policy(policy)

    deposits = _matching(tx, bridge_script)
    if not deposits:
        raise NoDepositOutputError(bridge_script.hex())

    op_returns = _op_returns(tx)
    if not op_returns:
        raise NoOpReturnError()

    if policy == OUTPUT_POLICY_UNIQUE:
        if len(deposits) > 1:
            raise AmbiguousMatchError("bridge script", deposits)
        if len(op_returns) > 1:
            raise AmbiguousMatchError("OP_RETURN", op_returns)

    deposit_index = deposits[0]
    op_return_index = op_returns[0]

    payload = decode_op_return(tx.outputs[op_return_index].script_pubkey)
    if payload is None:
        raise NoOpReturnError(f"output {op_return_index} carries no decodable address")

    value = tx.outputs[deposit_index].value
    logger.debug(
        f"Deposit output {deposit_index} ({value} sat), payload from output {op_return_index}"
    )

    return DepositOutput(
        value=value,
        payload=payload,
        output_index=deposit_index,
        op_return_index=op_return_index
    )


def locate_payout_output(
    tx: BitcoinTransaction,
    payout_script: bytes,
    policy: str = OUTPUT_POLICY_FIRST
) -> PayoutOutput:
    """
    Locate the payout to the burner.

    Raises:
        NoPayoutOutputError: no output pays payout_script
        AmbiguousMatchError: policy "unique" and more than one output matched
    """
    _check_policy(policy)

    payouts = _matching(tx, payout_script)
    if not payouts:
        raise NoPayoutOutputError(payout_script.hex())

    if policy == OUTPUT_POLICY_UNIQUE and len(payouts) > 1:
        raise AmbiguousMatchError("payout script", payouts)

    index = payouts[0]
    logger.debug(f"Payout output {index} ({tx.outputs[index].value} sat)")
    return PayoutOutput(value=tx.outputs[index].value, output_index=index)
