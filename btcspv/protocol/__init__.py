"""
btcspv Bridge Protocol

Witness schema, output location, public values and the mint/burn circuits.
"""

from btcspv.protocol.witness import Witness
from btcspv.protocol.outputs import (
    DepositOutput,
    PayoutOutput,
    locate_deposit_output,
    locate_payout_output,
)
from btcspv.protocol.public_values import (
    MintPublicValues,
    BurnPublicValues,
    commit_mint,
    commit_burn,
)
from btcspv.protocol.circuits import CircuitResult, run_mint, run_burn, run_circuit

__all__ = [
    "Witness",
    "DepositOutput",
    "PayoutOutput",
    "locate_deposit_output",
    "locate_payout_output",
    "MintPublicValues",
    "BurnPublicValues",
    "commit_mint",
    "commit_burn",
    "CircuitResult",
    "run_mint",
    "run_burn",
    "run_circuit",
]
