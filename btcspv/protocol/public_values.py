"""
Public Values

The facts a proof commits to, ABI-encoded for the Ethereum verifier:

    Mint: (bytes32 txId, address depositor, uint256 amount, bool valid)
    Burn: (string btcAddress, uint256 amount, bool valid)

txId is written in display byte order (as explorers print it).
Burn values are encoded as a parameter tuple, so the string's head slot
holds offset 96.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Union

from eth_abi import encode, decode
from eth_abi.exceptions import DecodingError

from btcspv.constants import ETH_ADDRESS_SIZE
from btcspv.core.types import Hash
from btcspv.core.script import to_checksum_address
from btcspv.protocol.outputs import DepositOutput, PayoutOutput
from btcspv.errors import InvalidParameterError

logger = logging.getLogger(__name__)

MINT_ABI_TYPES = ["bytes32", "address", "uint256", "bool"]
BURN_ABI_TYPES = ["string", "uint256", "bool"]


@dataclass(frozen=True, slots=True)
class MintPublicValues:
    """Committed facts of a deposit."""
    tx_id: Hash                         # Internal byte order
    eth_address: bytes                  # 20 bytes
    amount_satoshis: int
    valid: bool

    def encode(self) -> bytes:
        return encode(
            MINT_ABI_TYPES,
            [self.tx_id.data[::-1], self.eth_address, self.amount_satoshis, self.valid]
        )

    @classmethod
    def decode(cls, data: bytes) -> MintPublicValues:
        try:
            tx_id, address, amount, valid = decode(MINT_ABI_TYPES, data)
        except DecodingError as e:
            raise InvalidParameterError("public_values", str(e)) from e
        return cls(
            tx_id=Hash(tx_id[::-1]),
            eth_address=bytes.fromhex(address[2:]),
            amount_satoshis=amount,
            valid=valid
        )

    def to_dict(self) -> dict:
        return {
            "tx_id": self.tx_id.display_hex(),
            "eth_address": to_checksum_address(self.eth_address),
            "amount_satoshis": self.amount_satoshis,
            "valid": self.valid,
        }


@dataclass(frozen=True, slots=True)
class BurnPublicValues:
    """Committed facts of a redemption payout."""
    btc_address: str
    amount_satoshis: int
    valid: bool

    def encode(self) -> bytes:
        return encode(BURN_ABI_TYPES, [self.btc_address, self.amount_satoshis, self.valid])

    @classmethod
    def decode(cls, data: bytes) -> BurnPublicValues:
        try:
            btc_address, amount, valid = decode(BURN_ABI_TYPES, data)
        except DecodingError as e:
            raise InvalidParameterError("public_values", str(e)) from e
        return cls(btc_address=btc_address, amount_satoshis=amount, valid=valid)

    def to_dict(self) -> dict:
        return {
            "btc_address": self.btc_address,
            "amount_satoshis": self.amount_satoshis,
            "valid": self.valid,
        }


PublicValues = Union[MintPublicValues, BurnPublicValues]


def commit_mint(
    tx_id: Hash,
    deposit: DepositOutput,
    chain_valid: bool,
    merkle_valid: bool
) -> MintPublicValues:
    """
    Commit the facts of a verified deposit.

    valid = chain && merkle && output found && payload decoded
    """
    output_found = deposit.output_index >= 0
    payload_decoded = len(deposit.payload) == ETH_ADDRESS_SIZE
    valid = chain_valid and merkle_valid and output_found and payload_decoded

    values = MintPublicValues(
        tx_id=tx_id,
        eth_address=deposit.payload,
        amount_satoshis=deposit.value,
        valid=valid
    )
    recipient = to_checksum_address(deposit.payload) if payload_decoded else deposit.payload.hex()
    logger.info(
        f"Committed mint {tx_id.display_hex()}: {deposit.value} sat to "
        f"{recipient}, valid={valid}"
    )
    return values


def commit_burn(
    btc_address: str,
    payout: PayoutOutput,
    chain_valid: bool,
    merkle_valid: bool
) -> BurnPublicValues:
    """
    Commit the facts of a verified payout.

    valid = chain && merkle && output found
    """
    output_found = payout.output_index >= 0
    valid = chain_valid and merkle_valid and output_found

    values = BurnPublicValues(
        btc_address=btc_address,
        amount_satoshis=payout.value,
        valid=valid
    )
    logger.info(f"Committed burn: {payout.value} sat to {btc_address}, valid={valid}")
    return values
