"""
Script Classification and OP_RETURN Payloads

classify_script() recognises the standard output templates.
decode_op_return() extracts a target-chain (Ethereum) address from a
null-data output. Neither raises on unrecognised input.
"""

from __future__ import annotations
import logging
from enum import Enum
from typing import Optional

from bitcointx import ChainParams
from bitcointx.core.script import CScript
from bitcointx.wallet import CCoinAddress, CCoinAddressError

from btcspv.constants import ETH_ADDRESS_SIZE, ETH_ADDRESS_HEX_LENGTH
from btcspv.crypto.hash import keccak256
from btcspv.errors import InvalidAddressError

logger = logging.getLogger(__name__)

# Opcodes
OP_0 = 0x00
OP_PUSHDATA1 = 0x4C
OP_PUSHDATA2 = 0x4D
OP_1 = 0x51
OP_RETURN = 0x6A
OP_DUP = 0x76
OP_EQUAL = 0x87
OP_EQUALVERIFY = 0x88
OP_HASH160 = 0xA9
OP_CHECKSIG = 0xAC


class ScriptType(str, Enum):
    """Standard output templates."""
    P2PKH = "p2pkh"
    P2SH = "p2sh"
    P2WPKH = "p2wpkh"
    P2WSH = "p2wsh"
    P2TR = "p2tr"
    OP_RETURN = "op_return"
    UNKNOWN = "unknown"


def classify_script(script: bytes) -> ScriptType:
    """
    Classify a scriptPubKey by template.

    Args:
        script: Raw scriptPubKey

    Returns:
        ScriptType (UNKNOWN for anything non-standard)
    """
    n = len(script)

    if (n == 25 and script[0] == OP_DUP and script[1] == OP_HASH160
            and script[2] == 20 and script[23] == OP_EQUALVERIFY
            and script[24] == OP_CHECKSIG):
        return ScriptType.P2PKH

    if n == 23 and script[0] == OP_HASH160 and script[1] == 20 and script[22] == OP_EQUAL:
        return ScriptType.P2SH

    if n == 22 and script[0] == OP_0 and script[1] == 20:
        return ScriptType.P2WPKH

    if n == 34 and script[0] == OP_0 and script[1] == 32:
        return ScriptType.P2WSH

    if n == 34 and script[0] == OP_1 and script[1] == 32:
        return ScriptType.P2TR

    if n >= 1 and script[0] == OP_RETURN:
        return ScriptType.OP_RETURN

    return ScriptType.UNKNOWN


def _single_push(script: bytes, offset: int) -> Optional[bytes]:
    """Return the data of exactly one push starting at offset, or None."""
    if offset >= len(script):
        return None

    opcode = script[offset]
    offset += 1

    if 0x01 <= opcode < OP_PUSHDATA1:
        length = opcode
    elif opcode == OP_PUSHDATA1:
        if offset + 1 > len(script):
            return None
        length = script[offset]
        offset += 1
    elif opcode == OP_PUSHDATA2:
        if offset + 2 > len(script):
            return None
        length = int.from_bytes(script[offset:offset + 2], "little")
        offset += 2
    else:
        return None

    # The push must consume the rest of the script exactly
    if offset + length != len(script):
        return None
    return script[offset:offset + length]


# ==============================================================================
# Ethereum Addresses
# ==============================================================================

def to_checksum_address(address: bytes) -> str:
    """EIP-55 mixed-case hex for a 20-byte address."""
    if len(address) != ETH_ADDRESS_SIZE:
        raise ValueError(f"address must be {ETH_ADDRESS_SIZE} bytes, got {len(address)}")

    lower = address.hex()
    digest = keccak256(lower.encode("ascii")).hex()
    chars = [
        c.upper() if c.isalpha() and int(digest[i], 16) >= 8 else c
        for i, c in enumerate(lower)
    ]
    return "0x" + "".join(chars)


def parse_eth_address(text: str) -> Optional[bytes]:
    """
    Parse a "0x"-prefixed 40-hex-digit address.

    All-lowercase or all-uppercase hex is accepted as is; mixed case must
    carry a valid EIP-55 checksum.

    Returns:
        20 address bytes, or None if text is not a valid address
    """
    if len(text) != ETH_ADDRESS_HEX_LENGTH or not text.startswith("0x"):
        return None

    body = text[2:]
    try:
        address = bytes.fromhex(body)
    except ValueError:
        return None

    if body == body.lower() or body == body.upper():
        return address

    if to_checksum_address(address) != text:
        return None
    return address


def decode_op_return(script: bytes) -> Optional[bytes]:
    """
    Extract an Ethereum address from an OP_RETURN output.

    Accepted payloads (single push after OP_RETURN):
    - 20 raw address bytes
    - 42 ASCII characters "0x" + hex, EIP-55 checksummed if mixed case

    Args:
        script: scriptPubKey of the output

    Returns:
        20-byte address, or None
    """
    if len(script) < 2 or script[0] != OP_RETURN:
        return None

    data = _single_push(script, 1)
    if data is None:
        return None

    if len(data) == ETH_ADDRESS_SIZE:
        return data

    if len(data) == ETH_ADDRESS_HEX_LENGTH:
        try:
            text = data.decode("ascii")
        except UnicodeDecodeError:
            return None
        return parse_eth_address(text)

    logger.debug(f"OP_RETURN payload of {len(data)} bytes is not an address")
    return None


# ==============================================================================
# Bitcoin Addresses
# ==============================================================================

def address_to_script(address: str, network: str) -> bytes:
    """
    Resolve a Bitcoin address to its scriptPubKey.

    Args:
        address: Base58 or bech32/bech32m address
        network: bitcointx chain name, e.g. "bitcoin/testnet"

    Returns:
        scriptPubKey bytes

    Raises:
        InvalidAddressError: address does not parse for the network
    """
    try:
        with ChainParams(network):
            return bytes(CCoinAddress(address).to_scriptPubKey())
    except (CCoinAddressError, ValueError) as e:
        raise InvalidAddressError(address, network, str(e)) from e


def script_to_address(script: bytes, network: str) -> str:
    """
    Render a standard scriptPubKey as an address string.

    Raises:
        InvalidAddressError: script has no address form
    """
    try:
        with ChainParams(network):
            return str(CCoinAddress.from_scriptPubKey(CScript(script)))
    except (CCoinAddressError, ValueError) as e:
        raise InvalidAddressError(script.hex(), network, str(e)) from e
