"""
btcspv Error Handling

All error codes and exception classes.

Witness errors (chain, merkle, parse, output) are fatal to a single
proof request. Proving errors carry a ``retryable`` flag: backend
failures and timeouts may be resubmitted with the identical witness.
"""

from enum import IntEnum
from typing import Optional, Any


class ErrorCode(IntEnum):
    """Error codes."""

    # 1xxx - General errors
    INVALID_PARAMETER = 1001
    WITNESS_FORMAT = 1002
    INVALID_ADDRESS = 1003
    CONFIG_ERROR = 1004

    # 2xxx - Header chain errors
    EMPTY_CHAIN = 2001
    BROKEN_LINK = 2002
    INSUFFICIENT_WORK = 2003
    BLOCK_HASH_MISMATCH = 2004
    INSUFFICIENT_CONFIRMATIONS = 2005
    INVALID_INCLUSION_INDEX = 2006

    # 3xxx - Merkle errors
    ROOT_MISMATCH = 3001

    # 4xxx - Transaction parse errors
    MALFORMED_TRANSACTION = 4001
    TRUNCATED_VARINT = 4002

    # 5xxx - Output errors
    NO_DEPOSIT_OUTPUT = 5001
    NO_OP_RETURN = 5002
    NO_PAYOUT_OUTPUT = 5003
    AMBIGUOUS_MATCH = 5004

    # 6xxx - Proving errors
    WITNESS_INVALID = 6001
    BACKEND_FAILURE = 6002
    PROVING_TIMEOUT = 6003


class BridgeProofError(Exception):
    """Base exception for all btcspv errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[Any] = None
    ):
        self.code = code
        self.message = message
        self.details = details
        super().__init__(f"[{code.value}] {message}")

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        result = {
            "code": self.code.value,
            "name": self.code.name,
            "message": self.message,
        }
        if self.details is not None:
            result["details"] = self.details
        return result


# ==============================================================================
# General Errors (1xxx)
# ==============================================================================

class InvalidParameterError(BridgeProofError):
    def __init__(self, param: str, message: str = ""):
        msg = f"Invalid parameter: {param}"
        if message:
            msg += f" - {message}"
        super().__init__(ErrorCode.INVALID_PARAMETER, msg, {"parameter": param})


class WitnessFormatError(BridgeProofError):
    def __init__(self, field: str, reason: str):
        super().__init__(
            ErrorCode.WITNESS_FORMAT,
            f"Malformed witness field '{field}': {reason}",
            {"field": field, "reason": reason}
        )


class InvalidAddressError(BridgeProofError):
    def __init__(self, address: str, network: str, reason: str = ""):
        msg = f"Invalid Bitcoin address for {network}: {address}"
        if reason:
            msg += f" ({reason})"
        super().__init__(
            ErrorCode.INVALID_ADDRESS,
            msg,
            {"address": address, "network": network}
        )


class ConfigError(BridgeProofError):
    def __init__(self, problems: list):
        super().__init__(
            ErrorCode.CONFIG_ERROR,
            "Invalid configuration: " + "; ".join(problems),
            {"problems": list(problems)}
        )


# ==============================================================================
# Header Chain Errors (2xxx)
# ==============================================================================

class ChainError(BridgeProofError):
    """Header chain failed linkage, work or shape checks."""


class EmptyChainError(ChainError):
    def __init__(self):
        super().__init__(ErrorCode.EMPTY_CHAIN, "Header chain is empty")


class BrokenLinkError(ChainError):
    def __init__(self, index: int, parent_hash: str, expected: str):
        super().__init__(
            ErrorCode.BROKEN_LINK,
            f"Header {index} parent {parent_hash} does not match previous header hash {expected}",
            {"index": index, "parent_hash": parent_hash, "expected": expected}
        )


class InsufficientWorkError(ChainError):
    def __init__(self, index: int, block_hash: str, bits: int, reason: str = ""):
        msg = f"Header {index} ({block_hash}) does not meet target for bits {bits:#010x}"
        if reason:
            msg += f": {reason}"
        super().__init__(
            ErrorCode.INSUFFICIENT_WORK,
            msg,
            {"index": index, "block_hash": block_hash, "bits": bits}
        )


class BlockHashMismatchError(ChainError):
    def __init__(self, index: int, computed: str, claimed: str):
        super().__init__(
            ErrorCode.BLOCK_HASH_MISMATCH,
            f"Header {index}: computed hash {computed} does not match provided block_hash {claimed}",
            {"index": index, "computed": computed, "claimed": claimed}
        )


class InsufficientConfirmationsError(ChainError):
    def __init__(self, length: int, required: int):
        super().__init__(
            ErrorCode.INSUFFICIENT_CONFIRMATIONS,
            f"Header chain too short: {length} < {required}",
            {"length": length, "required": required}
        )


class InvalidInclusionIndexError(ChainError):
    def __init__(self, index: int, length: int):
        super().__init__(
            ErrorCode.INVALID_INCLUSION_INDEX,
            f"Inclusion index {index} outside chain of {length} headers",
            {"index": index, "length": length}
        )


# ==============================================================================
# Merkle Errors (3xxx)
# ==============================================================================

class MerkleError(BridgeProofError):
    """Merkle inclusion failed."""


class RootMismatchError(MerkleError):
    def __init__(self, tx_hash: str, expected_root: str):
        super().__init__(
            ErrorCode.ROOT_MISMATCH,
            f"Merkle path for {tx_hash} does not reduce to root {expected_root}",
            {"tx_hash": tx_hash, "expected_root": expected_root}
        )


# ==============================================================================
# Parse Errors (4xxx)
# ==============================================================================

class ParseError(BridgeProofError):
    """Raw transaction could not be decoded."""


class MalformedTransactionError(ParseError):
    def __init__(self, reason: str, offset: Optional[int] = None):
        msg = f"Malformed transaction: {reason}"
        if offset is not None:
            msg += f" (at byte {offset})"
        super().__init__(
            ErrorCode.MALFORMED_TRANSACTION,
            msg,
            {"reason": reason, "offset": offset}
        )


class TruncatedVarintError(ParseError):
    def __init__(self, offset: int, needed: int, available: int):
        super().__init__(
            ErrorCode.TRUNCATED_VARINT,
            f"Truncated varint at byte {offset}: needs {needed} bytes, {available} available",
            {"offset": offset, "needed": needed, "available": available}
        )


# ==============================================================================
# Output Errors (5xxx)
# ==============================================================================

class OutputError(BridgeProofError):
    """The transaction lacks the outputs a circuit needs."""


class NoDepositOutputError(OutputError):
    def __init__(self, script_hex: str):
        super().__init__(
            ErrorCode.NO_DEPOSIT_OUTPUT,
            f"No output pays the bridge script {script_hex}",
            {"script": script_hex}
        )


class NoOpReturnError(OutputError):
    def __init__(self, reason: str = "no OP_RETURN output"):
        super().__init__(
            ErrorCode.NO_OP_RETURN,
            f"No usable OP_RETURN payload: {reason}",
            {"reason": reason}
        )


class NoPayoutOutputError(OutputError):
    def __init__(self, script_hex: str):
        super().__init__(
            ErrorCode.NO_PAYOUT_OUTPUT,
            f"No output pays the payout script {script_hex}",
            {"script": script_hex}
        )


class AmbiguousMatchError(OutputError):
    def __init__(self, criterion: str, indices: list):
        super().__init__(
            ErrorCode.AMBIGUOUS_MATCH,
            f"Multiple outputs match {criterion}: {indices}",
            {"criterion": criterion, "indices": list(indices)}
        )


# ==============================================================================
# Proving Errors (6xxx)
# ==============================================================================

class ProvingError(BridgeProofError):
    """Proof generation failed after the witness was accepted locally."""

    retryable = False


class WitnessInvalidError(ProvingError):
    def __init__(self, reason: str):
        super().__init__(
            ErrorCode.WITNESS_INVALID,
            f"Prover rejected witness: {reason}",
            {"reason": reason}
        )


class BackendFailureError(ProvingError):
    retryable = True

    def __init__(self, reason: str, request_id: Optional[str] = None):
        super().__init__(
            ErrorCode.BACKEND_FAILURE,
            f"Proving backend failure: {reason}",
            {"reason": reason, "request_id": request_id}
        )


class ProvingTimeoutError(ProvingError):
    retryable = True

    def __init__(self, request_id: str, timeout_sec: float):
        super().__init__(
            ErrorCode.PROVING_TIMEOUT,
            f"Proof request {request_id} not fulfilled within {timeout_sec}s",
            {"request_id": request_id, "timeout_sec": timeout_sec}
        )
