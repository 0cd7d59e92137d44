"""
btcspv Constants

Bitcoin wire sizes, proof-of-work limits and bridge defaults.
All Bitcoin multi-byte integers are LITTLE-ENDIAN on the wire.
"""

from typing import Final, Dict

# ==============================================================================
# Byte Order
# ==============================================================================

LITTLE_ENDIAN: Final[str] = "little"

# ==============================================================================
# Sizes
# ==============================================================================

HASH_SIZE: Final[int] = 32
HEADER_SIZE: Final[int] = 80
ETH_ADDRESS_SIZE: Final[int] = 20
ETH_ADDRESS_HEX_LENGTH: Final[int] = 42          # "0x" + 40 hex chars

# A 64-byte transaction serializes like an inner Merkle node
FORBIDDEN_TX_SIZE: Final[int] = 64

# Smallest possible input: 32 prev hash + 4 vout + 1 script len + 4 sequence
MIN_INPUT_SIZE: Final[int] = 41
# Smallest possible output: 8 value + 1 script len
MIN_OUTPUT_SIZE: Final[int] = 9

# ==============================================================================
# Segwit
# ==============================================================================

SEGWIT_MARKER: Final[int] = 0x00
SEGWIT_FLAG: Final[int] = 0x01

# ==============================================================================
# Proof of Work
# ==============================================================================

MAINNET_POW_LIMIT_BITS: Final[int] = 0x1D00FFFF
TESTNET_POW_LIMIT_BITS: Final[int] = 0x1D00FFFF
SIGNET_POW_LIMIT_BITS: Final[int] = 0x1E0377AE
REGTEST_POW_LIMIT_BITS: Final[int] = 0x207FFFFF

# Keyed by python-bitcointx chain name
NETWORK_POW_LIMIT_BITS: Final[Dict[str, int]] = {
    "bitcoin": MAINNET_POW_LIMIT_BITS,
    "bitcoin/testnet": TESTNET_POW_LIMIT_BITS,
    "bitcoin/signet": SIGNET_POW_LIMIT_BITS,
    "bitcoin/regtest": REGTEST_POW_LIMIT_BITS,
}

# ==============================================================================
# Bridge Defaults
# ==============================================================================

DEFAULT_NETWORK: Final[str] = "bitcoin/testnet"
DEFAULT_BRIDGE_ADDRESS: Final[str] = "tb1qzfqwyxc70pmlw7l7vmx9nmhmqtgh5z3lp3j9hf"
DEFAULT_MIN_CHAIN_LENGTH: Final[int] = 6
DEFAULT_FIXTURES_DIR: Final[str] = "fixtures"

OUTPUT_POLICY_FIRST: Final[str] = "first"
OUTPUT_POLICY_UNIQUE: Final[str] = "unique"

# ==============================================================================
# Remote Prover
# ==============================================================================

DEFAULT_PROVER_URL: Final[str] = "https://prover.example.org"
DEFAULT_POLL_INTERVAL_SEC: Final[float] = 2.0
DEFAULT_PROVING_TIMEOUT_SEC: Final[float] = 3600.0
DEFAULT_MAX_RETRIES: Final[int] = 5
DEFAULT_BACKOFF_BASE_SEC: Final[float] = 0.5
HTTP_TIMEOUT_SEC: Final[float] = 30.0

# Verifier selector prefix carried by wrapped proofs
PROOF_SELECTOR_SIZE: Final[int] = 4

# ==============================================================================
# Version
# ==============================================================================

PROTOCOL_VERSION: Final[str] = "0.1.0"
