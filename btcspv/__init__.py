"""
btcspv
Bitcoin SPV proofs for a BTC/ETH bridge

Header chain validation, Merkle inclusion, raw transaction parsing and
ABI-committed public values, handed to a proving backend.
"""

__version__ = "0.1.0"
__author__ = "btcspv developers"

from btcspv.constants import PROTOCOL_VERSION, DEFAULT_NETWORK

__all__ = [
    "PROTOCOL_VERSION",
    "DEFAULT_NETWORK",
    "__version__",
]
