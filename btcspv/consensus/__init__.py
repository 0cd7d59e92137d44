"""
btcspv Header Chain Consensus
"""

from btcspv.consensus.validation import validate_header_chain, hash_headers, chain_work

__all__ = [
    "validate_header_chain",
    "hash_headers",
    "chain_work",
]
