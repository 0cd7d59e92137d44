"""
Header Chain Validation

A header chain is accepted when every header links to its predecessor,
matches any block hash the witness claimed for it, and meets its own
declared proof-of-work target. Each pass reports the lowest failing
index. Linkage runs first so that a corrupted parent_hash is reported
as a broken link whatever it did to the header's own hash.
"""

from __future__ import annotations
import logging
from typing import List, Optional

from btcspv.core.types import Hash
from btcspv.core.header import HeaderChain
from btcspv.crypto.pow import check_proof_of_work, block_work
from btcspv.errors import (
    EmptyChainError,
    BrokenLinkError,
    BlockHashMismatchError,
    InsufficientWorkError,
    InsufficientConfirmationsError,
    InvalidInclusionIndexError,
)

logger = logging.getLogger(__name__)


def hash_headers(chain: HeaderChain) -> List[Hash]:
    """Hash every header. Each hash depends only on its own header."""
    return [header.block_hash() for header in chain.headers]


def validate_header_chain(
    chain: HeaderChain,
    pow_limit: Optional[int] = None,
    min_length: int = 1
) -> Hash:
    """
    Validate a header chain and return the inclusion block's hash.

    Checks, in order:
    1. chain non-empty and inclusion_index in range
    2. parent linkage for every header after the first
    3. witness-claimed block hashes equal the computed hashes
    4. hash <= target(bits); target must also be positive, not
       overflowing, and within pow_limit (compact bits) when given
    5. at least min_length headers

    Args:
        chain: Headers oldest first
        pow_limit: Network proof-of-work limit as compact bits
        min_length: Required number of headers (confirmations)

    Returns:
        Hash of chain.headers[chain.inclusion_index]

    Raises:
        ChainError subclass describing the first failure
    """
    if len(chain) == 0:
        raise EmptyChainError()

    if not 0 <= chain.inclusion_index < len(chain):
        raise InvalidInclusionIndexError(chain.inclusion_index, len(chain))

    hashes = hash_headers(chain)

    # Linkage
    for i in range(1, len(chain)):
        parent = chain.headers[i].parent_hash
        if parent != hashes[i - 1]:
            raise BrokenLinkError(i, parent.display_hex(), hashes[i - 1].display_hex())

    # Claimed hashes
    for i, computed in enumerate(hashes):
        claimed = chain.claimed_hash(i)
        if claimed is not None and claimed != computed:
            raise BlockHashMismatchError(i, computed.display_hex(), claimed.display_hex())

    # Proof of work
    for i, (header, block_hash) in enumerate(zip(chain.headers, hashes)):
        reason = check_proof_of_work(block_hash, header.bits, pow_limit)
        if reason is not None:
            raise InsufficientWorkError(i, block_hash.display_hex(), header.bits, reason)

    if len(chain) < min_length:
        raise InsufficientConfirmationsError(len(chain), min_length)

    inclusion_hash = hashes[chain.inclusion_index]
    logger.info(
        f"Header chain verified: {len(chain)} headers, "
        f"inclusion block {inclusion_hash.display_hex()}"
    )
    return inclusion_hash


def chain_work(chain: HeaderChain) -> int:
    """Total expected hashes behind the chain."""
    return sum(block_work(header.bits) for header in chain.headers)
