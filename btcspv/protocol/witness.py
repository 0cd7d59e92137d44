"""
Witness Schema

JSON input of a proof request. Keys are snake_case; the camelCase
spelling produced by the upstream fetcher is accepted as well.

    merkle_proof: {siblings: [display hex], pos: int}
    chains: {blocks: [{block_hash, version, parent_hash, merkle_root,
                       timestamp, difficulty, nonce}], inclusion_index?}
    bit_tx_info: {raw_tx_hex: str}
    burner_btc_address?: str
    bridge_address?: str

All hashes in the witness are display (byte-reversed) hex.
"""

from __future__ import annotations
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from btcspv.core.types import Hash
from btcspv.core.header import BlockHeader, HeaderChain
from btcspv.crypto.merkle import MerkleProof
from btcspv.errors import WitnessFormatError

logger = logging.getLogger(__name__)


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _field(data: Dict[str, Any], name: str, path: str, required: bool = True) -> Any:
    if not isinstance(data, dict):
        raise WitnessFormatError(path, "expected an object")
    if name in data:
        return data[name]
    camel = _camel(name)
    if camel in data:
        return data[camel]
    if required:
        raise WitnessFormatError(f"{path}.{name}" if path else name, "missing")
    return None


def _int(value: Any, path: str, low: int, high: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise WitnessFormatError(path, f"expected integer, got {type(value).__name__}")
    if not low <= value <= high:
        raise WitnessFormatError(path, f"value {value} out of range")
    return value


def _hash(value: Any, path: str) -> Hash:
    if not isinstance(value, str):
        raise WitnessFormatError(path, "expected hex string")
    try:
        return Hash.from_display_hex(value)
    except ValueError as e:
        raise WitnessFormatError(path, str(e)) from e


def _header(block: Dict[str, Any], path: str) -> BlockHeader:
    return BlockHeader(
        version=_int(_field(block, "version", path), f"{path}.version", -0x80000000, 0xFFFFFFFF),
        parent_hash=_hash(_field(block, "parent_hash", path), f"{path}.parent_hash"),
        merkle_root=_hash(_field(block, "merkle_root", path), f"{path}.merkle_root"),
        timestamp=_int(_field(block, "timestamp", path), f"{path}.timestamp", 0, 0xFFFFFFFF),
        bits=_int(_field(block, "difficulty", path), f"{path}.difficulty", 0, 0xFFFFFFFF),
        nonce=_int(_field(block, "nonce", path), f"{path}.nonce", 0, 0xFFFFFFFF),
    )


@dataclass(slots=True)
class Witness:
    """Private input of one mint or burn proof."""
    merkle_proof: MerkleProof
    chain: HeaderChain
    raw_tx_hex: str
    burner_btc_address: Optional[str] = None
    bridge_address: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Witness:
        """
        Build a witness from decoded JSON.

        Raises:
            WitnessFormatError: missing field, wrong type or bad hex
        """
        proof = _field(data, "merkle_proof", "")
        siblings = _field(proof, "siblings", "merkle_proof")
        if not isinstance(siblings, list):
            raise WitnessFormatError("merkle_proof.siblings", "expected a list")
        merkle_proof = MerkleProof(
            siblings=[_hash(s, f"merkle_proof.siblings[{i}]") for i, s in enumerate(siblings)],
            pos=_int(_field(proof, "pos", "merkle_proof"), "merkle_proof.pos", 0, 0xFFFFFFFF),
        )

        chains = _field(data, "chains", "")
        blocks = _field(chains, "blocks", "chains")
        if not isinstance(blocks, list):
            raise WitnessFormatError("chains.blocks", "expected a list")

        headers: List[BlockHeader] = []
        claimed: List[Optional[Hash]] = []
        for i, block in enumerate(blocks):
            path = f"chains.blocks[{i}]"
            headers.append(_header(block, path))
            block_hash = _field(block, "block_hash", path, required=False)
            claimed.append(None if block_hash is None else _hash(block_hash, f"{path}.block_hash"))

        inclusion_index = _field(chains, "inclusion_index", "chains", required=False)
        chain = HeaderChain(
            headers=headers,
            inclusion_index=0 if inclusion_index is None else _int(
                inclusion_index, "chains.inclusion_index", -(1 << 31), (1 << 31) - 1
            ),
            claimed_hashes=claimed,
        )

        tx_info = _field(data, "bit_tx_info", "")
        raw_tx_hex = _field(tx_info, "raw_tx_hex", "bit_tx_info")
        if not isinstance(raw_tx_hex, str):
            raise WitnessFormatError("bit_tx_info.raw_tx_hex", "expected hex string")

        burner = _field(data, "burner_btc_address", "", required=False)
        bridge = _field(data, "bridge_address", "", required=False)
        for name, value in (("burner_btc_address", burner), ("bridge_address", bridge)):
            if value is not None and not isinstance(value, str):
                raise WitnessFormatError(name, "expected string")

        return cls(
            merkle_proof=merkle_proof,
            chain=chain,
            raw_tx_hex=raw_tx_hex,
            burner_btc_address=burner,
            bridge_address=bridge,
        )

    @classmethod
    def from_json(cls, text: Union[str, bytes]) -> Witness:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise WitnessFormatError("<root>", f"invalid JSON: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def load(cls, path: Union[str, Path]) -> Witness:
        """Load a witness from a JSON file."""
        try:
            with open(path, 'r') as f:
                text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise WitnessFormatError("<file>", f"{path}: {e}") from e
        witness = cls.from_json(text)
        logger.debug(f"Witness loaded from {path}")
        return witness

    def to_dict(self) -> dict:
        """Canonical snake_case form."""
        blocks = []
        for i, header in enumerate(self.chain.headers):
            claimed = self.chain.claimed_hash(i)
            blocks.append({
                "block_hash": (claimed or header.block_hash()).display_hex(),
                "version": header.version,
                "parent_hash": header.parent_hash.display_hex(),
                "merkle_root": header.merkle_root.display_hex(),
                "timestamp": header.timestamp,
                "difficulty": header.bits,
                "nonce": header.nonce,
            })

        result = {
            "merkle_proof": {
                "siblings": [s.display_hex() for s in self.merkle_proof.siblings],
                "pos": self.merkle_proof.pos,
            },
            "chains": {
                "blocks": blocks,
                "inclusion_index": self.chain.inclusion_index,
            },
            "bit_tx_info": {"raw_tx_hex": self.raw_tx_hex},
        }
        if self.burner_btc_address is not None:
            result["burner_btc_address"] = self.burner_btc_address
        if self.bridge_address is not None:
            result["bridge_address"] = self.bridge_address
        return result
