"""
Proving Backends

A backend turns a locally verified witness into proof bytes. Its
internals (arithmetization, groth16/plonk wrapping) are opaque here; the
orchestrator only relies on:

- verifying_key(circuit): fixed program key of a circuit
- prove(request): proof bytes plus the public values the prover committed
"""

from __future__ import annotations
import hashlib
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict

from btcspv.constants import PROTOCOL_VERSION, PROOF_SELECTOR_SIZE
from btcspv.core.types import CircuitVariant, ProofSystem

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ProofRequest:
    """One proving job."""
    circuit: CircuitVariant
    system: ProofSystem
    witness: Dict[str, Any]             # Canonical witness JSON
    public_values: bytes                # Locally committed ABI encoding

    def to_dict(self) -> dict:
        return {
            "circuit": self.circuit.value,
            "system": self.system.value,
            "witness": self.witness,
            "public_values": "0x" + self.public_values.hex(),
        }


@dataclass(frozen=True, slots=True)
class ProofResult:
    """Backend answer to a ProofRequest."""
    circuit: CircuitVariant
    system: ProofSystem
    public_values: bytes
    proof: bytes
    request_id: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)


class ProverBackend(ABC):
    """Opaque proving oracle."""

    @abstractmethod
    async def verifying_key(self, circuit: CircuitVariant) -> str:
        """Return the program key of a circuit as 0x-hex."""

    @abstractmethod
    async def prove(self, request: ProofRequest) -> ProofResult:
        """Produce a proof for a request."""

    async def close(self) -> None:
        return None


class MockProver(ProverBackend):
    """
    Deterministic local stand-in for a proving network.

    Proof bytes are a hash of (program key, system, public values), so an
    identical witness always yields an identical proof. Wrapped systems
    prefix the proof with a 4-byte verifier selector, as on-chain
    verifier gateways expect.
    """

    def __init__(self, program_version: str = PROTOCOL_VERSION):
        self.program_version = program_version
        self.requests: list = []

    def program_key(self, circuit: CircuitVariant) -> bytes:
        identity = f"btcspv/{CircuitVariant(circuit).value}/{self.program_version}"
        return hashlib.sha256(identity.encode()).digest()

    async def verifying_key(self, circuit: CircuitVariant) -> str:
        return "0x" + self.program_key(circuit).hex()

    def selector(self, circuit: CircuitVariant, system: ProofSystem) -> bytes:
        digest = hashlib.sha256(system.value.encode() + self.program_key(circuit)).digest()
        return digest[:PROOF_SELECTOR_SIZE]

    async def prove(self, request: ProofRequest) -> ProofResult:
        self.requests.append(request)

        body = hashlib.sha256(
            self.program_key(request.circuit)
            + request.system.value.encode()
            + request.public_values
        ).digest()

        if request.system == ProofSystem.CORE:
            proof = body
        else:
            proof = self.selector(request.circuit, request.system) + body

        logger.debug(
            f"Mock proof for {request.circuit.value}/{request.system.value}: {proof.hex()[:16]}..."
        )
        return ProofResult(
            circuit=request.circuit,
            system=request.system,
            public_values=request.public_values,
            proof=proof,
            request_id=body.hex()[:16],
        )
