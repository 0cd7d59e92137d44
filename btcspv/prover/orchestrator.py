"""
Proof Orchestrator

Runs a circuit locally, hands the verified witness to a proving backend,
and checks that the backend committed exactly what was computed locally.

Nothing is cached between requests; each call builds its own state.
"""

from __future__ import annotations
import asyncio
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Union

from btcspv.config import ProverConfig
from btcspv.core.types import Hash, CircuitVariant, ProofSystem
from btcspv.protocol.circuits import run_circuit
from btcspv.protocol.public_values import PublicValues
from btcspv.protocol.witness import Witness
from btcspv.prover.backend import ProverBackend, ProofRequest, ProofResult
from btcspv.errors import BackendFailureError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ExecutionReport:
    """Outcome of running a circuit without proving it."""
    circuit: CircuitVariant
    public_values: PublicValues
    encoded: bytes
    tx_id: Hash
    inclusion_block: Hash
    output_index: int
    chain_length: int

    def to_dict(self) -> dict:
        return {
            "circuit": self.circuit.value,
            "public_values": self.public_values.to_dict(),
            "encoded": "0x" + self.encoded.hex(),
            "tx_id": self.tx_id.display_hex(),
            "inclusion_block": self.inclusion_block.display_hex(),
            "output_index": self.output_index,
            "chain_length": self.chain_length,
        }


@dataclass(frozen=True, slots=True)
class ProofFixture:
    """Proof artifact consumed by on-chain verifier tests."""
    circuit: CircuitVariant
    system: ProofSystem
    vkey: str
    public_value: str                   # 0x-hex
    proof: str                          # 0x-hex

    @property
    def filename(self) -> str:
        return f"{self.system.value}-fixture_{self.circuit.value}.json".lower()

    def to_dict(self) -> dict:
        return {
            "vkey": self.vkey,
            "publicValue": self.public_value,
            "proof": self.proof,
        }


WitnessInput = Union[Witness, Dict[str, Any]]


class ProofOrchestrator:
    """
    Drives execute / prove for mint and burn circuits.
    """

    def __init__(self, backend: ProverBackend, config: ProverConfig):
        config.ensure_valid()
        self.backend = backend
        self.config = config

    @staticmethod
    def _witness(witness: WitnessInput) -> Witness:
        if isinstance(witness, Witness):
            return witness
        return Witness.from_dict(witness)

    def execute(self, witness: WitnessInput, circuit: CircuitVariant) -> ExecutionReport:
        """
        Evaluate a circuit locally.

        Raises:
            BridgeProofError subclass for the first failed check
        """
        witness = self._witness(witness)
        circuit = CircuitVariant(circuit)

        result = run_circuit(circuit, witness, self.config)
        report = ExecutionReport(
            circuit=circuit,
            public_values=result.public_values,
            encoded=result.encoded(),
            tx_id=result.tx_id,
            inclusion_block=result.inclusion_block,
            output_index=result.output_index,
            chain_length=len(witness.chain),
        )
        logger.info(f"Executed {circuit.value} circuit for tx {result.tx_id.display_hex()}")
        return report

    async def prove(
        self,
        witness: WitnessInput,
        circuit: CircuitVariant,
        system: ProofSystem = ProofSystem.GROTH16
    ) -> ProofResult:
        """
        Execute locally, then prove with the backend.

        Raises:
            BridgeProofError subclass from local execution
            ProvingError subclass from the backend
            BackendFailureError if the backend's public values differ
        """
        witness = self._witness(witness)
        system = ProofSystem(system)
        report = self.execute(witness, circuit)

        request = ProofRequest(
            circuit=report.circuit,
            system=system,
            witness=witness.to_dict(),
            public_values=report.encoded,
        )
        result = await self.backend.prove(request)

        if result.public_values != report.encoded:
            raise BackendFailureError(
                "backend public values differ from local execution", result.request_id
            )

        logger.info(
            f"Proved {report.circuit.value}/{system.value}: {len(result.proof)} proof bytes"
        )
        return result

    def prove_sync(
        self,
        witness: WitnessInput,
        circuit: CircuitVariant,
        system: ProofSystem = ProofSystem.GROTH16
    ) -> ProofResult:
        """Synchronous wrapper for prove."""
        return asyncio.run(self.prove(witness, circuit, system))

    async def fetch_verifying_key(self, circuit: CircuitVariant) -> str:
        """Program key of a circuit as 0x-hex."""
        return await self.backend.verifying_key(CircuitVariant(circuit))

    @staticmethod
    def create_fixture(result: ProofResult, vkey: str) -> ProofFixture:
        return ProofFixture(
            circuit=result.circuit,
            system=result.system,
            vkey=vkey,
            public_value="0x" + result.public_values.hex(),
            proof="0x" + result.proof.hex(),
        )

    @staticmethod
    def save_fixture(fixture: ProofFixture, directory: Union[str, Path]) -> Path:
        """Write {system}-fixture_{circuit}.json into directory."""
        path = Path(directory)
        path.mkdir(parents=True, exist_ok=True)
        target = path / fixture.filename

        with open(target, 'w') as f:
            json.dump(fixture.to_dict(), f, indent=2)

        logger.info(f"Fixture saved to {target}")
        return target
