"""
btcspv Proving
"""

from btcspv.prover.backend import ProverBackend, MockProver, ProofRequest, ProofResult
from btcspv.prover.network import NetworkProver
from btcspv.prover.orchestrator import ProofOrchestrator, ExecutionReport, ProofFixture

__all__ = [
    "ProverBackend",
    "MockProver",
    "NetworkProver",
    "ProofRequest",
    "ProofResult",
    "ProofOrchestrator",
    "ExecutionReport",
    "ProofFixture",
]
