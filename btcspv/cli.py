"""
btcspv command line

    btcspv execute --circuit mint [--input-json witness.json]
    btcspv prove   --circuit burn --system groth16
    btcspv vkey    --circuit mint
"""

from __future__ import annotations
import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from btcspv.config import ProverConfig, BACKEND_NETWORK, setup_logging
from btcspv.core.types import CircuitVariant, ProofSystem
from btcspv.protocol.witness import Witness
from btcspv.prover.backend import ProverBackend, MockProver
from btcspv.prover.network import NetworkProver
from btcspv.prover.orchestrator import ProofOrchestrator
from btcspv.sample import sample_witness
from btcspv.errors import BridgeProofError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="btcspv",
        description="Bitcoin SPV proofs for the BTC/ETH bridge",
    )
    parser.add_argument("--config", "-c", type=str, help="Path to config file")
    parser.add_argument("--log-level", type=str, help="Override log level")

    sub = parser.add_subparsers(dest="command", required=True)
    circuits = [c.value for c in CircuitVariant]

    execute = sub.add_parser("execute", help="Run a circuit locally")
    execute.add_argument("--circuit", choices=circuits, default=CircuitVariant.BURN.value)
    execute.add_argument("--input-json", type=str, help="Witness JSON (default: built-in sample)")

    prove = sub.add_parser("prove", help="Generate a proof and write its fixture")
    prove.add_argument("--circuit", choices=circuits, default=CircuitVariant.BURN.value)
    prove.add_argument(
        "--system",
        choices=[s.value for s in ProofSystem],
        default=ProofSystem.GROTH16.value,
    )
    prove.add_argument("--input-json", type=str, help="Witness JSON (default: built-in sample)")
    prove.add_argument("--fixtures-dir", type=str, help="Override fixture output directory")

    vkey = sub.add_parser("vkey", help="Print a circuit's verifying key")
    vkey.add_argument("--circuit", choices=circuits, default=CircuitVariant.BURN.value)

    return parser


def make_backend(config: ProverConfig) -> ProverBackend:
    if config.backend == BACKEND_NETWORK:
        return NetworkProver(config.remote)
    return MockProver()


def _load_witness(path: Optional[str]) -> Witness:
    if path:
        return Witness.load(path)
    return Witness.from_dict(sample_witness())


async def _run(args: argparse.Namespace, config: ProverConfig) -> int:
    backend = make_backend(config)
    try:
        orchestrator = ProofOrchestrator(backend, config)
        circuit = CircuitVariant(args.circuit)

        if args.command == "vkey":
            print(await orchestrator.fetch_verifying_key(circuit))
            return 0

        witness = _load_witness(args.input_json)

        if args.command == "execute":
            report = orchestrator.execute(witness, circuit)
            print(json.dumps(report.to_dict(), indent=2))
            return 0

        result = await orchestrator.prove(witness, circuit, ProofSystem(args.system))
        vkey = await orchestrator.fetch_verifying_key(circuit)
        fixture = orchestrator.create_fixture(result, vkey)
        path = orchestrator.save_fixture(fixture, args.fixtures_dir or config.fixtures_dir)

        print(f"Verification Key: {fixture.vkey}")
        print(f"Public Values: {fixture.public_value}")
        print(f"Proof Bytes: {fixture.proof}")
        print(f"Fixture: {path}")
        return 0
    finally:
        await backend.close()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = ProverConfig.load(args.config) if args.config else ProverConfig()
        if args.log_level:
            config.log.level = args.log_level
        setup_logging(config.log)
        return asyncio.run(_run(args, config))
    except BridgeProofError as e:
        logger.error(str(e))
        print(json.dumps({"error": e.to_dict()}, indent=2), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
