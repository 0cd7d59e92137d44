"""
btcspv CLI Tests

Run against the built-in testnet sample with the mock backend.
"""

import json

import pytest

from btcspv.cli import build_parser, main
from btcspv.config import ProverConfig
from btcspv.sample import sample_witness, SAMPLE_RECIPIENT


@pytest.fixture
def quiet_config(tmp_path) -> str:
    path = tmp_path / "config.json"
    config = ProverConfig(fixtures_dir=str(tmp_path / "fixtures"))
    config.log.level = "WARNING"
    config.save(str(path))
    return str(path)


class TestParser:
    """Argument defaults."""

    def test_defaults(self):
        args = build_parser().parse_args(["prove"])
        assert args.circuit == "burn"
        assert args.system == "groth16"
        assert args.input_json is None

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_unknown_circuit(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["execute", "--circuit", "swap"])


class TestCommands:
    """execute / prove / vkey."""

    def test_execute_mint(self, quiet_config, capsys):
        assert main(["-c", quiet_config, "execute", "--circuit", "mint"]) == 0
        report = json.loads(capsys.readouterr().out)
        values = report["public_values"]
        assert values["eth_address"] == SAMPLE_RECIPIENT
        assert values["amount_satoshis"] == 1000
        assert values["valid"] is True
        assert report["chain_length"] == 6

    def test_execute_burn(self, quiet_config, capsys):
        assert main(["-c", quiet_config, "execute"]) == 0
        report = json.loads(capsys.readouterr().out)
        assert report["circuit"] == "burn"
        assert report["output_index"] == 0

    def test_execute_input_json(self, quiet_config, tmp_path, capsys):
        path = tmp_path / "witness.json"
        path.write_text(json.dumps(sample_witness()))
        assert main(["-c", quiet_config, "execute", "--circuit", "mint", "--input-json", str(path)]) == 0
        assert json.loads(capsys.readouterr().out)["circuit"] == "mint"

    def test_prove_writes_fixture(self, quiet_config, tmp_path, capsys):
        out_dir = tmp_path / "out"
        code = main([
            "-c", quiet_config, "prove",
            "--circuit", "mint", "--system", "plonk", "--fixtures-dir", str(out_dir),
        ])
        assert code == 0

        fixture = out_dir / "plonk-fixture_mint.json"
        data = json.loads(fixture.read_text())
        out = capsys.readouterr().out
        assert f"Verification Key: {data['vkey']}" in out
        assert f"Public Values: {data['publicValue']}" in out
        assert f"Proof Bytes: {data['proof']}" in out

    def test_prove_default_fixture_dir(self, quiet_config, tmp_path):
        assert main(["-c", quiet_config, "prove", "--system", "core"]) == 0
        assert (tmp_path / "fixtures" / "core-fixture_burn.json").exists()

    def test_vkey(self, quiet_config, capsys):
        assert main(["-c", quiet_config, "vkey", "--circuit", "mint"]) == 0
        vkey = capsys.readouterr().out.strip()
        assert vkey.startswith("0x") and len(vkey) == 66


class TestErrors:
    """Failures exit 1 with a JSON error on stderr."""

    def test_bad_merkle_proof(self, quiet_config, tmp_path, capsys):
        witness = sample_witness()
        witness["merkle_proof"]["pos"] = 0
        path = tmp_path / "witness.json"
        path.write_text(json.dumps(witness))

        assert main(["-c", quiet_config, "execute", "--circuit", "mint", "--input-json", str(path)]) == 1
        err = capsys.readouterr().err
        error = json.loads(err[err.index("{"):])["error"]
        assert error["name"] == "ROOT_MISMATCH"
        assert error["code"] == 3001

    def test_invalid_config(self, tmp_path, capsys):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"network": "bitcoin/nowhere", "log": {"level": "WARNING"}}))
        assert main(["-c", str(path), "vkey"]) == 1
        err = capsys.readouterr().err
        assert json.loads(err[err.index("{"):])["error"]["name"] == "CONFIG_ERROR"

    def test_missing_witness_file(self, quiet_config, tmp_path, capsys):
        missing = tmp_path / "absent.json"
        assert main(["-c", quiet_config, "execute", "--input-json", str(missing)]) == 1
        err = capsys.readouterr().err
        assert json.loads(err[err.index("{"):])["error"]["name"] == "WITNESS_FORMAT"

    @pytest.mark.parametrize("content", [
        "{not json",
        json.dumps({"remote": {"endpoint": "http://localhost"}}),
        json.dumps(["bitcoin/testnet"]),
    ])
    def test_unreadable_config(self, tmp_path, capsys, content):
        path = tmp_path / "config.json"
        path.write_text(content)
        assert main(["-c", str(path), "vkey"]) == 1
        err = capsys.readouterr().err
        assert json.loads(err[err.index("{"):])["error"]["name"] == "CONFIG_ERROR"

    def test_missing_config_file(self, tmp_path, capsys):
        assert main(["-c", str(tmp_path / "absent.json"), "vkey"]) == 1
        err = capsys.readouterr().err
        assert json.loads(err[err.index("{"):])["error"]["name"] == "CONFIG_ERROR"
