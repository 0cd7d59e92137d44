"""
btcspv Output Location Tests
"""

import pytest

from btcspv.protocol.outputs import locate_deposit_output, locate_payout_output
from btcspv.core.transaction import parse_transaction
from btcspv.core.script import address_to_script
from btcspv.constants import DEFAULT_BRIDGE_ADDRESS, DEFAULT_NETWORK
from btcspv.sample import SAMPLE_RAW_TX, SAMPLE_RECIPIENT
from btcspv.errors import (
    InvalidParameterError,
    NoDepositOutputError,
    NoOpReturnError,
    NoPayoutOutputError,
    AmbiguousMatchError,
)

from conftest import make_tx, op_return_script, RECIPIENT, BURNER_SCRIPT, CHANGE_SCRIPT


class TestLocateDeposit:
    """Bridge payment plus OP_RETURN recipient."""

    def test_found(self, deposit_tx, bridge_script):
        deposit = locate_deposit_output(deposit_tx, bridge_script)
        assert deposit.value == 100_000
        assert deposit.payload == RECIPIENT
        assert deposit.output_index == 1
        assert deposit.op_return_index == 2

    def test_testnet_sample(self):
        tx = parse_transaction(SAMPLE_RAW_TX)
        script = address_to_script(DEFAULT_BRIDGE_ADDRESS, DEFAULT_NETWORK)
        deposit = locate_deposit_output(tx, script)
        assert deposit.value == 1000
        assert deposit.output_index == 0
        assert deposit.op_return_index == 1
        assert deposit.payload.hex() == SAMPLE_RECIPIENT[2:].lower()

    def test_no_bridge_output(self, bridge_script):
        tx = make_tx([(1_000, CHANGE_SCRIPT), (0, op_return_script(RECIPIENT))])
        with pytest.raises(NoDepositOutputError):
            locate_deposit_output(tx, bridge_script)

    def test_no_op_return(self, bridge_script):
        tx = make_tx([(1_000, bridge_script)])
        with pytest.raises(NoOpReturnError):
            locate_deposit_output(tx, bridge_script)

    def test_first_op_return_undecodable(self, bridge_script):
        """Only the first OP_RETURN is consulted."""
        tx = make_tx([
            (1_000, bridge_script),
            (0, op_return_script(b"hello")),
            (0, op_return_script(RECIPIENT)),
        ])
        with pytest.raises(NoOpReturnError):
            locate_deposit_output(tx, bridge_script)

    def test_first_match_policy(self, bridge_script):
        tx = make_tx([
            (0, op_return_script(RECIPIENT)),
            (2_000, bridge_script),
            (3_000, bridge_script),
        ])
        deposit = locate_deposit_output(tx, bridge_script)
        assert deposit.value == 2_000
        assert deposit.output_index == 1

    def test_unique_policy_rejects_second_deposit(self, bridge_script):
        tx = make_tx([
            (2_000, bridge_script),
            (3_000, bridge_script),
            (0, op_return_script(RECIPIENT)),
        ])
        with pytest.raises(AmbiguousMatchError) as exc:
            locate_deposit_output(tx, bridge_script, policy="unique")
        assert exc.value.details["indices"] == [0, 1]

    def test_unique_policy_rejects_second_op_return(self, bridge_script):
        tx = make_tx([
            (2_000, bridge_script),
            (0, op_return_script(RECIPIENT)),
            (0, op_return_script(RECIPIENT)),
        ])
        with pytest.raises(AmbiguousMatchError):
            locate_deposit_output(tx, bridge_script, policy="unique")

    def test_unknown_policy(self, deposit_tx, bridge_script):
        with pytest.raises(InvalidParameterError):
            locate_deposit_output(deposit_tx, bridge_script, policy="largest")


class TestLocatePayout:
    """Payout to the burner."""

    def test_found(self, payout_tx):
        payout = locate_payout_output(payout_tx, BURNER_SCRIPT)
        assert payout.value == 75_000
        assert payout.output_index == 0

    def test_missing(self, payout_tx):
        with pytest.raises(NoPayoutOutputError):
            locate_payout_output(payout_tx, bytes.fromhex("0014") + bytes(20))

    def test_unique_policy(self):
        tx = make_tx([(1, BURNER_SCRIPT), (2, BURNER_SCRIPT)])
        assert locate_payout_output(tx, BURNER_SCRIPT).value == 1
        with pytest.raises(AmbiguousMatchError):
            locate_payout_output(tx, BURNER_SCRIPT, policy="unique")
