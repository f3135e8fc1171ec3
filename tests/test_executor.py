"""
Tests for the swap executor: balance gate, approval phase, swap phase and
error containment.
"""

import threading

import pytest
import requests

from config.settings import SwapConfig
from swapcycle.cycle import SwapStep
from swapcycle.executor import OutcomeStatus
from swapcycle.ledger import LedgerError

from tests.conftest import FIXED_NOW, ROUTER


@pytest.fixture
def step(assets):
    return SwapStep(assets["A"], assets["B"], 1_000)


def fund(ledger, account, step, balance=None, allowance=0):
    ledger.balances[(step.source.symbol, account.address)] = (
        step.amount if balance is None else balance
    )
    if allowance:
        ledger.allowances[(step.source.symbol, account.address, ROUTER)] = allowance


class TestBalanceGate:

    def test_one_unit_below_skips(self, ledger, make_executor, alice, step):
        fund(ledger, alice, step, balance=step.amount - 1)
        outcome = make_executor().execute(alice, step)

        assert outcome.status is OutcomeStatus.SKIPPED_INSUFFICIENT_BALANCE
        assert outcome.skipped and not outcome.attempted
        assert ledger.count("get_allowance") == 0
        assert ledger.count("approve") == 0
        assert ledger.count("submit_swap") == 0

    def test_exact_balance_proceeds(self, ledger, make_executor, alice, step):
        fund(ledger, alice, step, balance=step.amount)
        outcome = make_executor().execute(alice, step)

        assert outcome.status is OutcomeStatus.SWAP_SUCCEEDED
        assert ledger.count("submit_swap") == 1

    def test_skip_reason_in_human_units(self, ledger, make_executor, alice, assets):
        step = SwapStep(assets["B"], assets["A"], 2_000_000)  # B has 6 decimals
        fund(ledger, alice, step, balance=500_000)
        outcome = make_executor().execute(alice, step)
        assert outcome.reason == "Required: 2, Have: 0.5"

    def test_balance_read_error_is_contained(self, ledger, make_executor, alice, step):
        ledger.balance_error = LedgerError("rpc down")
        outcome = make_executor().execute(alice, step)

        assert outcome.status is OutcomeStatus.BALANCE_CHECK_FAILED
        assert "rpc down" in outcome.reason
        assert [c[0] for c in ledger.calls] == ["get_balance"]


class TestApproval:

    def test_sufficient_allowance_skips_approval(self, ledger, make_executor, alice, step):
        fund(ledger, alice, step, allowance=step.amount)
        outcome = make_executor().execute(alice, step)

        assert outcome.succeeded
        assert ledger.count("approve") == 0
        assert ledger.count("submit_swap") == 1

    def test_larger_allowance_skips_approval(self, ledger, make_executor, alice, step):
        fund(ledger, alice, step, allowance=step.amount * 10)
        make_executor().execute(alice, step)
        assert ledger.count("approve") == 0

    def test_low_allowance_approves_exact_amount_once(self, ledger, make_executor, alice, step):
        fund(ledger, alice, step, allowance=step.amount - 1)
        outcome = make_executor().execute(alice, step)

        approvals = [c for c in ledger.calls if c[0] == "approve"]
        assert approvals == [("approve", "A", ROUTER, step.amount)]
        assert outcome.succeeded

    def test_approval_error_blocks_swap(self, ledger, make_executor, alice, step):
        fund(ledger, alice, step)
        ledger.approve_error = LedgerError("nonce too low")
        outcome = make_executor().execute(alice, step)

        assert outcome.status is OutcomeStatus.APPROVAL_FAILED
        assert "nonce too low" in outcome.reason
        assert ledger.count("submit_swap") == 0

    def test_allowance_read_error_blocks_approval_and_swap(self, ledger, make_executor, alice, step):
        fund(ledger, alice, step)
        ledger.allowance_error = LedgerError("allowance call reverted")
        outcome = make_executor().execute(alice, step)

        assert outcome.status is OutcomeStatus.APPROVAL_FAILED
        assert "allowance call reverted" in outcome.reason
        assert ledger.count("approve") == 0
        assert ledger.count("submit_swap") == 0

    def test_reverted_approval_blocks_swap(self, ledger, make_executor, alice, step):
        fund(ledger, alice, step)
        ledger.approve_status = 0
        outcome = make_executor().execute(alice, step)

        assert outcome.status is OutcomeStatus.APPROVAL_FAILED
        assert outcome.tx_hash is not None
        assert ledger.count("submit_swap") == 0


class TestSwap:

    def test_swap_parameters(self, ledger, make_executor, alice, step):
        fund(ledger, alice, step)
        make_executor().execute(alice, step)

        params = ledger.swaps[0]
        assert params.token_in == step.source.address
        assert params.token_out == step.destination.address
        assert params.fee == 3000
        assert params.recipient == alice.address
        assert params.deadline == FIXED_NOW + 120
        assert params.amount_in == step.amount
        assert params.amount_out_minimum == 0
        assert params.sqrt_price_limit_x96 == 0

    def test_configured_fee_deadline_and_minimum(self, ledger, make_executor, alice, step):
        fund(ledger, alice, step)
        cfg = SwapConfig(fee_tier=500, deadline_seconds=60, amount_out_minimum=7)
        make_executor(cfg).execute(alice, step)

        params = ledger.swaps[0]
        assert (params.fee, params.deadline, params.amount_out_minimum) == (500, FIXED_NOW + 60, 7)

    def test_successful_swap(self, ledger, make_executor, alice, step):
        fund(ledger, alice, step)
        outcome = make_executor().execute(alice, step)

        assert outcome.status is OutcomeStatus.SWAP_SUCCEEDED
        assert outcome.attempted and outcome.succeeded
        assert outcome.tx_hash.startswith("0x")

    def test_reverted_swap(self, ledger, make_executor, alice, step):
        fund(ledger, alice, step)
        ledger.swap_status = 0
        outcome = make_executor().execute(alice, step)

        assert outcome.status is OutcomeStatus.SWAP_FAILED
        assert outcome.attempted and not outcome.succeeded

    @pytest.mark.parametrize("error", [
        LedgerError("execution reverted"),
        requests.ConnectionError("connection reset"),
        TimeoutError("receipt wait timed out"),
    ])
    def test_swap_errors_are_contained(self, ledger, make_executor, alice, step, error):
        fund(ledger, alice, step)
        ledger.swap_error = error
        outcome = make_executor().execute(alice, step)

        assert outcome.status is OutcomeStatus.SWAP_FAILED
        assert str(error) in outcome.reason


class TestCancellation:

    def test_cancel_before_approval(self, ledger, make_executor, alice, step):
        fund(ledger, alice, step)
        cancel = threading.Event()
        cancel.set()
        outcome = make_executor().execute(alice, step, cancel=cancel)

        assert outcome.status is OutcomeStatus.CANCELLED
        assert [c[0] for c in ledger.calls] == ["get_balance"]

    def test_unset_cancel_runs_all_phases(self, ledger, make_executor, alice, step):
        fund(ledger, alice, step)
        outcome = make_executor().execute(alice, step, cancel=threading.Event())
        assert outcome.succeeded

    def test_cancel_during_approval_skips_swap(self, alice, step, make_executor, ledger):
        cancel = threading.Event()
        fund(ledger, alice, step)
        approve = ledger.approve

        def approve_then_cancel(*args, **kwargs):
            receipt = approve(*args, **kwargs)
            cancel.set()
            return receipt

        ledger.approve = approve_then_cancel
        outcome = make_executor().execute(alice, step, cancel=cancel)

        assert outcome.status is OutcomeStatus.CANCELLED
        assert ledger.count("approve") == 1
        assert ledger.count("submit_swap") == 0
