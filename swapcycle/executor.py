"""Swap executor: balance check, approval and swap for one account and step."""

import time
from dataclasses import dataclass
from enum import Enum

from config.settings import SwapConfig
from swapcycle.cycle import SwapStep, format_units
from swapcycle.ledger import LedgerClient, SwapParams


class OutcomeStatus(Enum):
    SKIPPED_INSUFFICIENT_BALANCE = "insufficient balance"
    BALANCE_CHECK_FAILED = "balance check failed"
    APPROVAL_FAILED = "approval failed"
    SWAP_FAILED = "swap failed"
    SWAP_SUCCEEDED = "swap succeeded"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class TransactionOutcome:
    status: OutcomeStatus
    reason: str | None = None
    tx_hash: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is OutcomeStatus.SWAP_SUCCEEDED

    @property
    def attempted(self) -> bool:
        """True when a swap transaction was submitted."""
        return self.status in (OutcomeStatus.SWAP_SUCCEEDED, OutcomeStatus.SWAP_FAILED)

    @property
    def skipped(self) -> bool:
        return self.status is OutcomeStatus.SKIPPED_INSUFFICIENT_BALANCE


class SwapExecutor:
    """Attempts one swap step for one account.

    Ledger failures never leave execute(): every phase converts its errors
    into a TransactionOutcome so the scheduler can move on.
    """

    def __init__(self, ledger: LedgerClient, router_address: str, cfg: SwapConfig,
                 logger, clock=time.time):
        self.ledger = ledger
        self.router_address = router_address
        self.cfg = cfg
        self.logger = logger
        self.clock = clock

    def execute(self, account, step: SwapStep, cancel=None) -> TransactionOutcome:
        tag = f"[{account.label}]"

        # Phase 1: balance gate
        try:
            balance = self.ledger.get_balance(step.source, account.address)
        except Exception as e:
            self.logger.error(f"{tag} Balance check for {step.source.symbol} failed: {e}")
            return TransactionOutcome(OutcomeStatus.BALANCE_CHECK_FAILED, reason=str(e))

        if balance < step.amount:
            decimals = step.source.decimals
            reason = (
                f"Required: {format_units(step.amount, decimals)}, "
                f"Have: {format_units(balance, decimals)}"
            )
            self.logger.warning(
                f"{tag} Insufficient balance of {step.source.symbol}. {reason}"
            )
            return TransactionOutcome(OutcomeStatus.SKIPPED_INSUFFICIENT_BALANCE, reason=reason)

        if cancel is not None and cancel.is_set():
            return TransactionOutcome(OutcomeStatus.CANCELLED)

        # Phase 2: approval
        approval = self._ensure_allowance(account, step, tag)
        if approval is not None:
            return approval

        if cancel is not None and cancel.is_set():
            return TransactionOutcome(OutcomeStatus.CANCELLED)

        # Phase 3: swap
        return self._swap(account, step, tag)

    def _ensure_allowance(self, account, step: SwapStep, tag: str) -> TransactionOutcome | None:
        """Returns None when the router may spend step.amount, else the failure."""
        try:
            allowance = self.ledger.get_allowance(
                step.source, account.address, self.router_address
            )
            if allowance >= step.amount:
                self.logger.info(f"{tag} Allowance is sufficient.")
                return None

            self.logger.info(f"{tag} Approving {step.source.symbol}...")
            receipt = self.ledger.approve(
                step.source, self.router_address, step.amount, account.signer
            )
        except Exception as e:
            self.logger.error(f"{tag} Approval failed: {e}")
            return TransactionOutcome(OutcomeStatus.APPROVAL_FAILED, reason=str(e))

        if not receipt.succeeded:
            self.logger.error(f"{tag} Approval failed. Tx: {receipt.tx_hash}")
            return TransactionOutcome(
                OutcomeStatus.APPROVAL_FAILED,
                reason="approval transaction reverted",
                tx_hash=receipt.tx_hash,
            )

        self.logger.info(f"{tag} Approval successful.")
        return None

    def _swap(self, account, step: SwapStep, tag: str) -> TransactionOutcome:
        params = SwapParams(
            token_in=step.source.address,
            token_out=step.destination.address,
            fee=self.cfg.fee_tier,
            recipient=account.address,
            deadline=int(self.clock()) + self.cfg.deadline_seconds,
            amount_in=step.amount,
            amount_out_minimum=self.cfg.amount_out_minimum,
            sqrt_price_limit_x96=0,
        )

        self.logger.info(
            f"{tag} Attempting swap: "
            f"{format_units(step.amount, step.source.decimals)} {step.source.symbol} "
            f"-> {step.destination.symbol}"
        )
        try:
            receipt = self.ledger.submit_swap(self.router_address, params, account.signer)
        except Exception as e:
            self.logger.error(f"{tag} Swap error: {e}")
            return TransactionOutcome(OutcomeStatus.SWAP_FAILED, reason=str(e))

        if not receipt.succeeded:
            self.logger.error(f"{tag} Swap transaction failed. Tx: {receipt.tx_hash}")
            return TransactionOutcome(
                OutcomeStatus.SWAP_FAILED,
                reason="swap transaction reverted",
                tx_hash=receipt.tx_hash,
            )

        self.logger.info(f"{tag} Swap successful! Tx: {receipt.tx_hash}")
        return TransactionOutcome(OutcomeStatus.SWAP_SUCCEEDED, tx_hash=receipt.tx_hash)
