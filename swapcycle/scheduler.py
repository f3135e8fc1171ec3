"""Scheduler loop: walks every account through the swap cycle, one at a time."""

import random
import threading

from swapcycle.cycle import CycleTracker, SwapCycle
from swapcycle.executor import SwapExecutor, TransactionOutcome
from swapcycle.logger import countdown
from swapcycle.pacing import DelayPolicy


class Scheduler:
    """Sequential driver over the account pool.

    Accounts are processed strictly in configured order. After each attempt
    the account's cycle pointer advances, whatever the outcome, and the loop
    pauses before the next account. The cycle pointers live here and nowhere
    else.
    """

    def __init__(self, accounts, cycle: SwapCycle, executor: SwapExecutor,
                 delay_policy: DelayPolicy, logger, rng: random.Random | None = None,
                 stop_event: threading.Event | None = None, wait=None):
        self.accounts = list(accounts)
        self.tracker = CycleTracker(cycle, self.accounts)
        self.executor = executor
        self.delay_policy = delay_policy
        self.logger = logger
        self.rng = rng or random.Random()
        self.stop_event = stop_event or threading.Event()
        self._wait = wait or self.stop_event.wait
        self.passes_completed = 0

    def stop(self):
        self.stop_event.set()

    def run(self, max_passes: int | None = None) -> int:
        """Run passes until stopped (or max_passes reached). Returns passes run.

        Errors raised outside the executor are not caught here.
        """
        while not self.stop_event.is_set():
            if max_passes is not None and self.passes_completed >= max_passes:
                break
            self.logger.info(f"{'='*60}")
            self.logger.info(
                f"Cycle pass #{self.passes_completed + 1} — {len(self.accounts)} wallet(s)"
            )
            self.run_pass()
            self.passes_completed += 1
        return self.passes_completed

    def run_pass(self) -> list[TransactionOutcome]:
        outcomes = []
        for account in self.accounts:
            if self.stop_event.is_set():
                break
            step = self.tracker.current_step(account)
            self.logger.info(f"--- Wallet: {account.label} | Task: {step.describe()} ---")

            outcome = self.executor.execute(account, step, cancel=self.stop_event)
            outcomes.append(outcome)

            # Advance regardless of outcome
            self.tracker.advance(account)
            self._pause()
        return outcomes

    def _pause(self):
        if self.stop_event.is_set():
            return
        delay = self.delay_policy.sample(self.rng)
        self.logger.info(f"Waiting for {delay:.0f} seconds...")
        if delay <= 0:
            return
        with countdown(delay):
            self._wait(delay)
