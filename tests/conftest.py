"""
conftest.py - Shared pytest fixtures for swapcycle tests

Provides:
- Three test assets (A, B, C) with valid lowercase addresses
- Deterministic local accounts
- The four-step A/B/C cycle used by the end-to-end scenarios
- A FakeLedger and executor/scheduler factories wired to it
"""

import logging

import pytest

from config.settings import SwapConfig
from swapcycle.accounts import Account
from swapcycle.cycle import Asset, SwapCycle, SwapStep
from swapcycle.executor import SwapExecutor
from swapcycle.pacing import DelayPolicy
from swapcycle.scheduler import Scheduler

from tests.fake_ledger import FakeLedger


ROUTER = "0x" + "9" * 40
FIXED_NOW = 1_700_000_000

KEY_ALICE = "0x" + "11" * 32
KEY_BOB = "0x" + "22" * 32


@pytest.fixture
def logger():
    return logging.getLogger("swapcycle.tests")


@pytest.fixture
def assets():
    return {
        "A": Asset(symbol="A", address="0x" + "a" * 40, decimals=18),
        "B": Asset(symbol="B", address="0x" + "b" * 40, decimals=6),
        "C": Asset(symbol="C", address="0x" + "c" * 40, decimals=8),
    }


@pytest.fixture
def alice():
    return Account.from_key(KEY_ALICE)


@pytest.fixture
def bob():
    return Account.from_key(KEY_BOB)


@pytest.fixture
def cycle(assets):
    """[A->B 1, B->A 2, C->B 3, B->C 4]"""
    a, b, c = assets["A"], assets["B"], assets["C"]
    return SwapCycle([
        SwapStep(a, b, 1),
        SwapStep(b, a, 2),
        SwapStep(c, b, 3),
        SwapStep(b, c, 4),
    ])


@pytest.fixture
def ledger():
    return FakeLedger()


@pytest.fixture
def swap_config():
    return SwapConfig()


@pytest.fixture
def make_executor(ledger, swap_config, logger):
    def factory(cfg=None):
        return SwapExecutor(
            ledger, ROUTER, cfg or swap_config, logger, clock=lambda: FIXED_NOW
        )
    return factory


@pytest.fixture
def make_scheduler(cycle, make_executor, logger):
    def factory(accounts, delay_policy=None, **kwargs):
        return Scheduler(
            accounts=accounts,
            cycle=cycle,
            executor=kwargs.pop("executor", None) or make_executor(),
            delay_policy=delay_policy or DelayPolicy.fixed(0),
            logger=logger,
            **kwargs,
        )
    return factory
