from .cycle import Asset, CycleTracker, SwapCycle, SwapStep, build_swap_cycle
from .executor import OutcomeStatus, SwapExecutor, TransactionOutcome
from .ledger import LedgerClient, LedgerError, Receipt, SwapParams, Web3LedgerClient
from .pacing import DelayPolicy
from .scheduler import Scheduler

__all__ = [
    "Asset",
    "CycleTracker",
    "SwapCycle",
    "SwapStep",
    "build_swap_cycle",
    "OutcomeStatus",
    "SwapExecutor",
    "TransactionOutcome",
    "LedgerClient",
    "LedgerError",
    "Receipt",
    "SwapParams",
    "Web3LedgerClient",
    "DelayPolicy",
    "Scheduler",
]
