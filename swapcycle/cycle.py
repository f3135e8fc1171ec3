"""Swap cycle table and per-account cycle pointers."""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, localcontext

from config.settings import AssetConfig


@dataclass(frozen=True)
class Asset:
    symbol: str
    address: str
    decimals: int

    @classmethod
    def from_config(cls, cfg: AssetConfig) -> "Asset":
        return cls(symbol=cfg.symbol, address=cfg.address, decimals=cfg.decimals)


@dataclass(frozen=True)
class SwapStep:
    source: Asset
    destination: Asset
    amount: int  # smallest units of source

    def __post_init__(self):
        if self.amount <= 0:
            raise ValueError(f"swap amount must be positive, got {self.amount}")

    def describe(self) -> str:
        return f"{self.source.symbol} -> {self.destination.symbol}"


def to_base_units(amount, decimals: int) -> int:
    """Convert a human amount ("0.0001") to integer base units.

    Exact decimal arithmetic; amounts finer than the asset's precision are
    rejected rather than rounded.
    """
    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        raise ValueError(f"not a decimal amount: {amount!r}") from None
    if not value.is_finite() or value < 0:
        raise ValueError(f"amount must be non-negative, got {amount}")
    with localcontext() as ctx:
        ctx.prec = len(value.as_tuple().digits) + abs(decimals) + 1
        scaled = value.scaleb(decimals)
        if scaled != scaled.to_integral_value():
            raise ValueError(f"{amount} has more than {decimals} decimal places")
    return int(scaled)


def format_units(value: int, decimals: int) -> str:
    """Render base units as a plain decimal string for log lines."""
    with localcontext() as ctx:
        ctx.prec = len(str(abs(value))) + abs(decimals) + 1
        text = format(Decimal(value).scaleb(-decimals), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"


class SwapCycle:
    """Immutable ordered swap sequence shared by every account."""

    def __init__(self, steps):
        self._steps = tuple(steps)
        if not self._steps:
            raise ValueError("a swap cycle needs at least one step")

    def __len__(self) -> int:
        return len(self._steps)

    def __iter__(self):
        return iter(self._steps)

    def step_at(self, index: int) -> SwapStep:
        return self._steps[index]


# (source, destination, amount in human units)
DEFAULT_POLICY = [
    ("USDT", "ETH", "1"),
    ("ETH", "USDT", "0.0001"),
    ("BTC", "ETH", "0.00001"),
    ("ETH", "BTC", "0.001"),
]


def build_swap_cycle(assets: dict[str, Asset], policy=None) -> SwapCycle:
    """Build the fixed swap cycle from the asset table."""
    steps = []
    for source, destination, amount in policy or DEFAULT_POLICY:
        src = assets[source]
        steps.append(SwapStep(
            source=src,
            destination=assets[destination],
            amount=to_base_units(amount, src.decimals),
        ))
    return SwapCycle(steps)


class CycleTracker:
    """Per-account pointers into a SwapCycle.

    Every account starts at step 0. Only the scheduler advances pointers, and
    advancing one account never touches another.
    """

    def __init__(self, cycle: SwapCycle, accounts):
        self.cycle = cycle
        self._index: dict[str, int] = {account.address: 0 for account in accounts}

    def index_of(self, account) -> int:
        return self._index[account.address]

    def current_step(self, account) -> SwapStep:
        return self.cycle.step_at(self._index[account.address])

    def advance(self, account) -> int:
        new_index = (self._index[account.address] + 1) % len(self.cycle)
        self._index[account.address] = new_index
        return new_index
