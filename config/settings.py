import math
import os
from dataclasses import dataclass, field
from dotenv import load_dotenv
from web3 import Web3

load_dotenv()


class ConfigError(ValueError):
    """Raised when the environment does not describe a runnable agent."""


def _require(name: str) -> str:
    value = os.getenv(name, "").strip()
    if not value:
        raise ConfigError(f"{name} is not set")
    return value


def _int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None


def _float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None
    if not math.isfinite(value):
        raise ConfigError(f"{name} must be a finite number, got {raw!r}")
    return value


def _address(name: str) -> str:
    raw = _require(name)
    if not Web3.is_address(raw):
        raise ConfigError(f"{name} is not a valid address: {raw!r}")
    return Web3.to_checksum_address(raw)


@dataclass(frozen=True)
class AssetConfig:
    symbol: str
    address: str
    decimals: int = 18

    @classmethod
    def from_env(cls, symbol: str) -> "AssetConfig":
        decimals = _int(f"{symbol}_DECIMALS", 18)
        if decimals < 0:
            raise ConfigError(f"{symbol}_DECIMALS must be >= 0")
        return cls(
            symbol=symbol,
            address=_address(f"{symbol}_ADDRESS"),
            decimals=decimals,
        )


@dataclass(frozen=True)
class DelayConfig:
    min_seconds: float = 30.0
    max_seconds: float = 30.0

    @classmethod
    def from_env(cls) -> "DelayConfig":
        cfg = cls(
            min_seconds=_float("DELAY_MIN_SECONDS", 30.0),
            max_seconds=_float("DELAY_MAX_SECONDS", 30.0),
        )
        if cfg.min_seconds < 0 or cfg.max_seconds < cfg.min_seconds:
            raise ConfigError(
                f"invalid delay range [{cfg.min_seconds}, {cfg.max_seconds}]"
            )
        return cfg


@dataclass(frozen=True)
class SwapConfig:
    fee_tier: int = 3000
    deadline_seconds: int = 120
    amount_out_minimum: int = 0  # no slippage protection unless set
    swap_gas_limit: int = 250_000
    approve_gas_limit: int | None = None  # None = let the node estimate
    receipt_timeout_seconds: float = 120.0

    @classmethod
    def from_env(cls) -> "SwapConfig":
        approve_gas = os.getenv("APPROVE_GAS_LIMIT", "").strip()
        cfg = cls(
            fee_tier=_int("FEE_TIER", 3000),
            deadline_seconds=_int("SWAP_DEADLINE_SECONDS", 120),
            amount_out_minimum=_int("AMOUNT_OUT_MINIMUM", 0),
            swap_gas_limit=_int("SWAP_GAS_LIMIT", 250_000),
            approve_gas_limit=_int("APPROVE_GAS_LIMIT", 0) if approve_gas else None,
            receipt_timeout_seconds=_float("RECEIPT_TIMEOUT_SECONDS", 120.0),
        )
        if cfg.amount_out_minimum < 0:
            raise ConfigError("AMOUNT_OUT_MINIMUM must be >= 0")
        if not 0 <= cfg.fee_tier < 2**24:
            raise ConfigError(f"FEE_TIER must fit in uint24, got {cfg.fee_tier}")
        if cfg.deadline_seconds <= 0:
            raise ConfigError("SWAP_DEADLINE_SECONDS must be > 0")
        if cfg.swap_gas_limit <= 0:
            raise ConfigError("SWAP_GAS_LIMIT must be > 0")
        if cfg.approve_gas_limit is not None and cfg.approve_gas_limit <= 0:
            raise ConfigError("APPROVE_GAS_LIMIT must be > 0")
        if cfg.receipt_timeout_seconds <= 0:
            raise ConfigError("RECEIPT_TIMEOUT_SECONDS must be > 0")
        return cfg


# Assets the fixed swap cycle trades between
CYCLE_ASSETS = ["USDT", "ETH", "BTC"]


@dataclass(frozen=True)
class AgentConfig:
    rpc_url: str
    private_keys: tuple[str, ...]
    router_address: str
    assets: dict[str, AssetConfig]
    delay: DelayConfig = field(default_factory=DelayConfig)
    swap: SwapConfig = field(default_factory=SwapConfig)
    log_dir: str = "data"

    @classmethod
    def from_env(cls) -> "AgentConfig":
        keys = tuple(k.strip() for k in _require("PRIVATE_KEY").split(",") if k.strip())
        if not keys:
            raise ConfigError("PRIVATE_KEY holds no keys")
        return cls(
            rpc_url=_require("RPC_URL"),
            private_keys=keys,
            router_address=_address("ROUTER_ADDRESS"),
            assets={symbol: AssetConfig.from_env(symbol) for symbol in CYCLE_ASSETS},
            delay=DelayConfig.from_env(),
            swap=SwapConfig.from_env(),
            log_dir=os.getenv("LOG_DIR", "data"),
        )
