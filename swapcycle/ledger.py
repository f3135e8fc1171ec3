"""Ledger client — ERC-20 reads and router writes over web3.py."""

import time
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass

import requests
from web3 import Web3
from web3.exceptions import Web3Exception

from config.settings import SwapConfig


class LedgerError(Exception):
    """A ledger read or write failed (transport, RPC, revert or timeout)."""


class LedgerConnectionError(LedgerError):
    """The node could not be reached at startup."""


@dataclass(frozen=True)
class Receipt:
    tx_hash: str
    status: int

    @property
    def succeeded(self) -> bool:
        return self.status == 1


@dataclass(frozen=True)
class SwapParams:
    """exactInputSingle arguments, in ABI field order."""
    token_in: str
    token_out: str
    fee: int
    recipient: str
    deadline: int
    amount_in: int
    amount_out_minimum: int = 0
    sqrt_price_limit_x96: int = 0

    def as_tuple(self) -> tuple:
        return (
            self.token_in,
            self.token_out,
            self.fee,
            self.recipient,
            self.deadline,
            self.amount_in,
            self.amount_out_minimum,
            self.sqrt_price_limit_x96,
        )


class LedgerClient(ABC):
    """What the swap executor needs from the chain."""

    @abstractmethod
    def get_balance(self, asset, owner: str) -> int:
        ...

    @abstractmethod
    def get_allowance(self, asset, owner: str, spender: str) -> int:
        ...

    @abstractmethod
    def approve(self, asset, spender: str, amount: int, signer) -> Receipt:
        """Submit an approval for exactly `amount` and wait for its receipt."""
        ...

    @abstractmethod
    def submit_swap(self, router: str, params: SwapParams, signer) -> Receipt:
        """Submit a single-hop exact-input swap and wait for its receipt."""
        ...


# ── ABIs ────────────────────────────────────────────────────

ROUTER_ABI = [
    {
        "inputs": [
            {
                "components": [
                    {"internalType": "address", "name": "tokenIn", "type": "address"},
                    {"internalType": "address", "name": "tokenOut", "type": "address"},
                    {"internalType": "uint24", "name": "fee", "type": "uint24"},
                    {"internalType": "address", "name": "recipient", "type": "address"},
                    {"internalType": "uint256", "name": "deadline", "type": "uint256"},
                    {"internalType": "uint256", "name": "amountIn", "type": "uint256"},
                    {"internalType": "uint256", "name": "amountOutMinimum", "type": "uint256"},
                    {"internalType": "uint160", "name": "sqrtPriceLimitX96", "type": "uint160"},
                ],
                "internalType": "struct ISwapRouter.ExactInputSingleParams",
                "name": "params",
                "type": "tuple",
            }
        ],
        "name": "exactInputSingle",
        "outputs": [{"internalType": "uint256", "name": "amountOut", "type": "uint256"}],
        "stateMutability": "payable",
        "type": "function",
    }
]

ERC20_ABI = [
    {
        "constant": True,
        "inputs": [{"name": "_owner", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "balance", "type": "uint256"}],
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [
            {"name": "_owner", "type": "address"},
            {"name": "_spender", "type": "address"},
        ],
        "name": "allowance",
        "outputs": [{"name": "", "type": "uint256"}],
        "type": "function",
    },
    {
        "constant": False,
        "inputs": [
            {"name": "_spender", "type": "address"},
            {"name": "_value", "type": "uint256"},
        ],
        "name": "approve",
        "outputs": [{"name": "", "type": "bool"}],
        "type": "function",
    },
]

# Errors raised by web3 and its HTTP transport that mean "the ledger call failed"
_TRANSPORT_ERRORS = (Web3Exception, requests.RequestException, ValueError)


@contextmanager
def _ledger_call(action: str):
    try:
        yield
    except _TRANSPORT_ERRORS as e:
        raise LedgerError(f"{action} failed: {e}") from e


def connect(rpc_url: str, attempts: int = 3, logger=None) -> Web3:
    """Open an HTTP provider, retrying a few times before giving up."""
    w3 = Web3(Web3.HTTPProvider(rpc_url))
    for attempt in range(1, attempts + 1):
        if w3.is_connected():
            return w3
        if logger:
            logger.warning(f"[ledger] RPC connection attempt {attempt}/{attempts} failed")
        if attempt < attempts:
            time.sleep(2 * attempt)
    raise LedgerConnectionError(f"could not reach RPC endpoint {rpc_url}")


class Web3LedgerClient(LedgerClient):
    """LedgerClient backed by a web3.py connection and local signing."""

    def __init__(self, w3: Web3, cfg: SwapConfig):
        self.w3 = w3
        self.cfg = cfg
        self._chain_id: int | None = None

    @property
    def chain_id(self) -> int:
        if self._chain_id is None:
            with _ledger_call("chain id lookup"):
                self._chain_id = self.w3.eth.chain_id
        return self._chain_id

    def _token(self, asset):
        return self.w3.eth.contract(
            address=Web3.to_checksum_address(asset.address), abi=ERC20_ABI
        )

    def get_balance(self, asset, owner: str) -> int:
        with _ledger_call(f"{asset.symbol} balanceOf"):
            return self._token(asset).functions.balanceOf(owner).call()

    def get_allowance(self, asset, owner: str, spender: str) -> int:
        with _ledger_call(f"{asset.symbol} allowance"):
            return self._token(asset).functions.allowance(
                owner, Web3.to_checksum_address(spender)
            ).call()

    def approve(self, asset, spender: str, amount: int, signer) -> Receipt:
        fn = self._token(asset).functions.approve(
            Web3.to_checksum_address(spender), amount
        )
        return self._transact(fn, signer, self.cfg.approve_gas_limit, f"{asset.symbol} approve")

    def submit_swap(self, router: str, params: SwapParams, signer) -> Receipt:
        contract = self.w3.eth.contract(
            address=Web3.to_checksum_address(router), abi=ROUTER_ABI
        )
        fn = contract.functions.exactInputSingle(params.as_tuple())
        return self._transact(fn, signer, self.cfg.swap_gas_limit, "exactInputSingle")

    def _transact(self, fn, signer, gas: int | None, action: str) -> Receipt:
        """Build, sign, send and confirm one contract call."""
        with _ledger_call(action):
            tx_params = {
                "from": signer.address,
                "nonce": self.w3.eth.get_transaction_count(signer.address, "pending"),
                "chainId": self.chain_id,
            }
            if gas:
                tx_params["gas"] = gas
            tx = fn.build_transaction(tx_params)
            signed = signer.sign_transaction(tx)
            tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
            receipt = self.w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self.cfg.receipt_timeout_seconds
            )
        return Receipt(tx_hash=Web3.to_hex(tx_hash), status=int(receipt["status"]))
