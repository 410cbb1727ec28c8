"""
Wallet session used by the sweep engine.

``WalletSession`` is the contract the engine depends on; ``Web3WalletSession``
implements it with web3.py and a local eth-account key.  Every blocking RPC
call is pushed to the default executor so the event loop stays responsive.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, Sequence

from eth_account import Account
from eth_utils import to_hex
from web3 import Web3

from config import get_env

logger = logging.getLogger(__name__)

RECEIPT_SUCCESS = "success"
RECEIPT_REVERTED = "reverted"


@dataclass(frozen=True)
class TxReceipt:
    tx_hash: str
    status: str  # "success" | "reverted"
    logs: list = field(default_factory=list)
    gas_used: int = 0

    @property
    def succeeded(self) -> bool:
        return self.status == RECEIPT_SUCCESS


class WalletSession(Protocol):
    """Signing-capable wallet connection consumed by the sweep engine."""

    address: str

    async def read_contract(
        self, address: str, abi: list, function_name: str, args: Sequence[Any] = ()
    ) -> Any: ...

    async def write_contract(
        self, address: str, abi: list, function_name: str, args: Sequence[Any] = ()
    ) -> str: ...

    async def send_transaction(
        self,
        to: str,
        data: str,
        value: int = 0,
        gas: Optional[int] = None,
        gas_price: Optional[int] = None,
    ) -> str: ...

    async def sign_typed_data(
        self, domain: dict, types: dict, primary_type: str, message: dict
    ) -> str: ...

    async def wait_for_transaction_receipt(self, tx_hash: str) -> TxReceipt: ...


class Web3WalletSession:
    """web3.py + local private key implementation of ``WalletSession``."""

    def __init__(
        self,
        w3: Web3,
        private_key: str,
        chain_id: int,
        receipt_timeout: float = 120.0,
    ) -> None:
        self._w3 = w3
        self._account = Account.from_key(private_key)
        self._chain_id = chain_id
        self._receipt_timeout = receipt_timeout
        self.address = self._account.address

    @classmethod
    def from_env(cls, chain_id: int, receipt_timeout: float = 120.0):
        rpc_url = get_env("RPC_URL", required=True)
        w3 = Web3(Web3.HTTPProvider(rpc_url))
        if not w3.is_connected():
            raise SystemExit(f"Failed to connect to {rpc_url}")
        return cls(
            w3,
            get_env("WALLET_PRIVATE_KEY", required=True),
            chain_id=chain_id,
            receipt_timeout=receipt_timeout,
        )

    async def _call(self, fn, *args, **kwargs):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(fn, *args, **kwargs))

    def _contract_fn(self, address: str, abi: list, function_name: str, args):
        contract = self._w3.eth.contract(
            address=Web3.to_checksum_address(address), abi=abi
        )
        return getattr(contract.functions, function_name)(*args)

    def _sign_and_send(self, tx: dict) -> str:
        signed = self._account.sign_transaction(tx)
        tx_hash = self._w3.eth.send_raw_transaction(signed.raw_transaction)
        return to_hex(tx_hash)

    # ── reads ──────────────────────────────────────────────────

    async def read_contract(
        self, address: str, abi: list, function_name: str, args: Sequence[Any] = ()
    ) -> Any:
        fn = self._contract_fn(address, abi, function_name, args)
        return await self._call(fn.call)

    # ── writes ─────────────────────────────────────────────────

    def _build_contract_tx(
        self, address: str, abi: list, function_name: str, args: Sequence[Any]
    ) -> dict:
        fn = self._contract_fn(address, abi, function_name, args)
        return fn.build_transaction(
            {
                "from": self.address,
                "nonce": self._w3.eth.get_transaction_count(self.address, "pending"),
                "chainId": self._chain_id,
            }
        )

    async def write_contract(
        self, address: str, abi: list, function_name: str, args: Sequence[Any] = ()
    ) -> str:
        tx = await self._call(
            self._build_contract_tx, address, abi, function_name, list(args)
        )
        tx_hash = await self._call(self._sign_and_send, tx)
        logger.debug("%s(%s) sent to %s tx=%s", function_name, args, address, tx_hash)
        return tx_hash

    def _build_tx(
        self,
        to: str,
        data: str,
        value: int,
        gas: Optional[int],
        gas_price: Optional[int],
    ) -> dict:
        tx = {
            "from": self.address,
            "to": Web3.to_checksum_address(to),
            "data": data,
            "value": int(value),
            "nonce": self._w3.eth.get_transaction_count(self.address, "pending"),
            "chainId": self._chain_id,
        }
        tx["gas"] = int(gas) if gas else self._w3.eth.estimate_gas(tx)
        tx["gasPrice"] = int(gas_price) if gas_price else self._w3.eth.gas_price
        return tx

    async def send_transaction(
        self,
        to: str,
        data: str,
        value: int = 0,
        gas: Optional[int] = None,
        gas_price: Optional[int] = None,
    ) -> str:
        tx = await self._call(self._build_tx, to, data, value, gas, gas_price)
        return await self._call(self._sign_and_send, tx)

    # ── signatures ─────────────────────────────────────────────

    async def sign_typed_data(
        self, domain: dict, types: dict, primary_type: str, message: dict
    ) -> str:
        # eth-account rejects a primaryType that is not the root of ``types``
        signed = self._account.sign_typed_data(
            full_message={
                "types": types,
                "domain": domain,
                "primaryType": primary_type,
                "message": message,
            }
        )
        logger.debug("Signed %s typed data for %s", primary_type, self.address)
        return to_hex(signed.signature)

    # ── receipts ───────────────────────────────────────────────

    async def wait_for_transaction_receipt(self, tx_hash: str) -> TxReceipt:
        receipt = await self._call(
            self._w3.eth.wait_for_transaction_receipt,
            tx_hash,
            timeout=self._receipt_timeout,
        )
        return TxReceipt(
            tx_hash=tx_hash,
            status=RECEIPT_SUCCESS if receipt["status"] == 1 else RECEIPT_REVERTED,
            logs=list(receipt.get("logs") or []),
            gas_used=int(receipt.get("gasUsed", 0)),
        )
