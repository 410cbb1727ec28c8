from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

import requests

from config import get_env, get_env_int

logger = logging.getLogger(__name__)

ZERO_X_BASE_URL = "https://api.0x.org"
HTTP_NO_LIQUIDITY = 503


class QuoteRequestError(RuntimeError):
    """Raised when the 0x API answers with a non-2xx status or an unusable body."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NoLiquidityError(QuoteRequestError):
    """0x has no route for the pair (HTTP 503 or ``liquidityAvailable: false``)."""


class SubmissionMode(str, Enum):
    """How a quoted swap is authorised on-chain."""

    ALLOWANCE_HOLDER = "allowance_holder"  # ERC-20 approve, submit tx as-is
    PERMIT2 = "permit2"  # sign EIP-712 permit, append signature to calldata

    @property
    def quote_path(self) -> str:
        if self == SubmissionMode.PERMIT2:
            return "/swap/permit2/quote"
        return "/swap/allowance-holder/quote"


@dataclass(frozen=True)
class SwapTransaction:
    """Prepared swap call returned by the aggregator."""

    to: str
    data: str
    value: int = 0
    gas: Optional[int] = None
    gas_price: Optional[int] = None


@dataclass(frozen=True)
class Quote:
    """
    Firm quote for selling ``sell_amount`` (base units) of ``token_address``.

    ``signature_payload`` is only set in permit2 mode and holds the EIP-712
    document (``domain``, ``types``, ``primaryType``, ``message``) to sign.
    """

    token_address: str
    buy_token: str
    sell_amount: int
    transaction: SwapTransaction
    allowance_target: Optional[str] = None
    signature_payload: Optional[dict] = None
    buy_amount: Optional[int] = None


class ZeroExClient:
    """
    0x Swap API v2 client.

    One instance serves one submission mode; the mode picks the endpoint
    (allowance-holder vs permit2) and how the response is interpreted.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        chain_id: int = 8453,
        mode: SubmissionMode = SubmissionMode.ALLOWANCE_HOLDER,
        base_url: str | None = None,
        slippage_bps: int = 500,
        fee_recipient: Optional[str] = None,
        fee_bps: Optional[int] = None,
        timeout_seconds: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._api_key = api_key or get_env("ZERO_X_API_KEY", required=True)
        self._chain_id = chain_id
        self._mode = mode
        self._base_url = (
            base_url or get_env("ZERO_X_BASE_URL", ZERO_X_BASE_URL) or ZERO_X_BASE_URL
        ).rstrip("/")
        self._slippage_bps = slippage_bps
        self._fee_recipient = fee_recipient
        self._fee_bps = fee_bps
        self._timeout = timeout_seconds
        self._session = session or requests.Session()

    @classmethod
    def from_env(
        cls, chain_id: int, mode: SubmissionMode, slippage_bps: int
    ) -> "ZeroExClient":
        return cls(
            chain_id=chain_id,
            mode=mode,
            slippage_bps=slippage_bps,
            fee_recipient=get_env("ZERO_X_FEE_RECIPIENT") or None,
            fee_bps=get_env_int("ZERO_X_FEE_BPS", 0) or None,
        )

    @property
    def mode(self) -> SubmissionMode:
        return self._mode

    def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self._base_url}{path}"
        headers = {"0x-api-key": self._api_key, "0x-version": "v2"}
        resp = self._session.get(
            url, params=params, headers=headers, timeout=self._timeout
        )
        if resp.status_code == HTTP_NO_LIQUIDITY:
            raise NoLiquidityError("no liquidity", status_code=resp.status_code)
        if not 200 <= resp.status_code < 300:
            raise QuoteRequestError(resp.text, status_code=resp.status_code)
        try:
            return resp.json()
        except ValueError as exc:
            raise QuoteRequestError(
                f"Invalid JSON from 0x: {resp.text!r}", status_code=resp.status_code
            ) from exc

    def quote(
        self,
        sell_token: str,
        buy_token: str,
        sell_amount: int,
        taker: str,
    ) -> Quote:
        """
        Request a firm quote for swapping ``sell_amount`` base units of
        ``sell_token`` into ``buy_token`` on behalf of ``taker``.

        Raises ``NoLiquidityError`` when 0x cannot route the pair and
        ``QuoteRequestError`` for any other unusable response.
        """
        params: Dict[str, Any] = {
            "chainId": self._chain_id,
            "sellToken": sell_token,
            "buyToken": buy_token,
            "sellAmount": str(sell_amount),
            "taker": taker,
            "slippageBps": self._slippage_bps,
        }
        if self._fee_recipient and self._fee_bps:
            params["swapFeeRecipient"] = self._fee_recipient
            params["swapFeeBps"] = self._fee_bps
            params["swapFeeToken"] = buy_token

        data = self._get(self._mode.quote_path, params)

        if data.get("liquidityAvailable") is False:
            raise NoLiquidityError("no liquidity")

        quote = self._parse_quote(data, sell_token, buy_token, sell_amount)
        logger.debug(
            "0x quote (%s): sell=%s amount=%d to=%s allowance_target=%s",
            self._mode.value,
            sell_token,
            sell_amount,
            quote.transaction.to,
            quote.allowance_target,
        )
        return quote

    def _parse_quote(
        self,
        data: Dict[str, Any],
        sell_token: str,
        buy_token: str,
        sell_amount: int,
    ) -> Quote:
        tx = data.get("transaction") or {}
        if not tx.get("to"):
            raise QuoteRequestError('Quote response missing "to" address')

        try:
            transaction = SwapTransaction(
                to=str(tx["to"]),
                data=str(tx.get("data") or "0x"),
                value=int(tx.get("value") or 0),
                gas=int(tx["gas"]) if tx.get("gas") else None,
                gas_price=int(tx["gasPrice"]) if tx.get("gasPrice") else None,
            )
            buy_amount = int(data["buyAmount"]) if data.get("buyAmount") else None
        except (KeyError, ValueError, TypeError) as exc:
            raise QuoteRequestError(f"Unexpected 0x quote schema: {tx}") from exc

        allowance_issue = (data.get("issues") or {}).get("allowance") or {}
        allowance_target = allowance_issue.get("spender")
        if not allowance_target and self._mode == SubmissionMode.ALLOWANCE_HOLDER:
            allowance_target = transaction.to

        signature_payload = None
        if self._mode == SubmissionMode.PERMIT2:
            signature_payload = (data.get("permit2") or {}).get("eip712")
            if not signature_payload:
                raise QuoteRequestError("Permit2 quote missing eip712 payload")

        return Quote(
            token_address=sell_token,
            buy_token=buy_token,
            sell_amount=sell_amount,
            transaction=transaction,
            allowance_target=allowance_target,
            signature_payload=signature_payload,
            buy_amount=buy_amount,
        )
