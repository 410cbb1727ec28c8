"""
SweepOrchestrator: consolidate many small ERC-20 balances into one token.

Tokens are processed strictly one at a time, in request order:

  1. native asset / denylisted token -> skipped, no network call
  2. decimals read + display -> base units; zero -> skipped (dust)
  3. 0x quote; no liquidity -> denylist + prune holdings + skipped
  4. approve the allowance target when the allowance is short
  5. submit the swap (signing the permit first in permit2 mode)
  6. classify the receipt / error into success, skipped or failed

A fixed pause follows every token, whatever its outcome, to keep the quote
API and RPC endpoint under their rate limits.  One token's failure never
stops the batch.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Mapping, Optional, Sequence

from chain.allowance import AllowanceManager
from chain.erc20 import (
    ERC20_ABI,
    FULL_BPS,
    NATIVE_PLACEHOLDER,
    ZERO_ADDRESS,
    same_address,
    to_base_units,
)
from chain.submitter import SwapSubmitter, submitter_for
from chain.wallet import WalletSession
from config import get_env, get_env_float, get_env_int
from inventory.denylist import TokenDenylist
from inventory.holdings import HoldingsCache
from quotes.zeroex_client import Quote, SubmissionMode, ZeroExClient
from sweeper.classifier import (
    AMOUNT_TOO_SMALL,
    DENYLISTED,
    NATIVE_TOKEN,
    Outcome,
    classify_exception,
    classify_hard_error,
    classify_quote_error,
    classify_receipt,
)
from sweeper.types import BatchState, BatchStatus, ProcessedToken, TokenStatus

logger = logging.getLogger(__name__)

BASE_CHAIN_ID = 8453
REQUEST_DELAY_SECONDS = 1.0

# Sweep destinations offered on Base
TARGET_TOKENS = {
    "ETH": NATIVE_PLACEHOLDER,
    "USDC": "0x833589fcd6edb6e08f4c7c32d4f71b54bda02913",
    "PRO": "0xf65c3c30dd36b508e29a538b79b21e9b9e504e6c",
}

StatusCallback = Callable[[BatchStatus], None]
SleepFn = Callable[[float], Awaitable[None]]


@dataclass
class SweepConfig:
    chain_id: int = BASE_CHAIN_ID
    slippage_bps: int = 500
    request_delay_seconds: float = REQUEST_DELAY_SECONDS
    submission_mode: SubmissionMode = SubmissionMode.ALLOWANCE_HOLDER
    # Share of the converted amount actually sold; 10_000 sells all of it.
    amount_margin_bps: int = FULL_BPS
    receipt_timeout_seconds: float = 120.0
    native_token_addresses: tuple[str, ...] = (ZERO_ADDRESS, NATIVE_PLACEHOLDER)

    def __post_init__(self) -> None:
        if not 0 < self.amount_margin_bps <= FULL_BPS:
            raise ValueError(
                f"amount_margin_bps must be in (0, {FULL_BPS}], "
                f"got {self.amount_margin_bps}"
            )
        if self.request_delay_seconds < 0:
            raise ValueError("request_delay_seconds must be >= 0")

    @classmethod
    def from_env(cls) -> "SweepConfig":
        mode = get_env("SWEEP_SUBMISSION_MODE", SubmissionMode.ALLOWANCE_HOLDER.value)
        try:
            submission_mode = SubmissionMode(mode)
        except ValueError as exc:
            raise SystemExit(
                f"SWEEP_SUBMISSION_MODE must be one of "
                f"{[m.value for m in SubmissionMode]}, got {mode!r}"
            ) from exc
        return cls(
            chain_id=get_env_int("CHAIN_ID", BASE_CHAIN_ID),
            slippage_bps=get_env_int("SWEEP_SLIPPAGE_BPS", 500),
            request_delay_seconds=get_env_float(
                "SWEEP_REQUEST_DELAY", REQUEST_DELAY_SECONDS
            ),
            submission_mode=submission_mode,
            amount_margin_bps=get_env_int("SWEEP_AMOUNT_MARGIN_BPS", FULL_BPS),
            receipt_timeout_seconds=get_env_float("SWEEP_RECEIPT_TIMEOUT", 120.0),
        )

    def is_native(self, address: str) -> bool:
        return any(same_address(address, n) for n in self.native_token_addresses)


def resolve_target_token(value: str) -> str:
    """Accept a symbol from ``TARGET_TOKENS`` or a raw address."""
    return TARGET_TOKENS.get(value.upper(), value)


class SweepOrchestrator:
    """
    Drive one sweep at a time for a wallet session.

    The batch status is owned here; ``on_status`` receives a snapshot after
    every change and ``on_refresh`` is called once a batch has completed.
    """

    def __init__(
        self,
        quote_client: ZeroExClient,
        wallet: Optional[WalletSession],
        denylist: TokenDenylist,
        holdings: Optional[HoldingsCache] = None,
        config: Optional[SweepConfig] = None,
        on_status: Optional[StatusCallback] = None,
        on_refresh: Optional[Callable[[], None]] = None,
        sleep_fn: SleepFn = asyncio.sleep,
        submitter: Optional[SwapSubmitter] = None,
    ) -> None:
        self.config = config or SweepConfig()
        quote_mode = getattr(quote_client, "mode", self.config.submission_mode)
        if quote_mode != self.config.submission_mode:
            raise ValueError(
                f"quote client mode {quote_mode} does not match "
                f"submission mode {self.config.submission_mode}"
            )
        self._quotes = quote_client
        self._wallet = wallet
        self._denylist = denylist
        self._holdings = holdings
        self._on_status = on_status
        self._on_refresh = on_refresh
        self._sleep = sleep_fn
        self._allowance = AllowanceManager(wallet) if wallet is not None else None
        if submitter is None and wallet is not None:
            submitter = submitter_for(self.config.submission_mode, wallet)
        self._submitter = submitter
        self._batch = BatchStatus()

    @property
    def status(self) -> BatchStatus:
        return self._batch.snapshot()

    # ── Public API ────────────────────────────────────────────

    async def sweep(
        self,
        tokens: Sequence[str],
        target_token: str,
        amounts: Sequence[str],
        symbols: Optional[Mapping[str, str]] = None,
    ) -> BatchStatus:
        """
        Swap each ``tokens[i]`` (``amounts[i]`` display units) into
        ``target_token``.  Returns the final batch status; batch-level
        SUCCESS means every token reached a terminal state, not that every
        swap went through.
        """
        if self._wallet is None or not getattr(self._wallet, "address", None):
            return self._fail_setup("wallet not connected")
        if len(tokens) != len(amounts):
            return self._fail_setup(
                f"{len(tokens)} tokens but {len(amounts)} amounts supplied"
            )

        self._batch = BatchStatus(status=BatchState.CONFIRMING)
        self._publish()
        symbol_map = {k.lower(): v for k, v in (symbols or {}).items()}
        logger.info(
            "Sweep started: %d tokens -> %s (mode=%s)",
            len(tokens),
            target_token,
            self.config.submission_mode.value,
        )

        for token, amount in zip(tokens, amounts):
            started = time.monotonic()
            await self._process_token(
                token, target_token, str(amount), self._symbol_for(token, symbol_map)
            )
            logger.debug(
                "Token %s done in %.0f ms", token, (time.monotonic() - started) * 1000
            )
            await self._sleep(self.config.request_delay_seconds)

        self._batch.status = BatchState.SUCCESS
        self._publish()
        logger.info(
            "Sweep finished: success=%d skipped=%d failed=%d",
            self._batch.count(TokenStatus.SUCCESS),
            self._batch.count(TokenStatus.SKIPPED),
            self._batch.count(TokenStatus.FAILED),
        )
        if self._on_refresh is not None:
            self._on_refresh()
        return self._batch.snapshot()

    # ── Per-token pipeline ────────────────────────────────────

    async def _process_token(
        self, token: str, target_token: str, amount: str, symbol: Optional[str]
    ) -> None:
        if self.config.is_native(token):
            self._record(token, amount, symbol, NATIVE_TOKEN)
            return
        if self._is_denylisted(token):
            self._record(token, amount, symbol, DENYLISTED)
            return

        try:
            decimals = await self._wallet.read_contract(token, ERC20_ABI, "decimals")
            sell_amount = to_base_units(
                amount, int(decimals), self.config.amount_margin_bps
            )
        except Exception as exc:
            logger.warning("Could not size %s: %s", token, exc)
            self._record(token, amount, symbol, classify_hard_error(exc))
            return
        if sell_amount == 0:
            self._record(token, amount, symbol, AMOUNT_TOO_SMALL)
            return

        entry = self._record(token, amount, symbol)

        try:
            quote = await self._request_quote(token, target_token, sell_amount)
        except Exception as exc:
            outcome = classify_quote_error(exc)
            if outcome.denylist:
                self._exclude(token, prune_holdings=True)
            else:
                logger.warning("Quote failed for %s: %s", token, exc)
            self._finish(entry, outcome)
            return

        if quote.allowance_target:
            try:
                await self._allowance.ensure_allowance(
                    token, quote.allowance_target, sell_amount
                )
            except Exception as exc:
                logger.warning("Approval failed for %s: %s", token, exc)
                self._finish(entry, classify_hard_error(exc))
                return

        try:
            receipt = await self._submitter.submit(quote)
        except Exception as exc:
            logger.warning("Swap failed for %s: %s", token, exc)
            self._finish(entry, classify_exception(exc))
            return

        outcome = classify_receipt(receipt)
        if outcome.denylist:
            self._exclude(token, prune_holdings=False)
        self._finish(entry, outcome, tx_hash=receipt.tx_hash)

    async def _request_quote(
        self, token: str, target_token: str, sell_amount: int
    ) -> Quote:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None,
            functools.partial(
                self._quotes.quote,
                sell_token=token,
                buy_token=target_token,
                sell_amount=sell_amount,
                taker=self._wallet.address,
            ),
        )

    # ── Internal helpers ───────────────────────────────────────

    def _symbol_for(self, token: str, symbol_map: Mapping[str, str]) -> Optional[str]:
        symbol = symbol_map.get(token.lower())
        if symbol:
            return symbol
        for known_symbol, address in TARGET_TOKENS.items():
            if same_address(address, token):
                return known_symbol
        return None

    def _record(
        self,
        token: str,
        amount: str,
        symbol: Optional[str],
        outcome: Optional[Outcome] = None,
    ) -> ProcessedToken:
        """Append a record: terminal when ``outcome`` is given, else CONFIRMING."""
        entry = ProcessedToken(
            address=token,
            amount=amount,
            symbol=symbol,
            status=outcome.status if outcome else TokenStatus.CONFIRMING,
            reason=outcome.reason if outcome else None,
        )
        self._batch.processed_tokens.append(entry)
        if outcome is not None:
            self._log_outcome(entry)
        self._publish()
        return entry

    def _finish(
        self, entry: ProcessedToken, outcome: Outcome, tx_hash: Optional[str] = None
    ) -> None:
        entry.finish(outcome.status, outcome.reason, tx_hash=tx_hash)
        self._log_outcome(entry)
        self._publish()

    def _is_denylisted(self, token: str) -> bool:
        try:
            return self._denylist.is_blacklisted(token)
        except Exception as exc:
            logger.warning("Denylist lookup failed for %s: %s", token, exc)
            return False

    def _exclude(self, token: str, prune_holdings: bool) -> None:
        """Denylist ``token``; store errors are logged, never raised."""
        try:
            self._denylist.blacklist(token)
        except Exception as exc:
            logger.warning("Could not denylist %s: %s", token, exc)
        if not prune_holdings or self._holdings is None:
            return
        try:
            self._holdings.remove_significant_token(token)
        except Exception as exc:
            logger.warning("Could not prune %s from holdings: %s", token, exc)

    @staticmethod
    def _log_outcome(entry: ProcessedToken) -> None:
        label = entry.symbol or entry.address
        if entry.status == TokenStatus.FAILED:
            logger.warning("%s %s: %s", label, entry.status.value, entry.reason)
        elif entry.reason:
            logger.info("%s %s: %s", label, entry.status.value, entry.reason)
        else:
            logger.info("%s %s (tx=%s)", label, entry.status.value, entry.tx_hash)

    def _fail_setup(self, error: str) -> BatchStatus:
        logger.error("Sweep aborted before start: %s", error)
        self._batch = BatchStatus(status=BatchState.ERROR, error=error)
        self._publish()
        return self._batch.snapshot()

    def _publish(self) -> None:
        if self._on_status is not None:
            self._on_status(self._batch.snapshot())
