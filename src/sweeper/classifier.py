"""
Outcome classification for one token's sweep attempt.

Pure functions: each terminal signal (quote error, receipt, exception) maps to
exactly one ``Outcome``.  ``denylist`` marks outcomes that should also exclude
the token from future sweeps.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from chain.wallet import RECEIPT_REVERTED, TxReceipt
from quotes.zeroex_client import NoLiquidityError
from sweeper.types import TokenStatus

REASON_NATIVE = "native token"
REASON_NO_LIQUIDITY = "no liquidity"
REASON_AMOUNT_TOO_SMALL = "amount too small"
REASON_LOW_LIQUIDITY = "low liquidity or token not supported"
REASON_REVERTED = "transaction reverted"
REASON_UNDERFLOW = "arithmetic underflow"

_BENIGN_ERROR_PATTERNS = {
    "arithmetic underflow": REASON_UNDERFLOW,
}


@dataclass(frozen=True)
class Outcome:
    status: TokenStatus
    reason: Optional[str] = None
    denylist: bool = False


SUCCESS = Outcome(TokenStatus.SUCCESS)
NATIVE_TOKEN = Outcome(TokenStatus.SKIPPED, REASON_NATIVE)
DENYLISTED = Outcome(TokenStatus.SKIPPED, REASON_NO_LIQUIDITY)
AMOUNT_TOO_SMALL = Outcome(TokenStatus.SKIPPED, REASON_AMOUNT_TOO_SMALL)
NO_LIQUIDITY = Outcome(TokenStatus.SKIPPED, REASON_NO_LIQUIDITY, denylist=True)


def _message(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__


def classify_quote_error(exc: BaseException) -> Outcome:
    """A failed quote request: no-liquidity is a skip, everything else fails."""
    if isinstance(exc, NoLiquidityError):
        return NO_LIQUIDITY
    return Outcome(TokenStatus.FAILED, _message(exc))


def classify_receipt(receipt: TxReceipt) -> Outcome:
    if receipt.succeeded:
        return SUCCESS
    # A revert that emitted nothing never touched a pool: 0x cannot trade it.
    if receipt.status == RECEIPT_REVERTED and not receipt.logs:
        return Outcome(TokenStatus.SKIPPED, REASON_LOW_LIQUIDITY, denylist=True)
    return Outcome(TokenStatus.FAILED, REASON_REVERTED)


def classify_exception(exc: BaseException) -> Outcome:
    """An error raised while signing or submitting the swap."""
    msg = _message(exc)
    lowered = msg.lower()
    for pattern, reason in _BENIGN_ERROR_PATTERNS.items():
        if pattern in lowered:
            return Outcome(TokenStatus.SKIPPED, reason)
    return Outcome(TokenStatus.FAILED, msg)


def classify_hard_error(exc: BaseException) -> Outcome:
    """Errors outside the swap itself (sizing, approval) always fail the token."""
    return Outcome(TokenStatus.FAILED, _message(exc))
