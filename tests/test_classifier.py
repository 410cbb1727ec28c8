"""Tests for sweeper.classifier: every terminal signal maps to one outcome."""

import pytest

from chain.allowance import AllowanceError
from chain.wallet import TxReceipt
from quotes.zeroex_client import NoLiquidityError, QuoteRequestError
from sweeper.classifier import (
    REASON_LOW_LIQUIDITY,
    REASON_NO_LIQUIDITY,
    REASON_REVERTED,
    REASON_UNDERFLOW,
    classify_exception,
    classify_hard_error,
    classify_quote_error,
    classify_receipt,
)
from sweeper.types import TokenStatus


class TestQuoteErrors:
    def test_no_liquidity_is_skip_and_denylist(self):
        outcome = classify_quote_error(NoLiquidityError("no liquidity", 503))
        assert outcome.status == TokenStatus.SKIPPED
        assert outcome.reason == REASON_NO_LIQUIDITY
        assert outcome.denylist

    def test_other_quote_error_keeps_raw_text(self):
        outcome = classify_quote_error(QuoteRequestError('{"reason":"bad"}', 400))
        assert outcome.status == TokenStatus.FAILED
        assert outcome.reason == '{"reason":"bad"}'
        assert not outcome.denylist

    def test_transport_error_fails(self):
        outcome = classify_quote_error(ConnectionError("connection reset"))
        assert outcome.status == TokenStatus.FAILED
        assert outcome.reason == "connection reset"


class TestReceipts:
    def test_success(self):
        outcome = classify_receipt(TxReceipt("0x1", "success", logs=[]))
        assert outcome.status == TokenStatus.SUCCESS
        assert outcome.reason is None

    def test_revert_without_logs_is_skip_and_denylist(self):
        outcome = classify_receipt(TxReceipt("0x1", "reverted", logs=[]))
        assert outcome.status == TokenStatus.SKIPPED
        assert outcome.reason == REASON_LOW_LIQUIDITY
        assert outcome.denylist

    def test_revert_with_logs_fails(self):
        outcome = classify_receipt(TxReceipt("0x1", "reverted", logs=[{"a": 1}]))
        assert outcome.status == TokenStatus.FAILED
        assert outcome.reason == REASON_REVERTED
        assert not outcome.denylist

    def test_unknown_status_fails(self):
        outcome = classify_receipt(TxReceipt("0x1", "dropped", logs=[]))
        assert outcome.status == TokenStatus.FAILED
        assert outcome.reason == REASON_REVERTED


class TestExceptions:
    @pytest.mark.parametrize(
        "message",
        [
            "Arithmetic underflow or overflow",
            "execution reverted: arithmetic underflow",
        ],
    )
    def test_underflow_is_benign(self, message):
        outcome = classify_exception(RuntimeError(message))
        assert outcome.status == TokenStatus.SKIPPED
        assert outcome.reason == REASON_UNDERFLOW
        assert not outcome.denylist

    def test_unknown_error_keeps_message(self):
        outcome = classify_exception(RuntimeError("user rejected the request"))
        assert outcome.status == TokenStatus.FAILED
        assert outcome.reason == "user rejected the request"

    def test_empty_message_uses_class_name(self):
        outcome = classify_exception(TimeoutError())
        assert outcome.reason == "TimeoutError"

    def test_hard_errors_always_fail(self):
        outcome = classify_hard_error(AllowanceError("arithmetic underflow"))
        assert outcome.status == TokenStatus.FAILED
        assert outcome.reason == "arithmetic underflow"
