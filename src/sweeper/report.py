"""
Plain-text report of a sweep batch: one line per token plus totals.

Used by the CLI after a sweep and safe to call on an in-progress snapshot.
"""

from __future__ import annotations

from sweeper.types import BatchState, BatchStatus, ProcessedToken, TokenStatus

# Keep reports short enough for chat/webhook messages
REPORT_MAX_LEN = 4000

_STATUS_MARK = {
    TokenStatus.SUCCESS: "OK",
    TokenStatus.SKIPPED: "SKIP",
    TokenStatus.FAILED: "FAIL",
    TokenStatus.CONFIRMING: "...",
}


def _short(value: str, keep: int = 10) -> str:
    if len(value) <= keep + 4:
        return value
    return f"{value[:keep]}...{value[-4:]}"


def format_token_line(token: ProcessedToken) -> str:
    label = token.symbol or _short(token.address)
    parts = [f"  [{_STATUS_MARK[token.status]}] {label}  amount={token.amount}"]
    if token.reason:
        parts.append(f"reason={token.reason}")
    if token.tx_hash:
        parts.append(f"tx={_short(token.tx_hash, 18)}")
    return " | ".join(parts)


def format_sweep_report(batch: BatchStatus) -> str:
    lines = ["━━ SWEEP REPORT ━━", f"Batch: {batch.status.value}"]
    if batch.status == BatchState.ERROR:
        lines.append(f"Error: {batch.error}")
    lines.append("")
    for token in batch.processed_tokens:
        lines.append(format_token_line(token))
    if batch.processed_tokens:
        lines.append("")
    lines.append(
        "Totals: "
        f"success={batch.count(TokenStatus.SUCCESS)}  "
        f"skipped={batch.count(TokenStatus.SKIPPED)}  "
        f"failed={batch.count(TokenStatus.FAILED)}"
    )
    pending = batch.count(TokenStatus.CONFIRMING)
    if pending:
        lines.append(f"Pending: {pending}")
    lines.append("━━━━━━━━━━━━━━━━━━")
    text = "\n".join(lines)
    if len(text) > REPORT_MAX_LEN:
        text = text[: REPORT_MAX_LEN - 3] + "..."
    return text
