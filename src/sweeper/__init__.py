from .classifier import (
    Outcome,
    classify_exception,
    classify_hard_error,
    classify_quote_error,
    classify_receipt,
)
from .engine import TARGET_TOKENS, SweepConfig, SweepOrchestrator, resolve_target_token
from .report import format_sweep_report
from .types import (
    BatchState,
    BatchStatus,
    InvalidTransition,
    ProcessedToken,
    TokenStatus,
)

__all__ = [
    "SweepOrchestrator",
    "SweepConfig",
    "TARGET_TOKENS",
    "resolve_target_token",
    "BatchStatus",
    "BatchState",
    "ProcessedToken",
    "TokenStatus",
    "InvalidTransition",
    "Outcome",
    "classify_quote_error",
    "classify_receipt",
    "classify_exception",
    "classify_hard_error",
    "format_sweep_report",
]
