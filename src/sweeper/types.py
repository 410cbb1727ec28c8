"""
Batch and per-token status records produced by a sweep.

A ``ProcessedToken`` is created either directly in a terminal state (filtered
before quoting) or in ``CONFIRMING``; from ``CONFIRMING`` it moves exactly once
to a terminal state.  ``BatchStatus`` is owned by the orchestrator while a
sweep runs; observers only ever see ``snapshot()`` copies.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional


class InvalidTransition(RuntimeError):
    """Raised when a token record is moved out of a terminal state."""


class TokenStatus(str, Enum):
    CONFIRMING = "confirming"
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self != TokenStatus.CONFIRMING


class BatchState(str, Enum):
    IDLE = "idle"
    CONFIRMING = "confirming"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class ProcessedToken:
    """Outcome record for one requested token; ``amount`` is in display units."""

    address: str
    amount: str
    status: TokenStatus
    symbol: Optional[str] = None
    reason: Optional[str] = None
    tx_hash: Optional[str] = None
    updated_at: float = field(default_factory=time.time)

    def finish(
        self,
        status: TokenStatus,
        reason: Optional[str] = None,
        tx_hash: Optional[str] = None,
    ) -> None:
        if self.status.is_terminal:
            raise InvalidTransition(
                f"{self.address}: already {self.status.value}, cannot become {status.value}"
            )
        if not status.is_terminal:
            raise InvalidTransition(
                f"{self.address}: {status.value} is not a terminal status"
            )
        self.status = status
        self.reason = reason
        if tx_hash is not None:
            self.tx_hash = tx_hash
        self.updated_at = time.time()

    def to_dict(self) -> dict:
        d = {
            "address": self.address,
            "symbol": self.symbol,
            "amount": self.amount,
            "status": self.status.value,
        }
        if self.reason is not None:
            d["reason"] = self.reason
        if self.tx_hash is not None:
            d["tx_hash"] = self.tx_hash
        return d


@dataclass
class BatchStatus:
    status: BatchState = BatchState.IDLE
    processed_tokens: list[ProcessedToken] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def is_finished(self) -> bool:
        return self.status in (BatchState.SUCCESS, BatchState.ERROR)

    def snapshot(self) -> "BatchStatus":
        """Copy safe to hand to observers; later updates do not leak into it."""
        return BatchStatus(
            status=self.status,
            processed_tokens=[replace(t) for t in self.processed_tokens],
            error=self.error,
        )

    def count(self, status: TokenStatus) -> int:
        return sum(1 for t in self.processed_tokens if t.status == status)

    def to_dict(self) -> dict:
        d = {
            "status": self.status.value,
            "processed_tokens": [t.to_dict() for t in self.processed_tokens],
        }
        if self.error is not None:
            d["error"] = self.error
        return d
