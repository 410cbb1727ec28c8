from __future__ import annotations

import logging

from chain.erc20 import ERC20_ABI, MAX_UINT256
from chain.wallet import WalletSession

logger = logging.getLogger(__name__)


class AllowanceError(RuntimeError):
    """Raised when an ERC-20 approve transaction does not succeed."""


class AllowanceManager:
    """Keep a spender's ERC-20 allowance at or above what a swap needs."""

    def __init__(self, wallet: WalletSession) -> None:
        self._wallet = wallet

    async def current_allowance(self, token: str, spender: str) -> int:
        raw = await self._wallet.read_contract(
            token, ERC20_ABI, "allowance", [self._wallet.address, spender]
        )
        return int(raw or 0)

    async def ensure_allowance(self, token: str, spender: str, min_amount: int) -> bool:
        """
        Approve ``spender`` for the maximum amount when the current allowance
        is below ``min_amount``.  Returns True if an approval was sent.
        """
        current = await self.current_allowance(token, spender)
        if current >= min_amount:
            return False

        tx_hash = await self._wallet.write_contract(
            token, ERC20_ABI, "approve", [spender, MAX_UINT256]
        )
        receipt = await self._wallet.wait_for_transaction_receipt(tx_hash)
        if not receipt.succeeded:
            raise AllowanceError("ERC-20 approve transaction reverted")
        logger.info("Approved %s for spender %s (tx=%s)", token, spender, tx_hash)
        return True
