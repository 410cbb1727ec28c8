"""
Swap submission strategies.

``AllowanceHolderSubmitter`` sends the quoted transaction unchanged;
``Permit2Submitter`` signs the quote's EIP-712 permit first and appends the
signature to the calldata.  A sweep uses exactly one of them.
"""

from __future__ import annotations

import logging

from chain.wallet import TxReceipt, WalletSession
from quotes.permit2 import append_signature, sign_permit2
from quotes.zeroex_client import Quote, SubmissionMode

logger = logging.getLogger(__name__)


class SwapSubmitter:
    mode: SubmissionMode

    def __init__(self, wallet: WalletSession) -> None:
        self._wallet = wallet

    async def prepare_calldata(self, quote: Quote) -> str:
        raise NotImplementedError

    async def submit(self, quote: Quote) -> TxReceipt:
        """Send the swap and wait for its receipt."""
        data = await self.prepare_calldata(quote)
        tx = quote.transaction
        tx_hash = await self._wallet.send_transaction(
            to=tx.to,
            data=data,
            value=tx.value,
            gas=tx.gas,
            gas_price=tx.gas_price,
        )
        logger.debug("Swap sent for %s (tx=%s)", quote.token_address, tx_hash)
        return await self._wallet.wait_for_transaction_receipt(tx_hash)


class AllowanceHolderSubmitter(SwapSubmitter):
    mode = SubmissionMode.ALLOWANCE_HOLDER

    async def prepare_calldata(self, quote: Quote) -> str:
        return quote.transaction.data


class Permit2Submitter(SwapSubmitter):
    mode = SubmissionMode.PERMIT2

    async def prepare_calldata(self, quote: Quote) -> str:
        if not quote.signature_payload:
            raise ValueError(f"permit2 quote for {quote.token_address} has no payload")
        signature = await sign_permit2(quote.signature_payload, self._wallet)
        return append_signature(quote.transaction.data, signature)


def submitter_for(mode: SubmissionMode, wallet: WalletSession) -> SwapSubmitter:
    if mode == SubmissionMode.PERMIT2:
        return Permit2Submitter(wallet)
    return AllowanceHolderSubmitter(wallet)
