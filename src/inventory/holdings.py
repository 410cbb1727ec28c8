# inventory/holdings.py

import logging
from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Optional

from inventory.token_store import InMemoryTokenStore, TokenStore

logger = logging.getLogger(__name__)

HOLDINGS_KEY = "cachedPortfolioData"
DEFAULT_HOLDINGS_TTL = 300.0


@dataclass
class TokenHolding:
    contract_address: str
    symbol: str
    balance: str  # display units
    decimals: int
    name: str = ""

    @property
    def amount(self) -> Decimal:
        return Decimal(self.balance)


class HoldingsCache:
    """
    Last known "significant holdings" of the wallet, i.e. the tokens offered
    for sweeping.  Written by the balance fetcher, pruned by the sweep engine
    when a token turns out to have no liquidity.
    """

    def __init__(
        self,
        store: Optional[TokenStore] = None,
        ttl_seconds: float = DEFAULT_HOLDINGS_TTL,
    ):
        self._store = store if store is not None else InMemoryTokenStore()
        self._ttl = ttl_seconds

    def save(self, holdings: list[TokenHolding]) -> None:
        """Replace the snapshot; it expires after the configured TTL."""
        self._store.set(
            HOLDINGS_KEY,
            {"significantTokens": [asdict(h) for h in holdings]},
            ttl_seconds=self._ttl,
        )

    def significant_tokens(self) -> list[TokenHolding]:
        """Cached holdings; entries that do not fit ``TokenHolding`` are dropped."""
        cached = self._store.get(HOLDINGS_KEY) or {}
        holdings = []
        for entry in cached.get("significantTokens", []):
            try:
                holdings.append(TokenHolding(**entry))
            except TypeError as exc:
                logger.warning("Ignoring malformed holdings entry %r: %s", entry, exc)
        return holdings

    def remove_significant_token(self, contract_address: str) -> bool:
        """
        Drop one token from the snapshot (re-saved with a fresh TTL).
        Returns True if it was present.
        """
        holdings = self.significant_tokens()
        kept = [
            h
            for h in holdings
            if h.contract_address.lower() != contract_address.lower()
        ]
        if len(kept) == len(holdings):
            return False
        self.save(kept)
        return True
