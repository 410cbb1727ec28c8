from __future__ import annotations

import logging
from typing import Optional

from inventory.token_store import InMemoryTokenStore, TokenStore

logger = logging.getLogger(__name__)

DENYLIST_KEY = "blacklistedTokens"


class TokenDenylist:
    """
    Tokens the aggregator cannot route, excluded from later sweeps.

    Append-only: entries never expire and there is no removal.  Addresses
    are compared case-insensitively.
    """

    def __init__(self, store: Optional[TokenStore] = None) -> None:
        self._store = store if store is not None else InMemoryTokenStore()

    def _entries(self) -> list[str]:
        return list(self._store.get(DENYLIST_KEY) or [])

    def is_blacklisted(self, address: str) -> bool:
        return address.lower() in self._entries()

    def blacklist(self, address: str) -> None:
        entries = self._entries()
        key = address.lower()
        if key in entries:
            return
        entries.append(key)
        self._store.set(DENYLIST_KEY, entries)
        logger.info("Denylisted token %s", address)

    def __contains__(self, address: str) -> bool:
        return self.is_blacklisted(address)

    def __len__(self) -> int:
        return len(self._entries())
