from .denylist import TokenDenylist
from .holdings import HoldingsCache, TokenHolding
from .token_store import InMemoryTokenStore, JsonFileTokenStore, TokenStore

__all__ = [
    "TokenDenylist",
    "HoldingsCache",
    "TokenHolding",
    "TokenStore",
    "InMemoryTokenStore",
    "JsonFileTokenStore",
]
