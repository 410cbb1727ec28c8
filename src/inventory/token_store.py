"""
Small key/value stores with per-entry TTL.

The denylist and the holdings snapshot are injected with one of these instead
of reaching into global state.  ``ttl_seconds=None`` means the entry never
expires; an expired entry reads as missing and is dropped on access.
"""

from __future__ import annotations

import json
import logging
import threading
import time
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Protocol

logger = logging.getLogger(__name__)


class TokenStore(Protocol):
    def get(self, key: str, default: Any = None) -> Any: ...

    def set(
        self, key: str, value: Any, ttl_seconds: Optional[float] = None
    ) -> None: ...

    def delete(self, key: str) -> None: ...


class InMemoryTokenStore:
    """Session-scoped store; contents vanish with the process."""

    def __init__(self, time_fn: Callable[[], float] = time.time) -> None:
        self._time = time_fn
        self._entries: Dict[str, tuple[Any, Optional[float]]] = {}
        self._lock = threading.Lock()

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return default
            value, expires_at = entry
            if expires_at is not None and self._time() >= expires_at:
                del self._entries[key]
                return default
            return value

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        expires_at = None if ttl_seconds is None else self._time() + ttl_seconds
        with self._lock:
            self._entries[key] = (value, expires_at)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)


class JsonFileTokenStore(InMemoryTokenStore):
    """
    ``InMemoryTokenStore`` mirrored to a JSON document on every write.

    Values must be JSON-serialisable.  A missing or unreadable file starts
    the store empty.
    """

    def __init__(
        self, path: str | Path, time_fn: Callable[[], float] = time.time
    ) -> None:
        super().__init__(time_fn=time_fn)
        self._path = Path(path)
        self._load()

    def _load(self) -> None:
        if not self._path.exists():
            return
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable token store %s: %s", self._path, exc)
            return
        for key, entry in (raw or {}).items():
            if isinstance(entry, dict) and "value" in entry:
                self._entries[key] = (entry["value"], entry.get("expires_at"))

    def _flush(self) -> None:
        with self._lock:
            doc = {
                key: {"value": value, "expires_at": expires_at}
                for key, (value, expires_at) in self._entries.items()
            }
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps(doc, indent=2, sort_keys=True), encoding="utf-8")
        tmp.replace(self._path)

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        super().set(key, value, ttl_seconds)
        self._flush()

    def delete(self, key: str) -> None:
        super().delete(key)
        self._flush()
