"""In-process cache backend."""

from __future__ import annotations

import threading
import time
from typing import TYPE_CHECKING, Any

from trellis.framework.caching.base import Cache

if TYPE_CHECKING:
    from trellis.core.context import TrellisContext


class MemoryCache(Cache):
    """Dict-backed cache with per-key expiry. Expired keys are dropped lazily on access."""

    def __init__(self, *, context: TrellisContext | None = None) -> None:
        super().__init__(context=context)
        self._store: dict[str, tuple[Any, float | None]] = {}
        self._lock = threading.Lock()

    def _live(self, key: str) -> bool:
        entry = self._store.get(key)
        if entry is None:
            return False
        expires_at = entry[1]
        if expires_at is not None and time.time() > expires_at:
            del self._store[key]
            return False
        return True

    def get_value(self, key: str) -> Any:
        with self._lock:
            return self._store[key][0] if self._live(key) else None

    def set_value(self, key: str, value: Any, expire: int) -> bool:
        expires_at = time.time() + expire if expire > 0 else None
        with self._lock:
            self._store[key] = (value, expires_at)
        return True

    def add_value(self, key: str, value: Any, expire: int) -> bool:
        with self._lock:
            if self._live(key):
                return False
            self._store[key] = (value, time.time() + expire if expire > 0 else None)
        return True

    def delete_value(self, key: str) -> bool:
        with self._lock:
            return self._store.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def size(self) -> int:
        return len(self._store)


__all__ = ["MemoryCache"]
