"""memcached cache backend (pymemcache)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from trellis.core.logging import get_logger
from trellis.framework.caching.base import Cache

if TYPE_CHECKING:
    from pymemcache.client.base import Client

    from trellis.core.context import TrellisContext

logger = get_logger(__name__)


class MemCache(Cache):
    """
    Cache stored in a memcached server.

    Configuration keys: ``host`` (default ``127.0.0.1``), ``port``
    (default 11211).  The client connects on first use.
    """

    def __init__(self, *, context: TrellisContext | None = None) -> None:
        super().__init__(context=context)
        self.host = "127.0.0.1"
        self.port = 11211
        self._client: Client | None = None

    def init(self) -> None:
        super().init()
        self.get_mem_cache()

    def get_mem_cache(self) -> Client:
        """The pymemcache client, created on first call."""
        if self._client is None:
            from pymemcache.client.base import Client

            self._client = Client((self.host, int(self.port)))
            logger.debug("memcache_client_created", host=self.host, port=self.port)
        return self._client

    def get_value(self, key: str) -> Any:
        return self.get_mem_cache().get(key)

    def set_value(self, key: str, value: Any, expire: int) -> bool:
        return bool(self.get_mem_cache().set(key, value, expire=max(0, int(expire)), noreply=False))

    def add_value(self, key: str, value: Any, expire: int) -> bool:
        return bool(self.get_mem_cache().add(key, value, expire=max(0, int(expire)), noreply=False))

    def delete_value(self, key: str) -> bool:
        return bool(self.get_mem_cache().delete(key, noreply=False))

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None


__all__ = ["MemCache"]
