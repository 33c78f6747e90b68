"""
Cache component base class.

Manifesto:
    Application code talks to one ``Cache`` API; the storage backend is a
    configuration detail.  Subclasses implement four primitives on
    already-prefixed keys and already-serialized values, the base class
    does the rest.

    - **Key isolation:** keys are prefixed with the application id and
      (by default) md5 hashed, so several applications may share one
      backend
    - **Dependencies:** a value may be stored with a
      :class:`~trellis.framework.caching.dependency.CacheDependency`;
      ``get`` treats the entry as missing once the dependency changes
    - **Pluggable serialization:** pickle by default, raw values, or a
      custom ``(dumps, loads)`` pair

Architecture:
    ::

        Cache (Component)
        ├── MemoryCache  — in-process dict with expiry
        └── MemCache     — memcached via pymemcache

        get(id)  → get_value(key)  → loads → [value, dependency] → value | None
        set(id, value, expire, dependency) → dumps([value, dependency]) → set_value
        add(...)  → add_value      (only if key is absent)
        delete(id) → delete_value

Examples:
    >>> cache = app.cache
    >>> cache.set("report:42", rows, expire=600)
    True
    >>> cache.get("report:42") == rows
    True

Tags:
    cache, caching, serialization, dependency, trellis-core

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import hashlib
import pickle
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from trellis.core.component import Component
from trellis.core.errors import ConfigError, NotSupportedError
from trellis.framework.caching.dependency import CacheDependency

if TYPE_CHECKING:
    from trellis.core.context import TrellisContext

CATEGORY = "system.caching"

Serializer = tuple[Callable[[Any], Any], Callable[[Any], Any]]

_PICKLE: Serializer = (pickle.dumps, pickle.loads)


class Cache(Component):
    """Base class for cache components. Subclasses implement the ``*_value`` primitives."""

    def __init__(self, *, context: TrellisContext | None = None) -> None:
        super().__init__(context=context)
        self.key_prefix: str | None = None
        self.hash_key = True
        self._serializer: Serializer | bool | None = None

    @property
    def serializer(self) -> Serializer | bool | None:
        """``None`` for pickle, ``False`` for raw values, or a ``(dumps, loads)`` pair."""
        return self._serializer

    @serializer.setter
    def serializer(self, value: Serializer | bool | None) -> None:
        if value is not None and value is not False:
            if not isinstance(value, (tuple, list)) or len(value) != 2 or not all(map(callable, value)):
                raise ConfigError("Cache.serializer must be None, False or a (dumps, loads) pair.")
            value = (value[0], value[1])
        self._serializer = value

    def init(self) -> None:
        super().init()
        if self.key_prefix is None:
            app = self.context.app
            self.key_prefix = app.id if app is not None else ""

    def generate_unique_key(self, key: str) -> str:
        """Backend key for *key*: prefixed, and md5 hashed when ``hash_key`` is set."""
        raw = f"{self.key_prefix or ''}{key}"
        if self.hash_key:
            return hashlib.md5(raw.encode("utf-8")).hexdigest()
        return raw

    # ── Public API ───────────────────────────────────────────────

    def get(self, id: str) -> Any:
        """Cached value for *id*; ``None`` if missing, expired or its dependency changed."""
        value = self.get_value(self.generate_unique_key(id))
        if value is None or self._serializer is False:
            return value

        loads = (self._serializer or _PICKLE)[1]
        data = loads(value)
        if isinstance(data, (list, tuple)) and len(data) > 1:
            dependency = data[1]
            if not isinstance(dependency, CacheDependency) or not dependency.has_changed:
                self.context.trace(f'Serving "{id}" from cache', CATEGORY)
                return data[0]
        return None

    def set(self, id: str, value: Any, expire: int = 0, dependency: CacheDependency | None = None) -> bool:
        """Store *value* under *id*, replacing any existing entry.

        Args:
            expire: seconds until expiry; 0 means never
            dependency: invalidates the entry when it reports a change
        """
        self.context.trace(f'Saving "{id}" to cache', CATEGORY)
        return self.set_value(self.generate_unique_key(id), self._pack(value, dependency), expire)

    def add(self, id: str, value: Any, expire: int = 0, dependency: CacheDependency | None = None) -> bool:
        """Store *value* only if *id* is not cached yet. Returns whether it was stored."""
        self.context.trace(f'Adding "{id}" to cache', CATEGORY)
        return self.add_value(self.generate_unique_key(id), self._pack(value, dependency), expire)

    def delete(self, id: str) -> bool:
        self.context.trace(f'Deleting "{id}" from cache', CATEGORY)
        return self.delete_value(self.generate_unique_key(id))

    def _pack(self, value: Any, dependency: CacheDependency | None) -> Any:
        if self._serializer is False:
            return value
        if dependency is not None:
            dependency.evaluate_dependency()
        dumps = (self._serializer or _PICKLE)[0]
        return dumps([value, dependency])

    # ── Backend primitives ───────────────────────────────────────

    def get_value(self, key: str) -> Any:
        raise NotSupportedError(f"{type(self).__name__} does not support get() functionality.")

    def set_value(self, key: str, value: Any, expire: int) -> bool:
        raise NotSupportedError(f"{type(self).__name__} does not support set() functionality.")

    def add_value(self, key: str, value: Any, expire: int) -> bool:
        raise NotSupportedError(f"{type(self).__name__} does not support add() functionality.")

    def delete_value(self, key: str) -> bool:
        raise NotSupportedError(f"{type(self).__name__} does not support delete() functionality.")


__all__ = ["CATEGORY", "Cache", "Serializer"]
