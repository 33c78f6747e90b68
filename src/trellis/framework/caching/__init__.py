"""Cache components."""

from trellis.framework.caching.base import Cache
from trellis.framework.caching.dependency import CacheDependency
from trellis.framework.caching.memcache import MemCache
from trellis.framework.caching.memory import MemoryCache

__all__ = ["Cache", "CacheDependency", "MemCache", "MemoryCache"]
