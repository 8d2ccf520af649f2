"""
Cache SPI.

Providers implement Cache. One instance exists per namespace; the namespace is
the cache id, fixed at construction. The base store is PerpetualCache; behaviour
such as eviction, per-key blocking, synchronization or token-based flushing is
layered on with decorators (see cache_decorators and token_cache).

Any locking a provider needs is internal to the provider. ``read_write_lock`` is
only kept for legacy callers and returns None by default.

Usage:
    cache = get_cache("orders.mapper")
    cache.put(CacheKey.from_args("select", 42), row)
"""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from metaobject.exceptions import CacheError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheKey:
    """Hashable key built from an ordered tuple of components."""
    components: Tuple[Any, ...]

    @classmethod
    def from_args(cls, *args) -> 'CacheKey':
        """Key whose components are the positional arguments, in order."""
        return cls(components=args)

    def extend(self, *args) -> 'CacheKey':
        """New key with extra components appended."""
        return CacheKey(components=self.components + args)


class Cache(ABC):
    """SPI for cache providers."""

    @property
    @abstractmethod
    def id(self) -> str:
        """Namespace identifier of this cache."""

    @abstractmethod
    def put(self, key: Any, value: Any) -> None:
        pass

    @abstractmethod
    def get(self, key: Any) -> Any:
        """Cached value, or None on a miss."""

    @abstractmethod
    def remove(self, key: Any) -> Any:
        """Remove an entry and return its previous value.

        Only called when rolling back an entry that was missing, so a blocking
        provider can release the lock it took on the miss.
        """

    @abstractmethod
    def clear(self) -> None:
        pass

    @abstractmethod
    def size(self) -> int:
        """Number of stored entries (not capacity). Advisory."""

    @property
    def read_write_lock(self) -> Optional[Any]:
        """Legacy hook; providers lock internally."""
        return None

    def __len__(self) -> int:
        return self.size()

    # Caches are identified by namespace
    def __eq__(self, other):
        if not isinstance(other, Cache):
            return NotImplemented
        return self.id == other.id

    def __hash__(self):
        return hash(self.id)

    def __repr__(self):
        return f"{type(self).__name__}({self.id!r})"


class PerpetualCache(Cache):
    """Dict-backed store with no eviction."""

    def __init__(self, id: str):
        if not id:
            raise CacheError("Cache instances require an ID")
        self._id = id
        self._cache: Dict[Any, Any] = {}

    @property
    def id(self) -> str:
        return self._id

    def put(self, key: Any, value: Any) -> None:
        self._cache[key] = value

    def get(self, key: Any) -> Any:
        return self._cache.get(key)

    def remove(self, key: Any) -> Any:
        return self._cache.pop(key, None)

    def clear(self) -> None:
        self._cache.clear()

    def size(self) -> int:
        return len(self._cache)


# Namespace registry: exactly one Cache per namespace
_caches: Dict[str, Cache] = {}
_caches_lock = threading.Lock()


def get_cache(namespace: str, factory: Callable[[str], Cache] = PerpetualCache) -> Cache:
    """Get the cache for ``namespace``, creating it with ``factory`` on first use.

    Args:
        namespace: Cache id
        factory: Called with the namespace when no cache exists yet

    Returns:
        The single Cache registered for the namespace
    """
    with _caches_lock:
        cache = _caches.get(namespace)
        if cache is None:
            cache = factory(namespace)
            if cache.id != namespace:
                raise CacheError(
                    f"Cache factory returned id '{cache.id}' for namespace '{namespace}'"
                )
            _caches[namespace] = cache
            logger.debug(f"Created cache {cache!r} for namespace '{namespace}'")
        return cache


def register_cache(cache: Cache) -> None:
    """Register a pre-built cache under its own id."""
    with _caches_lock:
        existing = _caches.get(cache.id)
        if existing is not None and existing is not cache:
            logger.warning(f"Overwriting existing cache for namespace: {cache.id}")
        _caches[cache.id] = cache


def remove_cache(namespace: str) -> Optional[Cache]:
    with _caches_lock:
        return _caches.pop(namespace, None)


def clear_cache_registry() -> None:
    with _caches_lock:
        _caches.clear()
