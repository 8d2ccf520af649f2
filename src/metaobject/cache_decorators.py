"""Cache decorators: LRU eviction, per-key blocking and full synchronization."""

import logging
import threading
from collections import OrderedDict
from typing import Any, Dict, Optional, Tuple

from metaobject.cache import Cache
from metaobject.exceptions import CacheError

logger = logging.getLogger(__name__)


class LruCache(Cache):
    """Evicts the least recently used entry once ``size`` entries are stored."""

    def __init__(self, delegate: Cache, size: int = 1024):
        self._delegate = delegate
        self._key_map: 'OrderedDict[Any, None]' = OrderedDict()
        self.set_size(size)

    @property
    def id(self) -> str:
        return self._delegate.id

    def set_size(self, size: int) -> None:
        if size < 1:
            raise CacheError(f"LRU size must be positive, got {size}")
        self._max_size = size

    def put(self, key: Any, value: Any) -> None:
        self._delegate.put(key, value)
        self._key_map[key] = None
        self._key_map.move_to_end(key)
        if len(self._key_map) > self._max_size:
            eldest, _ = self._key_map.popitem(last=False)
            self._delegate.remove(eldest)
            logger.debug(f"LRU evicted {eldest!r} from {self.id}")

    def get(self, key: Any) -> Any:
        if key in self._key_map:
            self._key_map.move_to_end(key)
        return self._delegate.get(key)

    def remove(self, key: Any) -> Any:
        self._key_map.pop(key, None)
        return self._delegate.remove(key)

    def clear(self) -> None:
        self._delegate.clear()
        self._key_map.clear()

    def size(self) -> int:
        return self._delegate.size()


class BlockingCache(Cache):
    """Allows at most one caller to compute a missing value per key.

    A get() miss leaves the key locked by the calling thread. Other callers
    asking for the same key wait until that thread either put()s the value or
    remove()s the key (rollback), instead of all going to the origin. Callers
    must therefore follow every miss with put() or remove(). A put() or
    remove() from a thread that does not hold the key stores or removes the
    entry but leaves the lock in place.

    Args:
        delegate: Underlying store
        timeout: Seconds to wait for a locked key; None waits forever
    """

    def __init__(self, delegate: Cache, timeout: Optional[float] = None):
        self._delegate = delegate
        self.timeout = timeout
        # key -> (owning thread ident, latch set on release)
        self._latches: Dict[Any, Tuple[int, threading.Event]] = {}
        self._latches_guard = threading.Lock()

    @property
    def id(self) -> str:
        return self._delegate.id

    def put(self, key: Any, value: Any) -> None:
        try:
            self._delegate.put(key, value)
        finally:
            self._release_lock(key)

    def get(self, key: Any) -> Any:
        self._acquire_lock(key)
        value = self._delegate.get(key)
        if value is not None:
            self._release_lock(key)
        else:
            logger.debug(f"Cache miss on {key!r} in {self.id}; key stays locked until put/remove")
        return value

    def remove(self, key: Any) -> Any:
        try:
            return self._delegate.remove(key)
        finally:
            self._release_lock(key)

    def clear(self) -> None:
        self._delegate.clear()

    def size(self) -> int:
        return self._delegate.size()

    def _acquire_lock(self, key: Any) -> None:
        owned = (threading.get_ident(), threading.Event())
        while True:
            with self._latches_guard:
                held = self._latches.get(key)
                if held is None:
                    self._latches[key] = owned
                    return
            if not held[1].wait(self.timeout):
                raise CacheError(
                    f"Couldn't get a lock in {self.timeout} seconds for the key {key!r} at the cache {self.id}"
                )

    def _release_lock(self, key: Any) -> None:
        with self._latches_guard:
            held = self._latches.get(key)
            if held is None:
                return
            if held[0] != threading.get_ident():
                logger.debug(f"Key {key!r} in {self.id} is held by another thread; not released")
                return
            del self._latches[key]
        held[1].set()


class SynchronizedCache(Cache):
    """Serializes every call to the delegate through one re-entrant lock."""

    def __init__(self, delegate: Cache):
        self._delegate = delegate
        self._lock = threading.RLock()

    @property
    def id(self) -> str:
        return self._delegate.id

    def put(self, key: Any, value: Any) -> None:
        with self._lock:
            self._delegate.put(key, value)

    def get(self, key: Any) -> Any:
        with self._lock:
            return self._delegate.get(key)

    def remove(self, key: Any) -> Any:
        with self._lock:
            return self._delegate.remove(key)

    def clear(self) -> None:
        with self._lock:
            self._delegate.clear()

    def size(self) -> int:
        with self._lock:
            return self._delegate.size()
