"""
Token-based cache invalidation.

TokenCache decorates any Cache so its contents are flushed whenever a global
token changes (e.g. a schema version or a mutation counter).
"""

import logging
from typing import Any, Callable, TypeVar

from metaobject.cache import Cache

logger = logging.getLogger(__name__)

T = TypeVar('T')


class TokenCache(Cache):
    """
    Cache decorator that flushes its delegate when a version token moves.

    Before each put/get/remove/size the token provider is polled. A token that
    differs from the last one seen clears the delegate first, so entries never
    outlive the version they were computed against.

    Example:
        metadata = TokenCache(PerpetualCache("schema"), lambda: schema.version)
        columns = metadata.get_or_compute(
            CacheKey.from_args('columns', 'orders'),
            lambda: load_columns('orders'),
        )
        # bumping schema.version empties the cache on the next access
    """

    def __init__(self, delegate: Cache, token_provider: Callable[[], int]):
        """
        Args:
            delegate: Store that holds the entries
            token_provider: Zero-argument callable returning the current version
        """
        self._delegate = delegate
        self._token_provider = token_provider
        self._last_token = token_provider()

    @property
    def id(self) -> str:
        return self._delegate.id

    def _check_token(self) -> None:
        token = self._token_provider()
        if token != self._last_token:
            logger.debug(f"Token changed {self._last_token} -> {token}, flushing {self.id}")
            self._delegate.clear()
            self._last_token = token

    def get_or_compute(self, key: Any, compute_fn: Callable[[], T]) -> T:
        """Cached value for ``key``; on a miss, ``compute_fn()`` is stored and returned."""
        cached = self.get(key)
        if cached is None:
            cached = compute_fn()
            self.put(key, cached)
        return cached

    def invalidate(self) -> None:
        """Flush everything and adopt the current token."""
        self._delegate.clear()
        self._last_token = self._token_provider()

    def put(self, key: Any, value: Any) -> None:
        self._check_token()
        self._delegate.put(key, value)

    def get(self, key: Any) -> Any:
        self._check_token()
        return self._delegate.get(key)

    def remove(self, key: Any) -> Any:
        self._check_token()
        return self._delegate.remove(key)

    def clear(self) -> None:
        self._delegate.clear()

    def size(self) -> int:
        self._check_token()
        return self._delegate.size()
