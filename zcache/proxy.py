"""Access the entries of a cache through a second set of keys."""

from __future__ import annotations

import threading
from typing import Any, Dict, Generic, Hashable, TypeVar

from zcache.cache import Cache

P = TypeVar("P", bound=Hashable)
K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class Proxy(Generic[P, K, V]):
    """Map proxy keys onto the keys of an underlying cache.

    This lets the same cache entry be found by different keys, for example
    a site by its ID or by its hostname. Proxy keys never expire and are
    never removed automatically. The items in the underlying cache can still
    expire or be deleted.
    """

    def __init__(self, cache: Cache[K, V]) -> None:
        self._cache = cache
        self._lock = threading.RLock()
        self._map: Dict[P, K] = {}

    def proxy(self, main_key: K, proxy_key: P) -> None:
        """Make ``proxy_key`` refer to ``main_key``."""
        with self._lock:
            self._map[proxy_key] = main_key

    def delete(self, proxy_key: P) -> None:
        """Remove the link for ``proxy_key``; the cache entry is left alone."""
        with self._lock:
            self._map.pop(proxy_key, None)

    def reset(self) -> None:
        """Remove all proxy links, leaving the underlying cache untouched."""
        with self._lock:
            self._map = {}

    def key(self, proxy_key: P, default: Any = None) -> Any:
        """Return the main key for ``proxy_key``, or ``default`` if it is not set."""
        with self._lock:
            return self._map.get(proxy_key, default)

    def cache(self) -> Cache[K, V]:
        """Return the underlying cache."""
        return self._cache

    def set(self, main_key: K, proxy_key: P, value: V) -> None:
        """Store ``value`` in the cache under ``main_key`` and link ``proxy_key`` to it."""
        with self._lock:
            self._map[proxy_key] = main_key
        self._cache.set(main_key, value)

    def get(self, proxy_key: P, default: Any = None) -> Any:
        """Return the cached value that ``proxy_key`` refers to, or ``default``."""
        with self._lock:
            if proxy_key not in self._map:
                return default
            main_key = self._map[proxy_key]
        return self._cache.get(main_key, default)

    def items(self) -> Dict[P, K]:
        """Return a copy of all links as ``{proxy_key: main_key}``."""
        with self._lock:
            return dict(self._map)