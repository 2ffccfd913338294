"""Thread-safe in-memory key/value cache with time-based expiry."""

from __future__ import annotations

import threading
import time
import weakref
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Generic, Hashable, List, Optional, Tuple, TypeVar, Union

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

Duration = Union[int, float, timedelta]

#: The item never expires.
NO_EXPIRATION: float = -1
#: Use the cache's default expiration.
DEFAULT_EXPIRATION: float = 0

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_MISSING: Any = object()


class CacheError(Exception):
    """Base class for cache errors."""


class KeyExistsError(CacheError):
    """The key is already set in the cache."""


class KeyMissingError(CacheError, KeyError):
    """The key is not set in the cache, or has expired."""


@dataclass(frozen=True)
class Item(Generic[V]):
    """A cached value and its expiry as a Unix timestamp in nanoseconds (0: never)."""

    value: V
    expiration: int = 0

    def expired(self, now: Optional[int] = None) -> bool:
        """Report whether the item has expired at ``now`` (nanoseconds)."""
        if self.expiration <= 0:
            return False
        if now is None:
            now = time.time_ns()
        return now > self.expiration


def _seconds(d: Duration) -> float:
    if isinstance(d, timedelta):
        return d.total_seconds()
    return float(d)


def _run_janitor(cache_ref: "weakref.ref[Cache[Any, Any]]", interval: float, stop: threading.Event) -> None:
    while not stop.wait(interval):
        cache = cache_ref()
        if cache is None:
            return
        cache.delete_expired()
        del cache


class Cache(Generic[K, V]):
    """A thread-safe key/value store where entries may expire.

    Durations are given in seconds (or as ``timedelta``). A default
    expiration of 0 or less means items never expire by default. A positive
    cleanup interval starts a background thread that removes expired items;
    it stops when the cache is closed or garbage collected.
    """

    def __init__(
        self,
        default_expiration: Duration = DEFAULT_EXPIRATION,
        cleanup_interval: Duration = 0,
        items: Optional[Dict[K, Item[V]]] = None,
    ) -> None:
        de = _seconds(default_expiration)
        self._default_expiration = NO_EXPIRATION if de == DEFAULT_EXPIRATION else de
        self._items: Dict[K, Item[V]] = {} if items is None else items
        self._lock = threading.RLock()
        self._on_evicted: Optional[Callable[[K, V], Any]] = None
        self._janitor_thread: Optional[threading.Thread] = None
        self._finalizer: Optional[weakref.finalize] = None

        interval = _seconds(cleanup_interval)
        if interval > 0:
            stop = threading.Event()
            self._janitor_thread = threading.Thread(
                target=_run_janitor,
                args=(weakref.ref(self), interval, stop),
                name="zcache-janitor",
                daemon=True,
            )
            self._finalizer = weakref.finalize(self, stop.set)
            self._janitor_thread.start()

    # Internal helpers; callers hold the lock.

    def _expiry(self, expire: Duration) -> int:
        d = _seconds(expire)
        if d == DEFAULT_EXPIRATION:
            d = self._default_expiration
        if d > 0:
            return time.time_ns() + round(d * 1_000_000_000)
        return 0

    def _live(self, key: K) -> Optional[Item[V]]:
        item = self._items.get(key)
        if item is None or item.expired():
            return None
        return item

    def _require(self, key: K) -> Item[V]:
        item = self._live(key)
        if item is None:
            raise KeyMissingError(key)
        return item

    # Public API.

    def set(self, key: K, value: V, expire: Duration = DEFAULT_EXPIRATION) -> None:
        """Store ``value`` under ``key``, replacing any existing item."""
        item = Item(value, self._expiry(expire))
        with self._lock:
            self._items[key] = item

    def touch(self, key: K, expire: Duration = DEFAULT_EXPIRATION) -> V:
        """Reset the expiry of ``key`` and return its value.

        Raises KeyMissingError if the key is not set.
        """
        expiration = self._expiry(expire)
        with self._lock:
            item = self._items.get(key)
            if item is None:
                raise KeyMissingError(key)
            self._items[key] = replace(item, expiration=expiration)
            return item.value

    def add(self, key: K, value: V, expire: Duration = DEFAULT_EXPIRATION) -> None:
        """Store ``value`` only if ``key`` is absent or expired.

        Raises KeyExistsError otherwise.
        """
        with self._lock:
            if self._live(key) is not None:
                raise KeyExistsError(f"item {key!r} already exists")
            self._items[key] = Item(value, self._expiry(expire))

    def replace(self, key: K, value: V, expire: Duration = DEFAULT_EXPIRATION) -> None:
        """Store ``value`` only if ``key`` is set and not expired.

        Raises KeyMissingError otherwise.
        """
        with self._lock:
            if self._live(key) is None:
                raise KeyMissingError(f"item {key!r} doesn't exist")
            self._items[key] = Item(value, self._expiry(expire))

    def get(self, key: K, default: Any = None) -> Any:
        """Return the value for ``key``, or ``default`` if absent or expired."""
        with self._lock:
            item = self._live(key)
        return default if item is None else item.value

    def get_stale(self, key: K) -> Tuple[V, bool]:
        """Return ``(value, expired)`` for ``key`` without regard to expiry.

        Raises KeyMissingError if the key is not set.
        """
        with self._lock:
            item = self._items.get(key)
        if item is None:
            raise KeyMissingError(key)
        return item.value, item.expired()

    def get_with_expire(self, key: K) -> Tuple[V, Optional[datetime]]:
        """Return ``(value, expires_at)``; ``expires_at`` is None if it never expires.

        Raises KeyMissingError if the key is absent or expired.
        """
        with self._lock:
            item = self._require(key)
        if item.expiration > 0:
            return item.value, _EPOCH + timedelta(microseconds=item.expiration // 1000)
        return item.value, None

    def modify(self, key: K, func: Callable[[V], V]) -> V:
        """Atomically replace the value of ``key`` with ``func(value)`` and return it.

        Raises KeyMissingError (without calling ``func``) if the key is absent
        or expired.
        """
        with self._lock:
            item = self._require(key)
            new = func(item.value)
            self._items[key] = replace(item, value=new)
            return new

    def delete(self, key: K) -> None:
        """Remove ``key``; does nothing if it is not set."""
        with self._lock:
            item = self._items.pop(key, None)
            callback = self._on_evicted
        if item is not None and callback is not None:
            callback(key, item.value)

    def rename(self, src: K, dst: K) -> bool:
        """Move the item at ``src`` to ``dst``, keeping value and expiry.

        Overwrites ``dst``; returns False if ``src`` is absent or expired.
        The eviction callback is not called.
        """
        with self._lock:
            item = self._live(src)
            if item is None:
                return False
            del self._items[src]
            self._items[dst] = item
            return True

    def pop(self, key: K, default: Any = _MISSING) -> Any:
        """Remove ``key`` and return its value.

        If the key is absent or expired, return ``default`` if given, else
        raise KeyMissingError.
        """
        with self._lock:
            item = self._live(key)
            if item is None:
                if default is _MISSING:
                    raise KeyMissingError(key)
                return default
            del self._items[key]
            callback = self._on_evicted
        if callback is not None:
            callback(key, item.value)
        return item.value

    def delete_expired(self) -> None:
        """Remove every expired item."""
        now = time.time_ns()
        with self._lock:
            expired = [(k, v) for k, v in self._items.items() if v.expired(now)]
            for k, _ in expired:
                del self._items[k]
            callback = self._on_evicted
        if callback is not None:
            for k, v in expired:
                callback(k, v.value)

    def on_evicted(self, func: Optional[Callable[[K, V], Any]]) -> None:
        """Set a callback run with ``(key, value)`` when an item is removed.

        It is not run when an item is overwritten. None disables it.
        """
        with self._lock:
            self._on_evicted = func

    def items(self) -> Dict[K, Item[V]]:
        """Return a copy of all unexpired items."""
        now = time.time_ns()
        with self._lock:
            return {k: v for k, v in self._items.items() if not v.expired(now)}

    def keys(self) -> List[K]:
        """Return all unexpired keys, in no particular order."""
        now = time.time_ns()
        with self._lock:
            return [k for k, v in self._items.items() if not v.expired(now)]

    def item_count(self) -> int:
        """Return the number of stored items, including expired ones not yet removed."""
        with self._lock:
            return len(self._items)

    def reset(self) -> None:
        """Remove all items without running the eviction callback."""
        with self._lock:
            self._items = {}

    def delete_all(self) -> Dict[K, Item[V]]:
        """Remove all items and return them, running the eviction callback."""
        with self._lock:
            items = self._items
            self._items = {}
            callback = self._on_evicted
        if callback is not None:
            for k, v in items.items():
                callback(k, v.value)
        return items

    def delete_func(self, predicate: Callable[[K, Item[V]], Tuple[bool, bool]]) -> Dict[K, Item[V]]:
        """Remove and return items matched by ``predicate``.

        ``predicate(key, item)`` returns ``(delete, stop)``; iteration ends
        after the first call returning a true ``stop``. The eviction callback
        runs for removed items.
        """
        removed: Dict[K, Item[V]] = {}
        with self._lock:
            for k, v in list(self._items.items()):
                delete, stop = predicate(k, v)
                if delete:
                    removed[k] = v
                    del self._items[k]
                if stop:
                    break
            callback = self._on_evicted
        if callback is not None:
            for k, v in removed.items():
                callback(k, v.value)
        return removed

    def close(self) -> None:
        """Stop the background cleanup thread, if any."""
        if self._finalizer is not None:
            self._finalizer()
        if self._janitor_thread is not None and self._janitor_thread is not threading.current_thread():
            self._janitor_thread.join()

    def __enter__(self) -> "Cache[K, V]":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return self._live(key) is not None  # type: ignore[arg-type]

    def __len__(self) -> int:
        return self.item_count()