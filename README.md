# zcache

An in-memory key/value cache with time-based expiry that threads can share.
It works like a dictionary guarded by a lock, and each entry can have its own
expiration time.

## Installation

```
pip install zcache
```

## Using the cache

```python
from zcache.cache import Cache, KeyExistsError, KeyMissingError

# By default, entries expire after 5 minutes. A background thread removes
# expired entries every 10 minutes.
with Cache(default_expiration=300, cleanup_interval=600) as cache:
    cache.set("foo", "bar")

    # With expire=-1, the entry never expires.
    cache.set("baz", "never", expire=-1)

    print(cache.get("foo"))             # bar
    print(cache.get("missing"))         # None
    print(cache.get("missing", "n/a"))  # n/a

    try:
        cache.add("foo", "other")
    except KeyExistsError:
        pass

    # Change a value while holding the cache's lock.
    cache.set("count", 1)
    print(cache.modify("count", lambda n: n + 1))  # 2

    print("foo" in cache)  # True
```

### Durations

Durations are given in seconds, as an `int`, a `float` or a
`datetime.timedelta`.

- An `expire` of `0` (`DEFAULT_EXPIRATION`) uses the cache's default
  expiration.
- An `expire` of `-1` (`NO_EXPIRATION`), or any other negative value, means
  the entry never expires.
- If the default expiration is `0` or negative, entries do not expire unless
  you give them an expiry.
- If the cleanup interval is `0` or negative, no background thread runs. In
  that case, call `delete_expired()` yourself to remove expired entries.

Expired entries are treated as absent: `get()`, `keys()`, `items()` and `in`
skip them. They still count towards `item_count()` and `len()` until they are
removed.

### Operations

- `set(key, value, expire=0)` stores a value and replaces any existing entry.
- `add(key, value, expire=0)` stores a value only when the key is absent or
  expired. Otherwise it raises `KeyExistsError`.
- `replace(key, value, expire=0)` stores a value only when the key is present
  and not expired. Otherwise it raises `KeyMissingError`.
- `get(key, default=None)` returns the value, or `default`.
- `get_stale(key)` returns `(value, expired)` and ignores expiry. It raises
  `KeyMissingError` when the key is not stored at all.
- `get_with_expire(key)` returns `(value, expires_at)`. `expires_at` is an
  aware UTC `datetime`, or `None` for entries that never expire. It raises
  `KeyMissingError` when the key is absent or expired.
- `touch(key, expire=0)` gives an entry a new expiry and returns its value.
  It raises `KeyMissingError` when the key is not stored.
- `modify(key, func)` replaces the value with `func(value)` and returns the
  new value. It raises `KeyMissingError` when the key is absent or expired,
  and in that case `func` is not called.
- `rename(src, dst)` moves an entry and keeps its value and expiry. It
  overwrites `dst` and returns `False` when `src` is absent or expired.
- `pop(key[, default])` removes an entry and returns its value. For a missing
  key it returns `default` when one is given, and raises `KeyMissingError`
  otherwise.
- `delete(key)` removes an entry. It does nothing when the key is not stored.
- `delete_expired()` removes every expired entry.
- `delete_all()` removes all entries and returns them.
- `delete_func(predicate)` removes and returns the entries that `predicate`
  selects. `predicate(key, item)` returns a pair `(delete, stop)`, and
  iteration ends after the first call whose `stop` is true.
- `reset()` removes all entries.
- `items()` returns a copy of the unexpired entries as `{key: Item}`.
- `keys()` returns a list of the unexpired keys.

`KeyExistsError` and `KeyMissingError` both derive from `CacheError`.
`KeyMissingError` is also a `KeyError`.

An `Item` is a frozen dataclass with two fields. `value` holds the stored
value. `expiration` holds a Unix timestamp in nanoseconds, or `0` for an entry
that never expires. `item.expired(now=None)` reports whether the item has
expired.

### Eviction callback

`on_evicted(func)` registers a callback, and `on_evicted(None)` removes it.
The callback is called with `(key, value)` whenever an entry is removed by
`delete()`, `pop()`, `delete_expired()` (which includes the background
thread), `delete_all()` or `delete_func()`. It is not called when an entry is
overwritten or renamed, or when `reset()` is used.

### Stopping the background thread

`close()` stops the background cleanup thread. Using the cache as a context
manager does the same on exit. The thread also stops once the cache is
garbage collected.

## Looking up one entry under several keys

A `Proxy` maps extra keys onto the keys of an existing cache. For example, a
site can be cached by its ID and also found by its hostname:

```python
from zcache.cache import Cache
from zcache.proxy import Proxy

sites = Cache(default_expiration=-1)
by_host = Proxy(sites)

by_host.set(42, "example.com", {"id": 42, "hostname": "example.com"})

assert sites.get(42) is by_host.get("example.com")
assert by_host.key("example.com") == 42
assert by_host.items() == {"example.com": 42}
assert by_host.cache() is sites
```

The proxy methods are:

- `proxy(main_key, proxy_key)` links a proxy key to a key of the cache.
- `set(main_key, proxy_key, value)` stores the value in the cache and links
  the proxy key to it.
- `get(proxy_key, default=None)` returns the value that the proxy key points
  to.
- `key(proxy_key, default=None)` returns the linked key of the cache.
- `items()` returns a copy of all links as `{proxy_key: main_key}`.
- `delete(proxy_key)` and `reset()` remove links. Neither touches the cache.

Proxy links never expire. The cache entries they point to still expire and
can be deleted as usual.

## What it does not do

The cache lives in memory only and does not save itself anywhere. To carry
entries over a restart, store the result of `items()` yourself and later pass
such a dictionary as `Cache(items=...)`. The cache then uses that dictionary
directly; it does not copy it.