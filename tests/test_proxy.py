import time
from dataclasses import dataclass

from zcache.cache import NO_EXPIRATION, Cache
from zcache.proxy import Proxy


def test_proxy_flow():
    c = Cache(NO_EXPIRATION, 0)
    pc = Proxy(c)

    c.set("k", "vvv")
    pc.proxy("k", "p")
    assert pc.get("p") == "vvv"
    assert pc.get("k") is None

    pc.delete("k")
    assert pc.get("p") == "vvv"
    pc.delete("p")
    assert pc.get("p") is None

    pc.set("main", "proxy", "vvv")
    assert pc.get("proxy") == "vvv"
    assert pc.get("main") is None

    assert pc.items() == {"proxy": "main"}
    assert pc.key("adsasdasd") is None
    assert pc.key("proxy") == "main"
    assert pc.cache() is c

    pc.reset()
    assert pc.items() == {}


def test_delete_keeps_cache_entry():
    c = Cache(NO_EXPIRATION, 0)
    pc = Proxy(c)
    pc.set("main", "alias", 1)
    pc.delete("alias")
    assert pc.get("alias") is None
    assert c.get("main") == 1


def test_reset_keeps_cache_entries():
    c = Cache(NO_EXPIRATION, 0)
    pc = Proxy(c)
    pc.set("a", "x", 1)
    pc.set("b", "y", 2)
    pc.reset()
    assert pc.get("x") is None
    assert sorted(c.keys()) == ["a", "b"]


def test_defaults():
    c = Cache(NO_EXPIRATION, 0)
    pc = Proxy(c)
    assert pc.key("missing", "fallback") == "fallback"
    assert pc.get("missing", 42) == 42
    pc.proxy("nowhere", "dangling")
    assert pc.get("dangling", "d") == "d"
    assert pc.key("dangling") == "nowhere"


def test_items_is_copy():
    c = Cache(NO_EXPIRATION, 0)
    pc = Proxy(c)
    pc.proxy("m", "p")
    items = pc.items()
    items["other"] = "x"
    assert pc.items() == {"p": "m"}


def test_expired_main_entry_not_returned():
    c = Cache(NO_EXPIRATION, 0)
    pc = Proxy(c)
    c.set("main", "v", 0.001)
    pc.proxy("main", "alias")
    time.sleep(0.01)
    assert pc.get("alias") is None
    assert pc.key("alias") == "main"


def test_example_sites():
    @dataclass
    class Site:
        id: int
        hostname: str

    site = Site(42, "example.com")
    c = Cache(NO_EXPIRATION, NO_EXPIRATION)
    p = Proxy(c)
    p.set(42, "example.com", site)

    by_id = c.get(42)
    by_host = p.get("example.com")
    assert by_id == Site(42, "example.com")
    assert by_host == Site(42, "example.com")
    assert by_id is by_host