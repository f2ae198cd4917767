import threading
import time

import pytest

from panel_notation.core.errors import DialectError, ErrorCode
from panel_notation.core.services.cache import DialectCache, TTLCache
from panel_notation.core.services.default_dialect import DEFAULT_DIALECT
from panel_notation.core.services.dialect import parse_dialect


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class FakeStore:
    def __init__(self, dialects=None, error=None):
        self.dialects = dialects or {}
        self.error = error
        self.calls = []

    def load_dialect(self, organization_id):
        self.calls.append(organization_id)
        if self.error is not None:
            raise self.error
        data = self.dialects.get(organization_id)
        return parse_dialect(data) if data is not None else None


def test_ttl_expiry():
    clock = FakeClock()
    cache = TTLCache(ttl_seconds=10, clock=clock)
    cache.set("a", 1)
    assert cache.get("a") == 1
    clock.now += 9.9
    assert cache.get("a") == 1
    clock.now += 0.2
    assert cache.get("a") is None
    assert len(cache) == 0


def test_get_or_load_reports_hits():
    cache = TTLCache(ttl_seconds=60)
    calls = []

    def loader():
        calls.append(1)
        return "value"

    assert cache.get_or_load("k", loader) == ("value", False)
    assert cache.get_or_load("k", loader) == ("value", True)
    assert len(calls) == 1
    stats = cache.stats()
    assert stats["hits"] == 1
    assert stats["misses"] == 1
    assert stats["loads"] == 1


def test_capacity_evicts_least_recently_used():
    cache = TTLCache(ttl_seconds=60, capacity=2)
    cache.set("a", 1)
    cache.set("b", 2)
    assert cache.get("a") == 1
    cache.set("c", 3)
    assert cache.get("b") is None
    assert cache.get("a") == 1
    assert cache.stats()["evictions"] == 1


def test_loader_error_is_not_cached():
    cache = TTLCache(ttl_seconds=60)

    def failing():
        raise RuntimeError("store down")

    with pytest.raises(RuntimeError):
        cache.get_or_load("k", failing)
    assert cache.get_or_load("k", lambda: "ok") == ("ok", False)


def test_concurrent_misses_share_one_load():
    cache = TTLCache(ttl_seconds=60)
    started = threading.Event()
    release = threading.Event()
    calls = []

    def slow_loader():
        calls.append(1)
        started.set()
        release.wait(timeout=5)
        return "dialect"

    results = []

    def worker():
        results.append(cache.get_or_load("org", slow_loader)[0])

    first = threading.Thread(target=worker)
    first.start()
    assert started.wait(timeout=5)
    others = [threading.Thread(target=worker) for _ in range(4)]
    for t in others:
        t.start()
    # give the waiters time to block on the in-flight load
    deadline = time.monotonic() + 5
    while cache.stats()["misses"] < 5 and time.monotonic() < deadline:
        time.sleep(0.01)
    release.set()
    for t in [first, *others]:
        t.join(timeout=5)

    assert results == ["dialect"] * 5
    assert len(calls) == 1


def test_invalidate_during_load_discards_result():
    cache = TTLCache(ttl_seconds=60)

    def loader():
        cache.invalidate("k")
        return "stale"

    assert cache.get_or_load("k", loader) == ("stale", False)
    assert cache.get("k") is None


def test_invalidate_and_clear():
    cache = TTLCache(ttl_seconds=60)
    cache.set("a", 1)
    cache.set("b", 2)
    assert cache.invalidate("a") is True
    assert cache.invalidate("a") is False
    cache.clear()
    assert len(cache) == 0


def test_dialect_cache_default_without_org():
    store = FakeStore()
    cache = DialectCache(store)
    assert cache.get(None) is DEFAULT_DIALECT
    assert cache.get("") is DEFAULT_DIALECT
    assert store.calls == []


def test_dialect_cache_merges_and_caches():
    store = FakeStore({"acme": {"edgeband": {"aliases": {"ALL EDGES": "2L"}}}})
    cache = DialectCache(store)
    dialect = cache.get("acme")
    assert dialect.organization_id == "acme"
    assert dialect.edgeband.resolve_alias("all edges") == "2L"
    assert dialect.edgeband.resolve_alias("FULL") == "2L2W"
    assert cache.get("acme") is dialect
    assert store.calls == ["acme"]


def test_dialect_cache_unknown_org_gets_default():
    cache = DialectCache(FakeStore())
    assert cache.get("nobody") is DEFAULT_DIALECT


def test_dialect_cache_store_error_falls_back_uncached():
    store = FakeStore(error=DialectError(ErrorCode.STORE_UNAVAILABLE, "down", "acme"))
    cache = DialectCache(store)
    assert cache.get("acme") is DEFAULT_DIALECT
    assert cache.get("acme") is DEFAULT_DIALECT
    assert store.calls == ["acme", "acme"]
    assert cache.stats()["size"] == 0


def test_dialect_cache_invalidate_reloads():
    store = FakeStore({"acme": {"name": "v1"}})
    cache = DialectCache(store)
    assert cache.get("acme").name == "v1"
    store.dialects["acme"] = {"name": "v2"}
    assert cache.get("acme").name == "v1"
    cache.invalidate("acme")
    assert cache.get("acme").name == "v2"


def test_invalidate_keeps_no_bookkeeping_for_idle_keys():
    cache = TTLCache(ttl_seconds=60)
    for i in range(100):
        cache.invalidate(f"org-{i}")
    cache.set("a", 1)
    cache.clear()
    assert cache._generations == {}

    def loader():
        cache.invalidate("k")
        return "stale"

    cache.get_or_load("k", loader)
    assert cache._generations == {}
    assert cache.get_or_load("k", lambda: "fresh") == ("fresh", False)
    assert cache.get("k") == "fresh"
