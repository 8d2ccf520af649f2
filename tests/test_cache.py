"""Tests for the cache SPI and its providers."""
import logging
import threading
import time

import pytest

from metaobject import (
    BlockingCache,
    CacheError,
    CacheKey,
    LruCache,
    PerpetualCache,
    SynchronizedCache,
    TokenCache,
    get_cache,
    register_cache,
    remove_cache,
)


class TestPerpetualCache:

    def test_put_get_remove(self):
        cache = PerpetualCache("ns")
        cache.put("k", 1)
        assert cache.get("k") == 1
        assert cache.size() == 1
        assert len(cache) == 1
        assert cache.remove("k") == 1
        assert cache.remove("k") is None
        assert cache.get("k") is None

    def test_clear(self):
        cache = PerpetualCache("ns")
        cache.put("a", 1)
        cache.put("b", 2)
        cache.clear()
        assert cache.size() == 0

    def test_id_required(self):
        with pytest.raises(CacheError):
            PerpetualCache("")

    def test_identity_by_id(self):
        assert PerpetualCache("ns") == PerpetualCache("ns")
        assert PerpetualCache("ns") != PerpetualCache("other")
        assert len({PerpetualCache("ns"), PerpetualCache("ns")}) == 1
        assert LruCache(PerpetualCache("ns")) == PerpetualCache("ns")

    def test_read_write_lock_is_optional(self):
        assert PerpetualCache("ns").read_write_lock is None


def test_cache_key():
    key = CacheKey.from_args("select", 42)
    assert key == CacheKey(components=("select", 42))
    assert key.extend("page", 2) == CacheKey.from_args("select", 42, "page", 2)
    cache = PerpetualCache("ns")
    cache.put(key, "row")
    assert cache.get(CacheKey.from_args("select", 42)) == "row"


class TestNamespaceRegistry:

    def test_one_instance_per_namespace(self):
        created = []

        def factory(namespace):
            created.append(namespace)
            return PerpetualCache(namespace)

        first = get_cache("orders", factory)
        assert get_cache("orders", factory) is first
        assert get_cache("users", factory) is not first
        assert created == ["orders", "users"]

    def test_concurrent_first_use_creates_one_instance(self):
        results = []
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            results.append(get_cache("shared"))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(5)
        assert len(results) == 8
        assert len({id(cache) for cache in results}) == 1

    def test_factory_must_honour_namespace(self):
        with pytest.raises(CacheError):
            get_cache("orders", lambda namespace: PerpetualCache("wrong"))

    def test_register_and_remove(self, caplog):
        cache = PerpetualCache("orders")
        register_cache(cache)
        assert get_cache("orders") is cache
        with caplog.at_level(logging.WARNING, logger="metaobject.cache"):
            register_cache(PerpetualCache("orders"))
        assert "Overwriting existing cache" in caplog.text
        assert remove_cache("orders") is not None
        assert remove_cache("orders") is None


class TestLruCache:

    def test_least_recently_used_is_evicted(self):
        cache = LruCache(PerpetualCache("lru"), size=2)
        cache.put("a", 1)
        cache.put("b", 2)
        assert cache.get("a") == 1
        cache.put("c", 3)
        assert cache.get("b") is None
        assert cache.get("a") == 1
        assert cache.get("c") == 3
        assert cache.size() == 2
        assert cache.id == "lru"

    def test_size_must_be_positive(self):
        with pytest.raises(CacheError):
            LruCache(PerpetualCache("lru"), size=0)


def test_synchronized_cache_concurrent_puts():
    cache = SynchronizedCache(PerpetualCache("sync"))

    def writer(offset):
        for i in range(100):
            cache.put(offset + i, i)

    threads = [threading.Thread(target=writer, args=(n * 1000,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(5)
    assert cache.size() == 400


class TestBlockingCache:

    def test_second_reader_waits_for_put(self):
        cache = BlockingCache(PerpetualCache("blocking"), timeout=5)
        assert cache.get("k") is None  # this thread now owns the miss

        results = []
        started = threading.Event()

        def reader():
            started.set()
            results.append(cache.get("k"))

        thread = threading.Thread(target=reader)
        thread.start()
        started.wait(1)
        time.sleep(0.1)
        assert results == []

        cache.put("k", "v")
        thread.join(5)
        assert results == ["v"]

    def test_remove_releases_waiters(self):
        cache = BlockingCache(PerpetualCache("blocking"), timeout=5)
        assert cache.get("k") is None

        results = []
        thread = threading.Thread(target=lambda: results.append(cache.get("k")))
        thread.start()
        time.sleep(0.1)
        assert cache.remove("k") is None
        thread.join(5)
        # The waiter saw the rollback as a miss and now owns the key
        assert results == [None]
        cache.put("k", "v")
        assert cache.get("k") == "v"

    def test_other_threads_cannot_release_a_pending_miss(self):
        cache = BlockingCache(PerpetualCache("blocking"), timeout=5)
        assert cache.get("k") is None  # this thread is computing "k"

        results = []

        def rollback_then_read():
            cache.remove("k")
            results.append(cache.get("k"))

        thread = threading.Thread(target=rollback_then_read)
        thread.start()
        time.sleep(0.1)
        assert results == []

        cache.put("k", "v")
        thread.join(5)
        assert results == ["v"]

    def test_timeout(self):
        cache = BlockingCache(PerpetualCache("blocking"), timeout=0.05)
        assert cache.get("k") is None

        errors = []

        def reader():
            try:
                cache.get("k")
            except CacheError as e:
                errors.append(e)

        thread = threading.Thread(target=reader)
        thread.start()
        thread.join(5)
        assert len(errors) == 1

    def test_at_most_one_computation_per_key(self):
        cache = BlockingCache(PerpetualCache("blocking"), timeout=5)
        computations = []
        results = []

        def load():
            value = cache.get("k")
            if value is None:
                computations.append(threading.get_ident())
                time.sleep(0.05)
                value = "computed"
                cache.put("k", value)
            results.append(value)

        threads = [threading.Thread(target=load) for _ in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(5)
        assert len(computations) == 1
        assert results == ["computed"] * 5

    def test_hits_do_not_hold_the_key(self):
        cache = BlockingCache(PerpetualCache("blocking"), timeout=0.5)
        cache.put("k", "v")
        results = []
        thread = threading.Thread(target=lambda: results.append(cache.get("k")))
        thread.start()
        thread.join(5)
        assert cache.get("k") == "v"
        assert results == ["v"]


class TestTokenCache:

    def test_token_change_flushes(self):
        token = [0]
        cache = TokenCache(PerpetualCache("tok"), lambda: token[0])
        cache.put("k", 1)
        assert cache.get("k") == 1
        token[0] += 1
        assert cache.get("k") is None
        assert cache.size() == 0

    def test_get_or_compute(self):
        token = [0]
        calls = []
        cache = TokenCache(PerpetualCache("tok"), lambda: token[0])

        def compute():
            calls.append(1)
            return "value"

        assert cache.get_or_compute(CacheKey.from_args("a"), compute) == "value"
        assert cache.get_or_compute(CacheKey.from_args("a"), compute) == "value"
        assert len(calls) == 1
        token[0] += 1
        cache.get_or_compute(CacheKey.from_args("a"), compute)
        assert len(calls) == 2

    def test_invalidate(self):
        cache = TokenCache(PerpetualCache("tok"), lambda: 0)
        cache.put("k", 1)
        cache.invalidate()
        assert cache.get("k") is None
