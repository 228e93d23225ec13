"""Tests for the TTL cache."""

import itertools
import threading

import pytest

from src.cache import CacheKeys, TTLCache, config_hash


class FakeClock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, minutes):
        self.now += minutes * 60


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return TTLCache(default_ttl_minutes=10, max_entries=3, clock=clock)


class TestTTLCache:
    def test_set_and_get(self, cache):
        cache.set("a", {"x": 1})
        assert cache.get("a") == {"x": 1}
        assert cache.has("a")

    def test_missing_key(self, cache):
        assert cache.get("nope") is None
        assert not cache.has("nope")

    def test_expiry_removes_entry(self, cache, clock):
        cache.set("a", 1)
        clock.advance(10)
        assert cache.get("a") == 1  # expires strictly after the TTL
        clock.advance(0.01)
        assert cache.get("a") is None
        assert "a" not in cache.keys()

    def test_per_entry_ttl(self, cache, clock):
        cache.set("short", 1, ttl_minutes=1)
        cache.set("long", 2)
        clock.advance(2)
        assert not cache.has("short")
        assert cache.has("long")

    def test_delete_and_clear(self, cache):
        cache.set("a", 1)
        cache.set("b", 2)
        cache.delete("a")
        cache.delete("missing")
        assert cache.keys() == ["b"]
        cache.clear()
        assert cache.keys() == []

    def test_overflow_purges_expired(self, cache, clock):
        cache.set("old1", 1, ttl_minutes=1)
        cache.set("old2", 2, ttl_minutes=1)
        clock.advance(5)
        cache.set("new1", 3)
        cache.set("new2", 4)
        assert sorted(cache.keys()) == ["new1", "new2"]

    def test_get_or_fetch(self, cache, clock):
        calls = []

        def fetch():
            calls.append(1)
            return len(calls)

        assert cache.get_or_fetch("k", fetch) == 1
        assert cache.get_or_fetch("k", fetch) == 1
        clock.advance(11)
        assert cache.get_or_fetch("k", fetch) == 2
        assert len(calls) == 2

    def test_fetch_error_is_not_cached(self, cache):
        def boom():
            raise RuntimeError("down")

        with pytest.raises(RuntimeError):
            cache.get_or_fetch("k", boom)
        assert not cache.has("k")

    def test_stats(self, cache, clock):
        cache.set("a", 1, ttl_minutes=1)
        cache.set("b", 2)
        clock.advance(2)
        stats = cache.stats()
        assert stats == {"total": 2, "active": 1, "expired": 1, "keys": ["a", "b"]}

    def test_instances_are_independent(self, clock):
        one = TTLCache(clock=clock)
        two = TTLCache(clock=clock)
        one.set("a", 1)
        assert two.get("a") is None


class TestConcurrentAccess:
    def test_writers_and_stats_readers(self):
        ticks = itertools.count(0, 30)
        cache = TTLCache(default_ttl_minutes=1, max_entries=5, clock=lambda: next(ticks))
        errors = []
        stop = threading.Event()

        def writer(prefix):
            try:
                for i in range(2000):
                    cache.set(f"{prefix}-{i}", i)
                    cache.get(f"{prefix}-{i - 3}")
            except Exception as e:
                errors.append(repr(e))

        def reader():
            try:
                while not stop.is_set():
                    cache.stats()
                    cache.keys()
            except Exception as e:
                errors.append(repr(e))

        threads = [threading.Thread(target=writer, args=(p,)) for p in "ab"]
        watcher = threading.Thread(target=reader)
        watcher.start()
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        stop.set()
        watcher.join()

        assert errors == []
        assert cache.stats()["total"] == len(cache.keys())

    def test_concurrent_fetch_runs_once(self, cache):
        calls = []
        started = threading.Event()
        release = threading.Event()

        def slow_fetch():
            calls.append(1)
            started.set()
            release.wait(timeout=5)
            return "scoreboard"

        results = []
        first = threading.Thread(target=lambda: results.append(cache.get_or_fetch("k", slow_fetch)))
        first.start()
        started.wait(timeout=5)
        second = threading.Thread(target=lambda: results.append(cache.get_or_fetch("k", slow_fetch)))
        second.start()
        release.set()
        first.join()
        second.join()

        assert results == ["scoreboard", "scoreboard"]
        assert len(calls) == 1


class TestKeys:
    def test_key_formats(self):
        assert CacheKeys.NFL_DATA == "nfl-data"
        assert CacheKeys.standings("abc") == "standings-abc"
        assert CacheKeys.achievements("abc", 5) == "achievements-abc-5"
        assert CacheKeys.narratives(5) == "narratives-5"
        assert CacheKeys.projections("abc", 5) == "projections-abc-5"

    def test_config_hash_stable_and_order_free(self):
        assert config_hash({"a": 1, "b": 2}) == config_hash({"b": 2, "a": 1})
        assert len(config_hash({"a": 1})) == 8
