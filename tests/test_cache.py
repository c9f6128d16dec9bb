"""
Tests for the time-bound cache.

Tests cover:
- Hits inside the TTL, refetch after it
- Fetch failures are not stored
- LRU eviction at the size bound
- Clearing by key and by prefix
"""
import pytest

from inventory_app.core.cache import TimedCache
from tests.conftest import FakeClock


class Counter:
    def __init__(self):
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return f"value-{self.calls}"


class TestTimedCache:
    """Test suite for TimedCache"""

    def test_second_read_within_ttl_is_cached(self):
        """Test: A read within the TTL does not call the fetch function again"""
        clock = FakeClock()
        cache = TimedCache(clock=clock)
        fetch = Counter()

        assert cache.get_or_fetch("items:a", fetch, ttl=300) == "value-1"
        clock.advance(299)
        assert cache.get_or_fetch("items:a", fetch, ttl=300) == "value-1"
        assert fetch.calls == 1

    def test_read_at_ttl_refetches(self):
        """Test: An entry exactly TTL seconds old is stale"""
        clock = FakeClock()
        cache = TimedCache(clock=clock)
        fetch = Counter()

        cache.get_or_fetch("k", fetch, ttl=120)
        clock.advance(120)

        assert cache.get_or_fetch("k", fetch, ttl=120) == "value-2"
        assert fetch.calls == 2

    def test_ttl_is_chosen_by_reader(self):
        """Test: The same key can be read with a shorter freshness requirement"""
        clock = FakeClock()
        cache = TimedCache(clock=clock)
        fetch = Counter()

        cache.get_or_fetch("k", fetch, ttl=300)
        clock.advance(150)

        assert cache.get_or_fetch("k", fetch, ttl=300) == "value-1"
        assert cache.get_or_fetch("k", fetch, ttl=120) == "value-2"

    def test_fetch_failure_propagates_and_stores_nothing(self):
        """Test: A failing fetch raises and leaves no entry"""
        cache = TimedCache(clock=FakeClock())

        def boom():
            raise RuntimeError("backend down")

        with pytest.raises(RuntimeError):
            cache.get_or_fetch("k", boom, ttl=60)
        assert "k" not in cache

    def test_lru_eviction(self):
        """Test: The least recently used entry is evicted at the bound"""
        cache = TimedCache(max_entries=2, clock=FakeClock())
        cache.get_or_fetch("a", lambda: 1, ttl=60)
        cache.get_or_fetch("b", lambda: 2, ttl=60)
        cache.get_or_fetch("a", lambda: 99, ttl=60)  # touch a
        cache.get_or_fetch("c", lambda: 3, ttl=60)

        assert "a" in cache
        assert "b" not in cache
        assert "c" in cache
        assert len(cache) == 2

    def test_clear_specific_keys_and_all(self):
        """Test: clear() removes listed keys, or everything with no keys"""
        cache = TimedCache(clock=FakeClock())
        for key in ("a", "b", "c"):
            cache.get_or_fetch(key, lambda: key, ttl=60)

        cache.clear(["a"])
        assert "a" not in cache
        assert len(cache) == 2

        cache.clear()
        assert len(cache) == 0

    def test_invalidate_prefix(self):
        """Test: Every key under a prefix is dropped, others stay"""
        cache = TimedCache(clock=FakeClock())
        cache.get_or_fetch("items:{\"page\": 1}", lambda: 1, ttl=60)
        cache.get_or_fetch("items:{\"page\": 2}", lambda: 2, ttl=60)
        cache.get_or_fetch("orders:{}", lambda: 3, ttl=60)

        removed = cache.invalidate_prefix("items:")

        assert removed == 2
        assert len(cache) == 1
        assert "orders:{}" in cache

    def test_invalid_bound(self):
        """Test: max_entries below 1 is rejected"""
        with pytest.raises(ValueError):
            TimedCache(max_entries=0)
