import pytest

from conftest import FakeClock
from floodrisk.utils.cache import TTLCache, coord_key


class TestTTLCache:
    def test_get_missing_key_returns_none(self, clock):
        cache = TTLCache(60, 10, clock=clock)
        assert cache.get("nope") is None

    def test_entry_served_before_ttl(self, clock):
        cache = TTLCache(60, 10, clock=clock)
        cache.set("k", "v")
        clock.advance(59.9)
        assert cache.get("k") == "v"

    def test_entry_expires_at_exactly_ttl(self, clock):
        cache = TTLCache(60, 10, clock=clock)
        cache.set("k", "v")
        clock.advance(60)
        assert cache.get("k") is None
        assert "k" not in cache

    def test_overflow_evicts_single_oldest_entry(self, clock):
        cache = TTLCache(600, 3, clock=clock)
        for key in ("a", "b", "c", "d"):
            cache.set(key, key.upper())
            clock.advance(1)
        assert len(cache) == 3
        assert "a" not in cache
        assert [cache.get(k) for k in ("b", "c", "d")] == ["B", "C", "D"]

    def test_reads_do_not_refresh_eviction_order(self, clock):
        cache = TTLCache(600, 2, clock=clock)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")
        cache.set("c", 3)
        assert "a" not in cache
        assert "b" in cache and "c" in cache

    def test_overwrite_refreshes_timestamp_without_growing(self, clock):
        cache = TTLCache(60, 2, clock=clock)
        cache.set("k", "old")
        clock.advance(50)
        cache.set("k", "new")
        clock.advance(50)
        assert len(cache) == 1
        assert cache.get("k") == "new"

    def test_clear(self, clock):
        cache = TTLCache(60, 2, clock=clock)
        cache.set("k", 1)
        cache.clear()
        assert len(cache) == 0

    def test_rejects_zero_size(self):
        with pytest.raises(ValueError):
            TTLCache(60, 0)

    def test_independent_instances(self):
        clock = FakeClock()
        a = TTLCache(60, 5, clock=clock)
        b = TTLCache(60, 5, clock=clock)
        a.set("shared", 1)
        assert b.get("shared") is None


class TestCoordKey:
    def test_rounds_to_four_decimals(self):
        assert coord_key(16.05441, 108.20219) == "16.0544,108.2022"

    def test_float_noise_maps_to_same_key(self):
        assert coord_key(0.1 + 0.2) == coord_key(0.3)

    def test_tiny_negative_shares_zero_key(self):
        assert coord_key(-0.00001) == coord_key(0.0) == "0.0000"
        assert coord_key(-0.00001, -0.00004) == "0.0000,0.0000"
