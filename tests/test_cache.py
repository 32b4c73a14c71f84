"""Tests for cache keys, cache backends and fail-open memoization."""

import fakeredis
import pytest

from life_leveling.cache.keys import (
    comparison_cache_key,
    hash_effort_allocation,
    simulation_cache_key,
)
from life_leveling.cache.memo import cached_compare, cached_simulate
from life_leveling.cache.result_cache import (
    InMemoryResultCache,
    RedisResultCache,
    build_result_cache,
)
from life_leveling.models.interest import AgeRange, Interest, UserRecord
from life_leveling.simulation.simulator import simulate


class FailingCache:
    """Cache collaborator whose store is unreachable."""

    def get(self, key):
        raise ConnectionError("cache down")

    def set(self, key, value, ttl_seconds):
        raise ConnectionError("cache down")

    def delete(self, key):
        raise ConnectionError("cache down")


@pytest.fixture
def r():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture
def interests():
    return [
        Interest(category="Math", current_level=1, intent_level="average"),
        Interest(category="Technical", current_level=2, intent_level="invested"),
    ]


class TestKeys:
    def test_order_independent(self):
        assert hash_effort_allocation({"A": 10, "B": 20}) == hash_effort_allocation({"B": 20, "A": 10})

    def test_int_and_float_agree(self):
        assert hash_effort_allocation({"A": 10}) == hash_effort_allocation({"A": 10.0})

    def test_values_matter(self):
        assert hash_effort_allocation({"A": 10, "B": 20}) != hash_effort_allocation({"A": 20, "B": 10})

    def test_simulation_key_layout(self):
        key = simulation_cache_key("user-1", {"B": 20, "A": 10}, 52)
        assert key.startswith("simulation:user-1:52w:")
        assert key == simulation_cache_key("user-1", {"A": 10, "B": 20}, 52)
        assert key != simulation_cache_key("user-2", {"A": 10, "B": 20}, 52)

    def test_comparison_key(self):
        assert comparison_cache_key("user-1") == "comparison:user-1"


class TestInMemoryResultCache:
    def test_set_get_delete(self):
        cache = InMemoryResultCache()
        cache.set("k", {"a": 1}, ttl_seconds=60)
        assert cache.get("k") == {"a": 1}
        cache.delete("k")
        assert cache.get("k") is None

    def test_entries_expire(self):
        now = [100.0]
        cache = InMemoryResultCache(clock=lambda: now[0])
        cache.set("k", [1, 2], ttl_seconds=30)
        now[0] = 129.0
        assert cache.get("k") == [1, 2]
        now[0] = 130.0
        assert cache.get("k") is None

    def test_expired_entries_swept_on_write(self):
        now = [0.0]
        cache = InMemoryResultCache(clock=lambda: now[0])
        for i in range(1000):
            cache.set(f"stale-{i}", i, ttl_seconds=1)
        cache.set("live", "x", ttl_seconds=500)

        now[0] = 100.0
        cache.set("fresh", "y", ttl_seconds=60)

        assert set(cache._entries) == {"life_leveling:live", "life_leveling:fresh"}
        assert cache.get("live") == "x"

    def test_reads_are_copies(self):
        cache = InMemoryResultCache()
        cache.set("k", {"a": [1]}, ttl_seconds=60)
        cache.get("k")["a"].append(2)
        assert cache.get("k") == {"a": [1]}


class TestRedisResultCache:
    def test_roundtrip_with_ttl(self, r):
        cache = RedisResultCache(r, prefix="test:")
        cache.set("simulation:u:abc", {"Math": {"projectedLevel": 1.6}}, ttl_seconds=1800)

        assert cache.get("simulation:u:abc") == {"Math": {"projectedLevel": 1.6}}
        assert 0 < r.ttl("test:simulation:u:abc") <= 1800

    def test_delete_and_miss(self, r):
        cache = RedisResultCache(r, prefix="test:")
        cache.set("k", 1, ttl_seconds=60)
        cache.delete("k")
        assert cache.get("k") is None

    def test_build_without_url_is_in_memory(self):
        assert isinstance(build_result_cache(None, "p:"), InMemoryResultCache)


class TestCachedSimulate:
    def test_miss_then_hit(self, r, interests):
        cache = RedisResultCache(r)
        allocation = {"Math": 50, "Technical": 30}

        first, first_cached = cached_simulate(cache, "u1", interests, allocation, 52, 1800)
        second, second_cached = cached_simulate(cache, "u1", interests, dict(reversed(allocation.items())), 52, 1800)

        assert first_cached is False
        assert second_cached is True
        assert first == second == simulate(interests, allocation, 52)

    def test_cache_failure_is_fail_open(self, interests):
        results, cached = cached_simulate(FailingCache(), "u1", interests, {"Math": 50}, 52, 1800)
        assert cached is False
        assert results == simulate(interests, {"Math": 50}, 52)

    def test_corrupt_entry_is_a_miss(self, interests):
        cache = InMemoryResultCache()
        key = simulation_cache_key("u1", {"Math": 50}, 52)
        cache.set(key, {"Math": {"projectedLevel": "not a number"}}, ttl_seconds=60)

        results, cached = cached_simulate(cache, "u1", interests, {"Math": 50}, 52, 1800)

        assert cached is False
        assert results["Math"].projected_level == pytest.approx(1.6)
        assert cache.get(key)["Math"]["projectedLevel"] == pytest.approx(1.6)

    def test_no_cache(self, interests):
        results, cached = cached_simulate(None, "u1", interests, {"Math": 50}, 52, 1800)
        assert cached is False
        assert set(results) == {"Math", "Technical"}

    def test_different_horizon_is_not_served_from_cache(self, interests):
        cache = InMemoryResultCache()
        cached_simulate(cache, "u1", interests, {"Math": 50}, 52, 1800)
        results, cached = cached_simulate(cache, "u1", interests, {"Math": 50}, 26, 1800)
        assert cached is False
        assert results["Math"].projected_level == pytest.approx(1.3)


class TestCachedCompare:
    def _users(self):
        teens = AgeRange(min=13, max=15)
        subject = UserRecord(
            user_id="s",
            age_range=teens,
            interests=[Interest(category="Math", current_level=3, intent_level="average")],
            allow_peer_comparisons=True,
        )
        peer = UserRecord(
            user_id="p",
            age_range=teens,
            interests=[Interest(category="Math", current_level=1, intent_level="average")],
            allow_peer_comparisons=True,
        )
        return subject, [subject, peer]

    def test_miss_then_hit(self):
        cache = InMemoryResultCache()
        subject, population = self._users()

        first, first_cached = cached_compare(cache, subject, population, 3600)
        second, second_cached = cached_compare(cache, subject, [], 3600)

        assert (first_cached, second_cached) == (False, True)
        assert first == second
        assert first[0].percentile == 100

    def test_cache_failure_is_fail_open(self):
        subject, population = self._users()
        comparisons, cached = cached_compare(FailingCache(), subject, population, 3600)
        assert cached is False
        assert comparisons[0].cohort_size == 1
