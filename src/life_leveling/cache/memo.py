"""Fail-open memoization of engine results.

Cache errors and undecodable entries count as misses and never reach the caller.
"""

from collections.abc import Iterable, Mapping
from typing import Any

import structlog
from pydantic import TypeAdapter

from life_leveling.cache.keys import comparison_cache_key, simulation_cache_key
from life_leveling.cache.result_cache import ResultCache
from life_leveling.comparison.comparator import CohortComparator
from life_leveling.models.comparison import CohortComparison
from life_leveling.models.interest import Interest, UserRecord
from life_leveling.models.simulation import SimulationResult
from life_leveling.simulation.simulator import GrowthSimulator

logger = structlog.get_logger()

SIMULATION_RESULTS = TypeAdapter(dict[str, SimulationResult])
COMPARISONS = TypeAdapter(list[CohortComparison])


def read_cached(cache: ResultCache | None, key: str, adapter: TypeAdapter) -> Any | None:
    """Read and validate a cached value; any failure is a miss."""
    if cache is None:
        return None
    try:
        payload = cache.get(key)
        if payload is None:
            return None
        return adapter.validate_python(payload)
    except Exception as e:
        logger.warning("cache_read_failed", key=key, error=str(e))
        return None


def write_cached(
    cache: ResultCache | None,
    key: str,
    value: Any,
    adapter: TypeAdapter,
    ttl_seconds: int,
) -> None:
    if cache is None:
        return
    try:
        cache.set(key, adapter.dump_python(value, mode="json", by_alias=True), ttl_seconds)
    except Exception as e:
        logger.warning("cache_write_failed", key=key, error=str(e))


def invalidate(cache: ResultCache | None, key: str) -> None:
    if cache is None:
        return
    try:
        cache.delete(key)
    except Exception as e:
        logger.warning("cache_delete_failed", key=key, error=str(e))


def cached_simulate(
    cache: ResultCache | None,
    user_id: str,
    interests: Iterable[Interest],
    effort_allocation: Mapping[str, Any],
    timeframe_weeks: int,
    ttl_seconds: int,
    simulator: GrowthSimulator | None = None,
) -> tuple[dict[str, SimulationResult], bool]:
    """Simulate, consulting the cache first.

    Returns:
        (results, served_from_cache)
    """
    key = simulation_cache_key(user_id, effort_allocation, timeframe_weeks)
    cached = read_cached(cache, key, SIMULATION_RESULTS)
    if cached is not None:
        logger.debug("simulation_cache_hit", user_id=user_id)
        return cached, True

    results = (simulator or GrowthSimulator()).simulate(
        interests, effort_allocation, timeframe_weeks
    )
    write_cached(cache, key, results, SIMULATION_RESULTS, ttl_seconds)
    return results, False


def cached_compare(
    cache: ResultCache | None,
    subject: UserRecord,
    population: Iterable[UserRecord],
    ttl_seconds: int,
    comparator: CohortComparator | None = None,
) -> tuple[list[CohortComparison], bool]:
    """Compare, consulting the cache first. Keyed by subject only.

    Returns:
        (comparisons, served_from_cache)
    """
    key = comparison_cache_key(subject.user_id)
    cached = read_cached(cache, key, COMPARISONS)
    if cached is not None:
        logger.debug("comparison_cache_hit", user_id=subject.user_id)
        return cached, True

    comparisons = (comparator or CohortComparator()).compare(subject, population)
    write_cached(cache, key, comparisons, COMPARISONS, ttl_seconds)
    return comparisons, False
