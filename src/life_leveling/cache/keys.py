"""Cache key derivation."""

import hashlib
from collections.abc import Mapping
from typing import Any

ALLOCATION_HASH_LENGTH = 16


def _format_percent(value: Any) -> str:
    try:
        return repr(float(value))
    except (TypeError, ValueError):
        return str(value)


def hash_effort_allocation(effort_allocation: Mapping[str, Any]) -> str:
    """Stable digest of an allocation; key order does not matter.

    Percentages are normalized to float text so that 10 and 10.0 agree.
    """
    canonical = "|".join(
        f"{category}:{_format_percent(effort_allocation[category])}"
        for category in sorted(effort_allocation)
    )
    digest = hashlib.sha256(canonical.encode("utf-8")).hexdigest()
    return digest[:ALLOCATION_HASH_LENGTH]


def simulation_cache_key(
    user_id: str,
    effort_allocation: Mapping[str, Any],
    timeframe_weeks: int | None = None,
) -> str:
    parts = ["simulation", user_id]
    if timeframe_weeks is not None:
        parts.append(f"{timeframe_weeks}w")
    parts.append(hash_effort_allocation(effort_allocation))
    return ":".join(parts)


def comparison_cache_key(user_id: str) -> str:
    return f"comparison:{user_id}"


def scenarios_cache_key(user_id: str) -> str:
    return f"scenarios:{user_id}"
