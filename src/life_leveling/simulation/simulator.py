"""Deterministic skill growth forecasting over a hypothetical effort allocation."""

import math
from collections.abc import Iterable, Mapping
from typing import Any

import structlog

from life_leveling.models.interest import CommitmentLevel, Interest, SkillLevel
from life_leveling.models.simulation import SimulationResult
from life_leveling.rounding import round_half_up
from life_leveling.simulation.tables import (
    COMMITMENT_MULTIPLIERS,
    DIMINISHING_RETURNS,
    EFFORT_OVERDRIVE,
    LEVEL_MULTIPLIERS,
    MAX_HORIZON_WEEKS,
    MAX_LEVEL,
    SYNERGY_CAP,
    WEEKS_PER_YEAR,
    related_categories,
)

logger = structlog.get_logger()


def sanitize_effort(value: Any) -> float:
    """Coerce an effort percentage; anything negative, non-finite or non-numeric is 0."""
    try:
        effort = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(effort) or effort < 0:
        return 0.0
    return effort


def effort_for(effort_allocation: Mapping[str, Any], category: str) -> float:
    return sanitize_effort(effort_allocation.get(category, 0))


def effort_multiplier(effort: float) -> float:
    """Roughly linear in effort, saturating at 1.0."""
    return min(1.0, (effort / 100) * EFFORT_OVERDRIVE)


def base_growth_rate(level: SkillLevel, effort: float) -> float:
    return LEVEL_MULTIPLIERS[level] * effort_multiplier(effort)


def commitment_multiplier(intent_level: CommitmentLevel) -> float:
    return COMMITMENT_MULTIPLIERS.get(intent_level, 1.0)


def diminishing_returns(level: SkillLevel) -> float:
    return DIMINISHING_RETURNS[level]


def synergy_bonus(
    category: str,
    held_categories: set[str],
    effort_allocation: Mapping[str, Any],
) -> float:
    """Growth boost from effort spent on related interests the user also holds.

    Args:
        category: Category being forecast.
        held_categories: Every category the user has an interest in.
        effort_allocation: Category -> effort percentage.

    Returns:
        Fractional bonus in [0, 0.5].
    """
    total = 0.0
    for related, strength in related_categories(category).items():
        if related in held_categories:
            total += (effort_for(effort_allocation, related) / 100) * strength
    return max(0.0, min(SYNERGY_CAP, total))


def _horizon_weeks(timeframe_weeks: Any) -> float:
    """Horizon in weeks, clamped to [0, MAX_HORIZON_WEEKS]. NaN and non-numeric are 0."""
    try:
        weeks = float(timeframe_weeks)
    except (TypeError, ValueError):
        return 0.0
    except OverflowError:
        # ints beyond float range
        weeks = math.inf if timeframe_weeks > 0 else -math.inf
    if math.isnan(weeks) or weeks < 0:
        return 0.0
    return min(weeks, float(MAX_HORIZON_WEEKS))


class GrowthSimulator:
    """Projects each interest's skill level under an effort allocation.

    The model is a product of independent factors: a base rate from the
    current level and effort, a commitment multiplier, a diminishing-returns
    factor, and a synergy bonus from related interests. The annualized rate is
    scaled to the requested horizon and the result capped at Expert.
    """

    def forecast(
        self,
        interest: Interest,
        effort_allocation: Mapping[str, Any],
        timeframe_weeks: float,
        held_categories: set[str],
    ) -> SimulationResult:
        """Forecast a single interest.

        Args:
            interest: The interest being forecast.
            effort_allocation: Category -> effort percentage for all interests.
            timeframe_weeks: Horizon in weeks.
            held_categories: Categories of every interest the user holds.

        Returns:
            Rounded simulation result.
        """
        effort = effort_for(effort_allocation, interest.category)
        level = interest.current_level

        bonus = synergy_bonus(interest.category, held_categories, effort_allocation)
        total_growth_rate = (
            base_growth_rate(level, effort)
            * commitment_multiplier(interest.intent_level)
            * diminishing_returns(level)
            * (1 + bonus)
        )

        growth_amount = total_growth_rate * _horizon_weeks(timeframe_weeks) / WEEKS_PER_YEAR
        projected_level = min(MAX_LEVEL, level + growth_amount)
        efficiency = growth_amount / (effort / 100) if effort > 0 else 0.0

        return SimulationResult(
            projected_level=round_half_up(projected_level, 1),
            growth_rate=round_half_up(total_growth_rate, 2),
            synergy_bonus=round_half_up(bonus, 2),
            effort_efficiency=round_half_up(efficiency, 2),
        )

    def simulate(
        self,
        interests: Iterable[Interest],
        effort_allocation: Mapping[str, Any],
        timeframe_weeks: float,
    ) -> dict[str, SimulationResult]:
        """Forecast every interest the user holds.

        Categories in the allocation that the user holds no interest in get no
        entry. A later interest with a repeated category replaces the earlier one.

        Args:
            interests: The user's interests.
            effort_allocation: Category -> effort percentage (need not sum to 100).
            timeframe_weeks: Horizon in weeks.

        Returns:
            Category -> simulation result.
        """
        interests = list(interests)
        held = {interest.category for interest in interests}

        results: dict[str, SimulationResult] = {}
        for interest in interests:
            results[interest.category] = self.forecast(
                interest, effort_allocation, timeframe_weeks, held
            )

        logger.debug(
            "simulation_completed",
            interest_count=len(results),
            timeframe_weeks=timeframe_weeks,
        )
        return results


def simulate(
    interests: Iterable[Interest],
    effort_allocation: Mapping[str, Any],
    timeframe_weeks: float,
) -> dict[str, SimulationResult]:
    """Module-level shortcut for GrowthSimulator().simulate()."""
    return GrowthSimulator().simulate(interests, effort_allocation, timeframe_weeks)
