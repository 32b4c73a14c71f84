"""Trade-off analysis for an effort allocation."""

from collections.abc import Iterable, Mapping
from typing import Any

import numpy as np

from life_leveling.models.interest import Interest, SkillLevel
from life_leveling.models.simulation import Severity, TradeOff, TradeOffType
from life_leveling.simulation.simulator import effort_for, sanitize_effort
from life_leveling.simulation.tables import related_categories

FOCUS_THRESHOLD = 40.0
SYNERGY_THRESHOLD = 20.0
ADVANCED_FOCUS_THRESHOLD = 30.0
BALANCED_VARIANCE = 100.0


def _focus_severity(effort: float) -> Severity:
    if effort > 60:
        return Severity.HIGH
    elif effort > 50:
        return Severity.MEDIUM
    else:
        return Severity.LOW


def _opportunity_costs(efforts: dict[str, float]) -> list[TradeOff]:
    tradeoffs = []
    for skill, effort in efforts.items():
        if effort <= FOCUS_THRESHOLD:
            continue
        others = [e for s, e in efforts.items() if s != skill]
        avg_other = float(np.mean(others)) if others else 0.0
        tradeoffs.append(TradeOff(
            type=TradeOffType.OPPORTUNITY_COST,
            skill=skill,
            impact=effort - avg_other,
            description=f"High focus on {skill} may limit growth in other areas",
            severity=_focus_severity(effort),
        ))
    return tradeoffs


def _synergy_boosts(interests: list[Interest], allocation: Mapping[str, Any]) -> list[TradeOff]:
    held = {interest.category for interest in interests}
    tradeoffs = []
    for interest in interests:
        for related, strength in related_categories(interest.category).items():
            if related not in held:
                continue
            effort = effort_for(allocation, interest.category)
            related_effort = effort_for(allocation, related)
            if effort > SYNERGY_THRESHOLD and related_effort > SYNERGY_THRESHOLD:
                tradeoffs.append(TradeOff(
                    type=TradeOffType.SYNERGY_BOOST,
                    skill=f"{interest.category} + {related}",
                    impact=strength * min(effort, related_effort) / 100,
                    description=f"{interest.category} and {related} boost each other",
                    severity=Severity.LOW,
                ))
    return tradeoffs


def _diminishing_returns(interests: list[Interest], allocation: Mapping[str, Any]) -> list[TradeOff]:
    tradeoffs = []
    for interest in interests:
        effort = effort_for(allocation, interest.category)
        level = interest.current_level
        if level >= SkillLevel.ADVANCED and effort > ADVANCED_FOCUS_THRESHOLD:
            tradeoffs.append(TradeOff(
                type=TradeOffType.DIMINISHING_RETURNS,
                skill=interest.category,
                impact=(level - 2) * (effort / 100),
                description=f"{interest.category} is already advanced - consider diversifying",
                severity=Severity.HIGH if level == SkillLevel.EXPERT else Severity.MEDIUM,
            ))
    return tradeoffs


def analyze_tradeoffs(
    effort_allocation: Mapping[str, Any],
    interests: Iterable[Interest],
) -> list[TradeOff]:
    """Find opportunity costs, synergies, diminishing returns and balance.

    Args:
        effort_allocation: Category -> effort percentage.
        interests: The user's interests.

    Returns:
        Trade-offs ordered from high to low severity.
    """
    interests = list(interests)
    efforts = {skill: sanitize_effort(value) for skill, value in effort_allocation.items()}

    tradeoffs = _opportunity_costs(efforts)
    tradeoffs += _synergy_boosts(interests, effort_allocation)
    tradeoffs += _diminishing_returns(interests, effort_allocation)

    if efforts:
        variance = float(np.var(list(efforts.values())))
        if variance < BALANCED_VARIANCE:
            tradeoffs.append(TradeOff(
                type=TradeOffType.BALANCED_GROWTH,
                skill="All Skills",
                impact=1 - variance / BALANCED_VARIANCE,
                description="Balanced effort allocation promotes steady growth across all areas",
                severity=Severity.LOW,
            ))

    return sorted(tradeoffs, key=lambda t: t.severity.rank, reverse=True)
