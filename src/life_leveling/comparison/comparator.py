"""Anonymous peer cohort comparison.

Callers must only pass users who opted into comparisons (subject and peers);
the comparator does not re-check privacy preferences.
"""

from collections import defaultdict
from collections.abc import Iterable

import numpy as np
import structlog

from life_leveling.comparison.messages import encouraging_message
from life_leveling.models.comparison import CohortComparison, CohortLevelStats
from life_leveling.models.interest import (
    AgeRange,
    CommitmentLevel,
    Interest,
    SkillLevel,
    UserRecord,
)
from life_leveling.rounding import round_half_up

logger = structlog.get_logger()

CohortKey = tuple[AgeRange, str, CommitmentLevel]

_COMMITMENT_ORDER = {level: i for i, level in enumerate(CommitmentLevel)}


def calculate_percentile(subject_level: int, peer_levels: Iterable[int]) -> int:
    """Percentile of a level within a cohort, counting ties as half below.

    Args:
        subject_level: The subject's skill level (1-4).
        peer_levels: Skill levels of every peer in the cohort, subject excluded.

    Returns:
        Integer percentile in [0, 100].

    Raises:
        ValueError: If the cohort is empty.
    """
    levels = np.fromiter((int(level) for level in peer_levels), dtype=np.int64)
    if levels.size == 0:
        raise ValueError("Cannot rank against an empty cohort")

    less_count = int(np.count_nonzero(levels < subject_level))
    equal_count = int(np.count_nonzero(levels == subject_level))
    percentile = round_half_up((less_count + 0.5 * equal_count) / levels.size * 100)
    return int(max(0, min(100, percentile)))


def _peer_interest(peer: UserRecord, category: str, intent_level: CommitmentLevel) -> Interest | None:
    for interest in peer.interests:
        if interest.category == category and interest.intent_level == intent_level:
            return interest
    return None


def cohort_levels(
    subject: UserRecord,
    interest: Interest,
    population: Iterable[UserRecord],
) -> list[int]:
    """Skill levels of the subject's peers for one interest.

    A peer belongs to the cohort when the age range bucket, category and
    commitment level all match exactly. Each peer is counted once.
    """
    levels = []
    for peer in population:
        if peer.user_id == subject.user_id or peer.age_range != subject.age_range:
            continue
        match = _peer_interest(peer, interest.category, interest.intent_level)
        if match is not None:
            levels.append(int(match.current_level))
    return levels


class CohortComparator:
    """Ranks a user's interests against anonymous cohorts of peers."""

    def compare_interest(
        self,
        subject: UserRecord,
        interest: Interest,
        population: Iterable[UserRecord],
    ) -> CohortComparison | None:
        """Compare one interest; None when nobody else is in the cohort."""
        levels = cohort_levels(subject, interest, population)
        if not levels:
            return None

        percentile = calculate_percentile(int(interest.current_level), levels)
        return CohortComparison(
            interest=interest.category,
            intent_level=interest.intent_level,
            age_range=subject.age_range,
            cohort_size=len(levels),
            percentile=percentile,
            encouraging_message=encouraging_message(
                percentile, interest.intent_level, interest.category, subject.age_range
            ),
        )

    def compare(
        self,
        subject: UserRecord,
        population: Iterable[UserRecord],
    ) -> list[CohortComparison]:
        """Compare every interest of the subject.

        Args:
            subject: The user being ranked.
            population: All comparable users, grouped per user. The subject may
                appear in it and is skipped.

        Returns:
            One comparison per interest with a non-empty cohort, in the order of
            the subject's interests.
        """
        population = list(population)
        comparisons = []
        for interest in subject.interests:
            comparison = self.compare_interest(subject, interest, population)
            if comparison is not None:
                comparisons.append(comparison)

        logger.debug(
            "cohort_comparison_completed",
            interest_count=len(subject.interests),
            comparison_count=len(comparisons),
        )
        return comparisons

    def compare_category(
        self,
        subject: UserRecord,
        population: Iterable[UserRecord],
        category: str,
    ) -> CohortComparison | None:
        interest = subject.interest_for(category)
        if interest is None:
            return None
        return self.compare_interest(subject, interest, population)


def cohort_statistics(population: Iterable[UserRecord]) -> list[CohortLevelStats]:
    """Per-level head-counts for every cohort present in the population.

    The percentile stored for a level is the share of the cohort strictly
    below that level.
    """
    cohorts: dict[CohortKey, dict[SkillLevel, int]] = defaultdict(lambda: defaultdict(int))
    for user in population:
        for interest in user.interests:
            key = (user.age_range, interest.category, interest.intent_level)
            cohorts[key][interest.current_level] += 1

    def sort_key(key: CohortKey) -> tuple:
        age_range, category, intent_level = key
        return (age_range.min, age_range.max, category, _COMMITMENT_ORDER[intent_level])

    stats: list[CohortLevelStats] = []
    for key in sorted(cohorts, key=sort_key):
        age_range, category, intent_level = key
        counts = cohorts[key]
        total = sum(counts.values())
        below = 0
        for level in sorted(counts):
            stats.append(CohortLevelStats(
                age_range=age_range,
                interest_category=category,
                intent_level=intent_level,
                skill_level=level,
                user_count=counts[level],
                percentile=int(round_half_up(below / total * 100)),
                total_cohort_size=total,
            ))
            below += counts[level]
    return stats
