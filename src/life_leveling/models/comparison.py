"""Peer cohort comparison output models."""

from pydantic import Field

from life_leveling.models.interest import AgeRange, CamelModel, CommitmentLevel, SkillLevel


class CohortComparison(CamelModel):
    """Where a user's skill level sits within their anonymous cohort."""

    interest: str
    intent_level: CommitmentLevel
    age_range: AgeRange
    cohort_size: int = Field(ge=1)
    percentile: int = Field(ge=0, le=100)
    encouraging_message: str


class CohortLevelStats(CamelModel):
    """Aggregate head-count for one skill level within one cohort."""

    age_range: AgeRange
    interest_category: str
    intent_level: CommitmentLevel
    skill_level: SkillLevel
    user_count: int
    percentile: int
    total_cohort_size: int
