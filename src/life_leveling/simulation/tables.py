"""Fixed lookup tables for the growth model.

All tables are read-only mappings so they can be audited and tested on their own.
"""

from collections.abc import Mapping
from types import MappingProxyType

from life_leveling.models.interest import CommitmentLevel, SkillLevel

MAX_LEVEL: float = float(SkillLevel.EXPERT)
WEEKS_PER_YEAR: int = 52
# Longer horizons are forecast as this many weeks.
MAX_HORIZON_WEEKS: int = 100 * WEEKS_PER_YEAR

# Effort above ~83% is clamped to full effectiveness.
EFFORT_OVERDRIVE: float = 1.2
SYNERGY_CAP: float = 0.5

# Lower current skill grows faster
LEVEL_MULTIPLIERS: Mapping[SkillLevel, float] = MappingProxyType({
    SkillLevel.NOVICE: 1.0,
    SkillLevel.INTERMEDIATE: 0.8,
    SkillLevel.ADVANCED: 0.6,
    SkillLevel.EXPERT: 0.4,
})

DIMINISHING_RETURNS: Mapping[SkillLevel, float] = MappingProxyType({
    SkillLevel.NOVICE: 1.0,
    SkillLevel.INTERMEDIATE: 0.9,
    SkillLevel.ADVANCED: 0.7,
    SkillLevel.EXPERT: 0.5,
})

COMMITMENT_MULTIPLIERS: Mapping[CommitmentLevel, float] = MappingProxyType({
    CommitmentLevel.CASUAL: 0.8,
    CommitmentLevel.AVERAGE: 1.0,
    CommitmentLevel.INVESTED: 1.2,
    CommitmentLevel.COMPETITIVE: 1.4,
})

# Directional: category -> {related category: strength}. Not symmetric.
SYNERGY_MAP: Mapping[str, Mapping[str, float]] = MappingProxyType({
    category: MappingProxyType(related)
    for category, related in {
        "Math": {"Technical": 0.3, "Science": 0.2},
        "Technical": {"Math": 0.3, "Creativity": 0.2},
        "Music": {"Math": 0.2, "Creativity": 0.3},
        "Sports": {"Health": 0.4, "Communication": 0.2},
        "Communication": {"Sports": 0.2, "Arts": 0.2},
        "Creativity": {"Arts": 0.3, "Music": 0.3, "Technical": 0.2},
        "Arts": {"Creativity": 0.3, "Communication": 0.2},
        "Science": {"Math": 0.2, "Technical": 0.2},
        "Health": {"Sports": 0.4, "Cooking": 0.2},
        "Languages": {"Communication": 0.3, "Reading": 0.2},
        "Reading": {"Writing": 0.4, "Languages": 0.2},
        "Writing": {"Reading": 0.4, "Communication": 0.3},
        "Gaming": {"Technical": 0.2},
        "Cooking": {"Health": 0.2, "Creativity": 0.2},
    }.items()
})


def related_categories(category: str) -> Mapping[str, float]:
    """Synergy partners for a category (empty when it has none)."""
    return SYNERGY_MAP.get(category, MappingProxyType({}))
