"""Encouraging feedback for peer comparisons.

Every band reads as growth-oriented; there is no discouraging template.
"""

from life_leveling.models.interest import AgeRange, CommitmentLevel

# (lower bound inclusive, template), checked top-down
MESSAGE_BANDS: tuple[tuple[int, str], ...] = (
    (
        90,
        "Amazing! You're in the top 10% of {commitment} {interest} enthusiasts "
        "aged {age_range}. Keep up the fantastic work! 🌟",
    ),
    (
        75,
        "Great job! You're in the top 25% of {commitment} {interest} learners "
        "in your age group ({age_range}). You're doing really well! 🎉",
    ),
    (
        50,
        "You're doing well! You're above average compared to other {commitment} "
        "{interest} {age_group} aged {age_range}. Keep exploring and growing! 💪",
    ),
    (
        25,
        "You're on a great learning journey! Many {commitment} {interest} "
        "{age_group} in your age group ({age_range}) are at similar levels. "
        "Every step forward counts! 🚀",
    ),
    (
        0,
        "Every expert was once a beginner! You're building your {interest} "
        "skills alongside other {commitment} learners aged {age_range}. Keep going! 🌱",
    ),
)


def age_group_noun(age_range: AgeRange) -> str:
    if age_range.max <= 12:
        return "kids"
    elif age_range.max <= 18:
        return "teens"
    else:
        return "people"


def encouraging_message(
    percentile: int,
    intent_level: CommitmentLevel,
    interest: str,
    age_range: AgeRange,
) -> str:
    """Pick the message for a percentile band: [90,100], [75,90), [50,75), [25,50), [0,25)."""
    for lower_bound, template in MESSAGE_BANDS:
        if percentile >= lower_bound:
            break
    return template.format(
        commitment=intent_level.descriptor,
        interest=interest.lower(),
        age_group=age_group_noun(age_range),
        age_range=str(age_range),
    )
