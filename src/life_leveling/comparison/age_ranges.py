"""Age range buckets used to group users into cohorts."""

from life_leveling.models.interest import AgeRange

AGE_RANGES: tuple[AgeRange, ...] = (
    AgeRange(min=6, max=9),
    AgeRange(min=10, max=12),
    AgeRange(min=13, max=15),
    AgeRange(min=16, max=18),
    AgeRange(min=19, max=25),
    AgeRange(min=26, max=35),
    AgeRange(min=36, max=50),
    AgeRange(min=51, max=99),
)


def bucket_age_range(age_min: int, age_max: int) -> AgeRange:
    """Map a self-reported age range onto one of the fixed buckets.

    The first bucket that fully contains the range wins; otherwise the bucket
    with the largest inclusive overlap; otherwise the youngest bucket.

    Args:
        age_min: Lower bound of the user's age range.
        age_max: Upper bound of the user's age range.

    Returns:
        The bucket to use as the cohort key.
    """
    for bucket in AGE_RANGES:
        if age_min >= bucket.min and age_max <= bucket.max:
            return bucket

    best = AGE_RANGES[0]
    best_overlap = 0
    for bucket in AGE_RANGES:
        overlap = max(0, min(age_max, bucket.max) - max(age_min, bucket.min) + 1)
        if overlap > best_overlap:
            best_overlap = overlap
            best = bucket
    return best
