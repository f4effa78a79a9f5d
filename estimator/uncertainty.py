"""
Uncertainty range and confidence score for a baseline estimate.

Both functions expect data that has already been filtered to a single lift.
"""
import math
from typing import Sequence

from .constants import (
    CONFIDENCE_BASE,
    CONFIDENCE_MAX_OLDER_BONUS,
    CONFIDENCE_MAX_RECENT_BONUS,
    CONFIDENCE_PER_OLDER_SET,
    CONFIDENCE_PER_RECENT_SET,
    CONFIDENCE_RECENT_TEST_BONUS,
    CONFIDENCE_TESTED_MAX_BONUS,
    RECENT_TEST_DAYS,
    UNCERTAINTY_BASE_FRACTION,
    UNCERTAINTY_MAX_REDUCTION,
    UNCERTAINTY_MIN_DEVIATION,
    UNCERTAINTY_REDUCTION_PER_RECENT_SET,
    UNCERTAINTY_STD_DEV_FRACTION,
)
from .models import UncertaintyRange


def population_std_dev(values: Sequence[float]) -> float:
    n = len(values)
    if n < 2:
        return 0.0
    mean_val = sum(values) / n
    return math.sqrt(sum((x - mean_val) ** 2 for x in values) / n)


def calculate_uncertainty_range(
    baseline_1rm: float,
    estimates: Sequence[float],
    recent_set_count: int
) -> UncertaintyRange:
    """
    Builds the +/- range around the baseline.

    deviation = 5% of baseline, plus half the (population) std dev of the
    per-set estimates when there are at least two of them, reduced by 2% per
    recent set (30% at most) and never narrower than 2.5.
    """
    deviation = baseline_1rm * UNCERTAINTY_BASE_FRACTION
    if len(estimates) >= 2:
        deviation += population_std_dev(estimates) * UNCERTAINTY_STD_DEV_FRACTION

    reduction = min(UNCERTAINTY_MAX_REDUCTION, recent_set_count * UNCERTAINTY_REDUCTION_PER_RECENT_SET)
    deviation *= (1 - reduction)
    deviation = max(UNCERTAINTY_MIN_DEVIATION, deviation)

    return UncertaintyRange(low=max(0.0, baseline_1rm - deviation), high=baseline_1rm + deviation)


def calculate_confidence(
    recent_set_count: int,
    older_set_count: int,
    has_tested_max: bool,
    tested_max_days_ago: float | None
) -> float:
    """Confidence score in [0, 1] from data volume and tested-max presence/recency."""
    confidence = CONFIDENCE_BASE
    confidence += min(CONFIDENCE_MAX_RECENT_BONUS, recent_set_count * CONFIDENCE_PER_RECENT_SET)
    confidence += min(CONFIDENCE_MAX_OLDER_BONUS, older_set_count * CONFIDENCE_PER_OLDER_SET)

    if has_tested_max:
        confidence += CONFIDENCE_TESTED_MAX_BONUS
        if tested_max_days_ago is not None and tested_max_days_ago <= RECENT_TEST_DAYS:
            confidence += CONFIDENCE_RECENT_TEST_BONUS

    return max(0.0, min(1.0, confidence))
