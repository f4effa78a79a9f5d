"""Recency weighting of per-set 1RM estimates."""
from datetime import datetime
from typing import Sequence

from .constants import ESTIMATION_WINDOW_DAYS, OLDER_SET_WEIGHT, RECENT_SET_WEIGHT, RECENT_WINDOW_DAYS
from .filtering import days_between
from .models import InvalidInputError, TrainingSet


def recency_weight(training_set: TrainingSet, reference_date: datetime) -> float:
    """1.0 within 60 days, 0.5 within 90 days, 0.0 beyond."""
    age_days = days_between(training_set.timestamp, reference_date)
    if age_days <= RECENT_WINDOW_DAYS:
        return RECENT_SET_WEIGHT
    if age_days <= ESTIMATION_WINDOW_DAYS:
        return OLDER_SET_WEIGHT
    return 0.0


def weighted_average(sets: Sequence[TrainingSet], estimates: Sequence[float], reference_date: datetime) -> float:
    """
    Recency-weighted mean of per-set 1RM estimates.

    Args:
        sets: Sets for a single lift, already limited to the estimation window.
        estimates: One 1RM estimate per set, in the same order.
        reference_date: The date ages are measured from.

    Returns:
        The weighted mean, or 0.0 when there is nothing to weigh.
    """
    if len(sets) != len(estimates):
        raise InvalidInputError(
            f"Sets and estimates must have the same length ({len(sets)} != {len(estimates)})"
        )
    if not sets:
        return 0.0

    total_weighted = 0.0
    total_weight = 0.0
    for training_set, estimate in zip(sets, estimates):
        weight = recency_weight(training_set, reference_date)
        total_weighted += estimate * weight
        total_weight += weight

    if total_weight == 0:
        return 0.0
    return total_weighted / total_weight
