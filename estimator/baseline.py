"""
Per-lift estimation pipeline.

raw records -> lift/90-day filter -> per-set estimates -> recency-weighted
baseline -> tested-max policy -> uncertainty and confidence -> category.

Every call is independent: nothing is cached between calls and only the
records of the requested lift are ever looked at.
"""
from __future__ import annotations

import logging
from datetime import datetime
from itertools import chain
from typing import Dict, Iterable, Sequence

from .calibration import CalibrationStrategy, apply_tested_max_policy, calibrate_estimate
from .clock import resolve_reference_date
from .constants import ESTIMATION_WINDOW_DAYS, RECENT_WINDOW_DAYS
from .filtering import days_between, filter_by_date_range, filter_by_lift_and_date_range, most_recent_tested_max
from .models import BaselineEstimate, EstimationResult, LiftType, TestedMax, TrainingSet, UserProfile
from .predictions import estimate_1rm_from_sets
from .strength import get_strength_category, placeholder_category
from .uncertainty import calculate_confidence, calculate_uncertainty_range
from .weighting import weighted_average

logger = logging.getLogger(__name__)


def _timestamps(sets: Sequence[TrainingSet], tests: Sequence[TestedMax]) -> Iterable[datetime]:
    return (r.timestamp for r in chain(sets, tests))


def estimate_baseline_for_lift(
    lift_type: LiftType,
    sets: Sequence[TrainingSet],
    tests: Sequence[TestedMax],
    profile: UserProfile,
    reference_date: datetime | None = None,
    calibration_strategy: CalibrationStrategy | None = None
) -> BaselineEstimate:
    """
    Estimates the current 1RM for one lift.

    Args:
        lift_type: The lift to estimate. Records of other lifts are ignored.
        sets: Training sets for any lifts.
        tests: Tested maxima for any lifts.
        profile: The user's profile. Not used by the estimate itself; it is
                 accepted so every estimation call has the same inputs.
        reference_date: "Now" for all windowing and decay; defaults to the clock.
        calibration_strategy: The derived-factor policy (default) only runs when
                              the latest test is older than 90 days. A stored
                              per-lift calibration scales every non-zero baseline.
                              The range is scaled with it.

    Returns:
        A BaselineEstimate. With no sets for the lift in the last 90 days this
        is the empty estimate (0 baseline, 0-0 range, confidence 0).
    """
    reference_date = resolve_reference_date(reference_date, _timestamps(sets, tests))

    window_sets = filter_by_lift_and_date_range(sets, lift_type, ESTIMATION_WINDOW_DAYS, reference_date)
    if not window_sets:
        logger.debug(f"{lift_type.value}: no sets in the last {ESTIMATION_WINDOW_DAYS} days")
        return BaselineEstimate.empty(lift_type)

    estimates = estimate_1rm_from_sets(window_sets)
    workout_baseline = weighted_average(window_sets, estimates, reference_date)

    tested_max = most_recent_tested_max(tests, lift_type)
    baseline_1rm = apply_tested_max_policy(
        workout_baseline, lift_type, tested_max, reference_date, calibration_strategy
    )

    recent_set_count = len(filter_by_date_range(window_sets, RECENT_WINDOW_DAYS, reference_date))
    older_set_count = len(window_sets) - recent_set_count

    uncertainty_range = calculate_uncertainty_range(baseline_1rm, estimates, recent_set_count)

    tested_max_days_ago = days_between(tested_max.timestamp, reference_date) if tested_max is not None else None
    confidence = calculate_confidence(recent_set_count, older_set_count, tested_max is not None, tested_max_days_ago)

    logger.debug(
        f"{lift_type.value}: {len(window_sets)} sets ({recent_set_count} recent), "
        f"workout baseline {workout_baseline:.2f}, final {baseline_1rm:.2f}, confidence {confidence:.2f}"
    )

    estimate = BaselineEstimate(
        lift_type=lift_type,
        baseline_1rm=baseline_1rm,
        uncertainty_range=uncertainty_range,
        confidence=confidence,
    )
    return calibrate_estimate(estimate, calibration_strategy, tested_max)


def estimate_one_rm_with_category(
    lift_type: LiftType,
    sets: Sequence[TrainingSet],
    tests: Sequence[TestedMax],
    profile: UserProfile,
    reference_date: datetime | None = None,
    calibration_strategy: CalibrationStrategy | None = None
) -> EstimationResult:
    """
    Baseline estimate plus a strength category.

    The category uses the baseline if there is one, otherwise the most recent
    tested max for the lift, otherwise a neutral zero-ratio novice placeholder.
    """
    reference_date = resolve_reference_date(reference_date, _timestamps(sets, tests))
    estimate = estimate_baseline_for_lift(
        lift_type, sets, tests, profile, reference_date, calibration_strategy
    )

    one_rm_for_category = estimate.baseline_1rm
    if one_rm_for_category <= 0:
        tested_max = most_recent_tested_max(tests, lift_type)
        if tested_max is not None:
            one_rm_for_category = tested_max.weight

    if one_rm_for_category > 0:
        category = get_strength_category(one_rm_for_category, profile.bodyweight, lift_type, profile.sex)
    else:
        category = placeholder_category(lift_type, profile.sex)

    return EstimationResult(estimate=estimate, strength_category=category)


def estimate_all_lifts(
    sets: Sequence[TrainingSet],
    tests: Sequence[TestedMax],
    profile: UserProfile,
    reference_date: datetime | None = None,
    lift_types: Iterable[LiftType] | None = None,
    calibration_strategy: CalibrationStrategy | None = None
) -> Dict[LiftType, EstimationResult]:
    """One independent estimate per lift, all at the same reference date."""
    reference_date = resolve_reference_date(reference_date, _timestamps(sets, tests))
    if lift_types is None:
        lift_types = list(LiftType)
    return {
        lift_type: estimate_one_rm_with_category(
            lift_type, sets, tests, profile, reference_date, calibration_strategy
        )
        for lift_type in lift_types
    }
