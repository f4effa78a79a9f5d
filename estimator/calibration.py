"""
Calibration and hard-reset logic.

Calibration nudges formula-derived estimates toward what a lifter actually
tested. Two policies exist and are interchangeable through CalibrationStrategy:

- DerivedFactorCalibration computes a gentle factor from the most recent
  tested max and the average estimated 1RM, clamped to [0.85, 1.15].
- StoredCalibration applies a per-lift multiplier from a Calibration record
  to every non-zero baseline, whatever the tested-max situation.

The hard reset pulls an estimate toward the most recent tested max with a
weight that decays with the age of the test.
"""
from __future__ import annotations

import logging
from datetime import datetime
from statistics import mean
from typing import Protocol, Sequence, Tuple

from .constants import (
    CALIBRATION_INTERCEPT,
    CALIBRATION_MAX_FACTOR,
    CALIBRATION_MIN_FACTOR,
    CALIBRATION_SLOPE,
    DEFAULT_CALIBRATION_FACTOR,
    HARD_RESET_MAX_AGE_DAYS,
    HARD_RESET_SCHEDULE,
    IMPROVEMENT_RATIO,
    IMPROVEMENT_RECENT_TEST_WEIGHT,
    RECENT_TEST_DAYS,
)
from .filtering import days_between, filter_by_lift, most_recent_tested_max
from .models import BaselineEstimate, Calibration, LiftType, TestedMax, TrainingSet, UncertaintyRange
from .predictions import estimate_1rm_from_sets

logger = logging.getLogger(__name__)


def calculate_calibration_factor(tested_max: TestedMax | None, average_estimated_1rm: float) -> float:
    """
    Derived-factor policy.
    factor = (tested / average) * 0.1 + 0.9, clamped to [0.85, 1.15].
    Returns 1.0 when there is no tested max or the average is not positive.
    """
    if tested_max is None or average_estimated_1rm <= 0:
        return DEFAULT_CALIBRATION_FACTOR

    ratio = tested_max.weight / average_estimated_1rm
    factor = ratio * CALIBRATION_SLOPE + CALIBRATION_INTERCEPT
    return max(CALIBRATION_MIN_FACTOR, min(CALIBRATION_MAX_FACTOR, factor))


def derive_calibration(lift_type: LiftType, sets: Sequence[TrainingSet], tests: Sequence[TestedMax]) -> float:
    """
    Derived factor for one lift from raw records.
    Uses the most recent tested max of the lift and the plain (unweighted)
    mean of the per-set estimates of that lift. Other lifts are ignored.
    """
    tested_max = most_recent_tested_max(tests, lift_type)
    if tested_max is None:
        return DEFAULT_CALIBRATION_FACTOR

    estimates = estimate_1rm_from_sets(filter_by_lift(sets, lift_type))
    if not estimates:
        return DEFAULT_CALIBRATION_FACTOR
    return calculate_calibration_factor(tested_max, mean(estimates))


def apply_calibration(estimate: float, factor: float) -> float:
    return estimate * factor


class CalibrationStrategy(Protocol):
    """Anything that can produce and apply a per-lift calibration factor."""

    # False: used only as the fallback for tests older than 90 days.
    # True: scales every finished non-zero baseline.
    applies_to_every_baseline: bool

    def factor_for(self, lift_type: LiftType, average_estimated_1rm: float, tested_max: TestedMax | None) -> float:
        ...

    def apply(self, estimate: float, lift_type: LiftType, tested_max: TestedMax | None) -> float:
        ...


class DerivedFactorCalibration:
    """Factor derived from the gap between the tested max and the estimate."""

    applies_to_every_baseline = False

    def factor_for(self, lift_type: LiftType, average_estimated_1rm: float, tested_max: TestedMax | None) -> float:
        if tested_max is not None and tested_max.lift_type is not lift_type:
            # A test for another lift says nothing about this one
            return DEFAULT_CALIBRATION_FACTOR
        return calculate_calibration_factor(tested_max, average_estimated_1rm)

    def apply(self, estimate: float, lift_type: LiftType, tested_max: TestedMax | None) -> float:
        return apply_calibration(estimate, self.factor_for(lift_type, estimate, tested_max))


class StoredCalibration:
    """Per-lift multipliers from a stored Calibration record."""

    applies_to_every_baseline = True

    def __init__(self, calibration: Calibration | None = None):
        self.calibration = calibration if calibration is not None else Calibration()

    def factor_for(self, lift_type: LiftType, average_estimated_1rm: float, tested_max: TestedMax | None) -> float:
        return self.calibration.for_lift(lift_type)

    def apply(self, estimate: float, lift_type: LiftType, tested_max: TestedMax | None) -> float:
        return apply_calibration(estimate, self.factor_for(lift_type, estimate, tested_max))


def hard_reset_weights(days_since_test: float) -> Tuple[float, float]:
    """Returns (weight on tested value, weight on estimate) for a test of this age."""
    for max_days, tested_weight in HARD_RESET_SCHEDULE:
        if days_since_test <= max_days:
            return tested_weight, 1.0 - tested_weight
    return 0.0, 1.0


def apply_hard_reset(estimate: float, tested_max: TestedMax | None, reference_date: datetime) -> float:
    """Blends the estimate toward the tested max. No tested max, or one older than 90 days, is a no-op."""
    if tested_max is None:
        return estimate

    days_since_test = days_between(tested_max.timestamp, reference_date)
    tested_weight, estimate_weight = hard_reset_weights(days_since_test)
    if tested_weight == 0:
        return estimate
    return tested_weight * tested_max.weight + estimate_weight * estimate


def apply_tested_max_policy(
    estimate: float,
    lift_type: LiftType,
    tested_max: TestedMax | None,
    reference_date: datetime,
    strategy: CalibrationStrategy | None = None
) -> float:
    """
    Combines a workout-derived estimate with the most recent tested max.

    Order of the checks:
    1. No tested max: the estimate is returned unchanged.
    2. Test at most 90 days old and the estimate more than 10% above it:
       the lifter has clearly improved. Trust the estimate, except when the
       test is at most 30 days old, where 10% of the tested value is blended in.
    3. Test at most 90 days old, no clear improvement: decayed hard reset.
    4. Test older than 90 days: calibrate through the fallback strategy (the
       derived factor unless another fallback strategy is given), then apply
       the decayed hard reset (which leaves the value alone at that age).

    Strategies that apply to every baseline are not used here; see
    calibrate_estimate.
    """
    if tested_max is None:
        logger.debug(f"{lift_type.value}: no tested max, keeping estimate {estimate:.2f}")
        return estimate

    days_since_test = days_between(tested_max.timestamp, reference_date)

    if days_since_test <= HARD_RESET_MAX_AGE_DAYS:
        if estimate > tested_max.weight * IMPROVEMENT_RATIO:
            if days_since_test <= RECENT_TEST_DAYS:
                blended = (
                    IMPROVEMENT_RECENT_TEST_WEIGHT * tested_max.weight
                    + (1.0 - IMPROVEMENT_RECENT_TEST_WEIGHT) * estimate
                )
                logger.debug(
                    f"{lift_type.value}: improved past recent test ({days_since_test:.1f}d), "
                    f"blending {estimate:.2f} -> {blended:.2f}"
                )
                return blended
            logger.debug(f"{lift_type.value}: improved past test ({days_since_test:.1f}d), trusting estimate")
            return estimate

        reset = apply_hard_reset(estimate, tested_max, reference_date)
        logger.debug(f"{lift_type.value}: hard reset toward {tested_max.weight:.2f}, {estimate:.2f} -> {reset:.2f}")
        return reset

    if strategy is None or strategy.applies_to_every_baseline:
        strategy = DerivedFactorCalibration()
    calibrated = strategy.apply(estimate, lift_type, tested_max)
    logger.debug(
        f"{lift_type.value}: test is {days_since_test:.1f}d old, calibrated {estimate:.2f} -> {calibrated:.2f}"
    )
    return apply_hard_reset(calibrated, tested_max, reference_date)


def calibrate_estimate(
    estimate: BaselineEstimate,
    strategy: CalibrationStrategy | None,
    tested_max: TestedMax | None = None
) -> BaselineEstimate:
    """
    Applies a whole-baseline strategy to a finished estimate.

    The uncertainty range is scaled by the same factor, so the baseline stays
    inside it. Empty estimates and fallback-only strategies pass through.
    """
    if strategy is None or not strategy.applies_to_every_baseline or not estimate.has_data:
        return estimate

    factor = strategy.factor_for(estimate.lift_type, estimate.baseline_1rm, tested_max)
    if factor == DEFAULT_CALIBRATION_FACTOR:
        return estimate

    logger.debug(f"{estimate.lift_type.value}: stored calibration x{factor:.3f}")
    return BaselineEstimate(
        lift_type=estimate.lift_type,
        baseline_1rm=estimate.baseline_1rm * factor,
        uncertainty_range=UncertaintyRange(
            low=estimate.uncertainty_range.low * factor,
            high=estimate.uncertainty_range.high * factor,
        ),
        confidence=estimate.confidence,
    )
