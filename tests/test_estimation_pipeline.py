from datetime import datetime, timedelta, timezone

import pytest

from estimator import (
    BaselineEstimate,
    Calibration,
    StoredCalibration,
    estimate_all_lifts,
    estimate_baseline_for_lift,
    estimate_one_rm_with_category,
)
from estimator.models import LiftType, StrengthCategoryType, TrainingSet

SINGLE_SET_1RM = 100.0 * (1 + 5 / 30)  # 116.67


# --- Insufficient data ---

def test_no_sets_gives_empty_estimate(male_profile, reference_date):
    estimate = estimate_baseline_for_lift(LiftType.BENCH, [], [], male_profile, reference_date)
    assert estimate == BaselineEstimate.empty(LiftType.BENCH)
    assert estimate.baseline_1rm == 0
    assert (estimate.uncertainty_range.low, estimate.uncertainty_range.high) == (0, 0)
    assert estimate.confidence == 0
    assert not estimate.has_data


def test_only_stale_or_other_lift_sets_gives_empty_estimate(make_set, make_test, male_profile, reference_date):
    sets = [make_set(LiftType.BENCH, 120, 100.0, 5), make_set(LiftType.SQUAT, 1, 150.0, 5)]
    tests = [make_test(LiftType.BENCH, 5, 130.0)]
    estimate = estimate_baseline_for_lift(LiftType.BENCH, sets, tests, male_profile, reference_date)
    assert estimate == BaselineEstimate.empty(LiftType.BENCH)


# --- Scenarios ---

def test_single_set_without_test(single_bench_set, male_profile, reference_date):
    estimate = estimate_baseline_for_lift(LiftType.BENCH, [single_bench_set], [], male_profile, reference_date)
    assert estimate.lift_type is LiftType.BENCH
    assert estimate.baseline_1rm == pytest.approx(116.67, abs=0.01)
    assert estimate.confidence == pytest.approx(0.6)
    half_width = estimate.uncertainty_range.high - estimate.baseline_1rm
    assert half_width >= 2.5
    assert estimate.uncertainty_range.low <= estimate.baseline_1rm <= estimate.uncertainty_range.high


def test_single_set_with_recent_heavier_test(single_bench_set, make_test, male_profile, reference_date):
    tests = [make_test(LiftType.BENCH, 1, 130.0)]
    estimate = estimate_baseline_for_lift(LiftType.BENCH, [single_bench_set], tests, male_profile, reference_date)
    # 0.7 * 130 + 0.3 * 116.67 = 126.0
    assert estimate.baseline_1rm == pytest.approx(126.0)
    assert estimate.baseline_1rm > SINGLE_SET_1RM
    # 0.5 + 0.1 (one recent set) + 0.2 (test) + 0.1 (test within 30 days)
    assert estimate.confidence == pytest.approx(0.9)


def test_improving_past_recent_test(single_bench_set, make_test, male_profile, reference_date):
    tests = [make_test(LiftType.BENCH, 10, 100.0)]
    estimate = estimate_baseline_for_lift(LiftType.BENCH, [single_bench_set], tests, male_profile, reference_date)
    # 116.67 > 110 -> 0.1 * 100 + 0.9 * 116.67 = 115
    assert estimate.baseline_1rm == pytest.approx(115.0)


def test_improving_past_older_test(single_bench_set, make_test, male_profile, reference_date):
    tests = [make_test(LiftType.BENCH, 45, 100.0)]
    estimate = estimate_baseline_for_lift(LiftType.BENCH, [single_bench_set], tests, male_profile, reference_date)
    assert estimate.baseline_1rm == pytest.approx(SINGLE_SET_1RM)
    assert estimate.confidence == pytest.approx(0.8)


def test_old_test_falls_back_to_calibration(single_bench_set, make_test, male_profile, reference_date):
    tests = [make_test(LiftType.BENCH, 120, 110.0)]
    estimate = estimate_baseline_for_lift(LiftType.BENCH, [single_bench_set], tests, male_profile, reference_date)
    # factor = (110 / 116.67) * 0.1 + 0.9 -> 116.67 * 0.9 + 11 = 116.0
    assert estimate.baseline_1rm == pytest.approx(116.0)
    assert estimate.confidence == pytest.approx(0.8)


def test_old_test_with_stored_calibration(single_bench_set, make_test, male_profile, reference_date):
    tests = [make_test(LiftType.BENCH, 120, 110.0)]
    strategy = StoredCalibration(Calibration({LiftType.BENCH: 1.1}))
    estimate = estimate_baseline_for_lift(
        LiftType.BENCH, [single_bench_set], tests, male_profile, reference_date, strategy
    )
    # Derived fallback for the old test (116.0), then the stored multiplier
    assert estimate.baseline_1rm == pytest.approx(116.0 * 1.1)


def test_stored_calibration_without_tested_max(single_bench_set, male_profile, reference_date):
    strategy = StoredCalibration(Calibration({LiftType.BENCH: 1.1}))
    plain = estimate_baseline_for_lift(LiftType.BENCH, [single_bench_set], [], male_profile, reference_date)
    calibrated = estimate_baseline_for_lift(
        LiftType.BENCH, [single_bench_set], [], male_profile, reference_date, strategy
    )
    assert calibrated.baseline_1rm == pytest.approx(128.3333, abs=0.001)
    assert calibrated.uncertainty_range.low == pytest.approx(plain.uncertainty_range.low * 1.1)
    assert calibrated.uncertainty_range.high == pytest.approx(plain.uncertainty_range.high * 1.1)
    assert calibrated.confidence == plain.confidence


def test_stored_calibration_with_recent_test(single_bench_set, make_test, male_profile, reference_date):
    tests = [make_test(LiftType.BENCH, 1, 130.0)]
    strategy = StoredCalibration(Calibration({LiftType.BENCH: 1.1, LiftType.SQUAT: 0.9}))
    estimate = estimate_baseline_for_lift(
        LiftType.BENCH, [single_bench_set], tests, male_profile, reference_date, strategy
    )
    assert estimate.baseline_1rm == pytest.approx(126.0 * 1.1)


def test_stored_calibration_leaves_empty_estimate_alone(male_profile, reference_date):
    strategy = StoredCalibration(Calibration({LiftType.BENCH: 1.1}))
    estimate = estimate_baseline_for_lift(LiftType.BENCH, [], [], male_profile, reference_date, strategy)
    assert estimate == BaselineEstimate.empty(LiftType.BENCH)


def test_recency_weighting_in_pipeline(make_set, male_profile, reference_date):
    sets = [
        make_set(LiftType.BENCH, 10, 100.0, 5),   # 116.67, weight 1.0
        make_set(LiftType.BENCH, 75, 100.0, 2),   # 106.67, weight 0.5
        make_set(LiftType.BENCH, 95, 200.0, 5),   # outside the window
    ]
    estimate = estimate_baseline_for_lift(LiftType.BENCH, sets, [], male_profile, reference_date)
    # (116.67 + 0.5 * 106.67) / 1.5 = 113.33
    assert estimate.baseline_1rm == pytest.approx(113.3333, abs=0.001)
    # one recent set and one older set: 0.5 + 0.1 + 0.05
    assert estimate.confidence == pytest.approx(0.65)


def test_set_on_window_boundary_is_included(make_set, male_profile, reference_date):
    estimate = estimate_baseline_for_lift(
        LiftType.BENCH, [make_set(LiftType.BENCH, 90, 100.0, 5)], [], male_profile, reference_date
    )
    assert estimate.baseline_1rm == pytest.approx(SINGLE_SET_1RM)
    # The set only counts as older data
    assert estimate.confidence == pytest.approx(0.55)


# --- Lift independence ---

def test_no_cross_lift_contamination(make_set, make_test, male_profile, reference_date):
    bench_sets = [make_set(LiftType.BENCH, d, 50.0, 8) for d in (2, 9, 30)]
    squat_sets = [make_set(LiftType.SQUAT, d, 150.0, 5, 1) for d in (3, 10, 70)]
    bench_tests = [make_test(LiftType.BENCH, 5, 70.0)]
    squat_tests = [make_test(LiftType.SQUAT, 40, 175.0)]

    mixed = estimate_baseline_for_lift(
        LiftType.SQUAT, bench_sets + squat_sets, bench_tests + squat_tests, male_profile, reference_date
    )
    squat_only = estimate_baseline_for_lift(LiftType.SQUAT, squat_sets, squat_tests, male_profile, reference_date)
    assert mixed == squat_only

    bench_mixed = estimate_baseline_for_lift(
        LiftType.BENCH, squat_sets + bench_sets, squat_tests + bench_tests, male_profile, reference_date
    )
    bench_only = estimate_baseline_for_lift(LiftType.BENCH, bench_sets, bench_tests, male_profile, reference_date)
    assert bench_mixed == bench_only


def test_calls_are_stateless_and_do_not_mutate_inputs(make_set, make_test, male_profile, reference_date):
    sets = [make_set(LiftType.BENCH, 3, 100.0, 5), make_set(LiftType.SQUAT, 3, 140.0, 5)]
    tests = [make_test(LiftType.BENCH, 3, 120.0)]
    sets_copy, tests_copy = list(sets), list(tests)

    first = estimate_baseline_for_lift(LiftType.BENCH, sets, tests, male_profile, reference_date)
    estimate_baseline_for_lift(LiftType.SQUAT, sets, tests, male_profile, reference_date)
    second = estimate_baseline_for_lift(LiftType.BENCH, sets, tests, male_profile, reference_date)

    assert first == second
    assert sets == sets_copy
    assert tests == tests_copy


def test_reference_date_defaults_to_now(male_profile):
    now = datetime.now(timezone.utc)
    recent = TrainingSet(id="aware", lift_type=LiftType.BENCH, timestamp=now - timedelta(days=1), weight=100.0, reps=5, rir=0)
    estimate = estimate_baseline_for_lift(LiftType.BENCH, [recent], [], male_profile)
    assert estimate.baseline_1rm == pytest.approx(SINGLE_SET_1RM)


def test_reference_date_defaults_to_now_with_naive_records(male_profile):
    now = datetime.now()
    recent = TrainingSet(id="naive", lift_type=LiftType.BENCH, timestamp=now - timedelta(days=1), weight=100.0, reps=5, rir=0)
    estimate = estimate_baseline_for_lift(LiftType.BENCH, [recent], [], male_profile)
    assert estimate.baseline_1rm == pytest.approx(SINGLE_SET_1RM)

    result = estimate_one_rm_with_category(LiftType.BENCH, [recent], [], male_profile)
    assert result.baseline_1rm == pytest.approx(SINGLE_SET_1RM)
    assert estimate_all_lifts([recent], [], male_profile)[LiftType.BENCH].baseline_1rm == pytest.approx(SINGLE_SET_1RM)


# --- Category ---

def test_estimate_with_category(single_bench_set, male_profile, reference_date):
    result = estimate_one_rm_with_category(LiftType.BENCH, [single_bench_set], [], male_profile, reference_date)
    assert result.baseline_1rm == pytest.approx(SINGLE_SET_1RM)
    # 116.67 / 80 = 1.458
    assert result.strength_category.category is StrengthCategoryType.INTERMEDIATE
    assert result.strength_category.ratio == pytest.approx(1.4583, abs=0.001)


def test_category_uses_female_table(single_bench_set, female_profile, reference_date):
    result = estimate_one_rm_with_category(LiftType.BENCH, [single_bench_set], [], female_profile, reference_date)
    # 1.458 is past the female bench elite bound of 1.3
    assert result.strength_category.category is StrengthCategoryType.ELITE


def test_category_falls_back_to_tested_max(make_test, male_profile, reference_date):
    tests = [make_test(LiftType.BENCH, 200, 130.0), make_test(LiftType.SQUAT, 1, 300.0)]
    result = estimate_one_rm_with_category(LiftType.BENCH, [], tests, male_profile, reference_date)
    assert not result.estimate.has_data
    # 130 / 80 = 1.625
    assert result.strength_category.category is StrengthCategoryType.ADVANCED


def test_category_placeholder_without_any_data(male_profile, reference_date):
    result = estimate_one_rm_with_category(LiftType.DEADLIFT, [], [], male_profile, reference_date)
    assert result.estimate == BaselineEstimate.empty(LiftType.DEADLIFT)
    assert result.strength_category.category is StrengthCategoryType.NOVICE
    assert result.strength_category.ratio == 0.0


def test_estimate_all_lifts(make_set, male_profile, reference_date):
    sets = [make_set(LiftType.BENCH, 2, 100.0, 5), make_set(LiftType.SQUAT, 2, 140.0, 5)]
    results = estimate_all_lifts(sets, [], male_profile, reference_date)
    assert set(results) == set(LiftType)
    assert results[LiftType.BENCH].baseline_1rm == pytest.approx(SINGLE_SET_1RM)
    assert results[LiftType.SQUAT].baseline_1rm == pytest.approx(140.0 * (1 + 5 / 30))
    assert not results[LiftType.POWERCLEAN].estimate.has_data

    only_bench = estimate_all_lifts(sets, [], male_profile, reference_date, lift_types=[LiftType.BENCH])
    assert list(only_bench) == [LiftType.BENCH]
