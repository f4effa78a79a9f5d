import os
import sys
from datetime import datetime, timedelta

import pytest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from estimator.models import LiftType, Sex, TestedMax, TrainingSet, UserProfile

REFERENCE_DATE = datetime(2024, 6, 1, 12, 0, 0)


def _make_set(lift_type, days_ago, weight, reps, rir=0, reference_date=REFERENCE_DATE, set_id=None):
    return TrainingSet(
        id=set_id or f"{lift_type.value}-set-{days_ago}-{weight}-{reps}-{rir}",
        lift_type=lift_type,
        timestamp=reference_date - timedelta(days=days_ago),
        weight=weight,
        reps=reps,
        rir=rir,
    )


def _make_test(lift_type, days_ago, weight, reference_date=REFERENCE_DATE, test_id=None):
    return TestedMax(
        id=test_id or f"{lift_type.value}-test-{days_ago}-{weight}",
        lift_type=lift_type,
        timestamp=reference_date - timedelta(days=days_ago),
        weight=weight,
    )


@pytest.fixture()
def reference_date():
    return REFERENCE_DATE


@pytest.fixture()
def make_set():
    """Builds a TrainingSet logged `days_ago` days before the reference date."""
    return _make_set


@pytest.fixture()
def make_test():
    """Builds a TestedMax logged `days_ago` days before the reference date."""
    return _make_test


@pytest.fixture()
def male_profile():
    return UserProfile(age=30, sex=Sex.MALE, bodyweight=80.0)


@pytest.fixture()
def female_profile():
    return UserProfile(age=28, sex=Sex.FEMALE, bodyweight=80.0)


@pytest.fixture()
def single_bench_set():
    # 100kg x 5 @ RIR 0 -> 100 * (1 + 5/30) = 116.67
    return _make_set(LiftType.BENCH, 1, 100.0, 5, 0)
