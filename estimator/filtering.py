"""
Lift and date filters over TrainingSet / TestedMax collections.

Filtering by lift is the only thing that keeps lifts independent of each
other, so every estimation path filters by lift before doing anything else.
None of these functions mutate their input; they always return new lists.
"""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, List, Sequence, TypeVar, Union

from .models import LiftType, TestedMax, TrainingSet

Record = TypeVar('Record', TrainingSet, TestedMax)

SECONDS_PER_DAY = 24 * 60 * 60


def days_between(earlier: datetime, later: datetime) -> float:
    """Fractional days from earlier to later (negative if earlier is after later)."""
    return (later - earlier).total_seconds() / SECONDS_PER_DAY


def filter_by_lift(records: Iterable[Record], lift_type: LiftType) -> List[Record]:
    return [r for r in records if r.lift_type is lift_type]


def filter_by_date_range(records: Iterable[Record], days: Union[int, float], reference_date: datetime) -> List[Record]:
    """Keeps records with timestamp >= reference_date - days."""
    cutoff = reference_date - timedelta(days=days)
    return [r for r in records if r.timestamp >= cutoff]


def filter_by_lift_and_date_range(
    records: Iterable[Record],
    lift_type: LiftType,
    days: Union[int, float],
    reference_date: datetime
) -> List[Record]:
    return filter_by_date_range(filter_by_lift(records, lift_type), days, reference_date)


def filter_available_at(records: Iterable[Record], reference_date: datetime, inclusive: bool = True) -> List[Record]:
    """
    Keeps records that already existed at reference_date.

    With inclusive=False, records stamped exactly at reference_date are dropped
    too, which is what the accuracy tool needs when it replays a tested max
    against the data logged before it.
    """
    if inclusive:
        return [r for r in records if r.timestamp <= reference_date]
    return [r for r in records if r.timestamp < reference_date]


def most_recent_tested_max(tests: Sequence[TestedMax], lift_type: LiftType) -> TestedMax | None:
    """Latest tested max for the lift; the first one wins on equal timestamps."""
    most_recent = None
    for test in filter_by_lift(tests, lift_type):
        if most_recent is None or test.timestamp > most_recent.timestamp:
            most_recent = test
    return most_recent
