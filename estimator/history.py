"""
Estimate trend for the history view.

Each point re-runs the engine as of its own date, using only the records that
already existed at that date.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List, Sequence

from .baseline import estimate_baseline_for_lift
from .calibration import CalibrationStrategy
from .clock import resolve_reference_date
from .filtering import days_between, filter_available_at, filter_by_lift
from .models import BaselineEstimate, InvalidInputError, LiftType, TestedMax, TrainingSet, UserProfile

PROGRESS_WINDOW_DAYS = 30


@dataclass(frozen=True)
class HistoryPoint:
    date: datetime
    estimate: BaselineEstimate
    tested_max_weight: float | None = None  # heaviest test logged on that calendar day


@dataclass(frozen=True)
class HistoryStats:
    current_1rm: float | None
    best_1rm: float | None
    progress_30d: float | None
    total_sessions: int


def daily_reference_dates(start: datetime, end: datetime) -> List[datetime]:
    """Every day from start to end inclusive, at start's time of day."""
    dates = []
    current = start
    while current <= end:
        dates.append(current)
        current += timedelta(days=1)
    return dates


def _tested_weight_on_day(tests: Sequence[TestedMax], day: datetime) -> float | None:
    weights = [t.weight for t in tests if t.timestamp.date() == day.date()]
    return max(weights) if weights else None


def build_history(
    lift_type: LiftType,
    sets: Sequence[TrainingSet],
    tests: Sequence[TestedMax],
    profile: UserProfile,
    reference_dates: Iterable[datetime],
    calibration_strategy: CalibrationStrategy | None = None
) -> List[HistoryPoint]:
    lift_sets = filter_by_lift(sets, lift_type)
    lift_tests = filter_by_lift(tests, lift_type)

    points = []
    for reference_date in sorted(reference_dates):
        estimate = estimate_baseline_for_lift(
            lift_type,
            filter_available_at(lift_sets, reference_date),
            filter_available_at(lift_tests, reference_date),
            profile,
            reference_date,
            calibration_strategy,
        )
        points.append(HistoryPoint(
            date=reference_date,
            estimate=estimate,
            tested_max_weight=_tested_weight_on_day(lift_tests, reference_date),
        ))
    return points


def count_sessions(sets: Sequence[TrainingSet]) -> int:
    """Distinct training days."""
    return len({s.timestamp.date() for s in sets})


def summarize_history(
    points: Sequence[HistoryPoint],
    sets: Sequence[TrainingSet] = (),
    now: datetime | None = None
) -> HistoryStats:
    """
    Headline numbers for one lift's history series.

    current_1rm is the latest non-empty estimate. best_1rm is the highest
    estimate or tested max in the series. progress_30d is the change between
    the latest estimate and the last one that is at least 30 days older than
    now. Sessions are counted over the sets of the series' lift only.
    """
    lift_types = {p.estimate.lift_type for p in points}
    if len(lift_types) > 1:
        raise InvalidInputError("History points must all belong to one lift")
    lift_sets = filter_by_lift(sets, lift_types.pop()) if lift_types else []
    total_sessions = count_sessions(lift_sets)

    ordered = sorted(points, key=lambda p: p.date)
    now = resolve_reference_date(now, (p.date for p in ordered))
    with_data = [p for p in ordered if p.estimate.has_data]
    tested_weights = [p.tested_max_weight for p in ordered if p.tested_max_weight is not None]

    current = with_data[-1].estimate.baseline_1rm if with_data else None
    candidates = [p.estimate.baseline_1rm for p in with_data] + tested_weights
    best = max(candidates) if candidates else None

    progress = None
    if with_data:
        older = [p for p in with_data if days_between(p.date, now) >= PROGRESS_WINDOW_DAYS]
        if older:
            progress = current - older[-1].estimate.baseline_1rm

    return HistoryStats(
        current_1rm=current,
        best_1rm=best,
        progress_30d=progress,
        total_sessions=total_sessions,
    )
