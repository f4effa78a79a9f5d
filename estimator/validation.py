"""
Offline accuracy check for the estimator.

Every tested max is replayed against the engine using only the sets and tests
of the same lift that were logged strictly before it, and the estimate the
engine would have shown is compared with what was actually lifted.

Usage:
    estimator-validate export.json [--policy stored] [--accuracy-window-kg 2.5]

The export is a JSON object:
    {"profile": {"age": 30, "sex": "male", "bodyweight": 80},
     "sets": [{"id": "...", "lift_type": "bench", "timestamp": "2024-01-02T10:00:00",
               "weight": 100, "reps": 5, "rir": 1}, ...],
     "tests": [{"id": "...", "lift_type": "bench", "timestamp": "...", "weight": 120}, ...],
     "calibration": {"bench": 1.02}}          # optional
"""
from __future__ import annotations

import argparse
import json
import logging
import math
import sys
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Sequence, Tuple

from .baseline import estimate_baseline_for_lift
from .calibration import CalibrationStrategy, DerivedFactorCalibration, StoredCalibration
from .config import CALIBRATION_POLICIES, CALIBRATION_POLICY_STORED, get_settings
from .constants import ACCURACY_PERCENT_WINDOW, DEFAULT_ACCURACY_WINDOW_KG
from .filtering import filter_available_at, filter_by_lift
from .models import (
    Calibration,
    InvalidInputError,
    LiftType,
    Sex,
    TestedMax,
    TrainingSet,
    UserProfile,
    lift_display_name,
    parse_lift_type,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationPair:
    tested_1rm: float
    estimated_1rm: float
    test_date: datetime | None = None
    lift_type: LiftType | None = None
    notes: str | None = None


@dataclass(frozen=True)
class ValidationMetrics:
    average_absolute_error: float
    average_percentage_error: float
    root_mean_square_error: float
    within_5_percent: int
    within_x_kg: int
    total_pairs: int
    accuracy_5_percent: float
    accuracy_x_kg: float


@dataclass(frozen=True)
class PairAnalysis:
    absolute_error: float
    percentage_error: float
    within_5_percent: bool
    within_x_kg: bool
    overestimate: bool


def build_validation_pairs(
    sets: Sequence[TrainingSet],
    tests: Sequence[TestedMax],
    profile: UserProfile,
    calibration_strategy: CalibrationStrategy | None = None
) -> List[ValidationPair]:
    pairs = []
    for tested in sorted(tests, key=lambda t: t.timestamp):
        lift_type = tested.lift_type
        sets_before = filter_available_at(filter_by_lift(sets, lift_type), tested.timestamp, inclusive=False)
        tests_before = filter_available_at(filter_by_lift(tests, lift_type), tested.timestamp, inclusive=False)

        estimate = estimate_baseline_for_lift(
            lift_type, sets_before, tests_before, profile, tested.timestamp, calibration_strategy
        )
        pairs.append(ValidationPair(
            tested_1rm=tested.weight,
            estimated_1rm=estimate.baseline_1rm,
            test_date=tested.timestamp,
            lift_type=lift_type,
            notes=f"Based on {len(sets_before)} sets and {len(tests_before)} previous tests",
        ))
    return pairs


def analyze_validation_pair(pair: ValidationPair, accuracy_window_kg: float = DEFAULT_ACCURACY_WINDOW_KG) -> PairAnalysis:
    absolute_error = abs(pair.tested_1rm - pair.estimated_1rm)
    percentage_error = absolute_error / pair.tested_1rm * 100
    return PairAnalysis(
        absolute_error=absolute_error,
        percentage_error=percentage_error,
        within_5_percent=percentage_error <= ACCURACY_PERCENT_WINDOW,
        within_x_kg=absolute_error <= accuracy_window_kg,
        overestimate=pair.estimated_1rm > pair.tested_1rm,
    )


def compute_validation_metrics(
    pairs: Sequence[ValidationPair],
    accuracy_window_kg: float = DEFAULT_ACCURACY_WINDOW_KG
) -> ValidationMetrics:
    """Aggregate error metrics. Pairs with no estimate (0) stay in and count as misses."""
    total = len(pairs)
    if total == 0:
        return ValidationMetrics(0.0, 0.0, 0.0, 0, 0, 0, 0.0, 0.0)

    analyses = [analyze_validation_pair(p, accuracy_window_kg) for p in pairs]
    within_5 = sum(1 for a in analyses if a.within_5_percent)
    within_x = sum(1 for a in analyses if a.within_x_kg)

    return ValidationMetrics(
        average_absolute_error=sum(a.absolute_error for a in analyses) / total,
        average_percentage_error=sum(a.percentage_error for a in analyses) / total,
        root_mean_square_error=math.sqrt(sum(a.absolute_error ** 2 for a in analyses) / total),
        within_5_percent=within_5,
        within_x_kg=within_x,
        total_pairs=total,
        accuracy_5_percent=within_5 / total * 100,
        accuracy_x_kg=within_x / total * 100,
    )


def format_validation_report(
    metrics: ValidationMetrics,
    accuracy_window_kg: float = DEFAULT_ACCURACY_WINDOW_KG,
    pairs: Sequence[ValidationPair] = ()
) -> str:
    """Plain-text report. With pairs, a per-lift breakdown is appended."""
    window = f"{accuracy_window_kg:g}"
    lines = [
        "=== 1RM Estimation Validation Metrics ===",
        f"Total Validation Pairs: {metrics.total_pairs}",
        "",
        "Error Metrics:",
        f"  Average Absolute Error: {metrics.average_absolute_error:.2f} kg",
        f"  Average Percentage Error: {metrics.average_percentage_error:.2f}%",
        f"  Root Mean Square Error: {metrics.root_mean_square_error:.2f} kg",
        "",
        "Accuracy Windows:",
        f"  Within ±5%: {metrics.within_5_percent}/{metrics.total_pairs} ({metrics.accuracy_5_percent:.1f}%)",
        f"  Within ±{window} kg: {metrics.within_x_kg}/{metrics.total_pairs} ({metrics.accuracy_x_kg:.1f}%)",
    ]

    lifts = [lift_type for lift_type in LiftType if any(p.lift_type is lift_type for p in pairs)]
    if lifts:
        lines += ["", "By Lift:"]
    for lift_type in lifts:
        lift_metrics = compute_validation_metrics([p for p in pairs if p.lift_type is lift_type], accuracy_window_kg)
        lines.append(
            f"  {lift_display_name(lift_type)}: {lift_metrics.total_pairs} pairs, "
            f"MAE {lift_metrics.average_absolute_error:.2f} kg, "
            f"within ±5% {lift_metrics.accuracy_5_percent:.1f}%"
        )
    return "\n".join(lines)


def export_validation_pairs_json(pairs: Sequence[ValidationPair]) -> str:
    export_data = [
        {
            'tested_1rm': p.tested_1rm,
            'estimated_1rm': p.estimated_1rm,
            'test_date': p.test_date.isoformat() if p.test_date else None,
            'lift_type': p.lift_type.value if p.lift_type else None,
            'notes': p.notes,
        }
        for p in pairs
    ]
    return json.dumps(export_data, indent=2)


# --- Export file loading (consumer side only; the engine itself does no I/O) ---

def _parse_timestamp(raw: Any) -> datetime:
    if isinstance(raw, str) and raw.endswith('Z'):
        # JavaScript's toISOString() marks UTC with a trailing Z
        raw = raw[:-1] + '+00:00'
    try:
        return datetime.fromisoformat(raw)
    except (TypeError, ValueError):
        raise InvalidInputError(f"Invalid timestamp: {raw!r}")


def _parse_sex(raw: Any) -> Sex:
    # Anything unrecognised is 'other', which classifies with the default table
    try:
        return Sex(str(raw).strip().lower())
    except ValueError:
        return Sex.OTHER


def parse_records(data: Dict[str, Any]) -> Tuple[UserProfile, List[TrainingSet], List[TestedMax], Calibration | None]:
    try:
        raw_profile = data['profile']
        profile = UserProfile(
            age=raw_profile['age'],
            sex=_parse_sex(raw_profile.get('sex')),
            bodyweight=raw_profile['bodyweight'],
        )
        sets = [
            TrainingSet(
                id=str(s['id']),
                lift_type=parse_lift_type(s['lift_type']),
                timestamp=_parse_timestamp(s['timestamp']),
                weight=s['weight'],
                reps=s['reps'],
                rir=s['rir'],
            )
            for s in data.get('sets', [])
        ]
        tests = [
            TestedMax(
                id=str(t['id']),
                lift_type=parse_lift_type(t['lift_type']),
                timestamp=_parse_timestamp(t['timestamp']),
                weight=t['weight'],
            )
            for t in data.get('tests', [])
        ]
        calibration = None
        if data.get('calibration'):
            calibration = Calibration({parse_lift_type(k): v for k, v in data['calibration'].items()})
    except KeyError as e:
        raise InvalidInputError(f"Missing field in export: {e}")
    except (TypeError, AttributeError) as e:
        # A list or scalar where the export needs an object
        raise InvalidInputError(f"Malformed export: {e}")

    return profile, sets, tests, calibration


def load_records(path: str) -> Tuple[UserProfile, List[TrainingSet], List[TestedMax], Calibration | None]:
    with open(path, encoding='utf-8') as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise InvalidInputError("Export must be a JSON object")
    return parse_records(data)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="estimator-validate",
        description="Replay tested maxima against the 1RM estimator and report its accuracy.",
    )
    parser.add_argument("export", help="Path to a JSON export with profile, sets, tests and optional calibration")
    parser.add_argument(
        "--accuracy-window-kg", type=float, default=None,
        help="Absolute accuracy window in kg (default: ESTIMATOR_ACCURACY_WINDOW_KG or 5)",
    )
    parser.add_argument(
        "--policy", choices=CALIBRATION_POLICIES, default=None,
        help="Calibration policy (default: ESTIMATOR_CALIBRATION_POLICY or derived)",
    )
    parser.add_argument("--no-export", action="store_true", help="Only print the report, not the pairs as JSON")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    logging.basicConfig(level=settings.log_level)

    accuracy_window_kg = settings.accuracy_window_kg if args.accuracy_window_kg is None else args.accuracy_window_kg
    if accuracy_window_kg <= 0:
        logger.error("--accuracy-window-kg must be positive")
        return 2
    policy = args.policy or settings.calibration_policy

    try:
        profile, sets, tests, calibration = load_records(args.export)
    except (OSError, json.JSONDecodeError, InvalidInputError) as e:
        logger.error(f"Could not load records from {args.export}: {e}")
        return 1

    if policy == CALIBRATION_POLICY_STORED:
        strategy = StoredCalibration(calibration)
    else:
        strategy = DerivedFactorCalibration()

    if not tests:
        logger.warning("No tested maxima found. Log some tested maxima to validate estimates.")

    pairs = build_validation_pairs(sets, tests, profile, strategy)
    metrics = compute_validation_metrics(pairs, accuracy_window_kg)
    logger.info(f"Validated {metrics.total_pairs} tested maxima against {len(sets)} sets")

    print(format_validation_report(metrics, accuracy_window_kg, pairs))
    if not args.no_export:
        print()
        print(export_validation_pairs_json(pairs))
    return 0


if __name__ == '__main__':
    sys.exit(main())
