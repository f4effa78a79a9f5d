"""
Records consumed and produced by the estimation engine.

Every record that belongs to a lift carries its LiftType explicitly; there is
no implicit default lift. Records are frozen dataclasses and are validated on
construction, so engine functions can trust the values they receive.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict


class InvalidInputError(ValueError):
    """Raised for malformed numeric arguments or a lift type mismatch."""


class LiftType(Enum):
    BENCH = 'bench'
    SQUAT = 'squat'
    DEADLIFT = 'deadlift'
    POWERCLEAN = 'powerclean'


LIFT_DISPLAY_NAMES: Dict[LiftType, str] = {
    LiftType.BENCH: 'Bench Press',
    LiftType.SQUAT: 'Back Squat',
    LiftType.DEADLIFT: 'Deadlift (Conventional)',
    LiftType.POWERCLEAN: 'Power Clean',
}


def lift_display_name(lift_type: LiftType) -> str:
    return LIFT_DISPLAY_NAMES[lift_type]


def parse_lift_type(value: Any) -> LiftType:
    """Returns the LiftType for an enum member or its string value."""
    if isinstance(value, LiftType):
        return value
    if isinstance(value, str):
        try:
            return LiftType(value.strip().lower())
        except ValueError:
            pass
    raise InvalidInputError(f"Unknown lift type: {value!r}")


class Sex(Enum):
    MALE = 'male'
    FEMALE = 'female'
    OTHER = 'other'


class StrengthCategoryType(Enum):
    NOVICE = 'novice'
    INTERMEDIATE = 'intermediate'
    ADVANCED = 'advanced'
    ELITE = 'elite'


# Band order used by the classifier, lowest first
CATEGORY_ORDER = [
    StrengthCategoryType.NOVICE,
    StrengthCategoryType.INTERMEDIATE,
    StrengthCategoryType.ADVANCED,
    StrengthCategoryType.ELITE,
]


def _is_positive_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value > 0


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _require_lift_type(value: Any) -> None:
    if not isinstance(value, LiftType):
        raise InvalidInputError(f"lift_type must be a LiftType, got {value!r}")


def _require_timestamp(value: Any) -> None:
    if not isinstance(value, datetime):
        raise InvalidInputError(f"timestamp must be a datetime, got {value!r}")


@dataclass(frozen=True)
class TrainingSet:
    """One logged attempt at a given weight, reps and reps-in-reserve."""
    id: str
    lift_type: LiftType
    timestamp: datetime
    weight: float
    reps: int
    rir: int

    def __post_init__(self):
        if not isinstance(self.id, str) or not self.id.strip():
            raise InvalidInputError("Set id must be provided")
        _require_lift_type(self.lift_type)
        _require_timestamp(self.timestamp)
        if not _is_positive_number(self.weight):
            raise InvalidInputError(f"Weight must be a positive number, got {self.weight!r}")
        if not _is_int(self.reps) or self.reps <= 0:
            raise InvalidInputError(f"Reps must be a positive integer, got {self.reps!r}")
        if not _is_int(self.rir) or self.rir < 0:
            raise InvalidInputError(f"RIR must be a non-negative integer, got {self.rir!r}")


@dataclass(frozen=True)
class TestedMax:
    """An actually completed single-rep maximal lift."""
    __test__ = False  # keep pytest from collecting this as a test class

    id: str
    lift_type: LiftType
    timestamp: datetime
    weight: float

    def __post_init__(self):
        if not isinstance(self.id, str) or not self.id.strip():
            raise InvalidInputError("Tested max id must be provided")
        _require_lift_type(self.lift_type)
        _require_timestamp(self.timestamp)
        if not _is_positive_number(self.weight):
            raise InvalidInputError(f"Weight must be a positive number, got {self.weight!r}")


@dataclass(frozen=True)
class UserProfile:
    age: int
    sex: Sex
    bodyweight: float

    def __post_init__(self):
        if not _is_positive_number(self.age):
            raise InvalidInputError(f"Age must be a positive number, got {self.age!r}")
        if not isinstance(self.sex, Sex):
            raise InvalidInputError(f"sex must be a Sex, got {self.sex!r}")
        if not _is_positive_number(self.bodyweight):
            raise InvalidInputError(f"Bodyweight must be a positive number, got {self.bodyweight!r}")


def _default_factors() -> Dict[LiftType, float]:
    return {lift_type: 1.0 for lift_type in LiftType}


@dataclass(frozen=True)
class Calibration:
    """Stored per-lift multipliers. Lifts without an entry use 1.0."""
    factors: Dict[LiftType, float] = field(default_factory=_default_factors)

    def __post_init__(self):
        for lift_type, factor in self.factors.items():
            _require_lift_type(lift_type)
            if not _is_positive_number(factor):
                raise InvalidInputError(
                    f"Calibration for {lift_type.value} must be a positive number, got {factor!r}"
                )

    def for_lift(self, lift_type: LiftType) -> float:
        return float(self.factors.get(lift_type, 1.0))

    def with_factor(self, lift_type: LiftType, factor: float) -> 'Calibration':
        factors = dict(self.factors)
        factors[lift_type] = factor
        return replace(self, factors=factors)


@dataclass(frozen=True)
class UncertaintyRange:
    low: float
    high: float

    def __post_init__(self):
        if self.low < 0 or self.high < self.low:
            raise InvalidInputError(
                f"Uncertainty range must satisfy 0 <= low <= high, got ({self.low}, {self.high})"
            )


@dataclass(frozen=True)
class BaselineEstimate:
    lift_type: LiftType
    baseline_1rm: float
    uncertainty_range: UncertaintyRange
    confidence: float

    def __post_init__(self):
        _require_lift_type(self.lift_type)
        if self.baseline_1rm < 0:
            raise InvalidInputError("Baseline 1RM must be non-negative")
        if not 0.0 <= self.confidence <= 1.0:
            raise InvalidInputError("Confidence must be between 0 and 1")
        if self.baseline_1rm == 0 and (self.uncertainty_range.low != 0 or self.uncertainty_range.high != 0):
            raise InvalidInputError("A zero baseline must carry a 0-0 uncertainty range")

    @classmethod
    def empty(cls, lift_type: LiftType) -> 'BaselineEstimate':
        """The 'no usable estimate yet' value."""
        return cls(lift_type, 0.0, UncertaintyRange(0.0, 0.0), 0.0)

    @property
    def has_data(self) -> bool:
        return self.baseline_1rm > 0


@dataclass(frozen=True)
class StrengthCategory:
    category: StrengthCategoryType
    ratio: float
    min_ratio: float | None = None
    max_ratio: float | None = None


@dataclass(frozen=True)
class EstimationResult:
    estimate: BaselineEstimate
    strength_category: StrengthCategory

    @property
    def lift_type(self) -> LiftType:
        return self.estimate.lift_type

    @property
    def baseline_1rm(self) -> float:
        return self.estimate.baseline_1rm
