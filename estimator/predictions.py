# RIR-adjusted Epley formula for 1RM prediction
# Formula: 1RM = w * (1 + (reps + rir) / 30)
# reps + rir is the number of reps the lifter could have done to failure,
# so a set of 5 @ RIR 2 is treated like 7 reps to failure.
# The formula is the same for every lift type.

from typing import Iterable, List

from .constants import EPLEY_REPS_DIVISOR
from .models import InvalidInputError, LiftType, TrainingSet


def estimate_1rm_from_set(training_set: TrainingSet) -> float:
    """
    Calculates the estimated 1 Rep Max for a single set.
    TrainingSet construction already guarantees weight > 0, reps >= 1 and rir >= 0,
    so no further bounds checking happens here. The result is not rounded.
    """
    effective_reps = training_set.reps + training_set.rir
    return training_set.weight * (1 + effective_reps / EPLEY_REPS_DIVISOR)


def estimate_1rm_from_sets(sets: Iterable[TrainingSet]) -> List[float]:
    return [estimate_1rm_from_set(s) for s in sets]


def estimate_1rm_for_lift(training_set: TrainingSet, lift_type: LiftType) -> float:
    """Like estimate_1rm_from_set, but rejects a set logged for a different lift."""
    if training_set.lift_type is not lift_type:
        raise InvalidInputError(
            f"Set lift type ({training_set.lift_type.value}) does not match requested lift type ({lift_type.value})"
        )
    return estimate_1rm_from_set(training_set)
