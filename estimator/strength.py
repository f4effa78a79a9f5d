"""
Strength classification by 1RM / bodyweight ratio.

Thresholds are data (constants.STRENGTH_THRESHOLDS), keyed by lift and then by
sex. A sex key that is not listed for a lift, including 'other', resolves to
the lift's 'default' table, which matches the male table for every lift.
"""
from __future__ import annotations

import math
from typing import Any, Sequence, Tuple

from .constants import CATEGORY_DESCRIPTIONS, DEFAULT_SEX_KEY, STRENGTH_THRESHOLDS
from .models import CATEGORY_ORDER, InvalidInputError, LiftType, Sex, StrengthCategory, StrengthCategoryType


def _require_positive_finite(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInputError(f"{name} must be a positive number, got {value!r}")
    if not math.isfinite(value) or value <= 0:
        raise InvalidInputError(f"{name} must be a positive number, got {value!r}")
    return float(value)


def calculate_one_rm_ratio(one_rm: float, bodyweight: float) -> float:
    bodyweight = _require_positive_finite(bodyweight, "Bodyweight")
    one_rm = _require_positive_finite(one_rm, "1RM")
    return one_rm / bodyweight


def thresholds_for(lift_type: LiftType, sex: Sex | str | None) -> Tuple[float, ...]:
    """Ordered band upper bounds (novice, intermediate, advanced) for a lift and sex."""
    by_sex = STRENGTH_THRESHOLDS[lift_type.value]
    if isinstance(sex, Sex):
        key = sex.value
    elif isinstance(sex, str):
        key = sex.strip().lower()
    else:
        key = DEFAULT_SEX_KEY
    return tuple(by_sex.get(key, by_sex[DEFAULT_SEX_KEY]))


def classify_ratio(ratio: float, thresholds: Sequence[float]) -> StrengthCategoryType:
    """First band whose upper bound is strictly greater than the ratio, else elite."""
    for category, upper_bound in zip(CATEGORY_ORDER, thresholds):
        if ratio < upper_bound:
            return category
    return StrengthCategoryType.ELITE


def _band_limits(category: StrengthCategoryType, thresholds: Sequence[float]) -> Tuple[float | None, float | None]:
    index = CATEGORY_ORDER.index(category)
    min_ratio = thresholds[index - 1] if index > 0 else None
    max_ratio = thresholds[index] if index < len(thresholds) else None
    return min_ratio, max_ratio


def get_strength_category(one_rm: float, bodyweight: float, lift_type: LiftType, sex: Sex | str | None) -> StrengthCategory:
    """
    Classifies a 1RM relative to bodyweight.

    Raises:
        InvalidInputError: if one_rm or bodyweight is not a finite positive number.
    """
    ratio = calculate_one_rm_ratio(one_rm, bodyweight)
    thresholds = thresholds_for(lift_type, sex)
    category = classify_ratio(ratio, thresholds)
    min_ratio, max_ratio = _band_limits(category, thresholds)
    return StrengthCategory(category=category, ratio=ratio, min_ratio=min_ratio, max_ratio=max_ratio)


def placeholder_category(lift_type: LiftType, sex: Sex | str | None) -> StrengthCategory:
    """Neutral novice result for when there is no usable 1RM at all."""
    thresholds = thresholds_for(lift_type, sex)
    return StrengthCategory(category=StrengthCategoryType.NOVICE, ratio=0.0, max_ratio=thresholds[0])


def category_description(category: StrengthCategoryType | str) -> str:
    key = category.value if isinstance(category, StrengthCategoryType) else str(category).strip().lower()
    return CATEGORY_DESCRIPTIONS.get(key, CATEGORY_DESCRIPTIONS[StrengthCategoryType.NOVICE.value])
