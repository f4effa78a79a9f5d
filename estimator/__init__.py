"""Per-lift 1RM estimation engine."""
from .baseline import estimate_all_lifts, estimate_baseline_for_lift, estimate_one_rm_with_category
from .calibration import CalibrationStrategy, DerivedFactorCalibration, StoredCalibration
from .models import (
    BaselineEstimate,
    Calibration,
    EstimationResult,
    InvalidInputError,
    LiftType,
    Sex,
    StrengthCategory,
    StrengthCategoryType,
    TestedMax,
    TrainingSet,
    UncertaintyRange,
    UserProfile,
)
from .strength import get_strength_category

__all__ = [
    'BaselineEstimate',
    'Calibration',
    'CalibrationStrategy',
    'DerivedFactorCalibration',
    'EstimationResult',
    'InvalidInputError',
    'LiftType',
    'Sex',
    'StoredCalibration',
    'StrengthCategory',
    'StrengthCategoryType',
    'TestedMax',
    'TrainingSet',
    'UncertaintyRange',
    'UserProfile',
    'estimate_all_lifts',
    'estimate_baseline_for_lift',
    'estimate_one_rm_with_category',
    'get_strength_category',
]
