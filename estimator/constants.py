# estimator/constants.py

# Epley divisor: 1RM = w * (1 + (reps + rir) / 30)
EPLEY_REPS_DIVISOR = 30.0

# Time windows (days)
ESTIMATION_WINDOW_DAYS = 90
RECENT_WINDOW_DAYS = 60

# Recency weights used by the weighted baseline
RECENT_SET_WEIGHT = 1.0
OLDER_SET_WEIGHT = 0.5

# Derived calibration: factor = ratio * SLOPE + INTERCEPT, clamped
CALIBRATION_SLOPE = 0.1
CALIBRATION_INTERCEPT = 0.9
CALIBRATION_MIN_FACTOR = 0.85
CALIBRATION_MAX_FACTOR = 1.15
DEFAULT_CALIBRATION_FACTOR = 1.0

# Hard reset: (max days since test, weight on tested value).
# Anything older than the last bound is not reset at all.
HARD_RESET_SCHEDULE = [
    (30, 0.7),
    (60, 0.5),
    (90, 0.3),
]
HARD_RESET_MAX_AGE_DAYS = 90

# Estimate above tested * this ratio counts as a clear improvement
IMPROVEMENT_RATIO = 1.1
# Pull toward a very recent test even when the lifter has clearly improved
IMPROVEMENT_RECENT_TEST_WEIGHT = 0.1
RECENT_TEST_DAYS = 30

# Uncertainty range
UNCERTAINTY_BASE_FRACTION = 0.05
UNCERTAINTY_STD_DEV_FRACTION = 0.5
UNCERTAINTY_REDUCTION_PER_RECENT_SET = 0.02
UNCERTAINTY_MAX_REDUCTION = 0.3
UNCERTAINTY_MIN_DEVIATION = 2.5

# Confidence score
CONFIDENCE_BASE = 0.5
CONFIDENCE_PER_RECENT_SET = 0.1
CONFIDENCE_MAX_RECENT_BONUS = 0.3
CONFIDENCE_PER_OLDER_SET = 0.05
CONFIDENCE_MAX_OLDER_BONUS = 0.15
CONFIDENCE_TESTED_MAX_BONUS = 0.2
CONFIDENCE_RECENT_TEST_BONUS = 0.1

# Strength thresholds: ratio (1RM / bodyweight) upper bounds of the
# novice, intermediate and advanced bands. Elite is unbounded.
# Any sex key not listed for a lift resolves to 'default'.
DEFAULT_SEX_KEY = 'default'

STRENGTH_THRESHOLDS = {
    'bench': {
        'male': (1.0, 1.5, 2.0),
        'female': (0.7, 1.0, 1.3),
        'default': (1.0, 1.5, 2.0),
    },
    'squat': {
        'male': (1.5, 2.0, 2.5),
        'female': (1.0, 1.5, 1.9),
        'default': (1.5, 2.0, 2.5),
    },
    'deadlift': {
        'male': (2.0, 2.5, 3.0),
        'female': (1.25, 1.75, 2.25),
        'default': (2.0, 2.5, 3.0),
    },
    'powerclean': {
        'male': (0.75, 1.0, 1.25),
        'female': (0.5, 0.75, 0.95),
        'default': (0.75, 1.0, 1.25),
    },
}

CATEGORY_DESCRIPTIONS = {
    'novice': "You're building a solid foundation. Every rep counts!",
    'intermediate': "Great progress! You're developing real strength.",
    'advanced': "Impressive strength! You're in the top tier of lifters.",
    'elite': "Exceptional strength! You're among the strongest lifters.",
}

# Offline validation
DEFAULT_ACCURACY_WINDOW_KG = 5.0
ACCURACY_PERCENT_WINDOW = 5.0
