"""Environment-driven settings for the estimator and its tools."""
import logging
import os
from dataclasses import dataclass

from .constants import DEFAULT_ACCURACY_WINDOW_KG
from .models import InvalidInputError

CALIBRATION_POLICY_DERIVED = 'derived'
CALIBRATION_POLICY_STORED = 'stored'
CALIBRATION_POLICIES = (CALIBRATION_POLICY_DERIVED, CALIBRATION_POLICY_STORED)


@dataclass(frozen=True)
class Settings:
    log_level: int = logging.INFO
    accuracy_window_kg: float = DEFAULT_ACCURACY_WINDOW_KG
    calibration_policy: str = CALIBRATION_POLICY_DERIVED


def _parse_log_level(raw: str) -> int:
    level = logging.getLevelName(raw.strip().upper())
    if not isinstance(level, int):
        raise InvalidInputError(f"ESTIMATOR_LOG_LEVEL is not a logging level: {raw!r}")
    return level


def get_settings() -> Settings:
    """Reads settings from the environment at call time."""
    log_level = _parse_log_level(os.getenv("ESTIMATOR_LOG_LEVEL", "INFO"))

    raw_window = os.getenv("ESTIMATOR_ACCURACY_WINDOW_KG")
    if raw_window is None:
        accuracy_window_kg = DEFAULT_ACCURACY_WINDOW_KG
    else:
        try:
            accuracy_window_kg = float(raw_window)
        except ValueError:
            raise InvalidInputError(f"ESTIMATOR_ACCURACY_WINDOW_KG must be a number, got {raw_window!r}")
        if accuracy_window_kg <= 0:
            raise InvalidInputError("ESTIMATOR_ACCURACY_WINDOW_KG must be positive")

    calibration_policy = os.getenv("ESTIMATOR_CALIBRATION_POLICY", CALIBRATION_POLICY_DERIVED).strip().lower()
    if calibration_policy not in CALIBRATION_POLICIES:
        raise InvalidInputError(
            f"ESTIMATOR_CALIBRATION_POLICY must be one of {CALIBRATION_POLICIES}, got {calibration_policy!r}"
        )

    return Settings(
        log_level=log_level,
        accuracy_window_kg=accuracy_window_kg,
        calibration_policy=calibration_policy,
    )
