"""Pace domain - turns positional fixes into a smoothed pace signal.

This domain handles:
- Great-circle distance between fixes
- Instantaneous pace and the 5-sample smoothing window
- Elapsed time and average pace
- CSV replay of recorded runs
"""

from .estimator import (
    PaceEstimator,
    compute_average_pace,
    haversine_m,
    speed_to_pace,
)
from .models import PACE_WINDOW_SIZE, PaceState, PositionSample
from .sources import ReplayLocationSource, load_samples_csv

__all__ = [
    "PACE_WINDOW_SIZE",
    "PaceEstimator",
    "PaceState",
    "PositionSample",
    "ReplayLocationSource",
    "compute_average_pace",
    "haversine_m",
    "load_samples_csv",
    "speed_to_pace",
]
