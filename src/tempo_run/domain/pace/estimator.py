"""
Pace estimation from a stream of positional fixes.

Turns noisy GPS samples into distance, elapsed time and a pace signal
smoothed over the last few observations.
"""

import math
from typing import Optional

from loguru import logger

from .models import PaceState, PositionSample

EARTH_RADIUS_M = 6371000.0

# (1000 m / 60 s): converts m/s into min/km via pace = METERS_PER_KM_PER_MINUTE / speed
METERS_PER_KM_PER_MINUTE = 1000.0 / 60.0


def haversine_m(a_lat: float, a_lon: float, b_lat: float, b_lon: float) -> float:
    """Great-circle distance in meters between two WGS84 points."""
    phi1 = math.radians(a_lat)
    phi2 = math.radians(b_lat)
    dphi = math.radians(b_lat - a_lat)
    dlmb = math.radians(b_lon - a_lon)

    s = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(min(1.0, s)))


def speed_to_pace(speed_mps: float) -> float:
    """Convert meters/second into minutes/kilometer (0.0 when not moving)."""
    if speed_mps <= 0:
        return 0.0
    return METERS_PER_KM_PER_MINUTE / speed_mps


def compute_average_pace(elapsed_seconds: float, distance_m: float) -> float:
    """Overall pace in min/km, 0.0 when either time or distance is zero."""
    elapsed_minutes = elapsed_seconds / 60.0
    distance_km = distance_m / 1000.0
    if elapsed_minutes <= 0 or distance_km <= 0:
        return 0.0
    return elapsed_minutes / distance_km


class PaceEstimator:
    """Derives instantaneous and smoothed pace from positional samples.

    The first valid sample only establishes a baseline; every later sample
    contributes distance and (when time has advanced) one pace observation.
    Invalid or out-of-order samples are dropped without raising, since GPS
    jitter is expected.
    """

    def __init__(self, start_time: float):
        self.start_time = start_time
        self.state = PaceState()
        self._last_sample: Optional[PositionSample] = None
        self.observations = 0  # Pace observations appended to the window

    @property
    def last_sample(self) -> Optional[PositionSample]:
        return self._last_sample

    def accept(self, sample: PositionSample) -> bool:
        """Apply a sample to the pace state.

        Args:
            sample: Positional fix from the location source

        Returns:
            True if the sample was applied, False if it was dropped
        """
        if not sample.is_valid:
            logger.debug(f"Dropping sample with negative accuracy at {sample.timestamp}")
            return False

        previous = self._last_sample
        if previous is None:
            self._last_sample = sample
            return True

        if sample.timestamp <= previous.timestamp:
            logger.debug(
                f"Dropping out-of-order sample: {sample.timestamp} <= {previous.timestamp}"
            )
            return False

        delta_distance = haversine_m(
            previous.latitude, previous.longitude, sample.latitude, sample.longitude
        )
        self.state.total_distance_m += delta_distance

        delta_time = sample.timestamp - previous.timestamp
        if delta_time > 0:
            pace = speed_to_pace(delta_distance / delta_time)
            self.state.recent_paces.append(pace)
            self.observations += 1
            window = self.state.recent_paces
            self.state.current_pace = sum(window) / len(window)

        self._last_sample = sample
        return True

    def tick(self, now: float) -> None:
        """Refresh elapsed time and average pace.

        Args:
            now: Current time in seconds since the epoch
        """
        self.state.elapsed_seconds = max(0.0, now - self.start_time)
        self.state.average_pace = compute_average_pace(
            self.state.elapsed_seconds, self.state.total_distance_m
        )
