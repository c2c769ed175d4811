"""
Pace domain models.

Contains data structures for positional fixes and the derived pace signal.
"""

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Tuple

# Number of recent instantaneous paces averaged into the current pace
PACE_WINDOW_SIZE = 5


@dataclass(frozen=True)
class PositionSample:
    """A single positional fix from the location source.

    Timestamps are seconds since the epoch. A negative horizontal accuracy
    marks an invalid fix.
    """

    timestamp: float
    latitude: float
    longitude: float
    horizontal_accuracy: float = 0.0

    @property
    def is_valid(self) -> bool:
        return self.horizontal_accuracy >= 0


@dataclass
class PaceState:
    """Smoothed pace signal for one run session.

    All paces are in minutes per kilometer; 0.0 means "no pace yet".
    """

    current_pace: float = 0.0
    average_pace: float = 0.0
    total_distance_m: float = 0.0
    elapsed_seconds: float = 0.0
    recent_paces: Deque[float] = field(
        default_factory=lambda: deque(maxlen=PACE_WINDOW_SIZE)
    )

    @property
    def distance_km(self) -> float:
        return self.total_distance_m / 1000.0

    def window(self) -> Tuple[float, ...]:
        """Return the recent pace window, oldest first."""
        return tuple(self.recent_paces)

    def snapshot(self) -> "PaceState":
        """Return an independent copy safe to hand to other threads."""
        return PaceState(
            current_pace=self.current_pace,
            average_pace=self.average_pace,
            total_distance_m=self.total_distance_m,
            elapsed_seconds=self.elapsed_seconds,
            recent_paces=deque(self.recent_paces, maxlen=PACE_WINDOW_SIZE),
        )
