"""
Run domain models.

Contains data structures for run modes and the per-run song log.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


class RunMode(str, Enum):
    """How the session derives its target pace."""

    TARGET_PACE = "target-pace"
    FASTEST_EFFORT = "fastest-effort"
    STEADY_EFFORT = "steady-effort"

    @property
    def description(self) -> str:
        return _MODE_DESCRIPTIONS[self]


_MODE_DESCRIPTIONS = {
    RunMode.TARGET_PACE: "Set a goal pace, and the music adapts to keep you on track.",
    RunMode.FASTEST_EFFORT: "Go all out; every queued track steps the tempo up.",
    RunMode.STEADY_EFFORT: "Hold the rhythm you start the run with.",
}


@dataclass
class PlayedSong:
    """A track observed playing during the run, with the pace around it.

    pace_before is the current pace when the track started; paces collects
    every pace observation made while it played.
    """

    track_id: str
    title: str
    artist: str
    bpm: Optional[float]
    pace_before: float
    started_at: float
    paces: List[float] = field(default_factory=list)

    @property
    def pace_during(self) -> float:
        if not self.paces:
            return self.pace_before
        return sum(self.paces) / len(self.paces)

    def as_row(self) -> Tuple[str, float, float]:
        """(track_id, pace_before, pace_during) tuple for the summary sink."""
        return (self.track_id, self.pace_before, self.pace_during)


@dataclass(frozen=True)
class RunSummary:
    """Final state of a run, handed to the session summary sink."""

    mode: RunMode
    target_pace: Optional[float]
    start_time: float
    duration_seconds: float
    distance_m: float
    average_pace: float
    songs: Tuple[PlayedSong, ...]

    def rows(self) -> List[Tuple[str, float, float]]:
        return [song.as_row() for song in self.songs]
