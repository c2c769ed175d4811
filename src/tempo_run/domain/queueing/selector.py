"""
Adaptive queue selection.

Picks the next track so its tempo nudges the runner toward the target:
a runner slower than target gets a faster track than the one playing,
otherwise a slower one. Among the closest tempo fits one is picked at
random so queues don't become fully predictable.
"""

import random
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from loguru import logger

from tempo_run.domain.library.catalog import TrackCatalog
from tempo_run.domain.library.models import Track

# BPM assumed for the playing track when it is unknown or unresolved
DEFAULT_CURRENT_BPM = 115.0

# Tempo step applied to the playing track's BPM
BPM_STEP = 10.0

# Number of best-scoring candidates the random pick is drawn from
TOP_CANDIDATES = 5

# Emits the queue command for a chosen track; returns success
QueueSink = Callable[[Track], bool]


def compute_ideal_bpm(current_bpm: float, pace_delta: float) -> float:
    """Target tempo for the next track.

    Args:
        current_bpm: BPM of the playing track
        pace_delta: current pace - target pace (min/km). Positive means the
            runner is slower than wanted.

    Returns:
        current_bpm + 10 when slower than target, else current_bpm - 10
    """
    if pace_delta > 0:
        return current_bpm + BPM_STEP
    return current_bpm - BPM_STEP


def score_candidates(candidates: List[Track], ideal_bpm: float) -> List[Tuple[Track, float]]:
    """Score tracks by distance from the ideal tempo, best first.

    Tracks without a BPM are left out. Ties keep catalog order.
    """
    scored = [
        (track, abs(track.bpm - ideal_bpm)) for track in candidates if track.bpm is not None
    ]
    return sorted(scored, key=lambda pair: pair[1])


@dataclass(frozen=True)
class Selection:
    """Outcome of one selection, kept for logging and the run log."""

    track: Track
    current_bpm: float
    ideal_bpm: float
    pace_delta: float
    score: float


class AdaptiveQueueSelector:
    """Chooses and queues the next track for a run session.

    choose() is pure selection plus queued-set bookkeeping and is meant to
    run under the session's lock; emit() performs the external queue call
    and may be run outside it.
    """

    def __init__(self, sink: Optional[QueueSink] = None, rng: Optional[random.Random] = None):
        self.sink = sink
        self.rng = rng or random.Random()

    def choose(
        self, catalog: TrackCatalog, current_pace: float, target_pace: float
    ) -> Optional[Selection]:
        """Pick the next track and mark it queued.

        Returns:
            Selection, or None when no eligible track has a BPM
        """
        current = catalog.current_track
        current_bpm = (
            current.bpm if current is not None and current.bpm is not None else DEFAULT_CURRENT_BPM
        )
        pace_delta = current_pace - target_pace
        ideal_bpm = compute_ideal_bpm(current_bpm, pace_delta)

        logger.info(
            f"🎯 Current BPM: {current_bpm} | Current Pace: {current_pace:.2f} | "
            f"Target Pace: {target_pace:.2f} | Ideal BPM: {ideal_bpm}"
        )

        candidates = catalog.candidates()
        if not candidates:
            logger.info("❌ No unplayed songs left to queue")
            return None

        scored = score_candidates(candidates, ideal_bpm)
        top = scored[:TOP_CANDIDATES]
        if not top:
            logger.info(
                f"❌ None of {len(candidates)} eligible tracks has a BPM yet; nothing queued"
            )
            return None

        track, score = self.rng.choice(top)
        catalog.mark_queued(track.id)

        return Selection(
            track=track,
            current_bpm=current_bpm,
            ideal_bpm=ideal_bpm,
            pace_delta=pace_delta,
            score=score,
        )

    def emit(self, selection: Selection) -> bool:
        """Send the queue command for a selection.

        Failures are logged and reported as False; the track stays in the
        queued-set either way.
        """
        track = selection.track
        if self.sink is None:
            logger.debug(f"No queue sink configured; {track.id} selected but not sent")
            return False

        try:
            ok = bool(self.sink(track))
        except Exception:
            logger.exception(f"Queue command failed for {track.id}")
            return False

        if ok:
            logger.info(f"✅ Queued: {track.title} by {track.artist} (BPM: {track.bpm})")
        else:
            logger.warning(f"Queue command rejected for {track.title} by {track.artist}")
        return ok

    def select_next(
        self, catalog: TrackCatalog, current_pace: float, target_pace: float
    ) -> Optional[Track]:
        """Choose the next track, queue it and return it (None if nothing eligible)."""
        selection = self.choose(catalog, current_pace, target_pace)
        if selection is None:
            return None
        self.emit(selection)
        return selection.track
