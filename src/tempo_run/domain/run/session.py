"""
Run session - the single owner of one run's mutable state.

Location samples, elapsed-time ticks and track changes arrive from
different threads; every mutation of the pace state, the catalog and the
queued-set goes through this object's lock. External calls (the queue
command) are made after the lock is released.
"""

import threading
import time
from typing import Callable, Iterable, List, Optional, Tuple

from loguru import logger

from tempo_run.domain.library.catalog import TrackCatalog
from tempo_run.domain.library.models import Track
from tempo_run.domain.pace.estimator import PaceEstimator
from tempo_run.domain.pace.models import PaceState, PositionSample
from tempo_run.domain.playback.models import NowPlaying
from tempo_run.domain.queueing.selector import AdaptiveQueueSelector, Selection

from .models import PlayedSong, RunMode, RunSummary

# Target used in fastest-effort mode: any moving runner is slower than this
FASTEST_EFFORT_TARGET = 0.0

UNKNOWN_TRACK_ID = "unknown"


class RunSession:
    """Aggregate for one run: pace, catalog, target and song log.

    Created at run start and discarded at run end; nothing is shared
    between sessions.
    """

    def __init__(
        self,
        mode: RunMode = RunMode.TARGET_PACE,
        target_pace: Optional[float] = None,
        catalog: Optional[TrackCatalog] = None,
        selector: Optional[AdaptiveQueueSelector] = None,
        clock: Callable[[], float] = time.time,
        start_time: Optional[float] = None,
    ):
        mode = RunMode(mode)
        if mode is RunMode.TARGET_PACE and (target_pace is None or target_pace <= 0):
            raise ValueError("target-pace mode requires a positive target pace")

        self.mode = mode
        self._target_pace = target_pace if mode is RunMode.TARGET_PACE else None
        self.catalog = catalog if catalog is not None else TrackCatalog()
        self.selector = selector if selector is not None else AdaptiveQueueSelector()
        self.clock = clock
        self.start_time = start_time if start_time is not None else clock()

        self._lock = threading.RLock()
        self._estimator = PaceEstimator(self.start_time)
        self._played: List[PlayedSong] = []
        self._steady_target: Optional[float] = None
        self._active = True

        logger.info(
            f"Run session created: mode={mode.value}, target={self._target_pace}"
        )

    def begin(self, now: Optional[float] = None) -> None:
        """Mark the moment the run actually starts.

        Restarts the clock and clears the pace state, so time spent loading
        and enriching the playlist is not counted as running.
        """
        with self._lock:
            self.start_time = now if now is not None else self.clock()
            self._estimator = PaceEstimator(self.start_time)
            logger.info(f"Run started at {self.start_time:.0f}")

    # ==================== PACE ====================

    def accept_sample(self, sample: PositionSample) -> bool:
        """Apply a location sample. Invalid or stale samples are dropped."""
        with self._lock:
            if not self._active:
                return False
            before = self._estimator.observations
            applied = self._estimator.accept(sample)
            if applied and self._estimator.observations > before and self._played:
                self._played[-1].paces.append(self._estimator.state.current_pace)
            return applied

    def tick(self, now: Optional[float] = None) -> None:
        """Refresh elapsed time and average pace."""
        with self._lock:
            if not self._active:
                return
            self._estimator.tick(now if now is not None else self.clock())

    def pace_state(self) -> PaceState:
        """Snapshot of the current pace state."""
        with self._lock:
            return self._estimator.state.snapshot()

    @property
    def current_pace(self) -> float:
        with self._lock:
            return self._estimator.state.current_pace

    # ==================== TARGET ====================

    @property
    def target_pace(self) -> Optional[float]:
        """Target pace the selector aims for, per mode.

        steady-effort returns None until a non-zero pace has been locked in.
        """
        with self._lock:
            if self.mode is RunMode.TARGET_PACE:
                return self._target_pace
            if self.mode is RunMode.FASTEST_EFFORT:
                return FASTEST_EFFORT_TARGET
            return self._steady_target

    def _effective_target(self, current_pace: float) -> float:
        if self.mode is RunMode.STEADY_EFFORT and self._steady_target is None:
            if current_pace > 0:
                self._steady_target = current_pace
                logger.info(f"Steady target locked at {current_pace:.2f} min/km")
            else:
                return current_pace
        target = self.target_pace
        return target if target is not None else current_pace

    # ==================== CATALOG ====================

    def load_catalog(self, tracks: Iterable[Track], playlist_id: Optional[str] = None) -> int:
        """Replace the catalog; the queued-set starts empty again."""
        with self._lock:
            return self.catalog.load(tracks, playlist_id)

    # ==================== TRACK CHANGES ====================

    def _resolve_current(self, playing: NowPlaying) -> Tuple[Optional[Track], Optional[str]]:
        track = self.catalog.get(playing.track_id) if playing.track_id else None
        if track is None:
            track = self.catalog.find_by_identity(playing.identity)
        current_id = track.id if track else playing.track_id
        return track, current_id

    def handle_track_change(self, playing: NowPlaying) -> Optional[Track]:
        """Record the new track and queue the next one.

        Selection happens under the lock; the queue command is sent after it
        is released.

        Returns:
            The track chosen for the queue, or None if nothing was eligible
        """
        with self._lock:
            if not self._active:
                return None

            track, current_id = self._resolve_current(playing)
            self.catalog.set_current(current_id)

            current_pace = self._estimator.state.current_pace
            self._played.append(
                PlayedSong(
                    track_id=current_id or UNKNOWN_TRACK_ID,
                    title=playing.title,
                    artist=playing.artist,
                    bpm=track.bpm if track else None,
                    pace_before=current_pace,
                    started_at=self.clock(),
                )
            )

            selection: Optional[Selection] = self.selector.choose(
                self.catalog, current_pace, self._effective_target(current_pace)
            )

        if selection is None:
            return None
        self.selector.emit(selection)
        return selection.track

    # ==================== LIFECYCLE ====================

    @property
    def active(self) -> bool:
        return self._active

    def stop(self) -> None:
        """End the session. Later samples and track changes are ignored."""
        with self._lock:
            if not self._active:
                return
            self._estimator.tick(self.clock())
            self._active = False
            self.catalog.close()
            logger.info(
                f"Run session stopped: {self._estimator.state.distance_km:.2f} km in "
                f"{self._estimator.state.elapsed_seconds:.0f}s, {len(self._played)} songs"
            )

    @property
    def played_songs(self) -> List[PlayedSong]:
        with self._lock:
            return list(self._played)

    def summary(self) -> RunSummary:
        """Summary for the session summary sink."""
        with self._lock:
            state = self._estimator.state
            return RunSummary(
                mode=self.mode,
                target_pace=self.target_pace,
                start_time=self.start_time,
                duration_seconds=state.elapsed_seconds,
                distance_m=state.total_distance_m,
                average_pace=state.average_pace,
                songs=tuple(self._played),
            )

    def summary_rows(self) -> List[Tuple[str, float, float]]:
        """(track_id, pace_before, pace_during) for every song played."""
        return self.summary().rows()
