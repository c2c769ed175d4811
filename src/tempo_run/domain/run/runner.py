"""
Run controller - wires a RunSession to its periodic sources.

Owns the elapsed-time ticker, the playback watcher, the location source
and the enrichment pipeline for one run, and tears them all down on stop.
"""

import threading
from typing import Callable, Iterable, List, Optional

from loguru import logger

from tempo_run.core.config import Config
from tempo_run.core.output import log
from tempo_run.domain.enrichment.pipeline import EnrichmentJob, TempoEnrichmentPipeline
from tempo_run.domain.library.models import Track
from tempo_run.domain.pace.models import PositionSample
from tempo_run.domain.pace.sources import ReplayLocationSource
from tempo_run.domain.playback.spotify_client import SpotifyPlayback
from tempo_run.domain.playback.watcher import PlaybackWatcher
from tempo_run.domain.queueing.selector import AdaptiveQueueSelector

from .models import RunMode, RunSummary
from .session import RunSession


class Ticker:
    """Calls a function on a fixed interval from a background thread."""

    def __init__(self, func: Callable[[], object], interval: float, name: str = "ticker"):
        self.func = func
        self.interval = interval
        self.name = name
        self._stop_event = threading.Event()
        self.thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self.thread and self.thread.is_alive():
            return
        self._stop_event.clear()
        self.thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self.thread.silent_logging = True
        self.thread.start()

    def stop(self) -> None:
        self._stop_event.set()
        if self.thread and self.thread.is_alive():
            self.thread.join(timeout=self.interval + 1.0)

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval):
            try:
                self.func()
            except Exception:
                logger.exception(f"{self.name} callback failed")


def validate_target_pace(config: Config, mode: RunMode, target_pace: Optional[float]) -> Optional[float]:
    """Check a requested target against the configured range.

    Returns:
        Target pace to use (config default when target-pace mode has none)

    Raises:
        ValueError: If the target is outside [min_target_pace, max_target_pace]
    """
    if mode is not RunMode.TARGET_PACE:
        return None
    target = target_pace if target_pace is not None else config.run.default_target_pace
    if not config.run.min_target_pace <= target <= config.run.max_target_pace:
        raise ValueError(
            f"Target pace {target} min/km outside "
            f"[{config.run.min_target_pace}, {config.run.max_target_pace}]"
        )
    return target


class RunController:
    """Starts and stops everything a run session needs."""

    def __init__(
        self,
        config: Config,
        mode: RunMode,
        target_pace: Optional[float] = None,
        playback: Optional[SpotifyPlayback] = None,
        pipeline: Optional[TempoEnrichmentPipeline] = None,
    ):
        self.config = config
        self.playback = playback or SpotifyPlayback(config.spotify)
        self.pipeline = pipeline or TempoEnrichmentPipeline(config.enrichment, config.ai)
        self.selector = AdaptiveQueueSelector(sink=self.playback.queue)
        self.session = RunSession(
            mode=mode,
            target_pace=validate_target_pace(config, RunMode(mode), target_pace),
            selector=self.selector,
        )
        self.watcher = PlaybackWatcher(
            source=self.playback.now_playing,
            on_track_change=self.session.handle_track_change,
            interval=config.run.poll_interval_seconds,
        )
        self.ticker = Ticker(
            self.session.tick, config.run.tick_interval_seconds, name="elapsed-ticker"
        )
        self.location: Optional[ReplayLocationSource] = None
        self.enrichment_job: Optional[EnrichmentJob] = None
        self._started = False

    # ==================== PREPARATION ====================

    def load_playlist(self, playlist_id: Optional[str] = None) -> List[Track]:
        """Load the playlist into the session catalog.

        Without an explicit ID the playlist is detected from the current
        playback context.
        """
        if playlist_id is None:
            playlist_id = self.playback.detect_playlist()
            if playlist_id is None:
                log("❗️ Could not detect playlist. Play a Spotify playlist first.", level="warning")
                return []

        tracks = self.playback.load_playlist(playlist_id)
        self.session.load_catalog(tracks, playlist_id)
        log(f"✓ Loaded {len(tracks)} tracks from playlist {playlist_id}", level="info")
        return tracks

    def enrich(self, wait: bool = True, timeout: Optional[float] = None) -> EnrichmentJob:
        """Resolve BPMs for the loaded catalog."""
        catalog = self.session.catalog
        self.enrichment_job = self.pipeline.enrich_catalog(catalog)
        if wait and not self.enrichment_job.wait(timeout):
            logger.warning("Enrichment still running; starting run with partial BPMs")
        log(
            f"🎶 BPM resolved for {catalog.resolved_count()}/{len(catalog)} tracks",
            level="info",
        )
        return self.enrichment_job

    # ==================== LIFECYCLE ====================

    def start(self, samples: Optional[Iterable[PositionSample]] = None, realtime: bool = True) -> None:
        """Start ticker, location feed and playback watcher.

        The first watcher poll happens immediately, so the track playing at
        start triggers the first selection.
        """
        if self._started:
            return
        self._started = True
        self.session.begin()

        self.ticker.start()
        if samples is not None:
            self.location = ReplayLocationSource(
                samples, self.session.accept_sample, realtime=realtime
            )
            self.location.start()
        self.watcher.start()
        logger.info(f"Run started (mode={self.session.mode.value})")

    def stop(self) -> RunSummary:
        """Stop every source and end the session.

        In-flight enrichment may finish, but the closed catalog discards
        its results.
        """
        if self.location:
            self.location.stop()
        self.watcher.stop()
        self.ticker.stop()
        self.session.stop()
        self.pipeline.shutdown(wait=False)
        self._started = False
        return self.session.summary()
