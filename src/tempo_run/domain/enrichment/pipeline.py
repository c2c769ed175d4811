"""
Tempo enrichment pipeline.

Resolves (title, artist) pairs to BPM values: the lookup site first, the
generative fallback only when the lookup site gives no value. Each path gets
a bounded number of immediate attempts. A playlist is enriched concurrently
on a worker pool and the caller is notified once every track is terminal.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional

import requests
from loguru import logger

from tempo_run.core.config import AIConfig, EnrichmentConfig
from tempo_run.core.output import mark_silent
from tempo_run.domain.ai import client as ai_client
from tempo_run.domain.library.catalog import TrackCatalog
from tempo_run.domain.library.models import Track

from .exceptions import EnrichmentError
from .lookup import fetch_lookup_bpm

# Single attempt against one source: (title, artist) -> bpm, raising on failure
BpmSource = Callable[[str, str], float]

SOURCE_LOOKUP = "lookup"
SOURCE_AI = "ai"


@dataclass
class EnrichmentRequest:
    """One lookup attempt chain for a single track and source."""

    title: str
    artist: str
    retries_remaining: int


@dataclass(frozen=True)
class EnrichmentResult:
    """Terminal outcome for one track. bpm is None when unavailable."""

    track_id: str
    bpm: Optional[float]
    source: Optional[str] = None

    @property
    def resolved(self) -> bool:
        return self.bpm is not None


class CompletionBarrier:
    """Counts outstanding lookups and fires a callback exactly once.

    The callback runs on the thread that completes the last lookup (or
    immediately on the creating thread when nothing is outstanding).
    """

    def __init__(self, count: int, on_complete: Optional[Callable[[], None]] = None):
        self._remaining = count
        self._on_complete = on_complete
        self._lock = threading.Lock()
        self._fired = False
        self.done = threading.Event()
        if count <= 0:
            self._fire()

    @property
    def remaining(self) -> int:
        return self._remaining

    def arrive(self) -> None:
        with self._lock:
            if self._remaining <= 0:
                return
            self._remaining -= 1
            should_fire = self._remaining == 0
        if should_fire:
            self._fire()

    def _fire(self) -> None:
        with self._lock:
            if self._fired:
                return
            self._fired = True
        try:
            if self._on_complete:
                self._on_complete()
        except Exception:
            logger.exception("Enrichment completion callback failed")
        finally:
            self.done.set()


@dataclass
class EnrichmentJob:
    """Handle for a batch of concurrent lookups."""

    barrier: CompletionBarrier
    results: Dict[str, EnrichmentResult] = field(default_factory=dict)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until every track is terminal. Returns False on timeout."""
        return self.barrier.done.wait(timeout)

    @property
    def finished(self) -> bool:
        return self.barrier.done.is_set()


class TempoEnrichmentPipeline:
    """Resolves BPM values with fallback and bounded retries.

    Lookups for different tracks share nothing mutable, so one track
    exhausting its attempts never delays another.
    """

    def __init__(
        self,
        config: Optional[EnrichmentConfig] = None,
        ai_config: Optional[AIConfig] = None,
        lookup: Optional[BpmSource] = None,
        fallback: Optional[BpmSource] = None,
    ):
        self.config = config or EnrichmentConfig()
        self.ai_config = ai_config or AIConfig()
        self.max_attempts = self.config.max_attempts
        self._http = requests.Session()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._executor_lock = threading.Lock()

        self.lookup = lookup or self._default_lookup
        self.fallback = fallback if fallback is not None else self._default_fallback()

    def _default_lookup(self, title: str, artist: str) -> float:
        return fetch_lookup_bpm(title, artist, self.config, session=self._http)

    def _default_fallback(self) -> Optional[BpmSource]:
        if not self.ai_config.enabled:
            logger.info("AI BPM fallback disabled in config")
            return None
        if not ai_client.get_api_key(self.ai_config):
            logger.warning("No AI API key configured; BPM fallback disabled")
            return None

        client = ai_client.create_client(self.ai_config)

        def guess(title: str, artist: str) -> float:
            return ai_client.request_bpm_guess(title, artist, self.ai_config, client=client)

        return guess

    # ==================== SINGLE TRACK ====================

    def _attempt_source(
        self, source_name: str, source: BpmSource, title: str, artist: str
    ) -> Optional[float]:
        """Run up to max_attempts immediate attempts against one source."""
        request = EnrichmentRequest(
            title=title, artist=artist, retries_remaining=self.max_attempts
        )

        while request.retries_remaining > 0:
            request.retries_remaining -= 1
            attempt = self.max_attempts - request.retries_remaining
            try:
                bpm = source(request.title, request.artist)
                if bpm is not None and bpm > 0:
                    return float(bpm)
                logger.debug(f"{source_name} returned unusable BPM {bpm!r} for {title}")
            except (EnrichmentError, ai_client.AIError) as e:
                logger.debug(
                    f"🔄 {source_name} attempt {attempt}/{self.max_attempts} failed for {title}: {e}"
                )

        return None

    def resolve(self, title: str, artist: str) -> tuple[Optional[float], Optional[str]]:
        """Resolve a BPM and report which source produced it.

        Returns:
            (bpm, source) or (None, None) when both paths are exhausted
        """
        bpm = self._attempt_source(SOURCE_LOOKUP, self.lookup, title, artist)
        if bpm is not None:
            return bpm, SOURCE_LOOKUP

        if self.fallback is None:
            logger.info(f"⚠️ BPM not found for {title} and no fallback configured")
            return None, None

        logger.info(f"⚠️ Falling back to AI for {title}")
        bpm = self._attempt_source(SOURCE_AI, self.fallback, title, artist)
        if bpm is not None:
            return bpm, SOURCE_AI

        logger.warning(f"❌ Failed to fetch BPM from lookup and AI for {title} - {artist}")
        return None, None

    def resolve_bpm(self, title: str, artist: str) -> Optional[float]:
        """Resolve a track's BPM, or None when it is unavailable."""
        bpm, _ = self.resolve(title, artist)
        return bpm

    def _resolve_track(self, track: Track) -> EnrichmentResult:
        try:
            bpm, source = self.resolve(track.title, track.artist)
        except Exception:
            # A broken source must not stall the barrier
            logger.exception(f"Unexpected error enriching {track.id}")
            bpm, source = None, None
        return EnrichmentResult(track_id=track.id, bpm=bpm, source=source)

    # ==================== BATCH ====================

    def _get_executor(self) -> ThreadPoolExecutor:
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.config.max_workers,
                    thread_name_prefix="enrichment",
                    initializer=mark_silent,
                )
            return self._executor

    def enrich_tracks(
        self,
        tracks: Iterable[Track],
        on_result: Optional[Callable[[EnrichmentResult], None]] = None,
        on_complete: Optional[Callable[[Dict[str, EnrichmentResult]], None]] = None,
    ) -> EnrichmentJob:
        """Resolve BPMs for many tracks concurrently.

        Args:
            tracks: Tracks to enrich (tracks that already have a BPM are skipped)
            on_result: Called on a worker thread as each track finishes
            on_complete: Called exactly once with all results when every
                track is terminal

        Returns:
            Job handle; job.wait() blocks until completion
        """
        pending: List[Track] = [track for track in tracks if not track.has_bpm]
        results: Dict[str, EnrichmentResult] = {}
        results_lock = threading.Lock()

        def complete() -> None:
            resolved = sum(1 for r in results.values() if r.resolved)
            logger.info(f"Enrichment complete: {resolved}/{len(results)} tracks resolved")
            if on_complete:
                on_complete(dict(results))

        barrier = CompletionBarrier(len(pending), complete)
        job = EnrichmentJob(barrier=barrier, results=results)
        if not pending:
            return job

        logger.info(f"Enriching {len(pending)} tracks")

        def work(track: Track) -> None:
            try:
                result = self._resolve_track(track)
                with results_lock:
                    results[track.id] = result
                if on_result:
                    try:
                        on_result(result)
                    except Exception:
                        logger.exception(f"Enrichment result handler failed for {track.id}")
            finally:
                barrier.arrive()

        executor = self._get_executor()
        for track in pending:
            executor.submit(work, track)

        return job

    def enrich_catalog(
        self,
        catalog: TrackCatalog,
        on_complete: Optional[Callable[[Dict[str, EnrichmentResult]], None]] = None,
    ) -> EnrichmentJob:
        """Enrich every track of the catalog's current load.

        Results are written back tagged with the load's generation, so a
        catalog that is reloaded or closed meanwhile discards them.
        """
        generation = catalog.generation

        def apply(result: EnrichmentResult) -> None:
            if result.bpm is not None:
                catalog.set_bpm(result.track_id, result.bpm, generation=generation)

        return self.enrich_tracks(catalog.tracks, on_result=apply, on_complete=on_complete)

    def shutdown(self, wait: bool = False) -> None:
        """Stop accepting work. In-flight lookups are allowed to finish."""
        with self._executor_lock:
            if self._executor is not None:
                self._executor.shutdown(wait=wait)
                self._executor = None
        self._http.close()
