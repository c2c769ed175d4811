"""
In-memory track catalog for the active run session.

Holds the playlist's tracks in order, the BPM annotations produced by
enrichment, the set of tracks already queued and the track that is playing
now. Each load() starts a new generation; enrichment results carrying an
older generation are discarded.
"""

import threading
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Set

from loguru import logger

from .models import Track


class TrackCatalog:
    """Ordered, id-unique collection of candidate tracks.

    Thread-safe: enrichment workers annotate BPMs while the run session
    reads candidates.
    """

    def __init__(self, tracks: Iterable[Track] = (), playlist_id: Optional[str] = None):
        self._lock = threading.RLock()
        self._tracks: List[Track] = []
        self._index: Dict[str, int] = {}
        self._queued_ids: Set[str] = set()
        self._current_track_id: Optional[str] = None
        self._generation = 0
        self._closed = False
        self.playlist_id: Optional[str] = None
        if tracks:
            self.load(tracks, playlist_id)
        else:
            self.playlist_id = playlist_id

    # ==================== LOADING ====================

    def load(self, tracks: Iterable[Track], playlist_id: Optional[str] = None) -> int:
        """Replace the catalog contents with a freshly loaded playlist.

        Duplicate ids keep their first occurrence. The queued-set and the
        current track are reset, since they are scoped to one load.

        Args:
            tracks: Tracks in playlist order
            playlist_id: Source playlist ID, if known

        Returns:
            Generation number identifying this load
        """
        with self._lock:
            self._tracks = []
            self._index = {}
            for track in tracks:
                if track.id in self._index:
                    logger.debug(f"Skipping duplicate track in playlist: {track.id}")
                    continue
                self._index[track.id] = len(self._tracks)
                self._tracks.append(track)

            self._queued_ids = set()
            self._current_track_id = None
            self._generation += 1
            self._closed = False
            self.playlist_id = playlist_id

            logger.info(
                f"Catalog loaded: {len(self._tracks)} tracks "
                f"(playlist={playlist_id}, generation={self._generation})"
            )
            return self._generation

    def close(self) -> None:
        """Mark the catalog as gone; late enrichment results are ignored."""
        with self._lock:
            self._closed = True
            logger.debug(f"Catalog closed at generation {self._generation}")

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def generation(self) -> int:
        return self._generation

    # ==================== READS ====================

    @property
    def tracks(self) -> List[Track]:
        with self._lock:
            return list(self._tracks)

    def __len__(self) -> int:
        return len(self._tracks)

    def __iter__(self) -> Iterator[Track]:
        return iter(self.tracks)

    def get(self, track_id: str) -> Optional[Track]:
        with self._lock:
            position = self._index.get(track_id)
            return self._tracks[position] if position is not None else None

    def find_by_identity(self, identity: str) -> Optional[Track]:
        """Find the first track whose normalized "title - artist" matches."""
        with self._lock:
            for track in self._tracks:
                if track.identity == identity:
                    return track
        return None

    def resolved_count(self) -> int:
        with self._lock:
            return sum(1 for track in self._tracks if track.has_bpm)

    # ==================== ENRICHMENT ====================

    def set_bpm(self, track_id: str, bpm: float, generation: Optional[int] = None) -> bool:
        """Annotate a track with its BPM.

        The first resolved BPM sticks for the session; later values, unknown
        ids, stale generations and closed catalogs are ignored.

        Returns:
            True if the annotation was applied
        """
        with self._lock:
            if self._closed:
                logger.debug(f"Discarding BPM for {track_id}: catalog closed")
                return False
            if generation is not None and generation != self._generation:
                logger.debug(
                    f"Discarding BPM for {track_id}: generation {generation} "
                    f"!= {self._generation}"
                )
                return False

            position = self._index.get(track_id)
            if position is None:
                return False

            track = self._tracks[position]
            if track.has_bpm:
                return False

            self._tracks[position] = track.with_bpm(bpm)
            return True

    # ==================== PLAYBACK ====================

    @property
    def current_track_id(self) -> Optional[str]:
        return self._current_track_id

    @property
    def current_track(self) -> Optional[Track]:
        with self._lock:
            if self._current_track_id is None:
                return None
            return self.get(self._current_track_id)

    def set_current(self, track_id: Optional[str]) -> None:
        with self._lock:
            self._current_track_id = track_id

    @property
    def queued_ids(self) -> FrozenSet[str]:
        with self._lock:
            return frozenset(self._queued_ids)

    def is_queued(self, track_id: str) -> bool:
        with self._lock:
            return track_id in self._queued_ids

    def mark_queued(self, track_id: str) -> None:
        with self._lock:
            self._queued_ids.add(track_id)

    def candidates(self) -> List[Track]:
        """Tracks eligible for queueing, in catalog order.

        Excludes the currently playing track and everything already queued.
        """
        with self._lock:
            return [
                track
                for track in self._tracks
                if track.id != self._current_track_id and track.id not in self._queued_ids
            ]
