"""
SpotifyPlayback - thin stateful wrapper around the Spotify API functions.

Holds the provider state between calls so the watcher, the queue sink and
playlist loading share one authenticated session.
"""

import threading
from typing import List, Optional

from loguru import logger

from tempo_run.core.config import SpotifyConfig
from tempo_run.domain.library.models import Track
from tempo_run.domain.library.providers.spotify import api

from .models import NowPlaying


class SpotifyPlayback:
    """Playback-state source and queue-command sink backed by Spotify.

    Pattern: thin class wrapper around pure API functions (in api.py).
    """

    def __init__(self, config: SpotifyConfig):
        self._state = api.init_provider(config)
        self._lock = threading.Lock()
        if not self._state.authenticated:
            logger.warning("Spotify access token missing; playback features disabled")

    @property
    def authenticated(self) -> bool:
        return self._state.authenticated

    def now_playing(self) -> Optional[NowPlaying]:
        """Current item, or None when nothing plays or the call fails."""
        with self._lock:
            self._state, payload = api.get_currently_playing(self._state)
        return NowPlaying.from_spotify(payload)

    def detect_playlist(self) -> Optional[str]:
        """Playlist ID of the current playback context, if any."""
        playing = self.now_playing()
        return playing.playlist_id if playing else None

    def load_playlist(self, playlist_id: str) -> List[Track]:
        with self._lock:
            self._state, tracks = api.get_playlist_tracks(self._state, playlist_id)
        return tracks

    def queue(self, track: Track) -> bool:
        """Queue-command sink for the selector."""
        with self._lock:
            self._state, ok = api.queue_track(self._state, track.id)
        return ok
