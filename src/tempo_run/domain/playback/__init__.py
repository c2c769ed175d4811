"""Playback domain - now-playing state, track-change detection and queueing."""

from .models import NowPlaying
from .spotify_client import SpotifyPlayback
from .watcher import DEFAULT_POLL_INTERVAL, PlaybackWatcher

__all__ = [
    "DEFAULT_POLL_INTERVAL",
    "NowPlaying",
    "PlaybackWatcher",
    "SpotifyPlayback",
]
