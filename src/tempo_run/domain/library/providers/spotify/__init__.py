"""
Spotify provider for Tempo Run.

Reads now-playing state, loads playlist tracks and queues tracks through
the Spotify Web API. Token exchange happens outside this package; the
provider is initialized with a ready access token.
"""

from .api import (
    API_BASE,
    get_currently_playing,
    get_playlist_tracks,
    init_provider,
    playlist_id_from_context,
    queue_track,
)

__all__ = [
    "API_BASE",
    "get_currently_playing",
    "get_playlist_tracks",
    "init_provider",
    "playlist_id_from_context",
    "queue_track",
]
