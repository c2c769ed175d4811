"""
Playback domain models.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from tempo_run.domain.library.providers.spotify.api import playlist_id_from_context
from tempo_run.utils.text import track_identity


@dataclass(frozen=True)
class NowPlaying:
    """What the playback source reports as playing right now."""

    track_id: Optional[str]
    title: str
    artist: str
    playlist_id: Optional[str] = None  # Set when playback comes from a playlist

    @property
    def identity(self) -> str:
        return track_identity(self.title, self.artist)

    @property
    def display_name(self) -> str:
        return f"{self.title} - {self.artist}"

    @classmethod
    def from_spotify(cls, payload: Optional[Dict[str, Any]]) -> Optional["NowPlaying"]:
        """Build from a currently-playing payload, or None if it has no usable item."""
        if not payload:
            return None
        item = payload.get("item") or {}
        title = item.get("name")
        artists = [a.get("name") for a in item.get("artists") or [] if a.get("name")]
        if not title or not artists:
            return None
        return cls(
            track_id=item.get("id"),
            title=title,
            artist=artists[0],
            playlist_id=playlist_id_from_context(payload),
        )
