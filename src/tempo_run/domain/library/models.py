"""
Music library domain models.

Contains data structures for representing playlist tracks.
"""

from dataclasses import dataclass, replace
from typing import Optional

from tempo_run.utils.text import track_identity


@dataclass(frozen=True)
class Track:
    """Represents a candidate track in the active playlist.

    bpm is None until enrichment resolves it. Tracks are immutable;
    with_bpm() returns an annotated copy.
    """

    id: str  # Spotify track ID
    title: str
    artist: str  # First credited artist
    bpm: Optional[float] = None

    @property
    def uri(self) -> str:
        return f"spotify:track:{self.id}"

    @property
    def identity(self) -> str:
        """Normalized "title - artist" used to match now-playing items."""
        return track_identity(self.title, self.artist)

    @property
    def has_bpm(self) -> bool:
        return self.bpm is not None

    def with_bpm(self, bpm: float) -> "Track":
        """Return new track with the resolved BPM."""
        return replace(self, bpm=float(bpm))
