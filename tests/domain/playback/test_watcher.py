"""Tests for now-playing models and the playback watcher."""

import threading
from unittest.mock import MagicMock

from tempo_run.domain.playback.models import NowPlaying
from tempo_run.domain.playback.watcher import PlaybackWatcher


def playing(title: str, artist: str = "Artist", track_id: str = "id") -> NowPlaying:
    return NowPlaying(track_id=track_id, title=title, artist=artist)


class TestNowPlaying:
    """Tests for NowPlaying.from_spotify."""

    def test_first_artist_used(self) -> None:
        payload = {"item": {"id": "t", "name": "Song", "artists": [{"name": "A"}, {"name": "B"}]}}
        result = NowPlaying.from_spotify(payload)
        assert result.artist == "A"
        assert result.playlist_id is None

    def test_item_without_artists(self) -> None:
        assert NowPlaying.from_spotify({"item": {"id": "t", "name": "Ad", "artists": []}}) is None

    def test_empty_payload(self) -> None:
        assert NowPlaying.from_spotify(None) is None


class TestPlaybackWatcherCheck:
    """Tests for a single poll cycle."""

    def test_first_track_is_a_change(self) -> None:
        handler = MagicMock()
        watcher = PlaybackWatcher(lambda: playing("Song A"), handler)
        assert watcher.check()
        handler.assert_called_once()
        assert watcher.last_known_identity == "song a - artist"

    def test_same_identity_ignored(self) -> None:
        """Formatting noise in the same track is not a change."""
        items = iter([playing("Song A"), playing("  SONG A ", " artist")])
        handler = MagicMock()
        watcher = PlaybackWatcher(lambda: next(items), handler)

        assert watcher.check()
        assert not watcher.check()
        assert handler.call_count == 1

    def test_new_identity_dispatched(self) -> None:
        items = iter([playing("Song A"), playing("Song B")])
        handler = MagicMock()
        watcher = PlaybackWatcher(lambda: next(items), handler)
        watcher.check()
        watcher.check()
        assert [c.args[0].title for c in handler.call_args_list] == ["Song A", "Song B"]

    def test_nothing_playing_keeps_identity(self) -> None:
        """A None poll neither dispatches nor forgets the last track."""
        items = iter([playing("Song A"), None, playing("Song A")])
        handler = MagicMock()
        watcher = PlaybackWatcher(lambda: next(items), handler)
        watcher.check()
        assert not watcher.check()
        assert not watcher.check()
        assert handler.call_count == 1

    def test_source_error_treated_as_no_change(self) -> None:
        watcher = PlaybackWatcher(MagicMock(side_effect=RuntimeError("api down")), MagicMock())
        assert not watcher.check()

    def test_handler_error_does_not_propagate(self) -> None:
        watcher = PlaybackWatcher(lambda: playing("Song A"), MagicMock(side_effect=ValueError))
        assert watcher.check()


class TestPlaybackWatcherThread:
    """Tests for the background polling loop."""

    def test_start_polls_immediately_and_stops(self) -> None:
        seen = threading.Event()
        watcher = PlaybackWatcher(lambda: playing("Song A"), lambda _: seen.set(), interval=10.0)

        watcher.start()
        assert seen.wait(timeout=2.0)
        assert watcher.is_running()

        watcher.stop()
        assert not watcher.is_running()
