"""Tests for the run session aggregate."""

from unittest.mock import MagicMock

import pytest

from tempo_run.domain.library.catalog import TrackCatalog
from tempo_run.domain.library.models import Track
from tempo_run.domain.pace.models import PositionSample
from tempo_run.domain.playback.models import NowPlaying
from tempo_run.domain.queueing.selector import AdaptiveQueueSelector
from tempo_run.domain.run.models import PlayedSong, RunMode
from tempo_run.domain.run.session import FASTEST_EFFORT_TARGET, RunSession

START = 1_000.0


class FakeClock:
    def __init__(self, now: float = START):
        self.now = now

    def __call__(self) -> float:
        return self.now


def first_choice_rng() -> MagicMock:
    rng = MagicMock()
    rng.choice.side_effect = lambda seq: seq[0]
    return rng


def sample(seconds: float, meters: float) -> PositionSample:
    return PositionSample(START + seconds, meters / 111_195.0, 0.0, 5.0)


def now_playing(track: Track) -> NowPlaying:
    return NowPlaying(track_id=track.id, title=track.title, artist=track.artist)


@pytest.fixture
def tracks() -> list[Track]:
    return [
        Track("A", "Song A", "Artist", bpm=120.0),
        Track("B", "Song B", "Artist", bpm=130.0),
        Track("C", "Song C", "Artist", bpm=100.0),
    ]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sink() -> MagicMock:
    return MagicMock(return_value=True)


def make_session(clock, sink, mode=RunMode.TARGET_PACE, target=5.0, tracks=None) -> RunSession:
    session = RunSession(
        mode=mode,
        target_pace=target,
        selector=AdaptiveQueueSelector(sink=sink, rng=first_choice_rng()),
        clock=clock,
    )
    if tracks:
        session.load_catalog(tracks, "playlist")
    return session


def run_at_pace(session: RunSession, seconds_per_10m: float, count: int = 3, start: float = 0.0) -> None:
    """Feed evenly spaced samples: 10 m every seconds_per_10m seconds."""
    for i in range(count + 1):
        session.accept_sample(sample(start + i * seconds_per_10m, i * 10))


class TestRunSessionModes:
    """Tests for target derivation per mode."""

    def test_target_pace_requires_value(self) -> None:
        with pytest.raises(ValueError):
            RunSession(mode=RunMode.TARGET_PACE, target_pace=None)
        with pytest.raises(ValueError):
            RunSession(mode="target-pace", target_pace=0.0)

    def test_fastest_effort_target(self, clock, sink) -> None:
        session = make_session(clock, sink, mode=RunMode.FASTEST_EFFORT, target=None)
        assert session.target_pace == FASTEST_EFFORT_TARGET

    def test_fastest_effort_always_speeds_up(self, clock, sink, tracks) -> None:
        """Any moving runner is slower than target, so the ideal goes up."""
        session = make_session(clock, sink, mode=RunMode.FASTEST_EFFORT, target=None, tracks=tracks)
        run_at_pace(session, 3.0)  # 5 min/km

        assert session.handle_track_change(now_playing(tracks[0])).id == "B"

    def test_steady_effort_locks_first_pace(self, clock, sink, tracks) -> None:
        session = make_session(clock, sink, mode=RunMode.STEADY_EFFORT, target=None, tracks=tracks)
        assert session.target_pace is None

        run_at_pace(session, 3.0)  # 5 min/km
        session.handle_track_change(now_playing(tracks[0]))
        assert session.target_pace == pytest.approx(5.0, rel=1e-3)

        # Slowing down afterwards makes the runner slower than the locked target
        run_at_pace(session, 6.0, count=5, start=20.0)
        session.handle_track_change(now_playing(tracks[2]))
        assert session.target_pace == pytest.approx(5.0, rel=1e-3)

    def test_steady_effort_no_lock_while_standing(self, clock, sink, tracks) -> None:
        session = make_session(clock, sink, mode=RunMode.STEADY_EFFORT, target=None, tracks=tracks)
        session.handle_track_change(now_playing(tracks[0]))
        assert session.target_pace is None


class TestRunSessionTrackChanges:
    """Tests for selection on track change."""

    def test_slow_runner_queues_faster_track(self, clock, sink, tracks) -> None:
        """Playing A (120) at 6:00 vs 5:00 target queues B (130)."""
        session = make_session(clock, sink, tracks=tracks)
        run_at_pace(session, 3.6)  # 6 min/km

        queued = session.handle_track_change(now_playing(tracks[0]))

        assert queued.id == "B"
        sink.assert_called_once_with(queued)
        assert session.catalog.current_track_id == "A"
        assert session.catalog.is_queued("B")

    def test_track_matched_by_identity(self, clock, sink, tracks) -> None:
        """A relinked track id still resolves through title and artist."""
        session = make_session(clock, sink, tracks=tracks)
        playing = NowPlaying(track_id="relinked", title="SONG A", artist="artist")

        session.handle_track_change(playing)

        assert session.catalog.current_track_id == "A"
        assert session.played_songs[0].bpm == 120.0

    def test_empty_catalog_queues_nothing(self, clock, sink, tracks) -> None:
        session = make_session(clock, sink)
        assert session.handle_track_change(now_playing(tracks[0])) is None
        sink.assert_not_called()
        assert len(session.played_songs) == 1

    def test_reload_clears_queued_set(self, clock, sink, tracks) -> None:
        session = make_session(clock, sink, tracks=tracks)
        session.handle_track_change(now_playing(tracks[0]))
        session.load_catalog(tracks, "playlist")
        assert session.catalog.queued_ids == frozenset()


class TestRunSessionLog:
    """Tests for the played-song log and summary."""

    def test_pace_before_and_during(self, clock, sink, tracks) -> None:
        session = make_session(clock, sink, tracks=tracks)
        run_at_pace(session, 3.0)  # 5 min/km
        session.handle_track_change(now_playing(tracks[0]))
        run_at_pace(session, 3.0, count=2, start=20.0)

        song = session.played_songs[0]
        assert song.pace_before == pytest.approx(5.0, rel=1e-3)
        assert len(song.paces) >= 2
        assert song.pace_during > 0

        rows = session.summary_rows()
        assert rows[0][0] == "A"
        assert rows[0][1] == pytest.approx(5.0, rel=1e-3)

    def test_pace_during_defaults_to_pace_before(self) -> None:
        song = PlayedSong("A", "Song", "Artist", 120.0, pace_before=5.5, started_at=0.0)
        assert song.pace_during == 5.5
        assert song.as_row() == ("A", 5.5, 5.5)

    def test_summary(self, clock, sink, tracks) -> None:
        session = make_session(clock, sink, tracks=tracks)
        run_at_pace(session, 3.0, count=10)
        clock.now = START + 30
        session.tick()

        summary = session.summary()
        assert summary.mode is RunMode.TARGET_PACE
        assert summary.target_pace == 5.0
        assert summary.duration_seconds == pytest.approx(30.0)
        assert summary.distance_m == pytest.approx(100.0, rel=1e-3)
        assert summary.average_pace == pytest.approx(5.0, rel=1e-3)


class TestRunSessionStop:
    """Tests for ending a session."""

    def test_stop_ignores_later_events(self, clock, sink, tracks) -> None:
        session = make_session(clock, sink, tracks=tracks)
        session.accept_sample(sample(0, 0))
        session.stop()

        assert not session.active
        assert not session.accept_sample(sample(3, 10))
        assert session.handle_track_change(now_playing(tracks[0])) is None
        sink.assert_not_called()

    def test_stop_closes_catalog(self, clock, sink, tracks) -> None:
        """Late enrichment results are discarded after the run ends."""
        session = make_session(clock, sink, tracks=[Track("X", "Song", "Artist")])
        session.stop()
        assert session.catalog.closed
        assert not session.catalog.set_bpm("X", 120.0)

    def test_stop_takes_final_tick(self, clock, sink) -> None:
        session = make_session(clock, sink)
        clock.now = START + 42
        session.stop()
        assert session.pace_state().elapsed_seconds == pytest.approx(42.0)

    def test_stop_twice_is_harmless(self, clock, sink) -> None:
        session = make_session(clock, sink)
        session.stop()
        session.stop()
        assert not session.active


class TestRunSessionSetup:
    """Tests for construction and begin()."""

    def test_empty_catalog_is_kept(self, clock, sink, tracks) -> None:
        """A caller's empty catalog is used as-is and sees later loads."""
        catalog = TrackCatalog()
        session = RunSession(mode=RunMode.FASTEST_EFFORT, catalog=catalog, clock=clock)

        catalog.load(tracks[:2])

        assert session.catalog is catalog
        assert len(session.catalog) == 2

    def test_begin_restarts_clock(self, clock, sink) -> None:
        """Elapsed time counts from begin(), not from construction."""
        session = make_session(clock, sink)
        clock.now = START + 100
        session.begin()
        clock.now = START + 130
        session.tick()

        assert session.start_time == START + 100
        assert session.pace_state().elapsed_seconds == pytest.approx(30.0)

    def test_begin_clears_pace(self, clock, sink) -> None:
        session = make_session(clock, sink)
        run_at_pace(session, 3.0)
        session.begin(START + 50)
        state = session.pace_state()
        assert state.total_distance_m == 0.0
        assert state.window() == ()
