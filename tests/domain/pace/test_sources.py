"""Tests for CSV sample loading and replay."""

from pathlib import Path

import pytest

from tempo_run.domain.pace.models import PositionSample
from tempo_run.domain.pace.sources import ReplayLocationSource, load_samples_csv


@pytest.fixture
def samples_csv(tmp_path: Path) -> Path:
    path = tmp_path / "run.csv"
    path.write_text(
        "timestamp,latitude,longitude,horizontal_accuracy\n"
        "100.0,51.5000,-0.1200,5.0\n"
        "103.0,51.5001,-0.1200,4.0\n"
        "bad,row,here,1\n"
        "106.0,51.5002,-0.1200,-1\n"
    )
    return path


class TestLoadSamplesCsv:
    """Tests for load_samples_csv function."""

    def test_loads_valid_rows(self, samples_csv: Path) -> None:
        """Parseable rows become samples in file order."""
        samples = load_samples_csv(samples_csv)
        assert [s.timestamp for s in samples] == [100.0, 103.0, 106.0]
        assert samples[0].latitude == 51.5
        assert not samples[2].is_valid

    def test_accuracy_column_optional(self, tmp_path: Path) -> None:
        """Missing accuracy defaults to 0 (valid)."""
        path = tmp_path / "short.csv"
        path.write_text("timestamp,latitude,longitude\n1,0,0\n")
        samples = load_samples_csv(path)
        assert samples[0].horizontal_accuracy == 0.0
        assert samples[0].is_valid

    def test_missing_columns_raise(self, tmp_path: Path) -> None:
        """A file without coordinates is rejected."""
        path = tmp_path / "bad.csv"
        path.write_text("timestamp,speed\n1,3.2\n")
        with pytest.raises(ValueError, match="missing columns"):
            load_samples_csv(path)


class TestReplayLocationSource:
    """Tests for ReplayLocationSource."""

    def test_immediate_replay_delivers_all(self) -> None:
        """Non-realtime replay hands every sample to the consumer as recorded."""
        samples = [PositionSample(float(t), 0.0, 0.0) for t in range(5)]
        received = []
        source = ReplayLocationSource(samples, received.append, realtime=False)

        source.start()
        source.thread.join(timeout=2.0)

        assert received == samples
        assert not source.is_running()

    def test_realtime_replay_rebases_timestamps(self) -> None:
        """Realtime replay shifts timestamps onto the injected clock."""
        samples = [PositionSample(10.0, 0.0, 0.0), PositionSample(10.0, 0.0, 0.001)]
        received = []
        source = ReplayLocationSource(
            samples, received.append, realtime=True, clock=lambda: 5000.0
        )

        source.start()
        source.thread.join(timeout=2.0)

        assert [s.timestamp for s in received] == [5000.0, 5000.0]
        assert received[1].longitude == 0.001

    def test_consumer_errors_do_not_stop_replay(self) -> None:
        """A failing consumer call is logged and replay continues."""
        calls = []

        def consumer(sample: PositionSample) -> None:
            calls.append(sample)
            if len(calls) == 1:
                raise RuntimeError("boom")

        samples = [PositionSample(float(t), 0.0, 0.0) for t in range(3)]
        source = ReplayLocationSource(samples, consumer, realtime=False)
        source.start()
        source.thread.join(timeout=2.0)

        assert len(calls) == 3
