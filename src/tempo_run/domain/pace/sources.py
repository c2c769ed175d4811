"""
Location sources that feed positional samples into a run session.

The device GPS is an external collaborator; this module provides a CSV
replay source so recorded runs can drive a session.
"""

import csv
import threading
import time
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from loguru import logger

from .models import PositionSample

CSV_FIELDS = ("timestamp", "latitude", "longitude", "horizontal_accuracy")


def load_samples_csv(path: Path) -> List[PositionSample]:
    """Read position samples from a CSV file.

    Expected header: timestamp,latitude,longitude,horizontal_accuracy
    (horizontal_accuracy is optional and defaults to 0). Rows that cannot
    be parsed are skipped.

    Args:
        path: CSV file path

    Returns:
        Samples in file order
    """
    samples: List[PositionSample] = []
    with open(path, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        missing = {"timestamp", "latitude", "longitude"} - set(reader.fieldnames or [])
        if missing:
            raise ValueError(f"Sample file {path} is missing columns: {sorted(missing)}")

        for line_number, row in enumerate(reader, start=2):
            try:
                samples.append(
                    PositionSample(
                        timestamp=float(row["timestamp"]),
                        latitude=float(row["latitude"]),
                        longitude=float(row["longitude"]),
                        horizontal_accuracy=float(row.get("horizontal_accuracy") or 0.0),
                    )
                )
            except (TypeError, ValueError):
                logger.warning(f"Skipping unparseable sample on line {line_number} of {path}")

    logger.info(f"Loaded {len(samples)} samples from {path}")
    return samples


class ReplayLocationSource:
    """Replays recorded samples into a consumer on a background thread.

    With realtime=True samples are delivered with the same spacing they were
    recorded with, re-based onto the wall clock so the session's elapsed time
    lines up with the samples. Otherwise they are delivered immediately.
    """

    def __init__(
        self,
        samples: Iterable[PositionSample],
        consumer: Callable[[PositionSample], object],
        realtime: bool = True,
        clock: Callable[[], float] = time.time,
    ):
        self.samples = list(samples)
        self.consumer = consumer
        self.realtime = realtime
        self.clock = clock
        self._stop_event = threading.Event()
        self.thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Start replay in a background thread."""
        if self.thread and self.thread.is_alive():
            return
        self._stop_event.clear()
        self.thread = threading.Thread(
            target=self._run, name="location-replay", daemon=True
        )
        self.thread.silent_logging = True
        self.thread.start()

    def stop(self) -> None:
        """Stop replay and wait for the thread to exit."""
        self._stop_event.set()
        if self.thread and self.thread.is_alive():
            self.thread.join(timeout=2.0)

    def is_running(self) -> bool:
        return bool(self.thread and self.thread.is_alive())

    def _run(self) -> None:
        if not self.samples:
            return

        first_ts = self.samples[0].timestamp
        wall_start = self.clock()

        for sample in self.samples:
            if self._stop_event.is_set():
                return

            if self.realtime:
                offset = sample.timestamp - first_ts
                delay = wall_start + offset - self.clock()
                if delay > 0 and self._stop_event.wait(delay):
                    return
                sample = PositionSample(
                    timestamp=wall_start + offset,
                    latitude=sample.latitude,
                    longitude=sample.longitude,
                    horizontal_accuracy=sample.horizontal_accuracy,
                )

            try:
                self.consumer(sample)
            except Exception:
                logger.exception("Location consumer failed")

        logger.info("Location replay finished")
