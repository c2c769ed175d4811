"""Queueing domain - tempo-aware selection of the next track."""

from .selector import (
    BPM_STEP,
    DEFAULT_CURRENT_BPM,
    TOP_CANDIDATES,
    AdaptiveQueueSelector,
    QueueSink,
    Selection,
    compute_ideal_bpm,
    score_candidates,
)

__all__ = [
    "BPM_STEP",
    "DEFAULT_CURRENT_BPM",
    "TOP_CANDIDATES",
    "AdaptiveQueueSelector",
    "QueueSink",
    "Selection",
    "compute_ideal_bpm",
    "score_candidates",
]
