"""Run domain - the run session aggregate and its wiring.

This domain handles:
- Run modes and target pace derivation
- Serialized ownership of pace, catalog and queued-set
- The per-run song log and summary
- Starting and stopping tickers, watcher and location feed
"""

from .models import PlayedSong, RunMode, RunSummary
from .runner import RunController, Ticker, validate_target_pace
from .session import FASTEST_EFFORT_TARGET, RunSession

__all__ = [
    "FASTEST_EFFORT_TARGET",
    "PlayedSong",
    "RunController",
    "RunMode",
    "RunSession",
    "RunSummary",
    "Ticker",
    "validate_target_pace",
]
