"""
Playback watcher - detects track changes by polling the playback source.

Polls on a fixed interval from a background thread. A change in the
normalized "title - artist" identity is a track-change event and is
handed to the session before the next poll runs.
"""

import threading
from typing import Callable, Optional

from loguru import logger

from .models import NowPlaying

DEFAULT_POLL_INTERVAL = 2.0

PlaybackSource = Callable[[], Optional[NowPlaying]]
TrackChangeHandler = Callable[[NowPlaying], object]


class PlaybackWatcher:
    """Polls a playback source and reports track changes.

    Errors from the source or the handler are logged and treated as
    "nothing changed"; they never stop the watcher.
    """

    def __init__(
        self,
        source: PlaybackSource,
        on_track_change: TrackChangeHandler,
        interval: float = DEFAULT_POLL_INTERVAL,
    ):
        self.source = source
        self.on_track_change = on_track_change
        self.interval = interval
        self.last_known_identity: Optional[str] = None
        self._stop_event = threading.Event()
        self.thread: Optional[threading.Thread] = None

    def poll(self) -> Optional[NowPlaying]:
        """Read the playback source once.

        Returns:
            Currently playing item, or None if nothing plays or the read failed
        """
        try:
            return self.source()
        except Exception as e:
            logger.debug(f"Playback poll failed: {e}")
            return None

    def check(self) -> bool:
        """Run one poll cycle: read, compare, dispatch.

        Returns:
            True if a track change was detected
        """
        playing = self.poll()
        if playing is None:
            return False

        identity = playing.identity
        if not identity or identity == self.last_known_identity:
            return False

        logger.info(f"🎶 Detected new song: {playing.display_name}")
        self.last_known_identity = identity

        try:
            self.on_track_change(playing)
        except Exception:
            logger.exception(f"Track change handling failed for {playing.display_name}")
        return True

    def start(self) -> None:
        """Start polling in a background thread."""
        if self.thread and self.thread.is_alive():
            return
        self._stop_event.clear()
        self.thread = threading.Thread(target=self._run, name="playback-watcher", daemon=True)
        self.thread.silent_logging = True
        self.thread.start()
        logger.debug(f"Playback watcher started (interval={self.interval}s)")

    def stop(self) -> None:
        """Stop polling; an in-progress cycle finishes first."""
        self._stop_event.set()
        if self.thread and self.thread.is_alive() and self.thread is not threading.current_thread():
            self.thread.join(timeout=self.interval + 2.0)
        logger.debug("Playback watcher stopped")

    def is_running(self) -> bool:
        return bool(self.thread and self.thread.is_alive())

    def _run(self) -> None:
        while not self._stop_event.is_set():
            self.check()
            if self._stop_event.wait(self.interval):
                break
