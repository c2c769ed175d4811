"""
Unified output system using Loguru.
Replaces print() statements and stdlib logging with dual output (console + file).
"""

import sys
import threading
from pathlib import Path

from loguru import logger

from .config import get_data_dir


def get_log_file_path() -> Path:
    """Get the path to the log file."""
    return get_data_dir() / "tempo-run.log"


def setup_loguru(
    log_file: Path | None = None,
    level: str = "INFO",
    console_output: bool = False,
) -> None:
    """
    Configure loguru for file logging, with an optional stderr sink.

    Args:
        log_file: Path to log file (default: ~/.local/share/tempo-run/tempo-run.log)
        level: Minimum level for logging (DEBUG, INFO, WARNING, ERROR)
        console_output: Also emit log records to stderr (for debugging)
    """
    log_file = log_file or get_log_file_path()
    log_file.parent.mkdir(parents=True, exist_ok=True)

    # Remove default handler
    logger.remove()

    logger.add(
        log_file,
        rotation="10 MB",
        retention=5,  # Keep 5 backup files
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {thread.name} | {name}:{line} | {message}",
        enqueue=False,  # Synchronous writes (thread-safe but blocking)
    )

    if console_output:
        logger.add(sys.stderr, level=level, format="{level}: {message}")

    logger.info(f"Loguru initialized: {log_file} (level={level})")


def mark_silent(thread: threading.Thread | None = None) -> None:
    """Mark a thread so log() keeps its messages out of stdout.

    Args:
        thread: Thread to mark (default: current thread)
    """
    target = thread or threading.current_thread()
    setattr(target, "silent_logging", True)


def log(message: str, level: str = "info") -> None:
    """
    Unified logging: writes to file AND prints for the user.

    Use this instead of print() for user-facing messages that should also be logged.
    Background threads marked with silent_logging=True only write to the log file.

    Args:
        message: User-facing message (can include emojis)
        level: Log level (debug, info, warning, error)
    """
    log_func = getattr(logger, level)
    log_func(message)

    silent = getattr(threading.current_thread(), "silent_logging", False)
    if not silent:
        print(message)
