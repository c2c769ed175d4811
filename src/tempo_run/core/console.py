"""Rich console shared by the CLI and run summaries, plus display helpers."""

from typing import Optional

from rich.console import Console

_console: Console | None = None


def get_console() -> Console:
    """Return the process-wide Console, creating it on first use."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def safe_print(message: str, style: str | None = None) -> None:
    """Print a line through the shared console, optionally styled."""
    get_console().print(message, style=style)


def format_pace(pace: Optional[float]) -> str:
    """Render min/km as m:ss ("-" when unknown, "0:00" when not moving)."""
    if pace is None:
        return "-"
    if pace <= 0:
        return "0:00"
    minutes = int(pace)
    seconds = int(round((pace - minutes) * 60))
    if seconds == 60:
        minutes, seconds = minutes + 1, 0
    return f"{minutes}:{seconds:02d}"
