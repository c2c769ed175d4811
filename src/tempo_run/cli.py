"""
Tempo Run CLI - entry point.

Subcommands:
  run   start an adaptive-tempo run session
  bpm   resolve one track's BPM through the enrichment pipeline
  pace  replay a recorded sample file through the pace estimator
"""

import argparse
import sys
import threading
from pathlib import Path
from typing import Optional

from loguru import logger
from rich.table import Table

from tempo_run.core.config import Config, ensure_directories, load_config
from tempo_run.core.console import format_pace, get_console, safe_print
from tempo_run.core.output import setup_loguru


def print_summary(summary) -> None:
    """Render a run summary as a rich table."""
    console = get_console()
    console.print()
    console.print(
        f"[bold]Run finished[/bold] ({summary.mode.value}): "
        f"{summary.distance_m / 1000.0:.2f} km in {summary.duration_seconds / 60.0:.1f} min, "
        f"average pace {format_pace(summary.average_pace)} /km"
    )

    if not summary.songs:
        safe_print("No songs were played during the run.", style="dim")
        return

    table = Table(title="Songs")
    table.add_column("Track")
    table.add_column("BPM", justify="right")
    table.add_column("Pace before", justify="right")
    table.add_column("Pace during", justify="right")
    for song in summary.songs:
        table.add_row(
            f"{song.title} - {song.artist}",
            f"{song.bpm:.0f}" if song.bpm else "-",
            format_pace(song.pace_before),
            format_pace(song.pace_during),
        )
    console.print(table)


def run_session(config: Config, args: argparse.Namespace) -> int:
    """Run a session until Ctrl-C (or until replayed samples run out)."""
    from tempo_run.domain.pace.sources import load_samples_csv
    from tempo_run.domain.run import RunController, RunMode

    mode = RunMode(args.mode)
    try:
        controller = RunController(config, mode, target_pace=args.target_pace)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not controller.playback.authenticated:
        print("Error: no Spotify access token (set SPOTIFY_ACCESS_TOKEN)", file=sys.stderr)
        return 1

    samples = None
    if args.samples:
        try:
            samples = load_samples_csv(Path(args.samples))
        except (OSError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    safe_print(f"🏃 {mode.value}: {mode.description}", style="bold")
    started = False
    try:
        if not controller.load_playlist(args.playlist):
            print("Error: no tracks to queue from", file=sys.stderr)
            return 1
        controller.enrich()

        controller.start(samples=samples, realtime=args.realtime)
        started = True
        safe_print("Running. Press Ctrl-C to finish.", style="dim")
        threading.Event().wait()
    except KeyboardInterrupt:
        pass
    finally:
        summary = controller.stop()

    if not started:
        safe_print("Run cancelled before it started.", style="dim")
        return 130
    print_summary(summary)
    return 0


def resolve_bpm(config: Config, title: str, artist: str) -> int:
    from tempo_run.domain.enrichment import TempoEnrichmentPipeline

    pipeline = TempoEnrichmentPipeline(config.enrichment, config.ai)
    try:
        bpm, source = pipeline.resolve(title, artist)
    finally:
        pipeline.shutdown()

    if bpm is None:
        print(f"BPM unavailable for {title} - {artist}", file=sys.stderr)
        return 1
    print(f"{title} - {artist}: {bpm:.0f} BPM ({source})")
    return 0


def replay_pace(csv_path: str) -> int:
    """Feed a sample file through the estimator and print each update."""
    from tempo_run.domain.pace import PaceEstimator, load_samples_csv

    try:
        samples = load_samples_csv(Path(csv_path))
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    if not samples:
        print("No samples to replay", file=sys.stderr)
        return 1

    estimator = PaceEstimator(samples[0].timestamp)
    table = Table(title=f"Pace replay: {csv_path}")
    table.add_column("t (s)", justify="right")
    table.add_column("Distance (km)", justify="right")
    table.add_column("Current", justify="right")
    table.add_column("Average", justify="right")

    for sample in samples:
        if not estimator.accept(sample):
            continue
        estimator.tick(sample.timestamp)
        state = estimator.state
        table.add_row(
            f"{state.elapsed_seconds:.0f}",
            f"{state.distance_km:.3f}",
            format_pace(state.current_pace),
            format_pace(state.average_pace),
        )

    get_console().print(table)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tempo-run",
        description="Tempo Run - music that keeps pace with your run",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log at DEBUG level and mirror logs to stderr",
    )

    subparsers = parser.add_subparsers(dest="subcommand", help="Available commands")

    run_parser = subparsers.add_parser("run", help="Start a run session")
    run_parser.add_argument(
        "--mode",
        choices=["target-pace", "fastest-effort", "steady-effort"],
        default="target-pace",
        help="How the target pace is chosen (default: target-pace)",
    )
    run_parser.add_argument(
        "--target-pace",
        type=float,
        help="Goal pace in min/km for target-pace mode (default from config)",
    )
    run_parser.add_argument(
        "--playlist",
        help="Spotify playlist ID (default: detected from current playback)",
    )
    run_parser.add_argument(
        "--samples",
        help="CSV of recorded location samples to replay as the GPS feed",
    )
    run_parser.add_argument(
        "--realtime",
        action="store_true",
        help="Replay samples with their recorded spacing",
    )

    bpm_parser = subparsers.add_parser("bpm", help="Look up a track's BPM")
    bpm_parser.add_argument("title", help="Track title")
    bpm_parser.add_argument("artist", help="Artist name")

    pace_parser = subparsers.add_parser("pace", help="Replay samples through the pace estimator")
    pace_parser.add_argument("csv", help="CSV of location samples")

    return parser


def main(argv: Optional[list] = None) -> None:
    """Main entry point for the tempo-run command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.subcommand:
        parser.print_help()
        sys.exit(1)

    ensure_directories()
    config = load_config()
    level = "DEBUG" if args.debug else config.logging.level
    log_file = Path(config.logging.log_file) if config.logging.log_file else None
    setup_loguru(
        log_file=log_file,
        level=level,
        console_output=args.debug or config.logging.console_output,
    )

    try:
        if args.subcommand == "run":
            sys.exit(run_session(config, args))
        elif args.subcommand == "bpm":
            sys.exit(resolve_bpm(config, args.title, args.artist))
        elif args.subcommand == "pace":
            sys.exit(replay_pace(args.csv))
    except Exception as e:
        logger.exception("Unexpected error")
        print(f"Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
