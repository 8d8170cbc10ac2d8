from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List

from rich import box
from rich.console import Console
from rich.table import Table

from .config import ALLOWED_CONCURRENT_REQUESTS, LONG_TASK_THRESHOLD, REQUIRED_QUIET_WINDOW, MetricConfig
from .errors import MetricError
from .metrics import compute_consistently_interactive, summarize_quiet_periods
from .models import MetricResult, TimePeriod, TraceSnapshot
from .quiet_periods import filter_long_tasks, find_cpu_quiet_periods, find_network_quiet_periods
from .timeline import build_rich_timeline, render_timeline
from .trace_io import load_snapshot

EXIT_METRIC_UNAVAILABLE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="interactivity-cli",
        description="Compute the consistently-interactive time of a page load from a trace snapshot.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging.")

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Compute the metric for a trace snapshot.")
    run_parser.add_argument(
        "--trace",
        "-t",
        required=True,
        help="Path to a JSON trace snapshot.",
    )
    run_parser.add_argument(
        "--quiet-window",
        type=float,
        default=REQUIRED_QUIET_WINDOW,
        help=f"Required quiet window in ms (default: {REQUIRED_QUIET_WINDOW}).",
    )
    run_parser.add_argument(
        "--concurrency",
        "-c",
        type=int,
        default=ALLOWED_CONCURRENT_REQUESTS,
        help=f"Allowed concurrent requests in a network quiet period (default: {ALLOWED_CONCURRENT_REQUESTS}).",
    )
    run_parser.add_argument(
        "--long-task-threshold",
        type=float,
        default=LONG_TASK_THRESHOLD,
        help=f"Minimum main-thread task duration in ms counted as busy (default: {LONG_TASK_THRESHOLD}).",
    )
    run_parser.add_argument(
        "--show-periods",
        action="store_true",
        help="Also print the candidate quiet periods and a timeline.",
    )

    periods_parser = subparsers.add_parser(
        "periods",
        help="Print the raw CPU and network quiet periods of a trace snapshot.",
    )
    periods_parser.add_argument(
        "--trace",
        "-t",
        required=True,
        help="Path to a JSON trace snapshot.",
    )
    periods_parser.add_argument(
        "--concurrency",
        "-c",
        type=int,
        default=ALLOWED_CONCURRENT_REQUESTS,
        help=f"Allowed concurrent requests in a network quiet period (default: {ALLOWED_CONCURRENT_REQUESTS}).",
    )
    periods_parser.add_argument(
        "--long-task-threshold",
        type=float,
        default=LONG_TASK_THRESHOLD,
        help=f"Minimum main-thread task duration in ms counted as busy (default: {LONG_TASK_THRESHOLD}).",
    )
    periods_parser.add_argument(
        "--plain",
        action="store_true",
        help="Print the timeline as plain text instead of a colored panel.",
    )

    return parser


def _periods_table(title: str, periods: List[TimePeriod], highlight: TimePeriod | None = None) -> Table:
    table = Table(title=title, box=box.SIMPLE_HEAVY)
    table.add_column("Start (ms)", justify="right")
    table.add_column("End (ms)", justify="right")
    table.add_column("Length (ms)", justify="right")

    for p in periods:
        style = "bold green" if p == highlight else None
        table.add_row(f"{p.start:.1f}", f"{p.end:.1f}", f"{p.duration:.1f}", style=style)
    return table


def _print_result(result: MetricResult, snapshot: TraceSnapshot, console: Console, show_periods: bool) -> None:
    table = Table(title="Consistently Interactive", box=box.SIMPLE_HEAVY)
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Timing", f"{result.timing:.1f} ms")
    table.add_row("Timestamp", f"{result.timestamp:.1f} ms")

    info = result.quiet_period_info
    if info is not None:
        table.add_row("CPU quiet period", f"{info.cpu_quiet_period.start:.1f} - {info.cpu_quiet_period.end:.1f}")
        table.add_row(
            "Network quiet period",
            f"{info.network_quiet_period.start:.1f} - {info.network_quiet_period.end:.1f}",
        )
    console.print(table)

    if show_periods and info is not None:
        console.print(_periods_table("CPU candidates", info.cpu_quiet_periods, info.cpu_quiet_period))
        console.print(_periods_table("Network candidates", info.network_quiet_periods, info.network_quiet_period))
        panel, time_marks = build_rich_timeline(
            info.cpu_quiet_periods,
            info.network_quiet_periods,
            snapshot.timestamps.trace_end_ms,
            match=TimePeriod(start=result.timestamp, end=result.timestamp),
        )
        console.print(panel)
        if time_marks:
            console.print(time_marks)


def _print_periods(
    snapshot: TraceSnapshot,
    concurrency: int,
    console: Console,
    long_task_threshold: float = LONG_TASK_THRESHOLD,
    plain: bool = False,
) -> None:
    timestamps = snapshot.timestamps
    cpu_periods = find_cpu_quiet_periods(filter_long_tasks(snapshot.long_tasks, long_task_threshold), timestamps)
    if snapshot.network_quiet_periods is not None:
        network_periods = list(snapshot.network_quiet_periods)
    else:
        network_periods = find_network_quiet_periods(snapshot.network_records, concurrency, timestamps.trace_end_ms)

    summary_table = Table(title="Quiet period summary", box=box.SIMPLE_HEAVY)
    summary_table.add_column("Timeline")
    summary_table.add_column("Periods", justify="right")
    summary_table.add_column("Total quiet (ms)", justify="right")
    summary_table.add_column("Longest (ms)", justify="right")
    for name, periods in (("CPU", cpu_periods), ("Network", network_periods)):
        summary = summarize_quiet_periods(periods)
        summary_table.add_row(
            name,
            str(summary["count"]),
            f"{summary['total_quiet']:.1f}",
            f"{summary['longest']:.1f}",
        )

    console.print(summary_table)
    console.print(_periods_table("CPU quiet periods", cpu_periods))
    console.print(_periods_table("Network quiet periods", network_periods))

    if plain:
        console.print(render_timeline(cpu_periods, network_periods, timestamps.trace_end_ms), markup=False)
        return

    panel, time_marks = build_rich_timeline(cpu_periods, network_periods, timestamps.trace_end_ms)
    console.print(panel)
    if time_marks:
        console.print(time_marks)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    console = Console()
    snapshot = load_snapshot(Path(args.trace))

    if args.command == "run":
        config = MetricConfig(
            required_quiet_window_ms=args.quiet_window,
            allowed_concurrent_requests=args.concurrency,
            long_task_threshold_ms=args.long_task_threshold,
        )
        try:
            result = compute_consistently_interactive(snapshot, config)
        except MetricError as exc:
            console.print(f"[red]Metric unavailable ({exc.kind.value}):[/red] {exc}")
            return EXIT_METRIC_UNAVAILABLE
        _print_result(result, snapshot, console, args.show_periods)
        return 0

    if args.command == "periods":
        _print_periods(
            snapshot,
            args.concurrency,
            console,
            long_task_threshold=args.long_task_threshold,
            plain=args.plain,
        )
        return 0

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
