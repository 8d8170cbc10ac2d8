from __future__ import annotations

from typing import List, Optional

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import TimePeriod

DEFAULT_WIDTH = 60


def _cells(periods: List[TimePeriod], trace_end: float, width: int) -> List[bool]:
    """
    Mark each of ``width`` equal buckets of [0, trace_end] that is quiet at its midpoint.
    """
    if trace_end <= 0:
        return [False] * width

    bucket = trace_end / width
    cells = []
    for i in range(width):
        t = (i + 0.5) * bucket
        cells.append(any(p.start <= t < p.end for p in periods))
    return cells


def render_timeline(
    cpu_periods: List[TimePeriod],
    network_periods: List[TimePeriod],
    trace_end: float,
    width: int = DEFAULT_WIDTH,
) -> str:
    """
    Plain-text timeline: '=' where quiet, '.' where busy.
    """
    cpu_line = "".join("=" if q else "." for q in _cells(cpu_periods, trace_end, width))
    net_line = "".join("=" if q else "." for q in _cells(network_periods, trace_end, width))
    end_mark = f"{trace_end:.0f}ms"

    return "\n".join(
        [
            "Quiet periods:",
            f"cpu |{cpu_line}|",
            f"net |{net_line}|",
            "    0" + end_mark.rjust(width + 1),
        ]
    )


def build_rich_timeline(
    cpu_periods: List[TimePeriod],
    network_periods: List[TimePeriod],
    trace_end: float,
    match: Optional[TimePeriod] = None,
    width: int = DEFAULT_WIDTH,
) -> tuple[Panel, str]:
    """
    Build a Rich Panel showing CPU and network quiet periods, plus a time-mark string.

    ``match`` highlights the start of the matched quiet window.
    """
    if trace_end <= 0:
        return Panel("Empty trace", title="Quiet periods"), ""

    match_cell = None
    if match is not None:
        match_cell = min(width - 1, max(0, int(match.start / trace_end * width)))

    table = Table.grid(padding=(0, 1))
    for label, periods, color in (("cpu", cpu_periods, "green"), ("net", network_periods, "blue")):
        row = Text()
        for i, quiet in enumerate(_cells(periods, trace_end, width)):
            if i == match_cell:
                row.append("|", style="bold yellow")
            elif quiet:
                row.append(" ", style=f"on {color}")
            else:
                row.append(".", style="dim")
        table.add_row(Text(label, style="bold"), row)

    time_marks = "0" + f"{trace_end:.0f}ms".rjust(width + 4)
    panel = Panel.fit(table, title="Quiet periods")
    return panel, time_marks
