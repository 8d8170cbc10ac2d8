from __future__ import annotations

import logging
from typing import Iterable, List, Tuple

from .config import LONG_TASK_THRESHOLD
from .models import LongTask, NetworkRequest, TimePeriod, Timestamps

logger = logging.getLogger(__name__)

# Requests on these schemes never hold a network connection open.
IGNORED_SCHEMES = {"data", "ws"}


def filter_long_tasks(tasks: Iterable[LongTask], threshold_ms: float = LONG_TASK_THRESHOLD) -> List[LongTask]:
    """
    Keep the main-thread tasks long enough to block interaction, ordered by start.
    """
    long_tasks = sorted((t for t in tasks if t.duration >= threshold_ms), key=lambda t: (t.start, t.end))
    logger.debug("Kept %d long tasks (threshold %sms)", len(long_tasks), threshold_ms)
    return long_tasks


def find_cpu_quiet_periods(long_tasks: List[LongTask], timestamps: Timestamps) -> List[TimePeriod]:
    """
    Return the gaps between long tasks, from 0 to the end of the trace.

    Long tasks are relative to navigation start; they are shifted by
    navigation start so every boundary shares the trace-end clock.
    """
    nav_start_ms = timestamps.navigation_start_ms
    trace_end_ms = timestamps.trace_end_ms

    if not long_tasks:
        return [TimePeriod(start=0, end=trace_end_ms)]

    quiet_periods: List[TimePeriod] = [TimePeriod(start=0, end=long_tasks[0].start + nav_start_ms)]
    for task, next_task in zip(long_tasks, long_tasks[1:]):
        quiet_periods.append(TimePeriod(start=task.end + nav_start_ms, end=next_task.start + nav_start_ms))
    quiet_periods.append(TimePeriod(start=long_tasks[-1].end + nav_start_ms, end=trace_end_ms))

    return quiet_periods


def find_network_quiet_periods(
    records: Iterable[NetworkRequest],
    allowed_concurrent_requests: int,
    trace_end_ms: float,
) -> List[TimePeriod]:
    """
    Return the periods where at most ``allowed_concurrent_requests`` requests
    are in flight.

    Requests are half-open ``[start, end)``: at equal times, ends are swept
    before starts. Unfinished requests run until the end of the trace, and
    boundaries after the end of the trace are ignored.
    """
    # (time in ms, is_start); False sorts before True so ends go first
    boundaries: List[Tuple[float, bool]] = []
    for record in records:
        if record.scheme in IGNORED_SCHEMES:
            continue
        start_ms = record.start_time * 1000
        end_ms = trace_end_ms if record.end_time is None else record.end_time * 1000
        boundaries.append((start_ms, True))
        boundaries.append((end_ms, False))
    # Activity after the trace ends cannot close a period inside it.
    boundaries = sorted(b for b in boundaries if b[0] <= trace_end_ms)

    quiet_periods: List[TimePeriod] = []
    inflight = 0
    quiet_start: float | None = 0

    for time, is_start in boundaries:
        inflight += 1 if is_start else -1
        if inflight > allowed_concurrent_requests and quiet_start is not None:
            quiet_periods.append(TimePeriod(start=quiet_start, end=time))
            quiet_start = None
        elif inflight <= allowed_concurrent_requests and quiet_start is None:
            quiet_start = time

    if quiet_start is not None and quiet_start < trace_end_ms:
        quiet_periods.append(TimePeriod(start=quiet_start, end=trace_end_ms))

    return quiet_periods


def is_long_enough_quiet_period(period: TimePeriod, fmp_ms: float, window_ms: float) -> bool:
    # Must end strictly after FMP + window, but may be exactly window long.
    return period.end > fmp_ms + window_ms and period.end - period.start >= window_ms


def filter_quiet_periods(periods: Iterable[TimePeriod], fmp_ms: float, window_ms: float) -> List[TimePeriod]:
    return [p for p in periods if is_long_enough_quiet_period(p, fmp_ms, window_ms)]
