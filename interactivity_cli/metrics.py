from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from .config import DEFAULT_CONFIG, MetricConfig
from .errors import ErrorKind, MetricError
from .models import (
    LongTask,
    MetricResult,
    NetworkRequest,
    QuietPeriodInfo,
    TimePeriod,
    Timestamps,
    TraceSnapshot,
)
from .quiet_periods import (
    filter_long_tasks,
    filter_quiet_periods,
    find_cpu_quiet_periods,
    find_network_quiet_periods,
)

logger = logging.getLogger(__name__)


def _require_fmp_ms(timestamps: Timestamps) -> float:
    if not timestamps.first_meaningful_paint:
        raise MetricError(ErrorKind.NO_FMP)
    return timestamps.first_meaningful_paint_ms


def _require_dcl_ms(timestamps: Timestamps) -> float:
    if not timestamps.dom_content_loaded:
        raise MetricError(ErrorKind.NO_DCL)
    return timestamps.dom_content_loaded_ms


def find_overlapping_quiet_periods(
    long_tasks: List[LongTask],
    network_records: Iterable[NetworkRequest],
    timestamps: Timestamps,
    config: Optional[MetricConfig] = None,
    network_quiet_periods: Optional[List[TimePeriod]] = None,
) -> QuietPeriodInfo:
    """
    Find the first CPU quiet period and network quiet period that share a
    quiet window of at least ``required_quiet_window_ms``.

    The later-starting period's start is the candidate window start; the
    other period must stay quiet for a full window past it. Both candidate
    lists are walked once, in start order. On equal starts the CPU period is
    treated as the later one.

    ``network_quiet_periods`` skips the network derivation when the caller
    already has them.
    """
    config = config or DEFAULT_CONFIG
    window = config.required_quiet_window_ms
    fmp_ms = _require_fmp_ms(timestamps)

    if network_quiet_periods is None:
        network_quiet_periods = find_network_quiet_periods(
            network_records, config.allowed_concurrent_requests, timestamps.trace_end_ms
        )
    network_candidates = filter_quiet_periods(network_quiet_periods, fmp_ms, window)
    cpu_candidates = filter_quiet_periods(find_cpu_quiet_periods(long_tasks, timestamps), fmp_ms, window)

    logger.debug(
        "Candidate quiet periods: %d cpu, %d network", len(cpu_candidates), len(network_candidates)
    )

    cpu_idx = 0
    net_idx = 0
    while cpu_idx < len(cpu_candidates) and net_idx < len(network_candidates):
        cpu = cpu_candidates[cpu_idx]
        net = network_candidates[net_idx]

        if cpu.start >= net.start:
            # CPU starts later: the window must fit inside the network period
            matched = net.end >= cpu.start + window
            if not matched:
                net_idx += 1
        else:
            # Network starts later: the window must fit inside the CPU period
            matched = cpu.end >= net.start + window
            if not matched:
                cpu_idx += 1

        if matched:
            logger.debug("Matched cpu %s with network %s", cpu, net)
            return QuietPeriodInfo(
                cpu_quiet_period=cpu,
                network_quiet_period=net,
                cpu_quiet_periods=cpu_candidates,
                network_quiet_periods=network_candidates,
            )

    if cpu_idx < len(cpu_candidates):
        raise MetricError(ErrorKind.NO_TTI_NETWORK_IDLE_PERIOD)
    raise MetricError(ErrorKind.NO_TTI_CPU_IDLE_PERIOD)


def compute_consistently_interactive(
    snapshot: TraceSnapshot, config: Optional[MetricConfig] = None
) -> MetricResult:
    """
    Compute the consistently-interactive time for one trace.

    Raises MetricError when FMP or DCL is missing, or when no shared quiet
    window exists.
    """
    config = config or DEFAULT_CONFIG
    timestamps = snapshot.timestamps

    fmp_ms = _require_fmp_ms(timestamps)
    dcl_ms = _require_dcl_ms(timestamps)

    long_tasks = filter_long_tasks(snapshot.long_tasks, config.long_task_threshold_ms)
    info = find_overlapping_quiet_periods(
        long_tasks,
        snapshot.network_records,
        timestamps,
        config=config,
        network_quiet_periods=snapshot.network_quiet_periods,
    )

    timestamp = max(info.cpu_quiet_period.start, fmp_ms, dcl_ms)
    timing = timestamp - timestamps.navigation_start_ms
    logger.debug("Consistently interactive at %sms (timing %sms)", timestamp, timing)

    return MetricResult(timing=timing, timestamp=timestamp, quiet_period_info=info)


def summarize_quiet_periods(periods: List[TimePeriod]) -> dict:
    """
    Return count and total/longest quiet time for a list of periods.
    """
    if not periods:
        return {"count": 0, "total_quiet": 0.0, "longest": 0.0}

    return {
        "count": len(periods),
        "total_quiet": float(sum(p.duration for p in periods)),
        "longest": float(max(p.duration for p in periods)),
    }
