import pytest

from interactivity_cli.config import MetricConfig
from interactivity_cli.errors import ErrorKind, MetricError
from interactivity_cli.metrics import (
    compute_consistently_interactive,
    find_overlapping_quiet_periods,
    summarize_quiet_periods,
)
from interactivity_cli.models import LongTask, NetworkRequest, TimePeriod, Timestamps, TraceSnapshot


def _timestamps(fmp=2000, dcl=2500, trace_end=10000, navigation_start=0):
    return Timestamps(
        navigation_start=navigation_start,
        trace_end=trace_end,
        first_meaningful_paint=fmp,
        dom_content_loaded=dcl,
        units_per_ms=1,
    )


def test_scenario_idle_page():
    snapshot = TraceSnapshot(timestamps=_timestamps(), network_quiet_periods=[TimePeriod(0, 10000)])
    result = compute_consistently_interactive(snapshot)
    info = result.quiet_period_info
    assert info.cpu_quiet_period == TimePeriod(0, 10000)
    assert info.network_quiet_period == TimePeriod(0, 10000)
    assert result.timestamp == 2500
    assert result.timing == 2500


def test_scenario_idle_page_derives_network_periods():
    result = compute_consistently_interactive(TraceSnapshot(timestamps=_timestamps()))
    assert result.quiet_period_info.network_quiet_period == TimePeriod(0, 10000)
    assert result.timing == 2500


def test_scenario_missing_fmp():
    snapshot = TraceSnapshot(timestamps=_timestamps(fmp=None))
    with pytest.raises(MetricError) as excinfo:
        compute_consistently_interactive(snapshot)
    assert excinfo.value.kind is ErrorKind.NO_FMP


def test_missing_dcl():
    snapshot = TraceSnapshot(timestamps=_timestamps(dcl=0))
    with pytest.raises(MetricError) as excinfo:
        compute_consistently_interactive(snapshot)
    assert excinfo.value.kind is ErrorKind.NO_DCL


def test_missing_fmp_checked_before_matching():
    # would otherwise fail with a network error
    busy = [NetworkRequest(0.0, None) for _ in range(3)]
    snapshot = TraceSnapshot(timestamps=_timestamps(fmp=0), network_records=busy)
    with pytest.raises(MetricError) as excinfo:
        compute_consistently_interactive(snapshot)
    assert excinfo.value.kind is ErrorKind.NO_FMP


def test_scenario_network_never_quiet():
    busy = [NetworkRequest(0.0, None) for _ in range(3)]
    snapshot = TraceSnapshot(timestamps=_timestamps(), network_records=busy)
    with pytest.raises(MetricError) as excinfo:
        compute_consistently_interactive(snapshot)
    assert excinfo.value.kind is ErrorKind.NO_TTI_NETWORK_IDLE_PERIOD


def test_scenario_single_long_task():
    snapshot = TraceSnapshot(
        timestamps=_timestamps(),
        long_tasks=[LongTask(3000, 3100)],
        network_quiet_periods=[TimePeriod(0, 10000)],
    )
    result = compute_consistently_interactive(snapshot)
    info = result.quiet_period_info
    assert info.cpu_quiet_periods == [TimePeriod(3100, 10000)]
    assert info.cpu_quiet_period == TimePeriod(3100, 10000)
    assert result.timestamp == 3100
    assert result.timing == 3100


def test_short_tasks_do_not_split_cpu_quiet_periods():
    snapshot = TraceSnapshot(
        timestamps=_timestamps(),
        long_tasks=[LongTask(3000, 3049)],
        network_quiet_periods=[TimePeriod(0, 10000)],
    )
    result = compute_consistently_interactive(snapshot)
    assert result.quiet_period_info.cpu_quiet_period == TimePeriod(0, 10000)


def test_cpu_exhausted_reports_cpu_error():
    # cpu: [0, 6000], [6500, 12000]; neither holds a window with the network periods
    ts = _timestamps(fmp=1, dcl=1, trace_end=12000)
    with pytest.raises(MetricError) as excinfo:
        find_overlapping_quiet_periods(
            [LongTask(6000, 6500)],
            [],
            ts,
            network_quiet_periods=[TimePeriod(2000, 9000), TimePeriod(9500, 20000)],
        )
    assert excinfo.value.kind is ErrorKind.NO_TTI_CPU_IDLE_PERIOD


def test_no_candidates_at_all_reports_cpu_error():
    ts = _timestamps(fmp=9000, trace_end=10000)
    with pytest.raises(MetricError) as excinfo:
        find_overlapping_quiet_periods([], [], ts)
    assert excinfo.value.kind is ErrorKind.NO_TTI_CPU_IDLE_PERIOD


def test_network_starting_later_must_fit_in_cpu_period():
    ts = _timestamps(fmp=1, trace_end=20000)
    info = find_overlapping_quiet_periods(
        [LongTask(14000, 15000)],
        [],
        ts,
        network_quiet_periods=[TimePeriod(4000, 12000)],
    )
    assert info.cpu_quiet_period == TimePeriod(0, 14000)
    assert info.network_quiet_period == TimePeriod(4000, 12000)


def test_matcher_advances_past_short_overlaps():
    ts = _timestamps(fmp=1, trace_end=30000)
    info = find_overlapping_quiet_periods(
        [LongTask(8000, 9000)],
        [],
        ts,
        network_quiet_periods=[TimePeriod(5000, 11000), TimePeriod(12000, 30000)],
    )
    # cpu [0, 8000] cannot hold a window starting at 5000; network [5000, 11000]
    # cannot hold one starting at 9000
    assert info.cpu_quiet_period == TimePeriod(9000, 30000)
    assert info.network_quiet_period == TimePeriod(12000, 30000)


def test_equal_starts_match():
    ts = _timestamps(fmp=1, trace_end=20000)
    info = find_overlapping_quiet_periods(
        [LongTask(0, 1000)],
        [],
        ts,
        network_quiet_periods=[TimePeriod(1000, 6000)],
    )
    assert info.cpu_quiet_period == TimePeriod(1000, 20000)
    assert info.network_quiet_period == TimePeriod(1000, 6000)


def test_matcher_is_deterministic():
    ts = _timestamps(fmp=1, trace_end=30000)
    args = ([LongTask(8000, 9000)], [], ts)
    kwargs = {"network_quiet_periods": [TimePeriod(5000, 11000), TimePeriod(12000, 30000)]}
    assert find_overlapping_quiet_periods(*args, **kwargs) == find_overlapping_quiet_periods(*args, **kwargs)


def test_custom_quiet_window():
    snapshot = TraceSnapshot(
        timestamps=_timestamps(fmp=1500),
        long_tasks=[LongTask(3000, 3100)],
        network_quiet_periods=[TimePeriod(0, 10000)],
    )
    result = compute_consistently_interactive(snapshot, MetricConfig(required_quiet_window_ms=1000))
    # [0, 3000] is long enough for a 1s window and ends after FMP + 1s
    assert result.quiet_period_info.cpu_quiet_period == TimePeriod(0, 3000)
    assert result.timestamp == 2500


def test_microsecond_timestamps():
    ts = Timestamps(
        navigation_start=1_000_000,
        trace_end=12_000_000,
        first_meaningful_paint=3_000_000,
        dom_content_loaded=3_500_000,
    )
    snapshot = TraceSnapshot(timestamps=ts, long_tasks=[LongTask(3000, 3100)])
    result = compute_consistently_interactive(snapshot)
    assert result.timestamp == 4100
    assert result.timing == 3100


def test_summarize_quiet_periods():
    assert summarize_quiet_periods([]) == {"count": 0, "total_quiet": 0.0, "longest": 0.0}
    summary = summarize_quiet_periods([TimePeriod(0, 3000), TimePeriod(3100, 10000)])
    assert summary == {"count": 2, "total_quiet": 9900.0, "longest": 6900.0}


def test_requests_after_trace_end_do_not_hide_busy_network():
    busy = [NetworkRequest(0.0, 9.0)] * 3 + [NetworkRequest(16.0, 17.0)] * 3
    with pytest.raises(MetricError) as excinfo:
        find_overlapping_quiet_periods([], busy, _timestamps())
    assert excinfo.value.kind is ErrorKind.NO_TTI_NETWORK_IDLE_PERIOD
