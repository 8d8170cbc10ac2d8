from __future__ import annotations

import json
from pathlib import Path
from typing import List, Mapping, Optional

from .models import LongTask, NetworkRequest, TimePeriod, Timestamps, TraceSnapshot


def load_snapshot(path: str | Path) -> TraceSnapshot:
    """
    Load a trace snapshot from a JSON file.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix != ".json":
        raise ValueError(f"Unsupported snapshot format: {suffix} (use .json)")

    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)

    return snapshot_from_mapping(raw)


def snapshot_from_mapping(raw) -> TraceSnapshot:
    if not isinstance(raw, Mapping):
        raise ValueError("Snapshot must be a JSON object")
    if "timestamps" not in raw:
        raise ValueError("Snapshot is missing 'timestamps'")

    quiet_raw = raw.get("networkQuietPeriods")
    network_quiet_periods: Optional[List[TimePeriod]] = None
    if quiet_raw is not None:
        network_quiet_periods = [_period_from_mapping(entry) for entry in _as_list(quiet_raw, "networkQuietPeriods")]

    return TraceSnapshot(
        timestamps=_timestamps_from_mapping(raw["timestamps"]),
        long_tasks=[_task_from_mapping(entry) for entry in _as_list(raw.get("longTasks", []), "longTasks")],
        network_records=[
            _request_from_mapping(entry) for entry in _as_list(raw.get("networkRecords", []), "networkRecords")
        ],
        network_quiet_periods=network_quiet_periods,
    )


def _as_list(value, name: str) -> list:
    if not isinstance(value, list):
        raise ValueError(f"'{name}' must be a list")
    return value


def _optional_float(mapping, key: str) -> Optional[float]:
    value = mapping.get(key)
    return float(value) if value not in (None, "") else None


def _timestamps_from_mapping(mapping) -> Timestamps:
    try:
        navigation_start = float(mapping["navigationStart"])
        trace_end = float(mapping["traceEnd"])
        units_per_ms = float(mapping.get("unitsPerMs", 1000))
        fmp = _optional_float(mapping, "firstMeaningfulPaint")
        dcl = _optional_float(mapping, "domContentLoaded")
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise ValueError(f"Invalid timestamps entry: {mapping!r}") from exc

    if units_per_ms <= 0:
        raise ValueError(f"Invalid timestamps entry: {mapping!r} (unitsPerMs must be positive)")

    return Timestamps(
        navigation_start=navigation_start,
        trace_end=trace_end,
        first_meaningful_paint=fmp,
        dom_content_loaded=dcl,
        units_per_ms=units_per_ms,
    )


def _task_from_mapping(mapping) -> LongTask:
    try:
        start = float(mapping["start"])
        if "end" in mapping:
            end = float(mapping["end"])
        else:
            end = start + float(mapping["duration"])
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Invalid long task entry: {mapping!r}") from exc

    if end < start:
        raise ValueError(f"Invalid long task entry: {mapping!r} (end before start)")
    return LongTask(start=start, end=end)


def _request_from_mapping(mapping) -> NetworkRequest:
    try:
        start_time = float(mapping["startTime"])
        end_time = _optional_float(mapping, "endTime")
        url = str(mapping.get("url", ""))
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise ValueError(f"Invalid network record entry: {mapping!r}") from exc

    if end_time is not None and end_time < start_time:
        raise ValueError(f"Invalid network record entry: {mapping!r} (end before start)")
    return NetworkRequest(start_time=start_time, end_time=end_time, url=url)


def _period_from_mapping(mapping) -> TimePeriod:
    try:
        start = float(mapping["start"])
        end = float(mapping["end"])
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Invalid quiet period entry: {mapping!r}") from exc

    if end < start:
        raise ValueError(f"Invalid quiet period entry: {mapping!r} (end before start)")
    return TimePeriod(start=start, end=end)
