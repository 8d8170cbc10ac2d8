from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional
from urllib.parse import urlparse


@dataclass(frozen=True)
class TimePeriod:
    """
    One contiguous quiet (or busy) interval, in milliseconds.
    """

    start: float
    end: float

    @property
    def duration(self) -> float:
        return self.end - self.start


@dataclass(frozen=True)
class LongTask:
    """
    A main-thread task, in milliseconds relative to navigation start.
    """

    start: float
    end: float

    @property
    def duration(self) -> float:
        return self.end - self.start


@dataclass(frozen=True)
class NetworkRequest:
    """
    A single network request on the trace clock, in seconds.

    ``end_time`` is None for requests that never finished.
    """

    start_time: float
    end_time: Optional[float] = None
    url: str = ""

    @property
    def scheme(self) -> str:
        return urlparse(self.url).scheme.lower() if self.url else ""


@dataclass(frozen=True)
class Timestamps:
    navigation_start: float
    trace_end: float
    first_meaningful_paint: Optional[float] = None
    dom_content_loaded: Optional[float] = None
    # 1000 for microsecond trace timestamps, 1 for millisecond input
    units_per_ms: float = 1000.0

    def to_ms(self, value: float) -> float:
        return value / self.units_per_ms

    @property
    def navigation_start_ms(self) -> float:
        return self.to_ms(self.navigation_start)

    @property
    def trace_end_ms(self) -> float:
        return self.to_ms(self.trace_end)

    @property
    def first_meaningful_paint_ms(self) -> Optional[float]:
        if self.first_meaningful_paint is None:
            return None
        return self.to_ms(self.first_meaningful_paint)

    @property
    def dom_content_loaded_ms(self) -> Optional[float]:
        if self.dom_content_loaded is None:
            return None
        return self.to_ms(self.dom_content_loaded)


@dataclass(frozen=True)
class QuietPeriodInfo:
    cpu_quiet_period: TimePeriod
    network_quiet_period: TimePeriod
    cpu_quiet_periods: List[TimePeriod] = field(default_factory=list)
    network_quiet_periods: List[TimePeriod] = field(default_factory=list)


@dataclass(frozen=True)
class MetricResult:
    """
    Final metric value. Both fields are milliseconds; ``timing`` is
    ``timestamp`` measured from navigation start.
    """

    timing: float
    timestamp: float
    quiet_period_info: Optional[QuietPeriodInfo] = None


@dataclass(frozen=True)
class TraceSnapshot:
    """
    Everything needed to compute the metric for one page load.
    """

    timestamps: Timestamps
    long_tasks: List[LongTask] = field(default_factory=list)
    network_records: List[NetworkRequest] = field(default_factory=list)
    # Already-derived network quiet periods, used instead of network_records when set
    network_quiet_periods: Optional[List[TimePeriod]] = None
