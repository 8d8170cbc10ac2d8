from __future__ import annotations

from dataclasses import dataclass

REQUIRED_QUIET_WINDOW = 5000
ALLOWED_CONCURRENT_REQUESTS = 2
LONG_TASK_THRESHOLD = 50


@dataclass(frozen=True)
class MetricConfig:
    """
    Tunable policy constants. Durations are in milliseconds.
    """

    required_quiet_window_ms: float = REQUIRED_QUIET_WINDOW
    allowed_concurrent_requests: int = ALLOWED_CONCURRENT_REQUESTS
    long_task_threshold_ms: float = LONG_TASK_THRESHOLD

    def __post_init__(self) -> None:
        if self.required_quiet_window_ms <= 0:
            raise ValueError("required_quiet_window_ms must be positive")
        if self.allowed_concurrent_requests < 0:
            raise ValueError("allowed_concurrent_requests cannot be negative")
        if self.long_task_threshold_ms < 0:
            raise ValueError("long_task_threshold_ms cannot be negative")


DEFAULT_CONFIG = MetricConfig()
