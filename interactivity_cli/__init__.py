"""
Interactivity CLI package.

Computes the "consistently interactive" page-load metric from a trace's
long main-thread tasks and network requests.
"""

from .errors import ErrorKind, MetricError
from .metrics import compute_consistently_interactive, find_overlapping_quiet_periods

__all__ = [
    "cli",
    "ErrorKind",
    "MetricError",
    "compute_consistently_interactive",
    "find_overlapping_quiet_periods",
]
