from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    NO_FMP = "NO_FMP"
    NO_DCL = "NO_DCL"
    NO_TTI_CPU_IDLE_PERIOD = "NO_TTI_CPU_IDLE_PERIOD"
    NO_TTI_NETWORK_IDLE_PERIOD = "NO_TTI_NETWORK_IDLE_PERIOD"


MESSAGES = {
    ErrorKind.NO_FMP: "No first meaningful paint found in the trace.",
    ErrorKind.NO_DCL: "No DOMContentLoaded event found in the trace.",
    ErrorKind.NO_TTI_CPU_IDLE_PERIOD: "The main thread was busy for the rest of the trace.",
    ErrorKind.NO_TTI_NETWORK_IDLE_PERIOD: "The network never went quiet for the rest of the trace.",
}


class MetricError(Exception):
    """
    Raised when the metric cannot be computed. Branch on ``kind``, not the message.
    """

    def __init__(self, kind: ErrorKind, message: str | None = None) -> None:
        self.kind = kind
        super().__init__(message or MESSAGES[kind])

    def __repr__(self) -> str:
        return f"MetricError({self.kind.value!r})"
