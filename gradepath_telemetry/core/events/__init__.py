"""Telemetry records."""

from gradepath_telemetry.core.events.base import TelemetryRecord, now_ms
from gradepath_telemetry.core.events.telemetry import (
    SCREEN_VIEW,
    SCREEN_VIEW_END,
    PerformanceMetric,
    ScreenViewEvent,
    TelemetryEvent,
)

__all__ = [
    "SCREEN_VIEW",
    "SCREEN_VIEW_END",
    "PerformanceMetric",
    "ScreenViewEvent",
    "TelemetryEvent",
    "TelemetryRecord",
    "now_ms",
]
