"""Client-side telemetry: batched, durable, at-least-once event delivery.

Usage:
    from gradepath_telemetry import TelemetryConfig, create_telemetry_service

    async with create_telemetry_service(TelemetryConfig(api_endpoint=url)) as telemetry:
        await telemetry.track_screen_view("Home")
        await telemetry.track("button_press", {"button": "start"})
"""

from gradepath_telemetry.core.config import PlatformId, TelemetryConfig
from gradepath_telemetry.core.events import PerformanceMetric, ScreenViewEvent, TelemetryEvent
from gradepath_telemetry.core.protocols import IngestClient, KeyValueStore, PlatformInfo
from gradepath_telemetry.core.telemetry_service import ServiceState, TelemetryService
from gradepath_telemetry.factory import create_telemetry_service

__version__ = "0.1.0"

__all__ = [
    "IngestClient",
    "KeyValueStore",
    "PerformanceMetric",
    "PlatformId",
    "PlatformInfo",
    "ScreenViewEvent",
    "ServiceState",
    "TelemetryConfig",
    "TelemetryEvent",
    "TelemetryService",
    "create_telemetry_service",
]
