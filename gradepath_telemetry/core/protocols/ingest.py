"""IngestClient protocol for delivering telemetry records.

Decouples the delivery engine from the transport. Each send either returns
normally (the endpoint answered 2xx) or raises an ``IngestError`` subclass
telling the caller whether a later retry can succeed.

Implementations:
- HttpIngestClient: adapters/ingest/http.py
- FakeIngestClient: adapters/ingest/fake.py (tests)
"""

from typing import Protocol, runtime_checkable

from gradepath_telemetry.core.events import PerformanceMetric, ScreenViewEvent, TelemetryEvent


@runtime_checkable
class IngestClient(Protocol):
    """Delivers one record per call to the ingest endpoint."""

    async def send_event(self, event: TelemetryEvent) -> None:
        """Deliver a generic event.

        Raises:
            IngestRejectedError: The endpoint refused the payload (non-retryable).
            IngestUnavailableError: Network failure, throttling or 5xx (retryable).
        """
        ...

    async def send_screen_view(self, screen_view: ScreenViewEvent) -> None:
        """Deliver a screen-view record. Raises like ``send_event``."""
        ...

    async def send_performance(self, metric: PerformanceMetric) -> None:
        """Deliver a performance metric. Raises like ``send_event``."""
        ...

    async def close(self) -> None:
        """Release transport resources."""
        ...
