"""Fake ingest client for testing.

Records every delivered record and lets tests decide, per call, whether
the endpoint accepts it.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from gradepath_telemetry.core.events import PerformanceMetric, ScreenViewEvent, TelemetryEvent
from gradepath_telemetry.core.exceptions import IngestError


@dataclass
class SentRecord:
    """Single recorded send."""

    path: str
    payload: Dict[str, Any]


class FakeIngestClient:
    """In-memory test double for IngestClient.

    ``fail_when`` receives ``(path, payload)`` and returns an ``IngestError``
    to raise, or None to accept. Rejected calls are kept in ``failed``.

    Usage:
        ingest = FakeIngestClient()
        ingest.fail_when = lambda path, payload: (
            IngestUnavailableError("down", 503) if payload["eventType"] == "b" else None
        )
        ...
        assert ingest.event_types() == ["a"]
    """

    def __init__(self) -> None:
        """Initialize with nothing recorded and every send accepted."""
        self.sent: List[SentRecord] = []
        self.failed: List[SentRecord] = []
        self.fail_when: Optional[Callable[[str, Dict[str, Any]], Optional[IngestError]]] = None
        self.call_count = 0
        self.closed = False

    async def send_event(self, event: TelemetryEvent) -> None:
        """Record a generic event."""
        self._record("/event", event.to_wire())

    async def send_screen_view(self, screen_view: ScreenViewEvent) -> None:
        """Record a screen-view record."""
        self._record("/screen-view", screen_view.to_wire())

    async def send_performance(self, metric: PerformanceMetric) -> None:
        """Record a performance metric."""
        self._record("/performance", metric.to_wire())

    async def close(self) -> None:
        """Mark the client closed."""
        self.closed = True

    def _record(self, path: str, payload: Dict[str, Any]) -> None:
        self.call_count += 1
        record = SentRecord(path=path, payload=payload)
        error = self.fail_when(path, payload) if self.fail_when else None
        if error is not None:
            self.failed.append(record)
            raise error
        self.sent.append(record)

    # Test helpers

    def sent_to(self, path: str) -> List[Dict[str, Any]]:
        """Payloads successfully delivered to ``path``."""
        return [r.payload for r in self.sent if r.path == path]

    def event_types(self) -> List[str]:
        """``eventType`` of every delivered generic event, in order."""
        return [p["eventType"] for p in self.sent_to("/event")]

    def clear(self) -> None:
        """Reset recorded calls and the failure rule."""
        self.sent.clear()
        self.failed.clear()
        self.fail_when = None
        self.call_count = 0
        self.closed = False
