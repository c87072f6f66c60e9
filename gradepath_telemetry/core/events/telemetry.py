"""Telemetry record types sent to the ingest endpoint."""

from typing import Any, Dict, Optional

from pydantic import Field

from gradepath_telemetry.core.events.base import TelemetryRecord, now_ms

SCREEN_VIEW = "screen_view"
SCREEN_VIEW_END = "screen_view_end"


class TelemetryEvent(TelemetryRecord):
    """A generic tracked event, the unit stored in the pending queue."""

    event_type: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    session_id: str = Field(..., min_length=1)
    screen_name: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    timestamp: int = Field(default_factory=now_ms)
    platform: str
    app_version: str

    @property
    def is_screen_view(self) -> bool:
        """True for ``screen_view`` and ``screen_view_end`` events."""
        return self.event_type.startswith(SCREEN_VIEW)

    @property
    def resolved_screen_name(self) -> Optional[str]:
        """Screen name from the event itself, else from ``metadata["screenName"]``."""
        if self.screen_name:
            return self.screen_name
        value = (self.metadata or {}).get("screenName")
        return str(value) if value else None


class ScreenViewEvent(TelemetryRecord):
    """Navigation record delivered to the screen-view ingest path."""

    screen_name: Optional[str] = None
    user_id: str = Field(..., min_length=1)
    session_id: str = Field(..., min_length=1)
    duration: Optional[int] = Field(None, ge=0)
    properties: Optional[Dict[str, Any]] = None
    timestamp: int = Field(default_factory=now_ms)

    @classmethod
    def from_event(cls, event: TelemetryEvent) -> "ScreenViewEvent":
        """Project a queued ``screen_view*`` event onto the screen-view shape.

        ``screenName`` is lifted out of the metadata. ``duration`` is lifted
        only from ``screen_view_end`` events and only when it is a
        non-negative integer; host properties named ``duration`` on other
        events stay in ``properties`` with everything else.
        """
        properties = dict(event.metadata or {})
        properties.pop("screenName", None)
        duration = None
        if event.event_type == SCREEN_VIEW_END and _is_duration(properties.get("duration")):
            duration = properties.pop("duration")
        return cls(
            screen_name=event.resolved_screen_name,
            user_id=event.user_id,
            session_id=event.session_id,
            duration=duration,
            properties=properties or None,
            timestamp=event.timestamp,
        )


class PerformanceMetric(TelemetryRecord):
    """A single measurement, delivered immediately and never queued."""

    metric_name: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    session_id: str = Field(..., min_length=1)
    value: float
    unit: str = "ms"
    context: Optional[Dict[str, Any]] = None
    timestamp: int = Field(default_factory=now_ms)


def _is_duration(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0
