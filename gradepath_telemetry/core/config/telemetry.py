"""Per-service telemetry configuration.

All defaults are defined here in the schema. Uses Pydantic Settings for
automatic env var loading with the ``TELEMETRY_`` prefix:

    TELEMETRY_API_ENDPOINT=https://api.example.com/telemetry
    TELEMETRY_BATCH_SIZE=20
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TelemetryConfig(BaseSettings):
    """Immutable configuration of one TelemetryService.

    The last five fields are hardening knobs; their defaults keep the plain
    at-least-once behavior (unbounded queue, retry forever).
    """

    model_config = SettingsConfigDict(
        env_prefix="TELEMETRY_",
        extra="ignore",
        frozen=True,
    )

    api_endpoint: str = Field(
        "http://localhost:3000/telemetry", description="Base URL of the ingest endpoint"
    )
    batch_size: int = Field(10, gt=0, description="Queue length that triggers an early flush")
    flush_interval_ms: int = Field(30000, gt=0, description="Periodic flush interval")
    enabled: bool = Field(True, description="Master switch for all tracking calls")

    max_queue_size: Optional[int] = Field(
        None, gt=0, description="Drop oldest events beyond this length"
    )
    max_delivery_attempts: Optional[int] = Field(
        None, gt=0, description="Drop an event after this many failed sends"
    )
    drop_rejected_events: bool = Field(
        False, description="Drop events the endpoint rejects with a non-retryable 4xx"
    )
    max_concurrent_sends: int = Field(4, gt=0, description="In-flight sends per flush")
    destroy_flush_timeout_ms: int = Field(
        5000, gt=0, description="Upper bound on the final flush in destroy()"
    )

    @property
    def flush_interval_seconds(self) -> float:
        """Flush interval in seconds, as asyncio expects."""
        return self.flush_interval_ms / 1000
