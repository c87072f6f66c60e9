"""Configuration module for the telemetry client.

Provides centralized configuration management with type-safe enums.

Usage:
    from gradepath_telemetry.core.config import settings, StorageBackendType

    if settings.STORAGE_BACKEND == StorageBackendType.REDIS:
        ...

    config = TelemetryConfig(batch_size=20)
"""

from gradepath_telemetry.core.config.enums import Environment, PlatformId, StorageBackendType
from gradepath_telemetry.core.config.settings import Settings
from gradepath_telemetry.core.config.telemetry import TelemetryConfig

__all__ = [
    "Settings",
    "TelemetryConfig",
    "StorageBackendType",
    "Environment",
    "PlatformId",
    "settings",
]

# Singleton settings instance
settings = Settings()
