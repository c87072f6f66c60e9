"""Ambient settings for the telemetry client.

Values are read from ``TELEMETRY_``-prefixed environment variables (and an
optional ``.env`` file) once at import time through the ``settings``
singleton in ``core.config``:

    TELEMETRY_STORAGE_BACKEND=redis
    TELEMETRY_LOG_LEVEL=DEBUG
"""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from gradepath_telemetry.core.config.enums import Environment, PlatformId, StorageBackendType


class Settings(BaseSettings):
    """Process-wide settings.

    Attributes:
        ENVIRONMENT: Deployment environment.
        LOG_LEVEL: Root level for the ``gradepath_telemetry`` logger.
        LOG_JSON: Emit one JSON object per log line. Always on in dev and prd.
        STORAGE_BACKEND: Which key-value store the factory builds.
        STORAGE_PATH: Directory used by the filesystem store.
        REDIS_URL: Connection URL used by the redis store.
        REDIS_KEY_PREFIX: Namespace prepended to every redis key.
        APP_VERSION: Application version override reported on events.
        PLATFORM: Platform override reported on events.
        HTTP_TIMEOUT_SECONDS: Per-request timeout for ingest calls.
        SEND_RETRY_ATTEMPTS: Attempts per ingest request on transient transport errors.
    """

    model_config = SettingsConfigDict(
        env_prefix="TELEMETRY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    ENVIRONMENT: Environment = Environment.LOCAL
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    STORAGE_BACKEND: StorageBackendType = StorageBackendType.FILESYSTEM
    STORAGE_PATH: Path = Path.home() / ".gradepath" / "telemetry"

    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_KEY_PREFIX: str = "telemetry"

    APP_VERSION: Optional[str] = None
    PLATFORM: Optional[PlatformId] = None

    HTTP_TIMEOUT_SECONDS: float = Field(10.0, gt=0)
    SEND_RETRY_ATTEMPTS: int = Field(3, ge=1)
