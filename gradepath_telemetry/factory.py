"""Telemetry service factory.

Resolves every adapter once at startup from settings, so the delivery
engine itself never inspects the runtime environment. Hosts that need full
control construct ``TelemetryService`` directly with their own adapters.
"""

from typing import Optional

from gradepath_telemetry.adapters.ingest.http import HttpIngestClient
from gradepath_telemetry.adapters.platform import HostPlatformAdapter, StaticPlatformAdapter
from gradepath_telemetry.core.config import Settings, StorageBackendType, TelemetryConfig, settings
from gradepath_telemetry.core.logging import logger
from gradepath_telemetry.core.protocols import IngestClient, KeyValueStore, PlatformInfo
from gradepath_telemetry.core.telemetry_service import TelemetryService


def create_storage(app_settings: Settings = settings) -> KeyValueStore:
    """Build the key-value store selected by ``STORAGE_BACKEND``.

    Raises:
        ValueError: If the backend type is unknown.
    """
    backend_type = app_settings.STORAGE_BACKEND

    logger.info(f"Initializing telemetry storage backend: {backend_type.value}")

    if backend_type == StorageBackendType.MEMORY:
        from gradepath_telemetry.adapters.storage.in_memory import InMemoryKeyValueStore

        return InMemoryKeyValueStore()

    elif backend_type == StorageBackendType.FILESYSTEM:
        from gradepath_telemetry.adapters.storage.filesystem import FilesystemKeyValueStore

        return FilesystemKeyValueStore(base_path=app_settings.STORAGE_PATH)

    elif backend_type == StorageBackendType.REDIS:
        from gradepath_telemetry.adapters.storage.redis import RedisKeyValueStore

        return RedisKeyValueStore.from_url(
            app_settings.REDIS_URL, prefix=app_settings.REDIS_KEY_PREFIX
        )

    else:
        valid_options = ", ".join(t.value for t in StorageBackendType)
        raise ValueError(f"Unknown STORAGE_BACKEND: {backend_type}. Valid options: {valid_options}")


def create_platform(app_settings: Settings = settings) -> PlatformInfo:
    """Platform adapter honoring the ``PLATFORM`` and ``APP_VERSION`` overrides."""
    if app_settings.PLATFORM is not None:
        return StaticPlatformAdapter(
            app_settings.PLATFORM, app_settings.APP_VERSION or "1.0.0"
        )
    return HostPlatformAdapter(app_version=app_settings.APP_VERSION)


def create_telemetry_service(
    config: Optional[TelemetryConfig] = None,
    *,
    storage: Optional[KeyValueStore] = None,
    platform: Optional[PlatformInfo] = None,
    ingest: Optional[IngestClient] = None,
    app_settings: Settings = settings,
) -> TelemetryService:
    """Build a TelemetryService, filling unspecified adapters from settings.

    Args:
        config: Service configuration; read from ``TELEMETRY_*`` env vars if omitted.
        storage: Key-value store; defaults to the ``STORAGE_BACKEND`` selection.
        platform: Platform adapter; defaults to the host platform.
        ingest: Ingest client; defaults to an HTTP client on ``config.api_endpoint``.
        app_settings: Ambient settings used for the defaults.

    Returns:
        An uninitialized TelemetryService. Call ``initialize()`` or use it as an
        async context manager.
    """
    config = config or TelemetryConfig()
    owns_ingest = ingest is None
    if ingest is None:
        ingest = HttpIngestClient(
            config.api_endpoint,
            timeout=app_settings.HTTP_TIMEOUT_SECONDS,
            retry_attempts=app_settings.SEND_RETRY_ATTEMPTS,
        )

    return TelemetryService(
        storage=storage or create_storage(app_settings),
        platform=platform or create_platform(app_settings),
        ingest=ingest,
        config=config,
        owns_ingest=owns_ingest,
    )
