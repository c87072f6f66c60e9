"""Unit tests for the telemetry service factory."""

import pytest

from gradepath_telemetry.adapters.ingest.http import HttpIngestClient
from gradepath_telemetry.adapters.platform import HostPlatformAdapter, StaticPlatformAdapter
from gradepath_telemetry.adapters.storage import FilesystemKeyValueStore, InMemoryKeyValueStore
from gradepath_telemetry.adapters.storage.redis import RedisKeyValueStore
from gradepath_telemetry.core.config import PlatformId, Settings, TelemetryConfig
from gradepath_telemetry.factory import (
    create_platform,
    create_storage,
    create_telemetry_service,
)


class TestCreateStorage:
    def test_memory(self):
        store = create_storage(Settings(STORAGE_BACKEND="memory"))

        assert isinstance(store, InMemoryKeyValueStore)

    def test_filesystem(self, tmp_path):
        store = create_storage(Settings(STORAGE_BACKEND="filesystem", STORAGE_PATH=tmp_path))

        assert isinstance(store, FilesystemKeyValueStore)
        assert store.base_path == tmp_path

    def test_redis(self):
        store = create_storage(
            Settings(
                STORAGE_BACKEND="redis",
                REDIS_URL="redis://localhost:6379/3",
                REDIS_KEY_PREFIX="app",
            )
        )

        assert isinstance(store, RedisKeyValueStore)
        assert store.make_key("k") == "app:k"


class TestCreatePlatform:
    def test_override_uses_static_adapter(self):
        platform = create_platform(Settings(PLATFORM="ios", APP_VERSION="3.1.0"))

        assert isinstance(platform, StaticPlatformAdapter)
        assert platform.platform_id() is PlatformId.IOS
        assert platform.app_version() == "3.1.0"

    def test_defaults_to_host(self, monkeypatch):
        monkeypatch.delenv("TELEMETRY_PLATFORM", raising=False)
        monkeypatch.delenv("TELEMETRY_APP_VERSION", raising=False)

        platform = create_platform(Settings(APP_VERSION="0.9.0"))

        assert isinstance(platform, HostPlatformAdapter)
        assert platform.app_version() == "0.9.0"


class TestCreateTelemetryService:
    @pytest.mark.asyncio
    async def test_uses_supplied_adapters(self, fake_store, fake_ingest, static_platform):
        service = create_telemetry_service(
            TelemetryConfig(batch_size=1, flush_interval_ms=3_600_000),
            storage=fake_store,
            platform=static_platform,
            ingest=fake_ingest,
        )

        async with service:
            await service.track("app_open")

        assert fake_ingest.event_types() == ["app_open"]
        assert fake_ingest.sent_to("/event")[0]["platform"] == "web"
        assert fake_ingest.closed is False

    @pytest.mark.asyncio
    async def test_builds_owned_http_client(self, fake_store, static_platform):
        config = TelemetryConfig(api_endpoint="https://api.example.com/telemetry")

        service = create_telemetry_service(config, storage=fake_store, platform=static_platform)

        assert service.config is config
        assert isinstance(service._ingest, HttpIngestClient)
        assert service._ingest.base_url == "https://api.example.com/telemetry"
        assert service._owns_ingest is True
        await service.destroy()

    def test_fills_storage_from_settings(self, static_platform, fake_ingest):
        service = create_telemetry_service(
            platform=static_platform,
            ingest=fake_ingest,
            app_settings=Settings(STORAGE_BACKEND="memory"),
        )

        assert isinstance(service._storage, InMemoryKeyValueStore)
