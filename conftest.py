"""Root conftest for pytest configuration and shared fixtures.

This conftest is loaded before both testpaths (tests/ and gradepath_telemetry/),
making its fixtures available to centralized tests AND colocated tests.
"""

import os

import pytest

# Register pytest-asyncio plugin at the root level
pytest_plugins = ("pytest_asyncio",)

# ---------------------------------------------------------------------------
# Environment variables, set before any gradepath_telemetry import.
# Uses setdefault so real env vars (CI) are never overridden.
# ---------------------------------------------------------------------------
os.environ.setdefault("TELEMETRY_ENVIRONMENT", "test")
os.environ.setdefault("TELEMETRY_STORAGE_BACKEND", "memory")
os.environ.setdefault("TELEMETRY_LOG_LEVEL", "DEBUG")


# ---------------------------------------------------------------------------
# Shared fake fixtures for the individual protocols
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_store():
    """Fake KeyValueStore that records writes and can simulate failures."""
    from gradepath_telemetry.adapters.storage.fake import FakeKeyValueStore

    return FakeKeyValueStore()


@pytest.fixture
def fake_ingest():
    """Fake IngestClient that records deliveries and can simulate failures."""
    from gradepath_telemetry.adapters.ingest.fake import FakeIngestClient

    return FakeIngestClient()


@pytest.fixture
def static_platform():
    """Platform adapter fixed to web / 2.3.4."""
    from gradepath_telemetry.adapters.platform.static import StaticPlatformAdapter

    return StaticPlatformAdapter("web", "2.3.4")
