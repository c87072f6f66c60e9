"""PlatformInfo protocol: what the host reports about itself."""

from typing import Protocol, runtime_checkable

from gradepath_telemetry.core.config.enums import PlatformId


@runtime_checkable
class PlatformInfo(Protocol):
    """Pure query for the running platform and application version."""

    def platform_id(self) -> PlatformId:
        """Return the platform the host application runs on."""
        ...

    def app_version(self) -> str:
        """Return the host application version string."""
        ...
