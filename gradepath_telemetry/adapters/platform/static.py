"""Fixed platform adapter.

For hosts that already know what they are (a mobile shell, a web backend
tracking on behalf of browsers) and tests.
"""

from typing import Union

from gradepath_telemetry.core.config.enums import PlatformId


class StaticPlatformAdapter:
    """PlatformInfo returning constructor-supplied values."""

    def __init__(self, platform: Union[PlatformId, str], app_version: str = "1.0.0") -> None:
        """Store fixed values.

        Args:
            platform: A ``PlatformId`` or its string value.
            app_version: Version reported on every event.

        Raises:
            ValueError: If ``platform`` is not a known platform id.
        """
        self._platform = PlatformId(platform)
        self._app_version = app_version

    def platform_id(self) -> PlatformId:
        """Return the configured platform."""
        return self._platform

    def app_version(self) -> str:
        """Return the configured application version."""
        return self._app_version
