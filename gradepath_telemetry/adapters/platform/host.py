"""Platform adapter for the process the library runs in.

Maps ``sys.platform`` onto the desktop platform ids. The application
version comes from, in order: the explicit argument, the installed
distribution's metadata, or ``DEFAULT_APP_VERSION``.
"""

import sys
from importlib import metadata
from typing import Optional

from gradepath_telemetry.core.config.enums import PlatformId

DEFAULT_APP_VERSION = "1.0.0"


def platform_from_sys(sys_platform: str) -> PlatformId:
    """Translate a ``sys.platform`` value. Unknown values map to linux."""
    if sys_platform.startswith("win") or sys_platform == "cygwin":
        return PlatformId.WINDOWS
    if sys_platform == "darwin":
        return PlatformId.MAC
    return PlatformId.LINUX


class HostPlatformAdapter:
    """PlatformInfo for desktop and server hosts."""

    def __init__(
        self,
        app_version: Optional[str] = None,
        distribution: Optional[str] = None,
        sys_platform: Optional[str] = None,
    ) -> None:
        """Resolve platform and version once.

        Args:
            app_version: Explicit version, wins over everything else.
            distribution: Installed distribution whose version to report.
            sys_platform: Override for ``sys.platform``.
        """
        self._platform = platform_from_sys(sys_platform or sys.platform)
        self._app_version = app_version or _distribution_version(distribution)

    def platform_id(self) -> PlatformId:
        """Return windows, mac or linux."""
        return self._platform

    def app_version(self) -> str:
        """Return the resolved application version."""
        return self._app_version


def _distribution_version(distribution: Optional[str]) -> str:
    if not distribution:
        return DEFAULT_APP_VERSION
    try:
        return metadata.version(distribution)
    except metadata.PackageNotFoundError:
        return DEFAULT_APP_VERSION
