"""Platform adapters."""

from gradepath_telemetry.adapters.platform.host import HostPlatformAdapter, platform_from_sys
from gradepath_telemetry.adapters.platform.static import StaticPlatformAdapter

__all__ = ["HostPlatformAdapter", "StaticPlatformAdapter", "platform_from_sys"]
