"""Core protocols for dependency injection.

The delivery engine depends only on these capabilities; concrete
implementations live under ``gradepath_telemetry.adapters``.
"""

from gradepath_telemetry.core.protocols.ingest import IngestClient
from gradepath_telemetry.core.protocols.platform import PlatformInfo
from gradepath_telemetry.core.protocols.storage import KeyValueStore

__all__ = [
    "IngestClient",
    "KeyValueStore",
    "PlatformInfo",
]
