"""Key-value store adapters."""

from gradepath_telemetry.adapters.storage.fake import FakeKeyValueStore
from gradepath_telemetry.adapters.storage.filesystem import FilesystemKeyValueStore
from gradepath_telemetry.adapters.storage.in_memory import InMemoryKeyValueStore

__all__ = ["InMemoryKeyValueStore", "FilesystemKeyValueStore", "FakeKeyValueStore"]
