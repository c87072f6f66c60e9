"""Fake key-value store for testing.

Records every write and can be switched into a failing mode to exercise
the storage-failure paths without a real backend.
"""

from typing import Dict, List, Optional, Tuple

from gradepath_telemetry.core.exceptions import StorageException


class FakeKeyValueStore:
    """Test implementation of the KeyValueStore protocol.

    Usage:
        store = FakeKeyValueStore()
        service = TelemetryService(store, platform, ingest)
        ...
        assert store.writes_for("@telemetry_queue")[-1] == "[]"

        store.fail_reads = True   # every get() raises StorageException
        store.fail_writes = True  # every set()/remove() raises StorageException
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        """Initialize with optional seed data and no recorded calls."""
        self.data: Dict[str, str] = dict(initial or {})
        self.writes: List[Tuple[str, str]] = []
        self.removals: List[str] = []
        self.reads: List[str] = []
        self.fail_reads = False
        self.fail_writes = False

    async def get(self, key: str) -> Optional[str]:
        """Return the stored value, or raise when reads are failing."""
        self.reads.append(key)
        if self.fail_reads:
            raise StorageException(f"Simulated read failure for {key}")
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        """Record and store the value, or raise when writes are failing."""
        if self.fail_writes:
            raise StorageException(f"Simulated write failure for {key}")
        self.writes.append((key, value))
        self.data[key] = value

    async def remove(self, key: str) -> None:
        """Record and delete the key, or raise when writes are failing."""
        if self.fail_writes:
            raise StorageException(f"Simulated remove failure for {key}")
        self.removals.append(key)
        self.data.pop(key, None)

    # Test helpers

    def writes_for(self, key: str) -> List[str]:
        """All values written to ``key``, oldest first."""
        return [value for k, value in self.writes if k == key]

    def clear(self) -> None:
        """Reset recorded calls and failure switches (data is kept)."""
        self.writes.clear()
        self.removals.clear()
        self.reads.clear()
        self.fail_reads = False
        self.fail_writes = False
