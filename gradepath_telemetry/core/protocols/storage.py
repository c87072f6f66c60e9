"""KeyValueStore protocol for durable client-side state.

The telemetry service keeps three named slots in the store: the durable
user id, the current session id, and the JSON-encoded pending queue. Any
backend that can get/set/remove strings by key satisfies the contract.

Implementations:
- InMemoryKeyValueStore: adapters/storage/in_memory.py
- FilesystemKeyValueStore: adapters/storage/filesystem.py
- RedisKeyValueStore: adapters/storage/redis.py
- FakeKeyValueStore: adapters/storage/fake.py (tests)
"""

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class KeyValueStore(Protocol):
    """Async string key/value storage."""

    async def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None when the key is absent.

        Raises:
            StorageException: If the backend cannot be read.
        """
        ...

    async def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value.

        Raises:
            StorageException: If the backend cannot be written.
        """
        ...

    async def remove(self, key: str) -> None:
        """Delete ``key``. Removing a missing key is not an error.

        Raises:
            StorageException: If the backend cannot be written.
        """
        ...
