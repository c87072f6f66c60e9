"""Redis-backed key-value store.

Namespaces every slot as ``<prefix>:<key>`` so several clients (or several
apps) can share one Redis database.
"""

from __future__ import annotations

from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from gradepath_telemetry.core.exceptions import StorageException


class RedisKeyValueStore:
    """Redis implementation of the KeyValueStore protocol."""

    def __init__(self, client: redis.Redis, prefix: str = "telemetry") -> None:
        """Wrap an existing client.

        Args:
            client: ``redis.asyncio.Redis`` created with ``decode_responses=True``
            prefix: Namespace prepended to every key
        """
        self._client = client
        self._prefix = prefix.rstrip(":")

    @classmethod
    def from_url(cls, url: str, prefix: str = "telemetry") -> "RedisKeyValueStore":
        """Build a store with its own connection pool from a redis URL."""
        return cls(redis.Redis.from_url(url, decode_responses=True), prefix=prefix)

    def make_key(self, key: str) -> str:
        """Build the namespaced Redis key ``<prefix>:<key>``."""
        return f"{self._prefix}:{key}" if self._prefix else key

    async def get(self, key: str) -> Optional[str]:
        """Return the value for ``key`` or None."""
        try:
            value = await self._client.get(self.make_key(key))
        except RedisError as e:
            raise StorageException(f"Redis GET {key} failed: {e}")
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key`` with no expiry."""
        try:
            await self._client.set(self.make_key(key), value)
        except RedisError as e:
            raise StorageException(f"Redis SET {key} failed: {e}")

    async def remove(self, key: str) -> None:
        """Delete ``key``."""
        try:
            await self._client.delete(self.make_key(key))
        except RedisError as e:
            raise StorageException(f"Redis DEL {key} failed: {e}")

    async def close(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()
