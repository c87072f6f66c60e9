"""In-memory key-value store.

Suitable for short-lived processes and tests. Nothing survives a restart,
so the user id is regenerated and undelivered events are lost on exit.
"""

from typing import Dict, Optional


class InMemoryKeyValueStore:
    """Dict-backed implementation of the KeyValueStore protocol."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        """Initialize, optionally seeded with existing values."""
        self._data: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        """Return the value for ``key`` or None."""
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``."""
        self._data[key] = value

    async def remove(self, key: str) -> None:
        """Delete ``key`` if present."""
        self._data.pop(key, None)
