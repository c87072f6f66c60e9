"""Filesystem key-value store.

Keeps every slot in a single JSON document (``telemetry.json`` by default)
under a base directory, the way desktop apps keep their settings file.
Writes go to a temporary file that is then atomically renamed over the
document, so a crash mid-write never leaves a truncated file behind.

Uses aiofiles for non-blocking file I/O operations.
"""

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional, Union

import aiofiles
import aiofiles.os

from gradepath_telemetry.core.exceptions import StorageException

logger = logging.getLogger(__name__)


class FilesystemKeyValueStore:
    """File-backed implementation of the KeyValueStore protocol.

    The document is read on first access and cached; every mutation rewrites
    the whole file. Thread-safe for concurrent coroutines via asyncio.Lock.
    """

    DEFAULT_FILENAME = "telemetry.json"

    def __init__(self, base_path: Union[str, Path], filename: str = DEFAULT_FILENAME):
        """Initialize filesystem store.

        Args:
            base_path: Directory holding the document (created if missing)
            filename: Name of the JSON document
        """
        self.base_path = Path(base_path)
        self.path = self.base_path / filename
        self._cache: Optional[Dict[str, str]] = None
        self._lock = asyncio.Lock()
        logger.debug(f"FilesystemKeyValueStore initialized at {self.path}")

    async def get(self, key: str) -> Optional[str]:
        """Return the value for ``key`` or None."""
        async with self._lock:
            data = await self._load()
            return data.get(key)

    async def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key`` and rewrite the document."""
        async with self._lock:
            data = await self._load()
            updated = {**data, key: value}
            await self._write(updated)
            self._cache = updated

    async def remove(self, key: str) -> None:
        """Delete ``key`` and rewrite the document if it was present."""
        async with self._lock:
            data = await self._load()
            if key not in data:
                return
            updated = {k: v for k, v in data.items() if k != key}
            await self._write(updated)
            self._cache = updated

    async def _load(self) -> Dict[str, str]:
        if self._cache is not None:
            return self._cache

        if not await aiofiles.os.path.exists(self.path):
            self._cache = {}
            return self._cache

        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                content = await f.read()
        except UnicodeDecodeError as e:
            logger.error(f"Telemetry store at {self.path} is not valid UTF-8, starting empty: {e}")
            content = ""
        except OSError as e:
            raise StorageException(f"Failed to read {self.path}: {e}")

        try:
            data = json.loads(content) if content.strip() else {}
        except json.JSONDecodeError as e:
            logger.error(f"Corrupt telemetry store at {self.path}, starting empty: {e}")
            data = {}

        if not isinstance(data, dict):
            logger.error(f"Telemetry store at {self.path} is not an object, starting empty")
            data = {}

        self._cache = {str(k): str(v) for k, v in data.items()}
        return self._cache

    async def _write(self, data: Dict[str, str]) -> None:
        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        try:
            await asyncio.to_thread(self.base_path.mkdir, parents=True, exist_ok=True)
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(json.dumps(data, indent=2))
            await aiofiles.os.replace(tmp_path, self.path)
        except OSError as e:
            raise StorageException(f"Failed to write {self.path}: {e}")

    def __repr__(self) -> str:
        return f"FilesystemKeyValueStore(path={os.fspath(self.path)!r})"
