"""
Durable key-value storage for settings and sync markers.

Values are plain strings; structured values are JSON-encoded by the
caller. The file-backed store keeps the whole map in memory and
rewrites the file atomically after every mutation.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

import aiofiles
import aiofiles.os

from .exceptions import SettingsError

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Abstract string key-value store."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Get a value, or None if the key is absent."""
        ...

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Set a value."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Delete a key if present."""
        ...


class MemoryKeyValueStore(KeyValueStore):
    """Process-local store. Nothing survives a restart."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.values: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self.values.get(key)

    async def set(self, key: str, value: str) -> None:
        self.values[key] = value

    async def delete(self, key: str) -> None:
        self.values.pop(key, None)


class JsonFileKeyValueStore(KeyValueStore):
    """Store persisted as a single JSON object on disk.

    The file is loaded on first access. A corrupted file is logged and
    treated as empty so a bad settings file never blocks the list.
    """

    def __init__(self, path: Path):
        """Initialize the store.

        Args:
            path: Path to the JSON settings file
        """
        self.path = Path(path)
        self._values: dict[str, str] = {}
        self._loaded = False
        self._lock = asyncio.Lock()

    async def _ensure_loaded(self) -> None:
        """Load values from disk if not already loaded."""
        if self._loaded:
            return

        if await aiofiles.os.path.exists(self.path):
            try:
                async with aiofiles.open(self.path, encoding="utf-8") as f:
                    content = await f.read()
                data = json.loads(content) if content.strip() else {}
                if isinstance(data, dict):
                    self._values = {str(k): str(v) for k, v in data.items()}
                else:
                    logger.warning(f"Ignoring non-object settings file: {self.path}")
            except (json.JSONDecodeError, OSError) as e:
                logger.warning(f"Settings file unreadable, starting empty: {self.path}: {e}")
                self._values = {}

        self._loaded = True

    async def _persist(self, key: str) -> None:
        """Write the map atomically using temp file + rename."""
        try:
            await aiofiles.os.makedirs(self.path.parent, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".tmp_", suffix=".json")
        except OSError as e:
            raise SettingsError(key, "write", e) from e

        try:
            os.close(fd)
            async with aiofiles.open(temp_path, "w", encoding="utf-8") as f:
                await f.write(json.dumps(self._values, indent=2, sort_keys=True))
                await f.flush()
                os.fsync(f.fileno())

            await aiofiles.os.rename(temp_path, self.path)
        except Exception as e:
            try:
                await aiofiles.os.remove(temp_path)
            except OSError:
                pass
            raise SettingsError(key, "write", e) from e

    async def get(self, key: str) -> str | None:
        await self._ensure_loaded()
        return self._values.get(key)

    async def set(self, key: str, value: str) -> None:
        async with self._lock:
            await self._ensure_loaded()
            self._values[key] = value
            await self._persist(key)

    async def delete(self, key: str) -> None:
        async with self._lock:
            await self._ensure_loaded()
            if self._values.pop(key, None) is not None:
                await self._persist(key)
