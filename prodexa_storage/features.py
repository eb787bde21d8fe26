"""
Features and their persisted settings.

A feature is a named list. Each one has its own storage directory,
storage mode and optional cloud file, all kept in the key-value store.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from enum import Enum

from .kv import KeyValueStore

logger = logging.getLogger(__name__)

SHOPPING_LIST = "shoppingList"

FEATURE_FILE_NAMES: dict[str, str] = {
    SHOPPING_LIST: "shopping_list.csv",
}

FEATURE_STORAGE_PATHS_KEY = "@prodexa/feature_storage_paths"
STORAGE_MODE_KEY_PREFIX = "@prodexa/storage_mode/"
CLOUD_FILE_URI_KEY_PREFIX = "@prodexa/cloud_file_uri/"
CLOUD_FILE_NAME_KEY_PREFIX = "@prodexa/cloud_file_name/"


class StorageMode(Enum):
    """Where the authoritative copy of a feature lives."""

    LOCAL = "local"
    CLOUD_FILE = "cloudFile"


def feature_file_name(feature: str, overrides: Mapping[str, str] | None = None) -> str:
    """File name used for a feature's CSV."""
    if overrides and feature in overrides:
        return overrides[feature]
    return FEATURE_FILE_NAMES.get(feature, f"{feature}.csv")


class FeatureSettings:
    """Typed access to per-feature settings in a KeyValueStore."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    # Storage directory

    async def _get_storage_paths(self) -> dict[str, str]:
        raw = await self.store.get(FEATURE_STORAGE_PATHS_KEY)
        if not raw:
            return {}
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable feature storage paths")
            return {}
        if not isinstance(parsed, dict):
            return {}
        return {str(k): str(v) for k, v in parsed.items()}

    async def get_storage_path(self, feature: str) -> str | None:
        """Configured directory for a feature, or None for the default location."""
        paths = await self._get_storage_paths()
        return paths.get(feature) or None

    async def set_storage_path(self, feature: str, path: str) -> None:
        paths = await self._get_storage_paths()
        paths[feature] = path
        await self.store.set(FEATURE_STORAGE_PATHS_KEY, json.dumps(paths))

    async def clear_storage_path(self, feature: str) -> None:
        paths = await self._get_storage_paths()
        paths.pop(feature, None)
        await self.store.set(FEATURE_STORAGE_PATHS_KEY, json.dumps(paths))

    # Storage mode

    async def get_storage_mode(self, feature: str) -> StorageMode:
        raw = await self.store.get(STORAGE_MODE_KEY_PREFIX + feature)
        try:
            return StorageMode(raw) if raw else StorageMode.LOCAL
        except ValueError:
            return StorageMode.LOCAL

    async def set_storage_mode(self, feature: str, mode: StorageMode) -> None:
        await self.store.set(STORAGE_MODE_KEY_PREFIX + feature, mode.value)

    # Cloud file

    async def get_cloud_file_uri(self, feature: str) -> str | None:
        return await self.store.get(CLOUD_FILE_URI_KEY_PREFIX + feature) or None

    async def set_cloud_file_uri(self, feature: str, uri: str) -> None:
        await self.store.set(CLOUD_FILE_URI_KEY_PREFIX + feature, uri)

    async def clear_cloud_file_uri(self, feature: str) -> None:
        await self.store.delete(CLOUD_FILE_URI_KEY_PREFIX + feature)

    async def get_cloud_file_name(self, feature: str) -> str | None:
        return await self.store.get(CLOUD_FILE_NAME_KEY_PREFIX + feature) or None

    async def set_cloud_file_name(self, feature: str, name: str) -> None:
        await self.store.set(CLOUD_FILE_NAME_KEY_PREFIX + feature, name)

    async def clear_cloud_file_name(self, feature: str) -> None:
        await self.store.delete(CLOUD_FILE_NAME_KEY_PREFIX + feature)
