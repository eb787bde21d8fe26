"""Tests for the durable key-value stores and feature settings."""

import json
from pathlib import Path

from prodexa_storage.features import (
    FEATURE_STORAGE_PATHS_KEY,
    SHOPPING_LIST,
    FeatureSettings,
    StorageMode,
    feature_file_name,
)
from prodexa_storage.kv import JsonFileKeyValueStore, MemoryKeyValueStore


class TestJsonFileKeyValueStore:
    """Tests for the file-backed store."""

    async def test_values_survive_reopen(self, tmp_path: Path):
        path = tmp_path / "settings" / "settings.json"
        store = JsonFileKeyValueStore(path)
        await store.set("a", "1")
        await store.set("b", "2")
        await store.delete("b")

        reopened = JsonFileKeyValueStore(path)

        assert await reopened.get("a") == "1"
        assert await reopened.get("b") is None
        assert json.loads(path.read_text()) == {"a": "1"}

    async def test_missing_file_is_empty(self, tmp_path: Path):
        store = JsonFileKeyValueStore(tmp_path / "settings.json")

        assert await store.get("anything") is None

    async def test_corrupt_file_starts_empty(self, tmp_path: Path):
        path = tmp_path / "settings.json"
        path.write_text("{not json")
        store = JsonFileKeyValueStore(path)

        assert await store.get("a") is None
        await store.set("a", "1")
        assert json.loads(path.read_text()) == {"a": "1"}

    async def test_non_object_file_starts_empty(self, tmp_path: Path):
        path = tmp_path / "settings.json"
        path.write_text("[1, 2]")

        assert await JsonFileKeyValueStore(path).get("0") is None

    async def test_delete_missing_key_does_not_write(self, tmp_path: Path):
        path = tmp_path / "settings.json"

        await JsonFileKeyValueStore(path).delete("missing")

        assert not path.exists()


class TestFeatureSettings:
    """Tests for typed per-feature settings."""

    async def test_storage_paths_are_per_feature(self):
        settings = FeatureSettings(MemoryKeyValueStore())

        await settings.set_storage_path(SHOPPING_LIST, "/data/lists")
        await settings.set_storage_path("pantry", "/data/pantry")
        await settings.clear_storage_path("pantry")

        assert await settings.get_storage_path(SHOPPING_LIST) == "/data/lists"
        assert await settings.get_storage_path("pantry") is None

    async def test_unreadable_storage_paths_are_ignored(self):
        settings = FeatureSettings(MemoryKeyValueStore({FEATURE_STORAGE_PATHS_KEY: "oops"}))

        assert await settings.get_storage_path(SHOPPING_LIST) is None

    async def test_storage_mode_defaults_to_local(self):
        settings = FeatureSettings(MemoryKeyValueStore())

        assert await settings.get_storage_mode(SHOPPING_LIST) == StorageMode.LOCAL
        await settings.set_storage_mode(SHOPPING_LIST, StorageMode.CLOUD_FILE)
        assert await settings.get_storage_mode(SHOPPING_LIST) == StorageMode.CLOUD_FILE

    async def test_cloud_file_round_trip(self):
        settings = FeatureSettings(MemoryKeyValueStore())

        await settings.set_cloud_file_uri(SHOPPING_LIST, "content://drive/document/1")
        await settings.set_cloud_file_name(SHOPPING_LIST, "list.csv")
        await settings.clear_cloud_file_name(SHOPPING_LIST)

        assert await settings.get_cloud_file_uri(SHOPPING_LIST) == "content://drive/document/1"
        assert await settings.get_cloud_file_name(SHOPPING_LIST) is None


def test_feature_file_names():
    assert feature_file_name(SHOPPING_LIST) == "shopping_list.csv"
    assert feature_file_name("pantry") == "pantry.csv"
    assert feature_file_name("pantry", {"pantry": "stock.csv"}) == "stock.csv"
