"""Tests for ListStorageConfig."""

from pathlib import Path

import pytest

from prodexa_storage.config import ListStorageConfig
from prodexa_storage.features import SHOPPING_LIST


class TestListStorageConfig:
    """Tests for configuration defaults and environment loading."""

    def test_defaults(self):
        config = ListStorageConfig()

        assert config.cache_ttl_seconds == 45.0
        assert config.watch_connectivity is False
        assert config.document_dir.name == "documents"
        assert config.feature_files[SHOPPING_LIST] == "shopping_list.csv"

    def test_from_environment(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
        monkeypatch.setenv("PRODEXA_DOCUMENT_DIR", str(tmp_path / "docs"))
        monkeypatch.setenv("PRODEXA_SETTINGS_PATH", str(tmp_path / "s.json"))
        monkeypatch.setenv("PRODEXA_CACHE_TTL_SECONDS", "10")
        monkeypatch.setenv("PRODEXA_CONNECTIVITY_HOST", "example.org")
        monkeypatch.setenv("PRODEXA_CONNECTIVITY_INTERVAL_SECONDS", "5")
        monkeypatch.setenv("PRODEXA_WATCH_CONNECTIVITY", "True")
        monkeypatch.setenv("PRODEXA_LOG_LEVEL", "debug")
        monkeypatch.setenv("PRODEXA_STRUCTURED_LOGGING", "false")

        config = ListStorageConfig.from_environment()

        assert config.document_dir == tmp_path / "docs"
        assert config.settings_path == tmp_path / "s.json"
        assert config.cache_ttl_seconds == 10.0
        assert config.connectivity_host == "example.org"
        assert config.connectivity_interval_seconds == 5.0
        assert config.watch_connectivity is True
        assert config.log_level == "DEBUG"
        assert config.structured_logging is False

    def test_negative_ttl_rejected(self):
        with pytest.raises(ValueError):
            ListStorageConfig(cache_ttl_seconds=-1)

    def test_home_is_expanded(self):
        config = ListStorageConfig(document_dir=Path("~/lists"))

        assert "~" not in str(config.document_dir)
