"""
Configuration for list storage.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from .features import FEATURE_FILE_NAMES
from .store import DEFAULT_CACHE_TTL_SECONDS
from .sync.events import DEFAULT_CONNECTIVITY_HOST

DEFAULT_BASE_PATH = Path.home() / ".prodexa"


@dataclass
class ListStorageConfig:
    """Configuration for the list storage engine.

    Environment Variables:
        PRODEXA_DOCUMENT_DIR: Local directory for feature files
        PRODEXA_SETTINGS_PATH: JSON file backing the settings store
        PRODEXA_CACHE_TTL_SECONDS: Cache freshness window (default: 45)
        PRODEXA_CONNECTIVITY_HOST: Host resolved to detect connectivity
        PRODEXA_CONNECTIVITY_INTERVAL_SECONDS: Delay between checks (default: 30)
        PRODEXA_WATCH_CONNECTIVITY: "true" to poll connectivity in the background
        PRODEXA_LOG_LEVEL: Log level (default: INFO)
        PRODEXA_STRUCTURED_LOGGING: "true" to emit JSON logs for the package

    Attributes:
        document_dir: Local directory used when a feature has no configured path
        settings_path: JSON file holding settings and the pending-sync set
        cache_ttl_seconds: How long cached records are served without a re-read
        connectivity_host: Host name the connectivity probe resolves
        connectivity_interval_seconds: Delay between connectivity checks
        watch_connectivity: Whether to start the connectivity watcher
        log_level: Level passed to structured logging setup
        structured_logging: Whether to install the JSON log handler
        feature_files: Feature name -> CSV file name
    """

    document_dir: Path = field(default_factory=lambda: DEFAULT_BASE_PATH / "documents")
    settings_path: Path = field(default_factory=lambda: DEFAULT_BASE_PATH / "settings.json")
    cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS
    connectivity_host: str = DEFAULT_CONNECTIVITY_HOST
    connectivity_interval_seconds: float = 30.0
    watch_connectivity: bool = False
    log_level: str = "INFO"
    structured_logging: bool = False
    feature_files: dict[str, str] = field(default_factory=lambda: dict(FEATURE_FILE_NAMES))

    def __post_init__(self) -> None:
        self.document_dir = Path(self.document_dir).expanduser()
        self.settings_path = Path(self.settings_path).expanduser()
        if self.cache_ttl_seconds < 0:
            raise ValueError(f"cache_ttl_seconds must be >= 0, got {self.cache_ttl_seconds}")

    @classmethod
    def from_environment(cls) -> ListStorageConfig:
        """Create configuration from environment variables."""
        base = cls()
        return cls(
            document_dir=Path(os.environ.get("PRODEXA_DOCUMENT_DIR", base.document_dir)),
            settings_path=Path(os.environ.get("PRODEXA_SETTINGS_PATH", base.settings_path)),
            cache_ttl_seconds=float(
                os.environ.get("PRODEXA_CACHE_TTL_SECONDS", base.cache_ttl_seconds)
            ),
            connectivity_host=os.environ.get("PRODEXA_CONNECTIVITY_HOST", base.connectivity_host),
            connectivity_interval_seconds=float(
                os.environ.get(
                    "PRODEXA_CONNECTIVITY_INTERVAL_SECONDS", base.connectivity_interval_seconds
                )
            ),
            watch_connectivity=os.environ.get("PRODEXA_WATCH_CONNECTIVITY", "").lower() == "true",
            log_level=os.environ.get("PRODEXA_LOG_LEVEL", base.log_level).upper(),
            structured_logging=os.environ.get("PRODEXA_STRUCTURED_LOGGING", "").lower() == "true",
        )
