"""
List storage engine.

ListStorage wires the settings store, location resolver, record
stores, cloud mirror and pending-sync queue together and exposes the
operations the UI layer calls.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from .codec import ListRecord
from .config import ListStorageConfig
from .exceptions import ListStorageError
from .features import SHOPPING_LIST, FeatureSettings, StorageMode
from .handles import HandleRegistry
from .kv import JsonFileKeyValueStore, KeyValueStore
from .location import LocationResolver
from .logging_utils import configure_structured_logging
from .store import DEFAULT_CACHE_TTL_SECONDS, RecordCache, RecordStore, StorageFileInfo
from .sync.events import ConnectivityWatcher, EventSource
from .sync.mirror import AttachResult, CloudMirror, PickedFile, RemoteFilePicker
from .sync.queue import PendingSyncQueue

logger = logging.getLogger(__name__)


@dataclass
class RefreshResult:
    """Outcome of a refresh from the cloud file.

    When the pull fails, ``records`` holds the cached or local data and
    ``used_stale_data`` is True, so callers can tell the user.
    """

    records: list[ListRecord] = field(default_factory=list)
    used_stale_data: bool = False
    error: Exception | None = None


class ListStorage:
    """Entry point for reading and editing feature lists."""

    def __init__(
        self,
        store: KeyValueStore,
        registry: HandleRegistry,
        resolver: LocationResolver,
        cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        watcher: ConnectivityWatcher | None = None,
        connectivity: EventSource | None = None,
        foreground: EventSource | None = None,
    ):
        """Initialize the engine.

        Args:
            store: Durable key-value store for settings and sync markers
            registry: Handle registry (register remote schemes on it)
            resolver: Resolves feature files
            cache_ttl_seconds: Cache freshness window for every feature
            watcher: Optional connectivity watcher started with the engine
            connectivity: Source fired when connectivity is restored
            foreground: Source fired when the app returns to the foreground
        """
        self.kv = store
        self.registry = registry
        self.resolver = resolver
        self.settings = resolver.settings
        self.cache_ttl_seconds = cache_ttl_seconds
        self.connectivity = connectivity or EventSource("connectivity_restored")
        self.foreground = foreground or EventSource("app_foregrounded")
        self.watcher = watcher
        self.mirror = CloudMirror(self.settings, resolver, registry)
        self.queue = PendingSyncQueue(store, self.mirror)
        self._stores: dict[str, RecordStore] = {}

    @classmethod
    def from_config(cls, config: ListStorageConfig | None = None, **kwargs: Any) -> ListStorage:
        """Build an engine backed by a JSON settings file.

        Args:
            config: Configuration (read from the environment if omitted)
            **kwargs: Passed to the constructor (event sources)
        """
        config = config or ListStorageConfig.from_environment()
        if config.structured_logging:
            configure_structured_logging(config.log_level, "prodexa_storage")

        kv = JsonFileKeyValueStore(config.settings_path)
        registry = HandleRegistry()
        resolver = LocationResolver(
            FeatureSettings(kv), registry, config.document_dir, config.feature_files
        )
        engine = cls(kv, registry, resolver, cache_ttl_seconds=config.cache_ttl_seconds, **kwargs)
        if config.watch_connectivity and engine.watcher is None:
            engine.watcher = ConnectivityWatcher(
                engine.connectivity,
                interval_seconds=config.connectivity_interval_seconds,
                host=config.connectivity_host,
            )
        return engine

    def store(self, feature: str = SHOPPING_LIST) -> RecordStore:
        """Record store of a feature, created on first use."""
        if feature not in self._stores:
            self._stores[feature] = RecordStore(
                feature,
                self.resolver,
                cache=RecordCache(self.cache_ttl_seconds),
                mirror=self.mirror,
                queue=self.queue,
            )
        return self._stores[feature]

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start(self) -> None:
        """Load pending syncs and start retrying them on trigger events."""
        await self.queue.start(self.connectivity, self.foreground)
        if self.watcher is not None:
            await self.watcher.start()

    async def close(self) -> None:
        if self.watcher is not None:
            await self.watcher.stop()
        await self.queue.close()

    async def __aenter__(self) -> ListStorage:
        await self.start()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def connectivity_restored(self) -> None:
        """Signal that the network is back. Callable from any thread after start()."""
        self.connectivity.notify()

    def app_foregrounded(self) -> None:
        """Signal that the app is in the foreground again. Thread-safe after start()."""
        self.foreground.notify()

    # =========================================================================
    # Records
    # =========================================================================

    async def read_all(
        self, force_refresh: bool = False, *, feature: str = SHOPPING_LIST
    ) -> list[ListRecord]:
        return await self.store(feature).read_all(force_refresh=force_refresh)

    async def append(self, record: ListRecord, *, feature: str = SHOPPING_LIST) -> None:
        await self.store(feature).append(record)

    async def remove_by_id(self, record_id: str, *, feature: str = SHOPPING_LIST) -> None:
        await self.store(feature).remove_by_id(record_id)

    async def remove_by_ids(
        self, record_ids: Iterable[str], *, feature: str = SHOPPING_LIST
    ) -> None:
        await self.store(feature).remove_by_ids(record_ids)

    async def get_file_info(self, feature: str = SHOPPING_LIST) -> StorageFileInfo:
        return await self.store(feature).get_file_info()

    # =========================================================================
    # Cloud file
    # =========================================================================

    async def attach_remote(
        self, picked: PickedFile, *, feature: str = SHOPPING_LIST
    ) -> AttachResult:
        result = await self.mirror.attach_remote(feature, picked)
        if result.success:
            self.store(feature).invalidate_cache()
        return result

    async def connect_cloud_file(
        self, picker: RemoteFilePicker, *, feature: str = SHOPPING_LIST
    ) -> AttachResult:
        """Let the user pick a cloud file and attach it."""
        result = await self.mirror.connect(feature, picker)
        if result.success:
            self.store(feature).invalidate_cache()
        return result

    async def detach_remote(self, feature: str = SHOPPING_LIST) -> None:
        await self.mirror.detach_remote(feature)
        self.store(feature).invalidate_cache()

    async def use_local_mode(self, feature: str = SHOPPING_LIST) -> None:
        """Switch a feature back to local storage, keeping its data."""
        if await self.settings.get_storage_mode(feature) == StorageMode.LOCAL:
            return
        await self.detach_remote(feature)

    async def sync_from_cloud(self, feature: str = SHOPPING_LIST) -> bool:
        """Pull the cloud file into the local file.

        Raises:
            RemoteUnavailableError: If the cloud file cannot be read
        """
        synced = await self.mirror.pull_to_local(feature)
        self.store(feature).invalidate_cache()
        return synced

    async def refresh(self, feature: str = SHOPPING_LIST) -> RefreshResult:
        """Pull from the cloud file and re-read the list.

        A failed pull falls back to the cached or local records and is
        reported through ``used_stale_data``.
        """
        try:
            await self.mirror.pull_to_local(feature)
        except (ListStorageError, OSError) as e:
            logger.warning(
                f"Refresh of {feature} failed, using stale data: {e}", extra={"feature": feature}
            )
            records = await self.store(feature).read_all()
            return RefreshResult(records=records, used_stale_data=True, error=e)

        records = await self.store(feature).read_all(force_refresh=True)
        return RefreshResult(records=records)

    # =========================================================================
    # Storage location
    # =========================================================================

    async def set_storage_path(self, path: str, *, feature: str = SHOPPING_LIST) -> None:
        """Store the feature's file in a user-chosen directory (path or tree URI)."""
        await self.settings.set_storage_path(feature, path)
        self.store(feature).invalidate_cache()

    async def reset_storage_path(self, feature: str = SHOPPING_LIST) -> None:
        """Go back to the local document directory."""
        await self.settings.clear_storage_path(feature)
        self.store(feature).invalidate_cache()

    def has_pending_sync(self, feature: str = SHOPPING_LIST) -> bool:
        return self.queue.is_pending(feature)
