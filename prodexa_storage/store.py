"""
File-backed record store with an in-memory cache.

Each RecordStore owns one feature. Reads are served from the cache
while it is fresh; every write updates the cache before returning, so
a caller always reads its own writes. After a write the store pushes
the file to the cloud mirror and, if that fails, marks the feature as
pending so the sync queue retries later.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .codec import CSV_HEADER, ListRecord, decode_document, encode_document, encode_record
from .exceptions import ListStorageError, LocationConflictError
from .location import LocationResolver, ResolvedFile
from .logging_utils import FeatureLoggerAdapter

if TYPE_CHECKING:
    from .sync.mirror import CloudMirror
    from .sync.queue import PendingSyncQueue

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL_SECONDS = 45.0
CSV_MIME_TYPE = "text/csv"


class RecordCache:
    """Last-known-good records of one feature, with a freshness window."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._items: list[ListRecord] | None = None
        self._updated_at = 0.0

    @property
    def is_warm(self) -> bool:
        """True if the cache holds records, fresh or not."""
        return self._items is not None

    def is_fresh(self) -> bool:
        if self._items is None:
            return False
        return self._clock() - self._updated_at < self.ttl_seconds

    def snapshot(self) -> list[ListRecord]:
        return list(self._items or [])

    def set(self, items: Iterable[ListRecord]) -> None:
        self._items = list(items)
        self._updated_at = self._clock()

    def append(self, item: ListRecord) -> None:
        self.set([*(self._items or []), item])

    def invalidate(self) -> None:
        self._items = None
        self._updated_at = 0.0


@dataclass
class ReadResult:
    """Records returned by a read, with what was discarded on the way."""

    records: list[ListRecord] = field(default_factory=list)
    duplicates: int = 0
    malformed: int = 0
    from_cache: bool = False


@dataclass
class StorageFileInfo:
    """Summary of a feature's file for display."""

    exists: bool
    size_bytes: int
    item_count: int
    path: str


class RecordStore:
    """Read-through/write-through store for one feature's records."""

    def __init__(
        self,
        feature: str,
        resolver: LocationResolver,
        cache: RecordCache | None = None,
        mirror: CloudMirror | None = None,
        queue: PendingSyncQueue | None = None,
    ):
        """Initialize the store.

        Args:
            feature: Feature name
            resolver: Resolves the feature's file
            cache: Cache instance (a fresh one by default)
            mirror: Cloud mirror pushed after each write
            queue: Pending-sync queue used when a push fails
        """
        self.feature = feature
        self.resolver = resolver
        self.cache = cache or RecordCache()
        self.mirror = mirror
        self.queue = queue
        self.log = FeatureLoggerAdapter(logger, {"feature": feature})

    def invalidate_cache(self) -> None:
        self.cache.invalidate()

    # =========================================================================
    # Reads
    # =========================================================================

    async def read_all(self, force_refresh: bool = False) -> list[ListRecord]:
        """Return the feature's records.

        Local read failures degrade to an empty list.
        """
        result = await self.read_all_with_stats(force_refresh=force_refresh)
        return result.records

    async def read_all_with_stats(self, force_refresh: bool = False) -> ReadResult:
        """Like read_all, but reports discarded duplicate and malformed rows."""
        if not force_refresh and self.cache.is_fresh():
            self.log.debug(f"Serving {self.feature} from cache")
            return ReadResult(records=self.cache.snapshot(), from_cache=True)

        try:
            return await self._load()
        except (ListStorageError, OSError) as e:
            self.log.warning(f"Failed to read {self.feature}, returning empty list: {e}")
            return ReadResult()

    async def _load(self) -> ReadResult:
        """Decode the file, deduplicate by id and refresh the cache.

        Raises on I/O failure.
        """
        resolved = await self.resolver.resolve_file(self.feature)
        if not await resolved.file.exists():
            self.cache.set([])
            return ReadResult()

        content = await resolved.file.read_text()
        decoded = decode_document(content)

        records: list[ListRecord] = []
        seen_ids: set[str] = set()
        duplicates = 0
        for record in decoded.records:
            if record.id in seen_ids:
                duplicates += 1
                continue
            seen_ids.add(record.id)
            records.append(record)

        if duplicates:
            self.log.warning(
                f"Ignored {duplicates} duplicated item id(s) while reading {self.feature}",
                extra={"duplicates": duplicates},
            )
        if decoded.malformed:
            self.log.info(
                f"Dropped {decoded.malformed} malformed row(s) while reading {self.feature}",
                extra={"malformed": decoded.malformed},
            )

        self.cache.set(records)
        return ReadResult(
            records=list(records), duplicates=duplicates, malformed=decoded.malformed
        )

    # =========================================================================
    # Writes
    # =========================================================================

    async def ensure_file(self) -> ResolvedFile:
        """Create the file with a header row if it does not exist.

        A directory occupying the file's path is deleted once and
        creation retried. Any other error propagates.

        Returns:
            The resolved location, pointing at the existing file
        """
        resolved = await self.resolver.resolve_file(self.feature)
        if await resolved.file.exists():
            return resolved

        if resolved.is_external:
            # Provider trees assign the new document's URI themselves
            created = await resolved.directory.create_file(resolved.file.name, CSV_MIME_TYPE)
            await created.write_text(CSV_HEADER + "\n")
            return ResolvedFile(created, resolved.directory, is_external=True)

        try:
            await self._create_with_header(resolved)
        except LocationConflictError:
            conflicting = resolved.directory.child_directory(resolved.file.name)
            self.log.warning(f"Removing folder that occupies {resolved.file.uri}")
            if await conflicting.exists():
                await conflicting.delete()
            await self._create_with_header(resolved)

        return resolved

    @staticmethod
    async def _create_with_header(resolved: ResolvedFile) -> None:
        await resolved.file.create()
        await resolved.file.write_text(CSV_HEADER + "\n")

    async def append(self, record: ListRecord) -> None:
        """Append one record as a new row.

        Raises:
            RecordValidationError: If the record has no id or name
            StorageIOError: If the local write fails
        """
        record.validate()
        resolved = await self.ensure_file()
        await resolved.file.append_line(encode_record(record))

        if self.cache.is_warm:
            self.cache.append(record)
        else:
            self.cache.invalidate()

        await self._push_after_write()

    async def remove_by_id(self, record_id: str) -> None:
        """Remove the record with the given id."""
        await self.remove_by_ids({record_id})

    async def remove_by_ids(self, record_ids: Iterable[str]) -> None:
        """Remove every record whose id is in record_ids."""
        ids = set(record_ids)
        if self.cache.is_fresh():
            current = self.cache.snapshot()
        else:
            # A failed read must not be mistaken for an empty list here
            current = (await self._load()).records
        await self._write_all([record for record in current if record.id not in ids])

    async def _write_all(self, records: list[ListRecord]) -> None:
        resolved = await self.ensure_file()
        await resolved.file.write_text(encode_document(records))
        self.cache.set(records)
        await self._push_after_write()

    async def _push_after_write(self) -> None:
        """Push the saved file to the mirror. Never raises once the local write is done."""
        if self.mirror is None:
            return
        try:
            await self.mirror.push_from_local(self.feature)
        except Exception as e:
            self.log.warning(
                f"Cloud sync after write failed for {self.feature}, queuing for retry: {e}"
            )
            if self.queue is not None:
                await self.queue.enqueue(self.feature)

    # =========================================================================
    # Info
    # =========================================================================

    async def get_file_info(self) -> StorageFileInfo:
        """Describe the feature's file. Failures report a missing file."""
        fallback_path = self.resolver.default_path(self.feature)
        missing = StorageFileInfo(exists=False, size_bytes=0, item_count=0, path=fallback_path)

        try:
            resolved = await self.resolver.resolve_file(self.feature)
            if not await resolved.file.exists():
                return missing
            content = await resolved.file.read_text()
            size = await resolved.file.size()
        except (ListStorageError, OSError) as e:
            self.log.warning(f"Failed to inspect file for {self.feature}: {e}")
            return missing

        return StorageFileInfo(
            exists=True,
            size_bytes=size,
            item_count=len(decode_document(content).records),
            path=resolved.file.uri or fallback_path,
        )
