"""
Prodexa List Storage

File-backed storage for user-editable lists, with an optional cloud
file mirror and a durable retry queue for pushes that failed while
offline.

Usage:

    >>> from prodexa_storage import ListRecord, ListStorage, ListStorageConfig
    >>> async with ListStorage.from_config(ListStorageConfig()) as storage:
    ...     await storage.append(ListRecord.create("Milk", quantity="2"))
    ...     items = await storage.read_all()

Files are CSV with the header ``id,name,quantity,store,price,addedBy``.
"""

from .codec import (
    CSV_HEADER,
    HEADER_FIELDS,
    DecodedDocument,
    ListRecord,
    decode_document,
    decode_record,
    encode_document,
    encode_record,
)
from .config import ListStorageConfig
from .exceptions import (
    ListStorageError,
    LocationConflictError,
    RecordValidationError,
    RemoteUnavailableError,
    SettingsError,
    StorageIOError,
    UnsupportedLocationError,
)
from .features import SHOPPING_LIST, FeatureSettings, StorageMode, feature_file_name
from .handles import HandleRegistry, MemoryDocumentProvider
from .kv import JsonFileKeyValueStore, KeyValueStore, MemoryKeyValueStore
from .location import LocationResolver, ResolvedFile
from .pricing import PriceEstimate, estimate_total, format_amount, parse_amount
from .service import ListStorage, RefreshResult
from .store import ReadResult, RecordCache, RecordStore, StorageFileInfo
from .sync import (
    AttachResult,
    CloudMirror,
    ConnectivityWatcher,
    DrainResult,
    EventSource,
    PendingSyncQueue,
    PickedFile,
    RemoteFilePicker,
)

__version__ = "0.1.0"

__all__ = [
    # Codec
    "CSV_HEADER",
    "HEADER_FIELDS",
    "DecodedDocument",
    "ListRecord",
    "decode_document",
    "decode_record",
    "encode_document",
    "encode_record",
    # Engine
    "ListStorage",
    "ListStorageConfig",
    "RefreshResult",
    # Storage
    "FeatureSettings",
    "HandleRegistry",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "LocationResolver",
    "MemoryDocumentProvider",
    "MemoryKeyValueStore",
    "ReadResult",
    "RecordCache",
    "RecordStore",
    "ResolvedFile",
    "SHOPPING_LIST",
    "StorageFileInfo",
    "StorageMode",
    "feature_file_name",
    # Sync
    "AttachResult",
    "CloudMirror",
    "ConnectivityWatcher",
    "DrainResult",
    "EventSource",
    "PendingSyncQueue",
    "PickedFile",
    "RemoteFilePicker",
    # Pricing
    "PriceEstimate",
    "estimate_total",
    "format_amount",
    "parse_amount",
    # Exceptions
    "ListStorageError",
    "LocationConflictError",
    "RecordValidationError",
    "RemoteUnavailableError",
    "SettingsError",
    "StorageIOError",
    "UnsupportedLocationError",
]
