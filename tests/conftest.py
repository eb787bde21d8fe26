"""
Shared test configuration and fixtures.

Remote files and provider-issued directories are simulated with
MemoryDocumentProvider registered under the ``content`` scheme; local
files live in a per-test temporary directory.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from prodexa_storage.features import SHOPPING_LIST, FeatureSettings
from prodexa_storage.handles import HandleRegistry, MemoryDocumentProvider
from prodexa_storage.kv import MemoryKeyValueStore
from prodexa_storage.location import LocationResolver
from prodexa_storage.store import RecordCache, RecordStore
from prodexa_storage.sync.mirror import CloudMirror
from prodexa_storage.sync.queue import PendingSyncQueue


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def kv() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def settings(kv: MemoryKeyValueStore) -> FeatureSettings:
    return FeatureSettings(kv)


@pytest.fixture
def provider() -> MemoryDocumentProvider:
    return MemoryDocumentProvider()


@pytest.fixture
def registry(provider: MemoryDocumentProvider) -> HandleRegistry:
    registry = HandleRegistry()
    registry.register("content", provider)
    return registry


@pytest.fixture
def document_dir(tmp_path: Path) -> Path:
    return tmp_path / "documents"


@pytest.fixture
def local_csv(document_dir: Path) -> Path:
    """Path of the shopping list in the default location."""
    return document_dir / "shopping_list.csv"


@pytest.fixture
def resolver(
    settings: FeatureSettings, registry: HandleRegistry, document_dir: Path
) -> LocationResolver:
    return LocationResolver(settings, registry, document_dir)


@pytest.fixture
def mirror(
    settings: FeatureSettings, resolver: LocationResolver, registry: HandleRegistry
) -> CloudMirror:
    return CloudMirror(settings, resolver, registry)


@pytest.fixture
def queue(kv: MemoryKeyValueStore, mirror: CloudMirror) -> PendingSyncQueue:
    return PendingSyncQueue(kv, mirror)


@pytest.fixture
def store(resolver: LocationResolver, clock: FakeClock) -> RecordStore:
    """Store without a mirror."""
    return RecordStore(SHOPPING_LIST, resolver, cache=RecordCache(clock=clock))


@pytest.fixture
def mirrored_store(
    resolver: LocationResolver,
    clock: FakeClock,
    mirror: CloudMirror,
    queue: PendingSyncQueue,
) -> RecordStore:
    """Store that pushes to the mirror and queues failed pushes."""
    return RecordStore(
        SHOPPING_LIST, resolver, cache=RecordCache(clock=clock), mirror=mirror, queue=queue
    )
