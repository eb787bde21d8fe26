"""
Durable queue of features whose cloud file is behind the local file.

A feature is enqueued when a push after a local write fails. The set
is persisted to the key-value store on every change and reloaded at
startup. Draining retries the push for every pending feature; at most
one drain runs at a time.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from ..exceptions import ListStorageError
from ..kv import KeyValueStore
from .events import EventSource
from .mirror import CloudMirror

logger = logging.getLogger(__name__)

PENDING_SYNC_KEY = "@prodexa/pending_cloud_sync"


@dataclass
class DrainResult:
    """Outcome of one drain pass."""

    synced: list[str] = field(default_factory=list)
    still_pending: list[str] = field(default_factory=list)
    skipped: bool = False


class PendingSyncQueue:
    """Set of features awaiting a retried push."""

    def __init__(self, store: KeyValueStore, mirror: CloudMirror):
        """Initialize the queue.

        Args:
            store: Durable store holding the pending set
            mirror: Mirror used to retry pushes
        """
        self.store = store
        self.mirror = mirror
        self._pending: set[str] = set()
        self._loaded = False
        self._draining = False
        self._started = False
        self._requeued: set[str] = set()
        self._unsubscribers: list[Callable[[], None]] = []
        self._tasks: set[asyncio.Task[DrainResult]] = set()
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def is_draining(self) -> bool:
        return self._draining

    async def load(self) -> None:
        """Load the pending set persisted by a previous session (once)."""
        if self._loaded:
            return

        raw = await self.store.get(PENDING_SYNC_KEY)
        if raw:
            try:
                parsed = json.loads(raw)
                if isinstance(parsed, list):
                    self._pending = {str(name) for name in parsed}
            except json.JSONDecodeError:
                logger.warning("Pending sync list unreadable, starting empty")
                self._pending = set()

        self._loaded = True

    async def _persist(self) -> None:
        """Write the pending set. On failure the in-memory set stays authoritative."""
        try:
            await self.store.set(PENDING_SYNC_KEY, json.dumps(sorted(self._pending)))
        except (ListStorageError, OSError) as e:
            logger.warning(f"Failed to persist pending sync list, keeping it in memory: {e}")

    async def enqueue(self, feature: str) -> None:
        """Mark a feature as needing a push."""
        await self.load()
        self._pending.add(feature)
        if self._draining:
            self._requeued.add(feature)
        await self._persist()
        logger.info(f"Enqueued pending sync for {feature}", extra={"feature": feature})

    def is_pending(self, feature: str) -> bool:
        return feature in self._pending

    def pending(self) -> list[str]:
        return sorted(self._pending)

    async def drain(self) -> DrainResult:
        """Retry the push for every pending feature.

        Features enqueued while the pass runs are handled by the next
        pass, including ones whose push was already in flight. A feature
        that no longer has anything to push (not in cloud mode, or no
        local file) is dropped from the set.
        """
        if self._draining or (self._loaded and not self._pending):
            return DrainResult(skipped=True)

        self._draining = True
        try:
            await self.load()
            if not self._pending:
                return DrainResult(skipped=True)

            result = DrainResult()
            try:
                for feature in list(self._pending):
                    try:
                        synced = await self.mirror.push_from_local(feature)
                    except (ListStorageError, OSError) as e:
                        logger.warning(
                            f"Pending sync for {feature} still failing, will retry later: {e}",
                            extra={"feature": feature},
                        )
                        result.still_pending.append(feature)
                        continue

                    result.synced.append(feature)
                    if feature in self._requeued:
                        # Written again while this push was in flight
                        continue
                    self._pending.discard(feature)
                    if synced:
                        logger.info(f"Synced pending {feature}", extra={"feature": feature})
                    else:
                        logger.info(
                            f"Dropped pending sync for {feature}, nothing to push",
                            extra={"feature": feature},
                        )
            finally:
                self._requeued.clear()
                await self._persist()
        finally:
            self._draining = False

        return result

    def schedule_drain(self) -> asyncio.Task[DrainResult]:
        """Start a drain in the background."""
        task = asyncio.get_running_loop().create_task(self.drain())
        self._tasks.add(task)
        task.add_done_callback(self._on_drain_done)
        return task

    def _on_trigger(self) -> None:
        """Trigger callback. Safe to call from any thread once the queue is started."""
        loop = self._loop
        if loop is None or loop.is_closed():
            logger.warning("Ignoring drain trigger, pending sync queue is not started")
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            self.schedule_drain()
        else:
            loop.call_soon_threadsafe(self.schedule_drain)

    def _on_drain_done(self, task: asyncio.Task[DrainResult]) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.warning(f"Background drain failed: {task.exception()}")

    async def wait_idle(self) -> None:
        """Wait for background drains to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def start(self, *sources: EventSource) -> None:
        """Load persisted state, subscribe to trigger sources, and drain once.

        Safe to call multiple times; only the first call subscribes.
        Sources may notify from other threads; drains always run on the
        loop that started the queue.
        """
        if self._started:
            return
        self._started = True
        self._loop = asyncio.get_running_loop()

        await self.load()
        for source in sources:
            self._unsubscribers.append(source.subscribe(self._on_trigger))
        self.schedule_drain()

    async def close(self) -> None:
        """Unsubscribe from trigger sources and wait for running drains."""
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        self._started = False
        self._loop = None
        await self.wait_idle()
