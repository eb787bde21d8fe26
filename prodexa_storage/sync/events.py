"""
Trigger sources for the pending-sync queue.

EventSource is a payload-free notification hub ("connectivity became
reachable", "app became foregrounded"). ConnectivityWatcher turns a
reachability probe into connectivity-restored notifications.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

DEFAULT_CONNECTIVITY_HOST = "dns.google"


class EventSource:
    """Notifies subscribers that something happened."""

    def __init__(self, name: str):
        self.name = name
        self._callbacks: list[Callable[[], None]] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._callbacks)

    def subscribe(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register a callback.

        Returns:
            A function that removes the subscription
        """
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    def notify(self) -> None:
        """Call every subscriber. A failing subscriber does not stop the others."""
        for callback in list(self._callbacks):
            try:
                callback()
            except Exception:
                logger.exception(f"Subscriber of {self.name} failed")


async def dns_probe(host: str = DEFAULT_CONNECTIVITY_HOST, timeout: float = 5.0) -> bool:
    """Check network reachability by resolving a host name."""
    loop = asyncio.get_running_loop()
    try:
        await asyncio.wait_for(loop.getaddrinfo(host, 443), timeout=timeout)
        return True
    except (OSError, TimeoutError):
        return False


class ConnectivityWatcher:
    """Polls reachability and notifies when the network comes back."""

    def __init__(
        self,
        source: EventSource,
        probe: Callable[[], Awaitable[bool]] | None = None,
        interval_seconds: float = 30.0,
        host: str = DEFAULT_CONNECTIVITY_HOST,
    ):
        """Initialize the watcher.

        Args:
            source: Event source fired on each offline -> online transition
            probe: Async reachability check (DNS lookup of host by default)
            interval_seconds: Delay between checks
            host: Host resolved by the default probe
        """
        self.source = source
        self.interval_seconds = interval_seconds
        self._probe = probe or (lambda: dns_probe(host))
        self._online: bool | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def is_online(self) -> bool | None:
        """Last observed state, None before the first check."""
        return self._online

    async def check(self) -> bool:
        """Run the probe once and notify if connectivity was restored."""
        online = await self._probe()
        was_online = self._online
        self._online = online
        if online and was_online is not True:
            logger.info("Connectivity restored")
            self.source.notify()
        return online

    async def start(self) -> None:
        """Start polling in the background."""
        if self._task is not None:
            return

        async def watch_loop() -> None:
            while True:
                try:
                    await self.check()
                    await asyncio.sleep(self.interval_seconds)
                except asyncio.CancelledError:
                    break
                except Exception:
                    logger.exception("Connectivity check failed")
                    await asyncio.sleep(self.interval_seconds)

        self._task = asyncio.create_task(watch_loop())

    async def stop(self) -> None:
        """Stop polling."""
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
