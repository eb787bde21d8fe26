"""
Cloud mirror of a feature's file.

The remote file is treated as a plain blob: a pull replaces the local
file with the remote content, a push replaces the remote content with
the local file. Both directions only run in cloud-file mode. I/O
failures are raised as RemoteUnavailableError so the caller can decide
whether to queue a retry, roll back, or fall back to cached data.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from ..exceptions import ListStorageError, RemoteUnavailableError, StorageIOError
from ..features import FeatureSettings, StorageMode
from ..handles import HandleRegistry
from ..location import LocationResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PickedFile:
    """A remote file chosen by the user."""

    uri: str
    display_name: str


@dataclass
class AttachResult:
    """Outcome of connecting a feature to a remote file.

    ``success=False`` with no error means the user cancelled.
    """

    success: bool
    file_name: str | None = None
    error: str | None = None


class RemoteFilePicker(ABC):
    """Lets the user choose a remote file."""

    @abstractmethod
    async def pick(self) -> PickedFile | None:
        """Return the chosen file, or None if the user cancelled."""
        ...


class CloudMirror:
    """Pulls and pushes a feature's file to its remote copy."""

    def __init__(
        self,
        settings: FeatureSettings,
        resolver: LocationResolver,
        registry: HandleRegistry,
    ):
        self.settings = settings
        self.resolver = resolver
        self.registry = registry

    async def is_mirrored(self, feature: str) -> bool:
        return await self.settings.get_storage_mode(feature) == StorageMode.CLOUD_FILE

    async def _remote_uri(self, feature: str) -> str | None:
        if not await self.is_mirrored(feature):
            return None
        return await self.settings.get_cloud_file_uri(feature)

    async def read_remote(self, uri: str) -> str:
        try:
            return await self.registry.file(uri).read_text()
        except RemoteUnavailableError:
            raise
        except Exception as e:
            raise RemoteUnavailableError(uri, "read", e) from e

    async def write_remote(self, uri: str, content: str) -> None:
        try:
            await self.registry.file(uri).write_text(content)
        except RemoteUnavailableError:
            raise
        except Exception as e:
            raise RemoteUnavailableError(uri, "write", e) from e

    async def _write_local(self, feature: str, content: str) -> None:
        resolved = await self.resolver.resolve_file(feature)
        target = resolved.file
        if not await target.exists():
            if resolved.is_external:
                target = await resolved.directory.create_file(target.name, "text/csv")
            else:
                await target.create()
        await target.write_text(content)

    async def pull_to_local(self, feature: str) -> bool:
        """Replace the local file with the remote content.

        Returns:
            True if a pull happened, False if the feature is not mirrored

        Raises:
            RemoteUnavailableError: If the remote file cannot be read
        """
        uri = await self._remote_uri(feature)
        if not uri:
            return False

        content = await self.read_remote(uri)
        await self._write_local(feature, content)
        logger.info(f"Pulled cloud file into {feature}", extra={"feature": feature})
        return True

    async def push_from_local(self, feature: str) -> bool:
        """Replace the remote content with the local file.

        Returns:
            True if a push happened, False if the feature is not mirrored
            or has no local file

        Raises:
            RemoteUnavailableError: If the remote file cannot be written
            StorageIOError: If the local file cannot be read
        """
        uri = await self._remote_uri(feature)
        if not uri:
            return False

        resolved = await self.resolver.resolve_file(feature)
        if not await resolved.file.exists():
            return False

        try:
            content = await resolved.file.read_text()
        except ListStorageError:
            raise
        except Exception as e:
            raise StorageIOError("read", resolved.file.uri, e) from e
        await self.write_remote(uri, content)
        logger.debug(f"Pushed {feature} to cloud file", extra={"feature": feature})
        return True

    async def attach_remote(self, feature: str, picked: PickedFile) -> AttachResult:
        """Connect a feature to a remote file and pull its content.

        On any failure the stored handle and name are rolled back, so
        the feature stays in its previous state: a previously connected
        file is restored, otherwise nothing remains configured.
        """
        previous_uri = await self.settings.get_cloud_file_uri(feature)
        previous_name = await self.settings.get_cloud_file_name(feature)

        try:
            await self.settings.set_cloud_file_uri(feature, picked.uri)
            await self.settings.set_cloud_file_name(feature, picked.display_name)

            content = await self.read_remote(picked.uri)
            await self._write_local(feature, content)
            await self.settings.set_storage_mode(feature, StorageMode.CLOUD_FILE)
        except (ListStorageError, OSError) as e:
            logger.warning(
                f"Failed to set up cloud file for {feature}: {e}", extra={"feature": feature}
            )
            await self._restore_remote(feature, previous_uri, previous_name)
            return AttachResult(success=False, error=str(e))

        logger.info(
            f"Connected {feature} to cloud file {picked.display_name}",
            extra={"feature": feature},
        )
        return AttachResult(success=True, file_name=picked.display_name)

    async def _restore_remote(self, feature: str, uri: str | None, name: str | None) -> None:
        if uri:
            await self.settings.set_cloud_file_uri(feature, uri)
        else:
            await self.settings.clear_cloud_file_uri(feature)
        if name:
            await self.settings.set_cloud_file_name(feature, name)
        else:
            await self.settings.clear_cloud_file_name(feature)

    async def connect(self, feature: str, picker: RemoteFilePicker) -> AttachResult:
        """Ask the picker for a file and attach it."""
        try:
            picked = await picker.pick()
        except Exception as e:
            logger.warning(f"Failed to pick cloud file: {e}")
            picked = None

        if picked is None:
            return AttachResult(success=False)
        return await self.attach_remote(feature, picked)

    async def detach_remote(self, feature: str) -> None:
        """Forget the remote file. Local data is kept."""
        await self.settings.clear_cloud_file_uri(feature)
        await self.settings.clear_cloud_file_name(feature)
        await self.settings.set_storage_mode(feature, StorageMode.LOCAL)
        logger.info(f"Disconnected {feature} from cloud file", extra={"feature": feature})
