"""
Resolution of the file that backs a feature.

Features without a configured directory live in the local document
directory. A configured directory may be a plain path or a
provider-issued tree URI. For the latter the child URI of an existing
file cannot be predicted, so the directory is listed and matched by
name first; building the child handle directly would make the provider
create a duplicate file next to the real one.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .features import FeatureSettings, feature_file_name
from .handles import DirectoryHandle, FileHandle, HandleRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedFile:
    """Concrete location of a feature's file.

    Attributes:
        file: Handle of the CSV file (may not exist yet)
        directory: Handle of the directory holding it
        is_external: True for provider-issued directories
    """

    file: FileHandle
    directory: DirectoryHandle
    is_external: bool


class LocationResolver:
    """Finds the file handle for a feature."""

    def __init__(
        self,
        settings: FeatureSettings,
        registry: HandleRegistry,
        document_dir: Path,
        file_names: Mapping[str, str] | None = None,
    ):
        """Initialize the resolver.

        Args:
            settings: Per-feature settings (storage directory lookup)
            registry: Handle registry for configured directories
            document_dir: Local sandboxed directory used by default
            file_names: Optional feature -> file name overrides
        """
        self.settings = settings
        self.registry = registry
        self.document_dir = Path(document_dir)
        self.file_names = dict(file_names or {})

    def file_name(self, feature: str) -> str:
        return feature_file_name(feature, self.file_names)

    def default_path(self, feature: str) -> str:
        """Path of the file in the local document directory."""
        return str(self.document_dir / self.file_name(feature))

    async def resolve_file(self, feature: str) -> ResolvedFile:
        """Resolve the file handle for a feature."""
        file_name = self.file_name(feature)
        configured = await self.settings.get_storage_path(feature)

        if not configured:
            directory = self.registry.directory(str(self.document_dir))
            return ResolvedFile(directory.child_file(file_name), directory, is_external=False)

        directory = self.registry.directory(configured)
        is_external = self.registry.is_opaque(configured)

        if is_external:
            match = await self._find_existing(directory, file_name)
            if match is not None:
                return ResolvedFile(match, directory, is_external=True)

        return ResolvedFile(directory.child_file(file_name), directory, is_external=is_external)

    async def _find_existing(self, directory: DirectoryHandle, file_name: str) -> FileHandle | None:
        try:
            entries = await directory.list_entries()
        except Exception as e:
            logger.warning(f"Failed to list directory {directory.uri}: {e}")
            return None

        for entry in entries:
            if isinstance(entry, FileHandle) and entry.name == file_name:
                return entry
        return None
