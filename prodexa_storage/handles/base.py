"""
Abstract file and directory capabilities.

Local directories, provider-issued document trees and remote files are
all accessed through these interfaces, so the store never needs to know
whether a URI is a plain path or an opaque provider identifier.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from urllib.parse import unquote


def decoded_name(uri: str) -> str:
    """Return the display name encoded in the last segment of a URI.

    Provider URIs often percent-encode the document path, so the
    last ``/`` segment may still contain an encoded separator.
    """
    decoded = unquote(uri.rstrip("/"))
    return decoded.rsplit("/", 1)[-1]


class FileHandle(ABC):
    """Capability to read and write a single file."""

    @property
    @abstractmethod
    def uri(self) -> str:
        """Identifier of the file (path or provider URI)."""
        ...

    @property
    def name(self) -> str:
        """Decoded file name."""
        return decoded_name(self.uri)

    @abstractmethod
    async def exists(self) -> bool:
        """Check whether a regular file exists at this handle."""
        ...

    @abstractmethod
    async def read_text(self) -> str:
        """Read the full file content."""
        ...

    @abstractmethod
    async def write_text(self, content: str) -> None:
        """Overwrite the file with content."""
        ...

    @abstractmethod
    async def create(self) -> None:
        """Create the file if absent.

        Raises:
            LocationConflictError: If a directory occupies the path
        """
        ...

    @abstractmethod
    async def size(self) -> int:
        """Size of the file in bytes."""
        ...

    async def append_line(self, line: str) -> None:
        """Append one line, starting a new line if the file lacks a trailing newline.

        Providers without native append support fall back to a
        read-modify-write.
        """
        content = await self.read_text()
        if content and not content.endswith("\n"):
            content += "\n"
        await self.write_text(content + line + "\n")

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.uri!r})"


class DirectoryHandle(ABC):
    """Capability to inspect and populate a directory."""

    @property
    @abstractmethod
    def uri(self) -> str:
        """Identifier of the directory (path or provider URI)."""
        ...

    @property
    def name(self) -> str:
        """Decoded directory name."""
        return decoded_name(self.uri)

    @abstractmethod
    async def exists(self) -> bool:
        """Check whether a directory exists at this handle."""
        ...

    @abstractmethod
    async def delete(self) -> None:
        """Delete the directory and its contents."""
        ...

    @abstractmethod
    async def create_file(self, name: str, mime_type: str | None = None) -> FileHandle:
        """Create a child file and return the handle the provider assigned to it."""
        ...

    @abstractmethod
    async def list_entries(self) -> list[FileHandle | DirectoryHandle]:
        """List direct children."""
        ...

    @abstractmethod
    def child_file(self, name: str) -> FileHandle:
        """Build a handle for a child file without touching storage."""
        ...

    @abstractmethod
    def child_directory(self, name: str) -> DirectoryHandle:
        """Build a handle for a child directory without touching storage."""
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.uri!r})"


class HandleProvider(ABC):
    """Builds handles for the URIs of one scheme."""

    @abstractmethod
    def file(self, uri: str) -> FileHandle:
        ...

    @abstractmethod
    def directory(self, uri: str) -> DirectoryHandle:
        ...
