"""
Local filesystem handles.

Provides async file access with:
- Atomic full rewrites using temp file + rename
- Native appends for single rows
- Conversion of OS errors to StorageIOError
"""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path
from urllib.parse import urlsplit
from urllib.request import url2pathname

import aiofiles
import aiofiles.os

from ..exceptions import LocationConflictError, StorageIOError
from .base import DirectoryHandle, FileHandle, HandleProvider


def path_from_uri(uri: str) -> Path:
    """Convert a ``file://`` URI or a plain path string to a Path."""
    if uri.startswith("file:"):
        return Path(url2pathname(urlsplit(uri).path))
    return Path(uri).expanduser()


async def ensure_directory(path: Path) -> None:
    """Ensure directory exists, creating if necessary.

    Args:
        path: Directory path to ensure exists
    """
    try:
        await aiofiles.os.makedirs(path, exist_ok=True)
    except OSError as e:
        raise StorageIOError("create_directory", str(path), e) from e


class LocalFileHandle(FileHandle):
    """File on the local filesystem."""

    def __init__(self, path: Path):
        self.path = Path(path)

    @property
    def uri(self) -> str:
        return str(self.path)

    @property
    def name(self) -> str:
        return self.path.name

    async def exists(self) -> bool:
        try:
            return await aiofiles.os.path.isfile(self.path)
        except OSError:
            return False

    async def read_text(self) -> str:
        try:
            async with aiofiles.open(self.path, encoding="utf-8", newline="") as f:
                return await f.read()
        except UnicodeDecodeError as e:
            raise StorageIOError("decode", str(self.path), e) from e
        except OSError as e:
            raise StorageIOError("read", str(self.path), e) from e

    async def write_text(self, content: str) -> None:
        """Write file atomically using temp file + rename."""
        if await aiofiles.os.path.isdir(self.path):
            raise LocationConflictError(str(self.path))
        await ensure_directory(self.path.parent)

        fd, temp_path = tempfile.mkstemp(
            dir=self.path.parent,
            prefix=".tmp_",
            suffix=self.path.suffix,
        )
        try:
            os.close(fd)
            async with aiofiles.open(temp_path, "w", encoding="utf-8", newline="") as f:
                await f.write(content)
                await f.flush()
                os.fsync(f.fileno())

            await aiofiles.os.rename(temp_path, self.path)
        except Exception as e:
            # Clean up temp file on error
            try:
                await aiofiles.os.remove(temp_path)
            except OSError:
                pass
            raise StorageIOError("write", str(self.path), e) from e

    async def append_line(self, line: str) -> None:
        try:
            needs_newline = False
            size = await aiofiles.os.path.getsize(self.path)
            if size > 0:
                async with aiofiles.open(self.path, "rb") as f:
                    await f.seek(size - 1)
                    needs_newline = await f.read(1) != b"\n"

            async with aiofiles.open(self.path, "a", encoding="utf-8", newline="") as f:
                await f.write(("\n" if needs_newline else "") + line + "\n")
                await f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            raise StorageIOError("append", str(self.path), e) from e

    async def create(self) -> None:
        if await aiofiles.os.path.isdir(self.path):
            raise LocationConflictError(str(self.path))
        await ensure_directory(self.path.parent)
        try:
            async with aiofiles.open(self.path, "a", encoding="utf-8"):
                pass
        except IsADirectoryError as e:
            raise LocationConflictError(str(self.path), e) from e
        except OSError as e:
            raise StorageIOError("create_file", str(self.path), e) from e

    async def size(self) -> int:
        try:
            return await aiofiles.os.path.getsize(self.path)
        except OSError as e:
            raise StorageIOError("stat", str(self.path), e) from e


class LocalDirectoryHandle(DirectoryHandle):
    """Directory on the local filesystem."""

    def __init__(self, path: Path):
        self.path = Path(path)

    @property
    def uri(self) -> str:
        return str(self.path)

    @property
    def name(self) -> str:
        return self.path.name

    async def exists(self) -> bool:
        try:
            return await aiofiles.os.path.isdir(self.path)
        except OSError:
            return False

    async def delete(self) -> None:
        try:
            if await aiofiles.os.path.exists(self.path):
                await aiofiles.os.wrap(shutil.rmtree)(self.path)
        except OSError as e:
            raise StorageIOError("remove_directory", str(self.path), e) from e

    async def create_file(self, name: str, mime_type: str | None = None) -> FileHandle:
        handle = self.child_file(name)
        await handle.create()
        return handle

    async def list_entries(self) -> list[FileHandle | DirectoryHandle]:
        try:
            if not await aiofiles.os.path.isdir(self.path):
                return []
            entries: list[FileHandle | DirectoryHandle] = []
            for entry in sorted(await aiofiles.os.listdir(self.path)):
                entry_path = self.path / entry
                if await aiofiles.os.path.isdir(entry_path):
                    entries.append(LocalDirectoryHandle(entry_path))
                else:
                    entries.append(LocalFileHandle(entry_path))
            return entries
        except OSError as e:
            raise StorageIOError("list_directory", str(self.path), e) from e

    def child_file(self, name: str) -> FileHandle:
        return LocalFileHandle(self.path / name)

    def child_directory(self, name: str) -> DirectoryHandle:
        return LocalDirectoryHandle(self.path / name)


class LocalHandleProvider(HandleProvider):
    """Handles for plain paths and ``file://`` URIs."""

    def file(self, uri: str) -> FileHandle:
        return LocalFileHandle(path_from_uri(uri))

    def directory(self, uri: str) -> DirectoryHandle:
        return LocalDirectoryHandle(path_from_uri(uri))
