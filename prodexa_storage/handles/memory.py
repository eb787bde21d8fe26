"""
In-process document provider.

Behaves like a provider-backed document tree: every document gets an
opaque ``content://`` URI that cannot be derived from its parent and
name, and creating a file whose name is taken yields a suffixed
duplicate instead of reusing the existing document. Useful as a remote
target for development and for reproducing offline behavior.
"""

from __future__ import annotations

import asyncio
from collections import Counter
from pathlib import PurePosixPath
from urllib.parse import quote

from ..exceptions import LocationConflictError
from .base import DirectoryHandle, FileHandle, HandleProvider


class MemoryDocumentProvider(HandleProvider):
    """Document store keyed by opaque URIs.

    Attributes:
        offline: When True, every read, write and listing raises ConnectionError
        fail_operations: Operation names ("read", "write", "list") that raise
        write_delay: Seconds each write waits before landing
        calls: Count of operations per (operation, uri)
    """

    def __init__(self, authority: str = "memory"):
        self.authority = authority
        self.offline = False
        self.fail_operations: set[str] = set()
        self.write_delay = 0.0
        self.calls: Counter[tuple[str, str]] = Counter()
        self._files: dict[str, str] = {}
        self._dirs: set[str] = set()
        self._parents: dict[str, str] = {}

    # Setup helpers

    def add_tree(self, tree_id: str) -> MemoryDirectoryHandle:
        """Register a document tree (a user-granted directory)."""
        uri = f"content://{self.authority}/tree/{quote(tree_id, safe='')}"
        self._dirs.add(uri)
        return MemoryDirectoryHandle(self, uri)

    def add_document(self, doc_id: str, content: str = "") -> MemoryFileHandle:
        """Register a standalone document (a picked file)."""
        uri = f"content://{self.authority}/document/{quote(doc_id, safe='')}"
        self._files[uri] = content
        return MemoryFileHandle(self, uri)

    def content_of(self, uri: str) -> str | None:
        return self._files.get(uri)

    def file_names_in(self, directory: DirectoryHandle) -> list[str]:
        return sorted(
            MemoryFileHandle(self, uri).name
            for uri, parent in self._parents.items()
            if parent == directory.uri and uri in self._files
        )

    # HandleProvider

    def file(self, uri: str) -> FileHandle:
        return MemoryFileHandle(self, uri)

    def directory(self, uri: str) -> DirectoryHandle:
        return MemoryDirectoryHandle(self, uri)

    # Internals

    def _check(self, operation: str, uri: str) -> None:
        self.calls[(operation, uri)] += 1
        if self.offline:
            raise ConnectionError(f"Provider {self.authority} is unreachable")
        if operation in self.fail_operations:
            raise OSError(f"Simulated {operation} failure for {uri}")

    def _doc_id(self, directory_uri: str) -> str:
        return directory_uri.split("/tree/", 1)[-1].split("/document/", 1)[-1]

    def _new_child_uri(self, directory_uri: str, name: str) -> str:
        existing = {
            MemoryFileHandle(self, uri).name
            for uri, parent in self._parents.items()
            if parent == directory_uri
        }
        candidate = name
        counter = 1
        stem, suffix = PurePosixPath(name).stem, PurePosixPath(name).suffix
        while candidate in existing:
            candidate = f"{stem} ({counter}){suffix}"
            counter += 1
        doc_path = f"{self._doc_id(directory_uri)}%2F{quote(candidate, safe='')}"
        return f"{directory_uri}/document/{doc_path}"


class MemoryFileHandle(FileHandle):
    """Document held by a MemoryDocumentProvider."""

    def __init__(self, provider: MemoryDocumentProvider, uri: str, parent_uri: str | None = None):
        self._provider = provider
        self._uri = uri
        self._parent_uri = parent_uri

    @property
    def uri(self) -> str:
        return self._uri

    async def exists(self) -> bool:
        return self._uri in self._provider._files

    async def read_text(self) -> str:
        self._provider._check("read", self._uri)
        if self._uri not in self._provider._files:
            raise FileNotFoundError(self._uri)
        return self._provider._files[self._uri]

    async def write_text(self, content: str) -> None:
        self._provider._check("write", self._uri)
        if self._provider.write_delay:
            await asyncio.sleep(self._provider.write_delay)
        if self._uri not in self._provider._files:
            raise FileNotFoundError(self._uri)
        self._provider._files[self._uri] = content

    async def create(self) -> None:
        if self._uri in self._provider._files:
            return
        if self._uri in self._provider._dirs:
            raise LocationConflictError(self._uri)
        if self._parent_uri is None:
            raise FileNotFoundError(self._uri)
        # Providers assign their own URI to new documents
        created = await MemoryDirectoryHandle(self._provider, self._parent_uri).create_file(
            self.name
        )
        self._uri = created.uri
        self._parent_uri = None

    async def size(self) -> int:
        if self._uri not in self._provider._files:
            raise FileNotFoundError(self._uri)
        return len(self._provider._files[self._uri].encode("utf-8"))


class MemoryDirectoryHandle(DirectoryHandle):
    """Directory held by a MemoryDocumentProvider."""

    def __init__(self, provider: MemoryDocumentProvider, uri: str):
        self._provider = provider
        self._uri = uri

    @property
    def uri(self) -> str:
        return self._uri

    async def exists(self) -> bool:
        return self._uri in self._provider._dirs

    async def delete(self) -> None:
        self._provider._check("write", self._uri)
        self._provider._dirs.discard(self._uri)
        children = [uri for uri, parent in self._provider._parents.items() if parent == self._uri]
        for uri in children:
            self._provider._files.pop(uri, None)
            self._provider._parents.pop(uri, None)

    async def create_file(self, name: str, mime_type: str | None = None) -> FileHandle:
        self._provider._check("write", self._uri)
        uri = self._provider._new_child_uri(self._uri, name)
        self._provider._files[uri] = ""
        self._provider._parents[uri] = self._uri
        return MemoryFileHandle(self._provider, uri)

    async def list_entries(self) -> list[FileHandle | DirectoryHandle]:
        self._provider._check("list", self._uri)
        entries: list[FileHandle | DirectoryHandle] = []
        for uri, parent in sorted(self._provider._parents.items()):
            if parent != self._uri:
                continue
            if uri in self._provider._files:
                entries.append(MemoryFileHandle(self._provider, uri))
            elif uri in self._provider._dirs:
                entries.append(MemoryDirectoryHandle(self._provider, uri))
        return entries

    def child_file(self, name: str) -> FileHandle:
        return MemoryFileHandle(self._provider, f"{self._uri}/{quote(name)}", parent_uri=self._uri)

    def child_directory(self, name: str) -> DirectoryHandle:
        return MemoryDirectoryHandle(self._provider, f"{self._uri}/{quote(name)}")

