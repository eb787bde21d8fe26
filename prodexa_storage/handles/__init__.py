"""
File and directory capabilities.

- FileHandle / DirectoryHandle: abstract capabilities used by the store
- LocalFileHandle / LocalDirectoryHandle: local filesystem via aiofiles
- MemoryDocumentProvider: in-process provider with opaque ``content://`` URIs
- HandleRegistry: maps URIs to the provider that owns their scheme
"""

from .base import DirectoryHandle, FileHandle, HandleProvider, decoded_name
from .local import LocalDirectoryHandle, LocalFileHandle, LocalHandleProvider
from .memory import MemoryDirectoryHandle, MemoryDocumentProvider, MemoryFileHandle
from .registry import DEFAULT_OPAQUE_SCHEMES, HandleRegistry

__all__ = [
    "DEFAULT_OPAQUE_SCHEMES",
    "DirectoryHandle",
    "FileHandle",
    "HandleProvider",
    "HandleRegistry",
    "LocalDirectoryHandle",
    "LocalFileHandle",
    "LocalHandleProvider",
    "MemoryDirectoryHandle",
    "MemoryDocumentProvider",
    "MemoryFileHandle",
    "decoded_name",
]
