"""
URI scheme dispatch for file and directory handles.
"""

from __future__ import annotations

from urllib.parse import urlsplit

from ..exceptions import UnsupportedLocationError
from .base import DirectoryHandle, FileHandle, HandleProvider
from .local import LocalHandleProvider

# Schemes whose URIs are issued by a provider and cannot be derived from a parent
DEFAULT_OPAQUE_SCHEMES = frozenset({"content"})


class HandleRegistry:
    """Resolves URIs and plain paths to handles.

    Plain paths, Windows drive paths and ``file://`` URIs map to the
    local filesystem. Other schemes must be registered.
    """

    def __init__(self, opaque_schemes: frozenset[str] | set[str] = DEFAULT_OPAQUE_SCHEMES):
        self._providers: dict[str, HandleProvider] = {}
        self._local = LocalHandleProvider()
        self.opaque_schemes = frozenset(opaque_schemes)

    def register(self, scheme: str, provider: HandleProvider) -> None:
        """Route URIs of a scheme to a provider."""
        self._providers[scheme.lower()] = provider

    @staticmethod
    def scheme_of(uri: str) -> str:
        scheme = urlsplit(uri).scheme.lower()
        # Single letters are drive names, not schemes
        return "" if len(scheme) <= 1 else scheme

    def is_opaque(self, uri: str) -> bool:
        """Check if a URI is provider-issued (child URIs cannot be predicted)."""
        return self.scheme_of(uri) in self.opaque_schemes

    def _provider_for(self, uri: str) -> HandleProvider:
        scheme = self.scheme_of(uri)
        if scheme in ("", "file"):
            return self._local
        try:
            return self._providers[scheme]
        except KeyError:
            raise UnsupportedLocationError(uri, scheme) from None

    def file(self, uri: str) -> FileHandle:
        return self._provider_for(uri).file(uri)

    def directory(self, uri: str) -> DirectoryHandle:
        return self._provider_for(uri).directory(uri)
