"""
Custom exceptions for list storage.

Local persistence failures and remote mirror failures are kept
distinct so callers can decide which ones are fatal.
"""


class ListStorageError(Exception):
    """Base exception for all list storage errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class StorageIOError(ListStorageError):
    """Raised when a local storage I/O operation fails."""

    def __init__(self, operation: str, path: str | None = None, cause: Exception | None = None):
        details = {"operation": operation}
        if path:
            details["path"] = path
        if cause:
            details["cause"] = str(cause)
        message = f"Storage I/O error during {operation}"
        if path:
            message += f": {path}"
        super().__init__(message, details)
        self.operation = operation
        self.path = path
        self.cause = cause


class LocationConflictError(StorageIOError):
    """Raised when a directory occupies the path a file should occupy."""

    def __init__(self, path: str, cause: Exception | None = None):
        super().__init__("create_file", path, cause)
        self.message = f"A folder with the same name already exists: {path}"
        self.args = (self.message,)


class RemoteUnavailableError(ListStorageError):
    """Raised when the remote mirror cannot be read or written.

    Covers unreachable networks as well as revoked handles.
    """

    def __init__(self, uri: str, operation: str, cause: Exception | None = None):
        details = {"uri": uri, "operation": operation}
        if cause:
            details["cause"] = str(cause)
        message = f"Remote file unavailable during {operation}: {uri}"
        if cause:
            message += f" ({cause})"
        super().__init__(message, details)
        self.uri = uri
        self.operation = operation
        self.cause = cause


class RecordValidationError(ListStorageError):
    """Raised when a record fails validation before being written."""

    def __init__(self, field: str, reason: str, value: str | None = None):
        details = {"field": field, "reason": reason}
        if value is not None:
            details["value"] = value
        super().__init__(f"Validation failed for {field}: {reason}", details)
        self.field = field
        self.reason = reason
        self.value = value


class SettingsError(ListStorageError):
    """Raised when the durable key-value store cannot be read or written."""

    def __init__(self, key: str | None, operation: str, cause: Exception | None = None):
        details: dict = {"operation": operation}
        if key:
            details["key"] = key
        if cause:
            details["cause"] = str(cause)
        message = f"Settings store error during {operation}"
        if key:
            message += f": {key}"
        super().__init__(message, details)
        self.key = key
        self.operation = operation
        self.cause = cause


class UnsupportedLocationError(ListStorageError, ValueError):
    """Raised when a URI uses a scheme no handle provider is registered for."""

    def __init__(self, uri: str, scheme: str):
        super().__init__(
            f"No handle provider registered for scheme '{scheme}': {uri}",
            {"uri": uri, "scheme": scheme},
        )
        self.uri = uri
        self.scheme = scheme
