"""FileVault storage error types.

Every storage failure a caller can observe is one of the typed exceptions
below. Each class carries the machine-readable ``code`` and the HTTP status
the API layer renders it with, so the transport never has to guess.
"""

from __future__ import annotations


class FileVaultError(Exception):
    """Base exception for storage operations.

    Attributes:
        message: Human-readable error message.
        path: Logical path associated with the operation (if applicable).
    """

    code = "IOFailure"
    http_status = 500

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self) -> str:
        if self.path:
            return f"{self.message} path={self.path}"
        return self.message


class PathTraversalError(FileVaultError):
    """Raised when a logical path resolves outside the storage sandbox.

    Always raised before any filesystem access takes place.
    """

    code = "BadPath"
    http_status = 400

    def __init__(
        self,
        message: str = "Invalid path: resolves outside the storage root",
        *,
        path: str | None = None,
    ) -> None:
        super().__init__(message, path=path)


class AlreadyExistsError(FileVaultError):
    """Raised when uploading to a path that already holds content."""

    code = "AlreadyExists"
    http_status = 409

    def __init__(
        self,
        message: str = "File already exists, use replace instead",
        *,
        path: str | None = None,
    ) -> None:
        super().__init__(message, path=path)


class ObjectNotFoundError(FileVaultError):
    """Raised when no active file exists at the logical path."""

    code = "NotFound"
    http_status = 404

    def __init__(self, message: str = "File not found", *, path: str | None = None) -> None:
        super().__init__(message, path=path)


class DirectoryNotEmptyError(FileVaultError):
    """Raised when deleting a directory that still has entries."""

    code = "DirectoryNotEmpty"
    http_status = 400

    def __init__(
        self, message: str = "Directory is not empty", *, path: str | None = None
    ) -> None:
        super().__init__(message, path=path)


class EmptyPayloadError(FileVaultError):
    """Raised when an upload or replace carries no bytes."""

    code = "EmptyPayload"
    http_status = 400

    def __init__(
        self, message: str = "No file data provided", *, path: str | None = None
    ) -> None:
        super().__init__(message, path=path)


class NoVersionsError(FileVaultError):
    """Raised when a logical path has no archived snapshots."""

    code = "NoVersions"
    http_status = 404

    def __init__(
        self,
        message: str = "No archived versions found for this file",
        *,
        path: str | None = None,
    ) -> None:
        super().__init__(message, path=path)


class InvalidVersionError(FileVaultError):
    """Raised when a rollback ordinal falls outside the listed range.

    Attributes:
        version: The ordinal that was requested.
        available: Number of snapshots that exist for the path.
    """

    code = "InvalidVersion"
    http_status = 400

    def __init__(
        self,
        message: str = "Invalid version number",
        *,
        path: str | None = None,
        version: int | None = None,
        available: int | None = None,
    ) -> None:
        super().__init__(message, path=path)
        self.version = version
        self.available = available


class InvalidRequestError(FileVaultError):
    """Raised when a rollback payload is missing or malformed."""

    code = "InvalidRequest"
    http_status = 400

    def __init__(
        self, message: str = "Version parameter required", *, path: str | None = None
    ) -> None:
        super().__init__(message, path=path)


class StorageBackendError(FileVaultError):
    """Raised when the filesystem fails in an unexpected way.

    The message is kept for server-side logs only; the API renders an opaque
    failure so internal paths never reach the caller.
    """

    code = "IOFailure"
    http_status = 500

    def __init__(
        self,
        message: str = "Storage backend error",
        *,
        path: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, path=path)
        self.cause = cause
