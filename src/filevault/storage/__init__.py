"""FileVault storage layer.

Provides sandboxed active storage, immutable snapshot archiving, rollback,
and the error taxonomy shared by the API and CLI.
"""

from filevault.storage.errors import (
    AlreadyExistsError,
    DirectoryNotEmptyError,
    EmptyPayloadError,
    FileVaultError,
    InvalidRequestError,
    InvalidVersionError,
    NoVersionsError,
    ObjectNotFoundError,
    PathTraversalError,
    StorageBackendError,
)
from filevault.storage.models import ArchiveSnapshot, StoredFile
from filevault.storage.vault import FileVault

__all__ = [
    "AlreadyExistsError",
    "ArchiveSnapshot",
    "DirectoryNotEmptyError",
    "EmptyPayloadError",
    "FileVault",
    "FileVaultError",
    "InvalidRequestError",
    "InvalidVersionError",
    "NoVersionsError",
    "ObjectNotFoundError",
    "PathTraversalError",
    "StorageBackendError",
    "StoredFile",
]
