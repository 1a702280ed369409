"""FileVault runtime configuration.

Configuration is built once at process start and passed explicitly into the
storage facade and the API factory. Nothing in the storage layer reads the
environment on its own.

Environment Variables:
    FILEVAULT_ROOT: Storage root holding active/, archive/ and audit/
        (default: OS temp dir / filevault)
    FILEVAULT_API_KEY: Shared secret required in the X-Api-Key header
        (default: unset, every keyed request is rejected)
    FILEVAULT_MAX_UPLOAD_BYTES: Largest accepted request body (default: 50 MiB)
    FILEVAULT_LOG_LEVEL: Logging level name (default: INFO)
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

FILEVAULT_ROOT_ENV = "FILEVAULT_ROOT"
FILEVAULT_API_KEY_ENV = "FILEVAULT_API_KEY"
FILEVAULT_MAX_UPLOAD_BYTES_ENV = "FILEVAULT_MAX_UPLOAD_BYTES"
FILEVAULT_LOG_LEVEL_ENV = "FILEVAULT_LOG_LEVEL"

DEFAULT_MAX_UPLOAD_BYTES = 50 * 1024 * 1024
DEFAULT_LOG_LEVEL = "INFO"

ACTIVE_DIR_NAME = "active"
ARCHIVE_DIR_NAME = "archive"
AUDIT_DIR_NAME = "audit"


def _get_env_str(key: str, default: str = "") -> str:
    """Get string from environment variable."""
    return os.environ.get(key, default).strip()


def _get_env_int(key: str, default: int) -> int:
    """Get a positive integer from environment variable."""
    raw = _get_env_str(key)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r; using %d", key, raw, default)
        return default
    if value <= 0:
        logger.warning("Ignoring non-positive %s=%d; using %d", key, value, default)
        return default
    return value


@dataclass(frozen=True)
class VaultConfig:
    """Process-wide settings for a FileVault instance.

    Attributes:
        root: Storage root directory (resolved to an absolute path).
        api_key: Shared secret callers must present. None rejects everyone.
        max_upload_bytes: Upper bound on upload/replace bodies.
        log_level: Logging level name for the entry points.
    """

    root: Path
    api_key: str | None = None
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    log_level: str = DEFAULT_LOG_LEVEL

    def __post_init__(self) -> None:
        object.__setattr__(self, "root", Path(os.path.abspath(self.root)))

    @property
    def active_root(self) -> Path:
        """Directory holding the current revision of every logical path."""
        return self.root / ACTIVE_DIR_NAME

    @property
    def archive_root(self) -> Path:
        """Directory holding immutable snapshots of replaced revisions."""
        return self.root / ARCHIVE_DIR_NAME

    @property
    def audit_root(self) -> Path:
        """Directory holding the per-day audit logs."""
        return self.root / AUDIT_DIR_NAME

    @classmethod
    def from_env(cls) -> VaultConfig:
        """Build configuration from FILEVAULT_* environment variables."""
        root_raw = _get_env_str(FILEVAULT_ROOT_ENV)
        root = Path(root_raw) if root_raw else Path(tempfile.gettempdir()) / "filevault"

        api_key = _get_env_str(FILEVAULT_API_KEY_ENV) or None
        if api_key is None:
            logger.warning("%s is not set; all keyed requests will be rejected", FILEVAULT_API_KEY_ENV)

        return cls(
            root=root,
            api_key=api_key,
            max_upload_bytes=_get_env_int(FILEVAULT_MAX_UPLOAD_BYTES_ENV, DEFAULT_MAX_UPLOAD_BYTES),
            log_level=_get_env_str(FILEVAULT_LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).upper(),
        )
