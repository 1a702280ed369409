"""Logical path sandboxing for FileVault.

Every caller-supplied path goes through validate_logical_path() before any
filesystem access. Resolution is purely lexical (os.path.abspath collapses
".." segments without touching the disk), so a rejected path never causes I/O.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from filevault.storage.errors import PathTraversalError

logger = logging.getLogger(__name__)

ROOT_MARKER = "."


def strip_route_prefix(raw_path: str, route_prefix: str | None) -> str:
    """Remove the framework routing prefix (e.g. "/fs/upload") from a request path."""
    if route_prefix and raw_path.startswith(route_prefix):
        return raw_path[len(route_prefix) :]
    return raw_path


def is_within_root(root: str | Path, candidate: str) -> bool:
    """Check that candidate, resolved against root, stays inside root."""
    resolved_root = os.path.abspath(root)
    resolved = os.path.abspath(os.path.join(resolved_root, candidate))
    return resolved == resolved_root or resolved.startswith(resolved_root + os.sep)


def validate_logical_path(
    root: str | Path,
    raw_path: str | None,
    *,
    route_prefix: str | None = None,
) -> str:
    """Normalize a raw request path into a logical path inside root.

    Args:
        root: Sandbox root the path must resolve into.
        raw_path: Path as received from the caller.
        route_prefix: Optional routing prefix to strip before validation.

    Returns:
        Normalized relative path using "/" separators, or "." for the root.

    Raises:
        PathTraversalError: If the path is missing, contains NUL bytes, or
            resolves outside root.
    """
    logger.debug("Validating raw path %r", raw_path)

    if raw_path is None:
        logger.warning("Rejected request without a path")
        raise PathTraversalError("Path parameter is required")

    candidate = strip_route_prefix(raw_path, route_prefix)

    if "\x00" in candidate:
        logger.warning("Rejected path with NUL byte: %r", raw_path)
        raise PathTraversalError(path=raw_path)

    if candidate in ("", "/"):
        candidate = ROOT_MARKER
    elif candidate.startswith("/"):
        candidate = candidate[1:]

    if not is_within_root(root, candidate):
        logger.warning(
            "Path traversal attempt detected: raw=%r root=%s", raw_path, os.path.abspath(root)
        )
        raise PathTraversalError(path=raw_path)

    resolved_root = os.path.abspath(root)
    resolved = os.path.abspath(os.path.join(resolved_root, candidate))
    logical_path = os.path.relpath(resolved, resolved_root).replace(os.sep, "/")

    logger.debug("Path validated: %r -> %r", raw_path, logical_path)
    return logical_path
