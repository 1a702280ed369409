"""Logging setup for the FileVault entry points.

Library modules only create loggers with logging.getLogger(__name__); the CLI
and server call configure_logging() once at startup.
"""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging with a single stream handler.

    Args:
        level: Level name such as "DEBUG" or "INFO". Unknown names fall back to INFO.
    """
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO

    logging.basicConfig(level=resolved, format=LOG_FORMAT)
