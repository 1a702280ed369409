"""OpenTelemetry tracing for FileVault storage operations.

Spans are only emitted when FILEVAULT_OTEL_ENABLED is truthy. With just
opentelemetry-api installed and no SDK configured, spans are no-ops.

Security:
    - Never export absolute filesystem paths in span attributes
    - Logical paths are exported as their SHA-256 only
    - No API keys or content in any span attribute
"""

from __future__ import annotations

import functools
import hashlib
import logging
import os
from collections.abc import Callable
from typing import Any, TypeVar, cast

from opentelemetry import trace

from filevault.storage.models import ArchiveSnapshot, StoredFile

logger = logging.getLogger(__name__)

FILEVAULT_OTEL_ENABLED_ENV = "FILEVAULT_OTEL_ENABLED"
TRACER_NAME = "filevault.storage"

F = TypeVar("F", bound=Callable[..., Any])


def _get_env_bool(key: str, default: bool = False) -> bool:
    """Get boolean from environment variable."""
    val = os.environ.get(key, "").strip().lower()
    if val in ("1", "true", "yes"):
        return True
    if val in ("0", "false", "no", ""):
        return default
    return default


def is_tracing_enabled() -> bool:
    """Check if OpenTelemetry tracing is enabled."""
    return _get_env_bool(FILEVAULT_OTEL_ENABLED_ENV, False)


def traced_storage_operation(operation: str) -> Callable[[F], F]:
    """Decorator to trace storage operations with OpenTelemetry.

    The decorated method must take the raw path as its first argument after
    self.

    Args:
        operation: Operation name (e.g., "upload", "download", "rollback").

    Returns:
        Decorated function that emits OTel spans when tracing is enabled.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(self: Any, raw_path: str, *args: Any, **kwargs: Any) -> Any:
            if not is_tracing_enabled():
                return func(self, raw_path, *args, **kwargs)

            tracer = trace.get_tracer(TRACER_NAME)
            with tracer.start_as_current_span(f"filevault.storage.{operation}") as span:
                path_sha256 = hashlib.sha256((raw_path or "").encode("utf-8")).hexdigest()
                span.set_attribute("filevault.path_sha256", path_sha256)
                span.set_attribute("storage.backend", getattr(self, "backend_name", "unknown"))

                try:
                    result = func(self, raw_path, *args, **kwargs)
                except Exception as e:
                    span.set_attribute("error", True)
                    span.set_attribute("error.type", type(e).__name__)
                    code = getattr(e, "code", None)
                    if code:
                        span.set_attribute("filevault.error_code", code)
                    raise

                _add_result_attributes(span, result, operation)
                return result

        return cast(F, wrapper)

    return decorator


def _add_result_attributes(span: Any, result: Any, operation: str) -> None:
    """Add result-based attributes to span safely.

    Only adds safe attributes (sha256, size, ordinals). Never filesystem paths.
    """
    if isinstance(result, StoredFile):
        span.set_attribute("filevault.content_sha256", result.sha256)
        span.set_attribute("filevault.content_size_bytes", result.size_bytes)
    elif isinstance(result, ArchiveSnapshot):
        span.set_attribute("filevault.version", result.ordinal)
    elif operation == "list_versions" and isinstance(result, list):
        span.set_attribute("filevault.version_count", len(result))
