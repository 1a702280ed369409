"""FileVault API key check.

Every file endpoint requires the shared secret in the X-Api-Key header. The
check runs as a router dependency, before the path is validated or the disk
is touched. Fails closed: with no key configured, every request is rejected.
"""

import hmac
import logging

from fastapi import Request

from filevault.api.errors import VaultHttpError

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-Api-Key"
_LOGGED_KEY_PREFIX = 4


def _client_host(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def require_api_key(request: Request) -> None:
    """Reject the request unless it carries the configured API key.

    Raises:
        VaultHttpError: 401 InvalidKey if the key is missing or wrong.
    """
    provided = request.headers.get(API_KEY_HEADER)
    expected: str | None = request.app.state.vault.config.api_key

    if not provided:
        logger.warning("API key missing from %s", _client_host(request))
        raise VaultHttpError(status_code=401, code="InvalidKey", message="Invalid API key")

    if not expected or not hmac.compare_digest(
        provided.encode("utf-8"), expected.encode("utf-8")
    ):
        logger.warning(
            "API key mismatch from %s (key %s...)",
            _client_host(request),
            provided[:_LOGGED_KEY_PREFIX],
        )
        raise VaultHttpError(status_code=401, code="InvalidKey", message="Invalid API key")

    logger.debug("API key accepted for %s", _client_host(request))
