"""Pytest configuration and fixtures for FileVault tests.

Every test gets its own storage root under tmp_path, so no state leaks
between tests and nothing touches the real FILEVAULT_ROOT.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from filevault.api.main import create_app
from filevault.config import VaultConfig
from filevault.storage.vault import FileVault
from tests.helpers import TEST_API_KEY

_FILEVAULT_ENV_VARS = (
    "FILEVAULT_ROOT",
    "FILEVAULT_API_KEY",
    "FILEVAULT_MAX_UPLOAD_BYTES",
    "FILEVAULT_LOG_LEVEL",
    "FILEVAULT_OTEL_ENABLED",
)


@pytest.fixture(autouse=True)
def clean_filevault_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove FILEVAULT_* variables inherited from the developer's shell."""
    for name in _FILEVAULT_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def vault_root(tmp_path: Path) -> Path:
    """Return an isolated storage root (not yet created)."""
    return tmp_path / "vault"


@pytest.fixture
def config(vault_root: Path) -> VaultConfig:
    """Return a configuration rooted at the isolated storage root."""
    return VaultConfig(root=vault_root, api_key=TEST_API_KEY)


@pytest.fixture
def vault(config: VaultConfig) -> FileVault:
    """Return a FileVault with its directory layout in place."""
    store = FileVault(config)
    store.ensure_layout()
    return store


@pytest.fixture
def client(config: VaultConfig) -> TestClient:
    """Create a test client for the FileVault API."""
    return TestClient(create_app(config), raise_server_exceptions=False)


@pytest.fixture
def auth_headers() -> dict[str, str]:
    """Headers carrying the valid API key."""
    return {"X-Api-Key": TEST_API_KEY}
