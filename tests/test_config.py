"""Tests for VaultConfig and logging setup."""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

import pytest

from filevault.config import DEFAULT_MAX_UPLOAD_BYTES, VaultConfig
from filevault.logging_config import configure_logging


class TestVaultConfig:
    """Tests for configuration loading."""

    def test_defaults(self) -> None:
        """Without environment, defaults apply and no key is configured."""
        config = VaultConfig.from_env()

        assert config.root == Path(tempfile.gettempdir()).absolute() / "filevault"
        assert config.api_key is None
        assert config.max_upload_bytes == DEFAULT_MAX_UPLOAD_BYTES
        assert config.log_level == "INFO"

    def test_from_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """FILEVAULT_* variables override the defaults."""
        monkeypatch.setenv("FILEVAULT_ROOT", str(tmp_path / "store"))
        monkeypatch.setenv("FILEVAULT_API_KEY", " secret ")
        monkeypatch.setenv("FILEVAULT_MAX_UPLOAD_BYTES", "1024")
        monkeypatch.setenv("FILEVAULT_LOG_LEVEL", "debug")

        config = VaultConfig.from_env()

        assert config.root == tmp_path / "store"
        assert config.api_key == "secret"
        assert config.max_upload_bytes == 1024
        assert config.log_level == "DEBUG"

    @pytest.mark.parametrize("raw", ["lots", "0", "-5"])
    def test_bad_upload_limit_falls_back(
        self, raw: str, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Unusable limits are ignored with a warning."""
        monkeypatch.setenv("FILEVAULT_MAX_UPLOAD_BYTES", raw)

        with caplog.at_level(logging.WARNING, logger="filevault.config"):
            config = VaultConfig.from_env()

        assert config.max_upload_bytes == DEFAULT_MAX_UPLOAD_BYTES
        assert "FILEVAULT_MAX_UPLOAD_BYTES" in caplog.text

    def test_layout_directories(self, tmp_path: Path) -> None:
        """active, archive and audit live directly under the root."""
        config = VaultConfig(root=tmp_path)

        assert config.active_root == tmp_path / "active"
        assert config.archive_root == tmp_path / "archive"
        assert config.audit_root == tmp_path / "audit"

    def test_relative_root_made_absolute(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """A relative root is resolved against the working directory."""
        monkeypatch.chdir(tmp_path)

        assert VaultConfig(root=Path("data")).root == tmp_path / "data"


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_unknown_level_falls_back_to_info(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Unknown level names do not raise."""
        calls: list[dict] = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.append(kw))

        configure_logging("chatty")

        assert calls[0]["level"] == logging.INFO

    def test_named_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Level names are resolved case-insensitively."""
        calls: list[dict] = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.append(kw))

        configure_logging("debug")

        assert calls[0]["level"] == logging.DEBUG
