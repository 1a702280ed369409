"""Tests for the FileVault HTTP contract.

Covers key enforcement, status codes per error kind, the error envelope,
the upload size limit and the version routes.
"""

from __future__ import annotations

import hashlib
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from filevault.api.main import create_app
from filevault.config import VaultConfig
from tests.helpers import TEST_API_KEY, read_audit_lines

ENVELOPE_KEYS = {"code", "message", "details", "request_id"}


def _assert_error(response, status: int, code: str) -> dict:  # type: ignore[no-untyped-def]
    assert response.status_code == status
    body = response.json()
    assert set(body) == ENVELOPE_KEYS
    assert body["code"] == code
    assert body["request_id"] == response.headers["X-Request-Id"]
    return body


class TestApiKey:
    """The key check runs before anything else."""

    def test_missing_key_rejected(self, client: TestClient) -> None:
        """No X-Api-Key header yields 401 InvalidKey."""
        response = client.get("/fs/download/a.txt")

        _assert_error(response, 401, "InvalidKey")

    def test_wrong_key_rejected(self, client: TestClient) -> None:
        """A wrong key yields 401 InvalidKey."""
        response = client.get("/fs/download/a.txt", headers={"X-Api-Key": "nope"})

        _assert_error(response, 401, "InvalidKey")

    def test_key_checked_before_path(self, client: TestClient) -> None:
        """A traversal path without a key is still just unauthorized."""
        response = client.get("/fs/download/%2e%2e/%2e%2e/etc/passwd")

        _assert_error(response, 401, "InvalidKey")

    def test_rejected_upload_writes_nothing(self, client: TestClient, vault_root: Path) -> None:
        """An unauthorized upload leaves no file and no audit record."""
        response = client.post("/fs/upload/a.txt", content=b"data")

        assert response.status_code == 401
        assert not (vault_root / "active" / "a.txt").exists()
        assert read_audit_lines(vault_root) == []

    def test_no_configured_key_rejects_everyone(self, tmp_path: Path) -> None:
        """Without a configured key the server fails closed."""
        app = create_app(VaultConfig(root=tmp_path / "vault", api_key=None))
        client = TestClient(app, raise_server_exceptions=False)

        response = client.get("/fs/download/a.txt", headers={"X-Api-Key": "anything"})

        _assert_error(response, 401, "InvalidKey")

    @pytest.mark.parametrize(
        ("method", "url"),
        [
            ("POST", "/fs/upload/a.txt"),
            ("DELETE", "/fs/delete/a.txt"),
            ("PUT", "/fs/replace/a.txt"),
            ("GET", "/list-versions/a.txt"),
            ("POST", "/fs/rollback/a.txt"),
        ],
    )
    def test_every_file_route_requires_key(self, client: TestClient, method: str, url: str) -> None:
        """All file and version routes are keyed."""
        response = client.request(method, url, content=b"x")

        assert response.status_code == 401

    def test_health_needs_no_key(self, client: TestClient) -> None:
        """Health stays open for probes."""
        assert client.get("/health").status_code == 200


class TestFileRoutes:
    """Tests for upload, download, delete and replace over HTTP."""

    def test_upload_then_download(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        """201 on upload; download returns the same bytes and their hash."""
        data = b"\x00\x01binary\xff"

        response = client.post("/fs/upload/notes/a.bin", content=data, headers=auth_headers)
        assert response.status_code == 201
        assert response.json() == {"status": "success", "path": "notes/a.bin"}

        response = client.get("/fs/download/notes/a.bin", headers=auth_headers)
        assert response.status_code == 200
        assert response.content == data
        assert response.headers["content-type"] == "application/octet-stream"
        assert response.headers["X-Content-SHA256"] == hashlib.sha256(data).hexdigest()

    def test_upload_conflict(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        """A second upload to the same path is 409."""
        client.post("/fs/upload/a.txt", content=b"v1", headers=auth_headers)

        response = client.post("/fs/upload/a.txt", content=b"v2", headers=auth_headers)

        _assert_error(response, 409, "AlreadyExists")

    def test_upload_empty_body(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        """An empty upload is 400 EmptyPayload."""
        response = client.post("/fs/upload/a.txt", content=b"", headers=auth_headers)

        _assert_error(response, 400, "EmptyPayload")

    def test_download_missing(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        """Downloading a missing file is 404."""
        response = client.get("/fs/download/missing.txt", headers=auth_headers)

        _assert_error(response, 404, "NotFound")

    def test_delete(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        """Delete removes the file; a second delete is 404."""
        client.post("/fs/upload/a.txt", content=b"v1", headers=auth_headers)

        response = client.delete("/fs/delete/a.txt", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == {"status": "success", "path": "a.txt"}

        response = client.delete("/fs/delete/a.txt", headers=auth_headers)
        _assert_error(response, 404, "NotFound")

    def test_delete_non_empty_directory(
        self, client: TestClient, auth_headers: dict[str, str]
    ) -> None:
        """Deleting a directory that still holds files is 400."""
        client.post("/fs/upload/docs/a.txt", content=b"v1", headers=auth_headers)

        response = client.delete("/fs/delete/docs", headers=auth_headers)

        _assert_error(response, 400, "DirectoryNotEmpty")

    def test_delete_root_is_bad_path(
        self, client: TestClient, auth_headers: dict[str, str]
    ) -> None:
        """The storage root can never be deleted."""
        response = client.delete("/fs/delete/", headers=auth_headers)

        _assert_error(response, 400, "BadPath")

    def test_replace(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        """Replace overwrites the content."""
        client.post("/fs/upload/a.txt", content=b"v1", headers=auth_headers)

        response = client.put("/fs/replace/a.txt", content=b"v2", headers=auth_headers)
        assert response.status_code == 200

        assert client.get("/fs/download/a.txt", headers=auth_headers).content == b"v2"

    def test_replace_missing(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        """Replacing a missing file is 404."""
        response = client.put("/fs/replace/a.txt", content=b"v2", headers=auth_headers)

        _assert_error(response, 404, "NotFound")

    def test_replace_empty_body(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        """An empty replacement is 400 EmptyPayload."""
        client.post("/fs/upload/a.txt", content=b"v1", headers=auth_headers)

        response = client.put("/fs/replace/a.txt", content=b"", headers=auth_headers)

        _assert_error(response, 400, "EmptyPayload")

    def test_unknown_route(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        """Unknown routes are rendered in the error envelope."""
        response = client.get("/fs/unknown/a.txt", headers=auth_headers)

        _assert_error(response, 404, "NotFound")


class TestPathTraversal:
    """Traversal attempts are rejected before any filesystem access."""

    @pytest.mark.parametrize(
        "url",
        [
            "/fs/download/%2e%2e/%2e%2e/etc/passwd",
            "/fs/download/notes/%2e%2e/%2e%2e/secret",
            "/fs/download/a%00b",
        ],
    )
    def test_download_traversal(
        self, client: TestClient, auth_headers: dict[str, str], url: str
    ) -> None:
        """Escaping paths are 400 BadPath."""
        response = client.get(url, headers=auth_headers)

        _assert_error(response, 400, "BadPath")

    def test_upload_traversal_writes_nothing(
        self, client: TestClient, auth_headers: dict[str, str], tmp_path: Path
    ) -> None:
        """A rejected upload writes nothing outside or inside the root."""
        response = client.post(
            "/fs/upload/%2e%2e/%2e%2e/escape.txt", content=b"x", headers=auth_headers
        )

        _assert_error(response, 400, "BadPath")
        assert not (tmp_path / "escape.txt").exists()
        assert [p for p in tmp_path.rglob("escape.txt")] == []

    def test_dot_segments_inside_root_are_normalized(
        self, client: TestClient, auth_headers: dict[str, str]
    ) -> None:
        """Dot segments that stay inside the root are collapsed."""
        client.post("/fs/upload/notes/a.txt", content=b"v1", headers=auth_headers)

        response = client.get("/fs/download/notes/x/%2e%2e/a.txt", headers=auth_headers)

        assert response.status_code == 200
        assert response.content == b"v1"


class TestErrorEnvelope:
    """Tests for the shared error envelope."""

    def test_request_id_echoed_in_error(
        self, client: TestClient, auth_headers: dict[str, str]
    ) -> None:
        """A caller-supplied request id is carried in the envelope."""
        headers = {**auth_headers, "X-Request-Id": "req-123"}

        response = client.get("/fs/download/missing.txt", headers=headers)

        body = _assert_error(response, 404, "NotFound")
        assert body["request_id"] == "req-123"

    def test_backend_failure_is_opaque(
        self, client: TestClient, auth_headers: dict[str, str], vault_root: Path
    ) -> None:
        """Backend failures are 500 IOFailure without internal paths."""
        client.post("/fs/upload/a.txt", content=b"v1", headers=auth_headers)

        response = client.post("/fs/upload/a.txt/b.txt", content=b"v2", headers=auth_headers)

        body = _assert_error(response, 500, "IOFailure")
        assert str(vault_root) not in response.text
        assert body["details"] is None


class TestUploadLimit:
    """Tests for the request body size limit."""

    @pytest.fixture
    def small_client(self, tmp_path: Path) -> TestClient:
        config = VaultConfig(root=tmp_path / "vault", api_key=TEST_API_KEY, max_upload_bytes=16)
        return TestClient(create_app(config), raise_server_exceptions=False)

    def test_oversized_upload_rejected(
        self, small_client: TestClient, auth_headers: dict[str, str], tmp_path: Path
    ) -> None:
        """Bodies over the limit are 413 and nothing is stored."""
        response = small_client.post("/fs/upload/a.txt", content=b"x" * 17, headers=auth_headers)

        body = _assert_error(response, 413, "PayloadTooLarge")
        assert body["details"] == {"limit_bytes": 16}
        assert not (tmp_path / "vault" / "active" / "a.txt").exists()

    @pytest.mark.parametrize(
        ("method", "url"),
        [
            ("POST", "/fs/upload/%2e%2e/%2e%2e/escape.txt"),
            ("PUT", "/fs/replace/%2e%2e/%2e%2e/escape.txt"),
            ("POST", "/fs/rollback/%2e%2e/escape.txt"),
        ],
    )
    def test_bad_path_reported_before_body_size(
        self, small_client: TestClient, auth_headers: dict[str, str], method: str, url: str
    ) -> None:
        """An escaping path is BadPath even when the body is also oversized."""
        response = small_client.request(method, url, content=b"x" * 17, headers=auth_headers)

        _assert_error(response, 400, "BadPath")

    def test_body_at_limit_accepted(
        self, small_client: TestClient, auth_headers: dict[str, str]
    ) -> None:
        """A body exactly at the limit is accepted."""
        response = small_client.post("/fs/upload/a.txt", content=b"x" * 16, headers=auth_headers)

        assert response.status_code == 201


class TestVersionRoutes:
    """Tests for list-versions and rollback over HTTP."""

    def _upload_three_revisions(self, client: TestClient, headers: dict[str, str]) -> None:
        client.post("/fs/upload/notes/a.txt", content=b"v1", headers=headers)
        client.put("/fs/replace/notes/a.txt", content=b"v2", headers=headers)
        client.put("/fs/replace/notes/a.txt", content=b"v3", headers=headers)

    def test_list_versions(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        """Versions are keyed "1".."N" with file, date and timestamp."""
        self._upload_three_revisions(client, auth_headers)

        response = client.get("/list-versions/notes/a.txt", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert list(body) == ["1", "2"]
        assert set(body["1"]) == {"file", "date", "timestamp"}
        assert body["1"]["file"].startswith("a_")
        assert body["1"]["timestamp"] < body["2"]["timestamp"]

    def test_list_versions_none(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        """A path never replaced has no versions (404)."""
        client.post("/fs/upload/a.txt", content=b"v1", headers=auth_headers)

        response = client.get("/list-versions/a.txt", headers=auth_headers)

        _assert_error(response, 404, "NoVersions")

    def test_rollback(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        """Rollback to version 1 restores the first revision."""
        self._upload_three_revisions(client, auth_headers)

        response = client.post(
            "/fs/rollback/notes/a.txt", json={"version": 1}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json() == {"status": "success", "path": "notes/a.txt", "version": 1}
        assert client.get("/fs/download/notes/a.txt", headers=auth_headers).content == b"v1"

    def test_rollback_version_out_of_range(
        self, client: TestClient, auth_headers: dict[str, str]
    ) -> None:
        """An unknown ordinal is 400 InvalidVersion with range details."""
        self._upload_three_revisions(client, auth_headers)

        response = client.post(
            "/fs/rollback/notes/a.txt", json={"version": 99}, headers=auth_headers
        )

        body = _assert_error(response, 400, "InvalidVersion")
        assert body["details"] == {"version": 99, "available": 2}

    @pytest.mark.parametrize("content", [b"{", b"{}", b'{"version": "x"}'])
    def test_rollback_invalid_request(
        self, client: TestClient, auth_headers: dict[str, str], content: bytes
    ) -> None:
        """Malformed bodies are 400 InvalidRequest."""
        self._upload_three_revisions(client, auth_headers)

        response = client.post(
            "/fs/rollback/notes/a.txt",
            content=content,
            headers={**auth_headers, "Content-Type": "application/json"},
        )

        _assert_error(response, 400, "InvalidRequest")

    def test_rollback_without_versions(
        self, client: TestClient, auth_headers: dict[str, str]
    ) -> None:
        """Rollback on a path with no snapshots is 404 NoVersions."""
        client.post("/fs/upload/a.txt", content=b"v1", headers=auth_headers)

        response = client.post("/fs/rollback/a.txt", json={"version": 1}, headers=auth_headers)

        _assert_error(response, 404, "NoVersions")

    def test_rollback_traversal(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        """Rollback paths are sandboxed too."""
        response = client.post(
            "/fs/rollback/%2e%2e/a.txt", json={"version": 1}, headers=auth_headers
        )

        _assert_error(response, 400, "BadPath")
