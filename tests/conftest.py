from __future__ import annotations

import os
import uuid
from pathlib import Path
from typing import List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient

from vidshare.core.config import Settings
from vidshare.main import create_app
from vidshare.models.models import MediaKind
from vidshare.services.media.storage_service import MediaStorageError, UploadResult

API = "/api/v1"


class FakeMediaStorage:
    """In-memory stand-in for the bucket: records uploads and deletions."""

    def __init__(self):
        self.uploads: List[UploadResult] = []
        self.deleted: List[Tuple[str, MediaKind]] = []
        self.fail_kind: Optional[MediaKind] = None
        self.staged: List[Path] = []

    async def upload(self, path: Path, kind: MediaKind = MediaKind.IMAGE) -> UploadResult:
        self.staged.append(Path(path))
        try:
            if self.fail_kind == kind:
                raise MediaStorageError(f"Failed to upload {kind.value}")
            key = f"{kind.value}/{uuid.uuid4().hex}{Path(path).suffix}"
            result = UploadResult(
                url=f"http://media.test/{key}",
                public_id=key,
                kind=kind,
                duration=42.0 if kind == MediaKind.VIDEO else None,
            )
            self.uploads.append(result)
            return result
        finally:
            if os.path.exists(path):
                os.remove(path)

    async def delete(self, public_id: Optional[str], kind: MediaKind = MediaKind.IMAGE) -> None:
        if public_id:
            self.deleted.append((public_id, kind))


@pytest.fixture
def storage() -> FakeMediaStorage:
    return FakeMediaStorage()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_dsn=f"sqlite+aiosqlite:///{tmp_path / 'vidshare.db'}",
        temp_dir=str(tmp_path / "staging"),
        secret_key="test-secret",
        refresh_secret_key="test-refresh-secret",
        share_base_url="http://share.test",
        log_level="WARNING",
    )


@pytest.fixture
def client(settings, storage):
    app = create_app(settings, media_storage=storage)
    with TestClient(app) as test_client:
        yield test_client


# ── Helpers ──────────────────────────────────────────────────────────────

def register(client: TestClient, username: str, password: str = "s3cret-pass", avatar: bool = True):
    files = {"avatar": ("avatar.png", b"\x89PNG-avatar", "image/png")} if avatar else None
    return client.post(
        f"{API}/users/register",
        data={
            "fullName": f"{username.title()} Tester",
            "email": f"{username}@example.com",
            "username": username,
            "password": password,
        },
        files=files,
    )


def login(client: TestClient, username: str, password: str = "s3cret-pass") -> dict:
    response = client.post(f"{API}/users/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["data"]


def auth_headers(tokens: dict) -> dict:
    return {"Authorization": f"Bearer {tokens['accessToken']}"}


def signup(client: TestClient, username: str) -> Tuple[str, dict]:
    """Register and log in; returns (account id, auth headers)."""
    response = register(client, username)
    assert response.status_code == 201, response.text
    tokens = login(client, username)
    return tokens["user"]["id"], auth_headers(tokens)


def publish(client: TestClient, headers: dict, title: str = "First video", description: str = "About it") -> dict:
    response = client.post(
        f"{API}/videos",
        data={"title": title, "description": description},
        files={
            "videoFile": ("clip.mp4", b"\x00\x00video-bytes", "video/mp4"),
            "thumbnail": ("thumb.jpg", b"\xff\xd8thumb", "image/jpeg"),
        },
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.fixture
def alice(client):
    return signup(client, "alice")


@pytest.fixture
def bob(client):
    return signup(client, "bob")
