"""
VidShare Media Storage - S3-compatible object storage for uploaded media.

Uploads arrive as ``UploadFile``s, are staged under ``temp_dir`` and then
pushed to the bucket. The staged file is removed whether the upload
succeeds or fails. Deletions are best-effort: failures are logged, never
raised, so they can run as compensation after a failed multi-step write.
"""
from __future__ import annotations

import asyncio
import json
import logging
import os
import shutil
import subprocess
import uuid
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Iterable, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import Request, UploadFile

from vidshare.core.config import Settings
from vidshare.models.models import MediaKind

logger = logging.getLogger(__name__)


class MediaStorageError(Exception):
    pass


@dataclass
class UploadResult:
    url: str
    public_id: str
    kind: MediaKind
    duration: Optional[float] = None


# ── Staging ──────────────────────────────────────────────────────────────

def stage_upload(upload: UploadFile, temp_dir: str) -> Path:
    """Copy an incoming upload to a uniquely named local file."""
    directory = Path(temp_dir)
    directory.mkdir(parents=True, exist_ok=True)
    suffix = Path(upload.filename or "").suffix
    destination = directory / f"{uuid.uuid4().hex}{suffix}"
    upload.file.seek(0)
    with open(destination, "wb") as out:
        shutil.copyfileobj(upload.file, out)
    return destination


def has_content(upload: Optional[UploadFile]) -> bool:
    return upload is not None and bool(upload.filename)


# ── Storage ──────────────────────────────────────────────────────────────

class MediaStorage:
    """Bucket-backed implementation; tests substitute an in-memory double."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.bucket = settings.s3_bucket
        self._client = None

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client(
                "s3",
                endpoint_url=self.settings.s3_endpoint_url or None,
                aws_access_key_id=self.settings.s3_access_key,
                aws_secret_access_key=self.settings.s3_secret_key,
                region_name=self.settings.s3_region,
            )
        return self._client

    def probe_duration(self, path: Path) -> Optional[float]:
        try:
            probe = subprocess.run(
                [
                    self.settings.ffprobe_binary, "-v", "quiet", "-print_format", "json",
                    "-show_format", str(path),
                ],
                capture_output=True, text=True, timeout=30,
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.warning(f"ffprobe unavailable for {path.name}: {e}")
            return None
        if probe.returncode != 0:
            return None
        try:
            return float(json.loads(probe.stdout).get("format", {}).get("duration"))
        except (TypeError, ValueError):
            return None

    def _upload_sync(self, path: Path, kind: MediaKind) -> UploadResult:
        duration = self.probe_duration(path) if kind == MediaKind.VIDEO else None
        key = f"{kind.value}/{uuid.uuid4().hex}{path.suffix}"
        self.client.upload_file(str(path), self.bucket, key)
        return UploadResult(
            url=f"{self.settings.media_public_url.rstrip('/')}/{key}",
            public_id=key,
            kind=kind,
            duration=duration,
        )

    async def upload(self, path: Path, kind: MediaKind = MediaKind.IMAGE) -> UploadResult:
        loop = asyncio.get_running_loop()
        try:
            result = await loop.run_in_executor(None, self._upload_sync, path, kind)
        except (BotoCoreError, ClientError, OSError) as e:
            logger.error(f"Upload of {path.name} failed: {e}")
            raise MediaStorageError(f"Failed to upload {kind.value}") from e
        finally:
            discard_local(path)
        logger.info("Uploaded %s %s", kind.value, result.public_id)
        return result

    async def delete(self, public_id: Optional[str], kind: MediaKind = MediaKind.IMAGE) -> None:
        if not public_id:
            logger.warning("No public id provided for media deletion")
            return
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(
                None, partial(self.client.delete_object, Bucket=self.bucket, Key=public_id),
            )
            logger.info("Deleted %s %s", kind.value, public_id)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Media deletion failed for {public_id}: {e}")


def discard_local(path: Optional[Path]) -> None:
    if path is None:
        return
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Could not remove staged file {path}: {e}")


async def discard_uploads(storage, uploads: Iterable[Optional[UploadResult]]) -> None:
    """Compensation step: delete media uploaded by a write that later failed."""
    for uploaded in uploads:
        if uploaded is not None:
            await storage.delete(uploaded.public_id, uploaded.kind)


async def store_upload(storage, upload: UploadFile, temp_dir: str, kind: MediaKind) -> UploadResult:
    """Stage an incoming file off the event loop and push it to storage."""
    loop = asyncio.get_running_loop()
    path = await loop.run_in_executor(None, stage_upload, upload, temp_dir)
    return await storage.upload(path, kind)


# ── Dependency ───────────────────────────────────────────────────────────

def get_media_storage(request: Request) -> MediaStorage:
    storage = getattr(request.app.state, "media_storage", None)
    if storage is None:
        raise RuntimeError("Media storage is not initialised; is the lifespan running?")
    return storage
