import asyncio
import io
import threading

from fastapi import UploadFile

from conftest import FakeMediaStorage
from vidshare.models.models import MediaKind
from vidshare.services.media import storage_service
from vidshare.services.media.storage_service import discard_uploads, store_upload


def test_store_upload_stages_off_the_event_loop(tmp_path, monkeypatch):
    threads = []
    stage = storage_service.stage_upload

    def recording_stage(upload, temp_dir):
        threads.append(threading.get_ident())
        return stage(upload, temp_dir)

    monkeypatch.setattr(storage_service, "stage_upload", recording_stage)
    storage = FakeMediaStorage()
    upload = UploadFile(file=io.BytesIO(b"\x89PNG-bytes"), filename="avatar.png")

    async def run():
        result = await store_upload(storage, upload, str(tmp_path), MediaKind.IMAGE)
        return result, threading.get_ident()

    result, loop_thread = asyncio.run(run())
    assert threads and threads[0] != loop_thread
    assert result.public_id.endswith(".png")
    assert storage.staged[0].parent == tmp_path
    assert not storage.staged[0].exists()


def test_discard_uploads_skips_missing_results():
    storage = FakeMediaStorage()
    asyncio.run(discard_uploads(storage, (None,)))
    assert storage.deleted == []
