import base64

import httpx
import pytest
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from sqlalchemy import func, select

from productflow.errors import InvalidRequestError
from productflow.models.project import DataFile
from productflow.schemas.project import DataFileUpload
from productflow.services.data_file_service import DataFileService
from productflow.services.storage import ContentFetcher, InvalidKeyError, LocalBlobStorage

PUBLIC_BASE = "http://files.test"


@pytest.mark.unit
def test_url_encodes_reserved_characters():
    storage = LocalBlobStorage(root="/tmp/unused", public_base_url=PUBLIC_BASE)

    url = storage.url_for("projects/p1/files/abcd1234-notes #1 100%?.txt")

    assert url == f"{PUBLIC_BASE}/files/projects/p1/files/abcd1234-notes%20%231%20100%25%3F.txt"


@pytest.mark.asyncio
async def test_stored_file_with_reserved_characters_reads_back(tmp_path):
    storage = LocalBlobStorage(root=str(tmp_path), public_base_url=PUBLIC_BASE)
    files_app = FastAPI()
    files_app.mount("/files", StaticFiles(directory=str(tmp_path)), name="files")
    fetcher = ContentFetcher(timeout_seconds=5, transport=httpx.ASGITransport(app=files_app))

    stored = storage.put("projects/p1/files/abcd1234-notes #1.txt", b"Onboarding was slow.", "text/plain")

    assert stored["key"] == "projects/p1/files/abcd1234-notes #1.txt"
    assert await fetcher.fetch_text(stored["url"]) == "Onboarding was slow."


@pytest.mark.unit
def test_key_outside_root_is_rejected(tmp_path):
    storage = LocalBlobStorage(root=str(tmp_path / "blobs"), public_base_url=PUBLIC_BASE)

    with pytest.raises(InvalidKeyError):
        storage.put("../outside.txt", b"x", "text/plain")
    assert not (tmp_path / "outside.txt").exists()


@pytest.mark.asyncio
async def test_escaping_file_name_is_a_validation_error(db, user, project, tmp_path):
    storage = LocalBlobStorage(root=str(tmp_path), public_base_url=PUBLIC_BASE)
    upload = DataFileUpload.model_construct(
        file_name="../../../../../../escape.txt",
        file_type="transcript",
        content=base64.b64encode(b"hello").decode("ascii"),
        mime_type="text/plain",
    )

    with pytest.raises(InvalidRequestError) as exc_info:
        await DataFileService(db, storage).upload(user, project.id, upload)

    assert exc_info.value.code == "invalid_file_name"
    assert exc_info.value.status_code == 400
    assert (await db.execute(select(func.count(DataFile.id)))).scalar_one() == 0


@pytest.mark.unit
def test_upload_schema_keeps_only_the_base_name():
    upload = DataFileUpload(
        file_name="../../etc/notes #1.txt",
        file_type="transcript",
        content=base64.b64encode(b"hello").decode("ascii"),
        mime_type="text/plain",
    )
    assert upload.file_name == "notes #1.txt"
