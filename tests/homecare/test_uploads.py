import pytest
from fastapi import status
from httpx import ASGITransport, AsyncClient

from src.homecare.config import settings
from src.homecare.infra.storage import documents
from src.homecare.main import app
from src.homecare.services.audit.service import audit_service


@pytest.fixture
def storage(tmp_path, monkeypatch):
    backend = documents.LocalDocumentStorageBackend(base=tmp_path, url_prefix="/uploads")
    monkeypatch.setattr(documents, "document_storage_backend", backend)
    return backend


async def test_upload_stores_document(storage):
    content = b"%PDF-1.4 license scan"
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        response = await ac.post(
            "/api/v1/uploads",
            files={"file": ("license.PDF", content, "application/pdf")},
        )
    assert response.status_code == status.HTTP_201_CREATED
    body = response.json()
    assert body["filename"] == "license.PDF"
    assert body["size"] == len(content)
    assert body["url"].startswith("/uploads/")
    assert body["url"].endswith(".pdf")
    assert storage.path_for(body["url"]).read_bytes() == content

    (event,) = audit_service.list_events(resource_type="upload")
    assert event.resource_id == body["url"]


async def test_upload_rejects_bad_type_and_empty_file(storage):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        wrong_type = await ac.post("/api/v1/uploads/", files={"file": ("notes.txt", b"hello", "text/plain")})
        empty = await ac.post("/api/v1/uploads/", files={"file": ("blank.png", b"", "image/png")})
    assert wrong_type.status_code == status.HTTP_400_BAD_REQUEST
    assert empty.status_code == status.HTTP_400_BAD_REQUEST


async def test_upload_enforces_size_limit(storage, monkeypatch):
    monkeypatch.setattr(settings, "max_upload_bytes", 4)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        response = await ac.post("/api/v1/uploads/", files={"file": ("photo.jpg", b"12345", "image/jpeg")})
    assert response.status_code == status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
