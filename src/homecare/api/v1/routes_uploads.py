from __future__ import annotations

from pathlib import Path
from uuid import uuid4

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from pydantic import BaseModel

from src.homecare.config import settings
from src.homecare.domain.models.user import User
from src.homecare.infra.storage import documents
from src.homecare.security import get_api_key, get_current_user
from src.homecare.services.audit.service import audit_service
from src.homecare.tenancy import agency_dependency


router = APIRouter(
    prefix="/uploads",
    tags=["uploads"],
    dependencies=[Depends(get_api_key), Depends(agency_dependency)],
)

ALLOWED_CONTENT_TYPES = frozenset({"application/pdf", "image/jpeg", "image/png", "image/heic", "image/webp"})


class UploadResponse(BaseModel):
    url: str
    filename: str
    size: int


@router.post("/", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
@router.post("", response_model=UploadResponse, status_code=status.HTTP_201_CREATED, include_in_schema=False)
async def upload_document(
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
) -> UploadResponse:
    """Store a credential document (scan or photo) and return its URL.

    The caller attaches the URL to a credential's ``document_urls``.
    """

    if file.content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid file type; expected a PDF or image.",
        )

    content = await file.read()
    if not content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Uploaded file is empty.")
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail="Uploaded file too large.",
        )

    suffix = Path(file.filename or "").suffix.lower()
    url = documents.document_storage_backend.save_file(content, name=f"{uuid4()}{suffix}")

    audit_service.log_event(
        action="upload_document",
        resource_type="upload",
        resource_id=url,
        extra={"user_id": str(current_user.id), "size": len(content), "content_type": file.content_type},
    )

    return UploadResponse(url=url, filename=file.filename or url.rsplit("/", 1)[-1], size=len(content))
