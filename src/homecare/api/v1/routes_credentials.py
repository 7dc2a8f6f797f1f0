from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from pydantic import BaseModel, Field

from src.homecare.config import settings
from src.homecare.domain.models.credential import (
    AlertSeverity,
    Credential,
    CredentialAlert,
    CredentialCategory,
    CredentialStatus,
    CredentialType,
)
from src.homecare.domain.models.user import User
from src.homecare.security import get_api_key, get_current_user
from src.homecare.services.credentials.presentation import STATUS_PRESENTATION, StatusPresentation, present_status
from src.homecare.services.credentials.service import CredentialSummary, credential_service
from src.homecare.tenancy import agency_dependency


router = APIRouter(
    prefix="/credentials",
    tags=["credentials"],
    dependencies=[Depends(get_api_key), Depends(agency_dependency)],
)


class CredentialView(Credential):
    presentation: StatusPresentation

    @classmethod
    def from_credential(cls, credential: Credential) -> "CredentialView":
        return cls(**credential.model_dump(), presentation=present_status(credential.status))


class CredentialListResponse(BaseModel):
    credentials: List[CredentialView]
    summary: CredentialSummary


class CredentialDetailResponse(BaseModel):
    credential: CredentialView
    credential_type: Optional[CredentialType] = None
    alerts: List[CredentialAlert] = Field(default_factory=list)


class CredentialCreateRequest(BaseModel):
    caregiver_id: str
    credential_type_id: UUID
    license_number: Optional[str] = None
    issuing_authority: Optional[str] = None
    issuing_state: Optional[str] = None
    issue_date: Optional[date] = None
    expiration_date: Optional[date] = None
    document_urls: List[str] = Field(default_factory=list)
    verification_url: Optional[str] = None
    notes: Optional[str] = None


class CredentialUpdateRequest(BaseModel):
    license_number: Optional[str] = None
    issuing_authority: Optional[str] = None
    issuing_state: Optional[str] = None
    issue_date: Optional[date] = None
    expiration_date: Optional[date] = None
    document_urls: Optional[List[str]] = None
    verification_url: Optional[str] = None
    notes: Optional[str] = None
    is_verified: Optional[bool] = None


class CredentialRevokeRequest(BaseModel):
    reason: Optional[str] = None


class CredentialTypeCreateRequest(BaseModel):
    name: str = Field(min_length=1)
    category: CredentialCategory
    description: Optional[str] = None
    default_validity_months: Optional[int] = Field(default=None, ge=0)
    is_required: bool = False
    required_for_roles: List[str] = Field(default_factory=list)
    reminder_days: List[int] = Field(default_factory=list)


class CredentialTypeUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    category: Optional[CredentialCategory] = None
    description: Optional[str] = None
    default_validity_months: Optional[int] = Field(default=None, ge=0)
    is_required: Optional[bool] = None
    required_for_roles: Optional[List[str]] = None
    reminder_days: Optional[List[int]] = None
    is_active: Optional[bool] = None


class CredentialCheckResponse(BaseModel):
    success: bool
    credentials_checked: int
    status_updated: int
    alerts_created: int
    errors: List[str]


# Static sub-paths first so they are not captured by /{credential_id}.


@router.get("/status-presentation", response_model=Dict[str, StatusPresentation])
async def get_status_presentation() -> Dict[str, StatusPresentation]:
    """The status-to-badge table clients use to render credential statuses."""
    return {status_value.value: presentation for status_value, presentation in STATUS_PRESENTATION.items()}


@router.get("/types", response_model=List[CredentialType])
async def list_credential_types(include_inactive: bool = False) -> List[CredentialType]:
    return credential_service.list_types(include_inactive=include_inactive)


@router.post("/types", response_model=CredentialType, status_code=status.HTTP_201_CREATED)
async def create_credential_type(
    payload: CredentialTypeCreateRequest,
    current_user: User = Depends(get_current_user),
) -> CredentialType:
    return credential_service.create_type(current_user, **payload.model_dump())


@router.patch("/types/{type_id}", response_model=CredentialType)
async def update_credential_type(
    type_id: UUID,
    payload: CredentialTypeUpdateRequest,
    current_user: User = Depends(get_current_user),
) -> CredentialType:
    return credential_service.update_type(current_user, type_id, payload.model_dump(exclude_unset=True))


@router.delete("/types/{type_id}", response_model=CredentialType)
async def deactivate_credential_type(
    type_id: UUID,
    current_user: User = Depends(get_current_user),
) -> CredentialType:
    return credential_service.deactivate_type(current_user, type_id)


@router.get("/alerts", response_model=List[CredentialAlert])
async def list_credential_alerts(
    unacknowledged_only: bool = False,
    severity: Optional[AlertSeverity] = None,
    current_user: User = Depends(get_current_user),
) -> List[CredentialAlert]:
    return credential_service.list_alerts(current_user, unacknowledged_only=unacknowledged_only, severity=severity)


@router.post("/alerts/{alert_id}/acknowledge", response_model=CredentialAlert)
async def acknowledge_credential_alert(
    alert_id: UUID,
    current_user: User = Depends(get_current_user),
) -> CredentialAlert:
    return credential_service.acknowledge_alert(current_user, alert_id)


@router.post("/check", response_model=CredentialCheckResponse)
async def run_credential_check(authorization: Optional[str] = Header(None)) -> CredentialCheckResponse:
    """Daily job entry point: reconcile statuses and raise expiration alerts.

    Meant to be called by a scheduler. When CRON_SECRET is configured the
    caller must send it as a bearer token.
    """

    if settings.cron_secret and authorization != f"Bearer {settings.cron_secret}":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    result = credential_service.run_credential_check()
    return CredentialCheckResponse(
        success=True,
        credentials_checked=result.credentials_checked,
        status_updated=result.status_updated,
        alerts_created=result.alerts_created,
        errors=result.errors,
    )


@router.get("/", response_model=CredentialListResponse)
async def list_credentials(
    caregiver_id: Optional[str] = None,
    credential_type_id: Optional[UUID] = None,
    status_filter: Optional[CredentialStatus] = Query(None, alias="status"),
    expiring_within_days: Optional[int] = Query(None, ge=1),
    current_user: User = Depends(get_current_user),
) -> CredentialListResponse:
    credentials, summary = credential_service.list_credentials(
        current_user,
        caregiver_id=caregiver_id,
        credential_type_id=credential_type_id,
        status=status_filter,
        expiring_within_days=expiring_within_days,
    )
    return CredentialListResponse(
        credentials=[CredentialView.from_credential(c) for c in credentials],
        summary=summary,
    )


@router.post("/", response_model=CredentialView, status_code=status.HTTP_201_CREATED)
async def create_credential(
    payload: CredentialCreateRequest,
    current_user: User = Depends(get_current_user),
) -> CredentialView:
    credential = credential_service.create_credential(current_user, **payload.model_dump())
    return CredentialView.from_credential(credential)


@router.get("/{credential_id}", response_model=CredentialDetailResponse)
async def get_credential(
    credential_id: UUID,
    current_user: User = Depends(get_current_user),
) -> CredentialDetailResponse:
    credential = credential_service.get_credential(current_user, credential_id)
    return CredentialDetailResponse(
        credential=CredentialView.from_credential(credential),
        credential_type=credential_service.find_type(credential.credential_type_id),
        alerts=credential_service.recent_alerts(credential_id),
    )


@router.patch("/{credential_id}", response_model=CredentialView)
async def update_credential(
    credential_id: UUID,
    payload: CredentialUpdateRequest,
    current_user: User = Depends(get_current_user),
) -> CredentialView:
    credential = credential_service.update_credential(
        current_user,
        credential_id,
        payload.model_dump(exclude_unset=True),
    )
    return CredentialView.from_credential(credential)


@router.post("/{credential_id}/revoke", response_model=CredentialView)
async def revoke_credential(
    credential_id: UUID,
    payload: CredentialRevokeRequest,
    current_user: User = Depends(get_current_user),
) -> CredentialView:
    credential = credential_service.revoke_credential(current_user, credential_id, payload.reason)
    return CredentialView.from_credential(credential)


@router.delete("/{credential_id}")
async def delete_credential(
    credential_id: UUID,
    current_user: User = Depends(get_current_user),
) -> dict:
    credential_service.delete_credential(current_user, credential_id)
    return {"success": True}
