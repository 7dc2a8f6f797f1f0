from __future__ import annotations

from typing import Any, Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, EmailStr, Field

from src.homecare.domain.models.assessment import QAStatus
from src.homecare.domain.models.staff import StaffMember
from src.homecare.domain.models.user import User, UserRole
from src.homecare.security import ensure_is_manager, get_api_key, get_current_user
from src.homecare.services.assessments.service import assessment_service
from src.homecare.services.audit.service import audit_service
from src.homecare.services.credentials.service import CredentialSummary, credential_service
from src.homecare.services.staff.service import staff_service
from src.homecare.tenancy import agency_dependency


router = APIRouter(
    prefix="/staff",
    tags=["staff"],
    dependencies=[Depends(get_api_key), Depends(agency_dependency)],
)


class StaffCreateRequest(BaseModel):
    email: EmailStr
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    role: UserRole = UserRole.CARER
    phone: Optional[str] = Field(default=None, max_length=20)
    profile_data: Optional[Dict[str, Any]] = None


class StaffUpdateRequest(BaseModel):
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    role: Optional[UserRole] = None
    phone: Optional[str] = Field(default=None, max_length=20)
    is_active: Optional[bool] = None
    profile_data: Optional[Dict[str, Any]] = None


class StaffStats(BaseModel):
    credentials: CredentialSummary
    total_assessments: int
    pending_qa: int
    rejected: int


class StaffDetailResponse(BaseModel):
    staff: StaffMember
    stats: StaffStats


@router.get("/", response_model=List[StaffMember])
async def list_staff(
    role: Optional[UserRole] = None,
    include_inactive: bool = False,
    current_user: User = Depends(get_current_user),
) -> List[StaffMember]:
    ensure_is_manager(current_user, "view staff")
    return staff_service.list_staff(role=role, include_inactive=include_inactive)


@router.post("/", response_model=StaffMember, status_code=status.HTTP_201_CREATED)
async def create_staff(
    payload: StaffCreateRequest,
    current_user: User = Depends(get_current_user),
) -> StaffMember:
    ensure_is_manager(current_user)
    staff = staff_service.create_staff(**payload.model_dump())

    audit_service.log_event(
        action="create_staff",
        resource_type="staff",
        resource_id=str(staff.id),
        extra={"user_id": str(current_user.id), "role": staff.role.value},
    )
    return staff


@router.get("/{staff_id}", response_model=StaffDetailResponse)
async def get_staff(
    staff_id: UUID,
    current_user: User = Depends(get_current_user),
) -> StaffDetailResponse:
    ensure_is_manager(current_user, "view staff")
    staff = staff_service.get_staff(staff_id)

    _, credential_summary = credential_service.list_credentials(current_user, caregiver_id=str(staff.id))
    assessments = assessment_service.list_assessments(current_user, caregiver_id=str(staff.id))

    return StaffDetailResponse(
        staff=staff,
        stats=StaffStats(
            credentials=credential_summary,
            total_assessments=len(assessments),
            pending_qa=sum(1 for a in assessments if a.qa_status == QAStatus.COMPLETED),
            rejected=sum(1 for a in assessments if a.qa_status == QAStatus.REJECTED),
        ),
    )


@router.patch("/{staff_id}", response_model=StaffMember)
async def update_staff(
    staff_id: UUID,
    payload: StaffUpdateRequest,
    current_user: User = Depends(get_current_user),
) -> StaffMember:
    ensure_is_manager(current_user)
    changes = payload.model_dump(exclude_unset=True)
    staff = staff_service.update_staff(staff_id, changes)

    audit_service.log_event(
        action="update_staff",
        resource_type="staff",
        resource_id=str(staff_id),
        extra={"user_id": str(current_user.id), "fields": sorted(changes)},
    )
    return staff


@router.delete("/{staff_id}", response_model=StaffMember)
async def deactivate_staff(
    staff_id: UUID,
    current_user: User = Depends(get_current_user),
) -> StaffMember:
    ensure_is_manager(current_user)
    staff = staff_service.deactivate_staff(staff_id)

    audit_service.log_event(
        action="deactivate_staff",
        resource_type="staff",
        resource_id=str(staff_id),
        extra={"user_id": str(current_user.id)},
    )
    return staff
