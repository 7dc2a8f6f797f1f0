from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from src.homecare.domain.models.assessment import Assessment, AssessmentType, QAStatus
from src.homecare.domain.models.user import User
from src.homecare.security import get_api_key, get_current_user
from src.homecare.services.assessments.service import assessment_service
from src.homecare.tenancy import agency_dependency


router = APIRouter(
    prefix="/assessments",
    tags=["assessments"],
    dependencies=[Depends(get_api_key), Depends(agency_dependency)],
)


class AssessmentCreateRequest(BaseModel):
    patient_schedule_id: str
    assessment_type: AssessmentType
    caregiver_id: Optional[str] = None
    patient_id: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)
    visit_date: Optional[date] = None
    time_in: Optional[str] = None
    time_out: Optional[str] = None


class AssessmentSaveRequest(BaseModel):
    patient_id: Optional[str] = None
    data: Optional[Dict[str, Any]] = None
    visit_date: Optional[date] = None
    time_in: Optional[str] = None
    time_out: Optional[str] = None


class QAStatusUpdateRequest(BaseModel):
    # Left empty when no review action was picked; the request is then a no-op.
    status: Optional[QAStatus] = None
    qa_comment: Optional[str] = None


@router.get("/", response_model=List[Assessment])
async def list_assessments(
    caregiver_id: Optional[str] = None,
    patient_schedule_id: Optional[str] = None,
    qa_status: Optional[QAStatus] = None,
    assessment_type: Optional[AssessmentType] = None,
    current_user: User = Depends(get_current_user),
) -> List[Assessment]:
    return assessment_service.list_assessments(
        current_user,
        caregiver_id=caregiver_id,
        patient_schedule_id=patient_schedule_id,
        qa_status=qa_status,
        assessment_type=assessment_type,
    )


@router.post("/", response_model=Assessment, status_code=status.HTTP_201_CREATED)
async def create_assessment(
    payload: AssessmentCreateRequest,
    current_user: User = Depends(get_current_user),
) -> Assessment:
    return assessment_service.create_assessment(current_user, **payload.model_dump())


@router.get("/{assessment_id}", response_model=Assessment)
async def get_assessment(
    assessment_id: UUID,
    current_user: User = Depends(get_current_user),
) -> Assessment:
    return assessment_service.get_assessment(current_user, assessment_id)


@router.put("/{assessment_id}", response_model=Assessment)
async def save_assessment(
    assessment_id: UUID,
    payload: AssessmentSaveRequest,
    current_user: User = Depends(get_current_user),
) -> Assessment:
    return assessment_service.save_assessment(current_user, assessment_id, payload.model_dump(exclude_unset=True))


@router.post("/{assessment_id}/send-to-qa", response_model=Assessment)
async def send_assessment_to_qa(
    assessment_id: UUID,
    payload: Optional[AssessmentSaveRequest] = None,
    current_user: User = Depends(get_current_user),
) -> Assessment:
    """Save any pending edits and hand the assessment to QA.

    Responds 400 with the visit-window problems when the visit date, arrival
    or departure time are missing or unreadable.
    """

    changes = payload.model_dump(exclude_unset=True) if payload is not None else None
    return assessment_service.send_to_qa(current_user, assessment_id, changes)


@router.post("/{assessment_id}/qa-status", response_model=Assessment)
async def update_qa_status(
    assessment_id: UUID,
    payload: QAStatusUpdateRequest,
    current_user: User = Depends(get_current_user),
) -> Assessment:
    return assessment_service.apply_qa_action(
        current_user,
        assessment_id,
        status=payload.status,
        comment=payload.qa_comment,
    )
