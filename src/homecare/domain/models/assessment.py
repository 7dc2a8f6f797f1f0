from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class QAStatus(str, Enum):
    # Draft still being edited by the caregiver.
    INUSE = "INUSE"
    # Sent to QA and awaiting review.
    COMPLETED = "COMPLETED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


# Target statuses a reviewer may pick.
QA_REVIEW_STATUSES = frozenset({QAStatus.APPROVED, QAStatus.REJECTED})


class AssessmentType(str, Enum):
    SOC_OASIS = "SOC_OASIS"
    OASIS_FOLLOWUP = "OASIS_FOLLOWUP"
    CERT485 = "CERT485"
    PLAN_OF_CARE = "PLAN_OF_CARE"
    SN_NOTE = "SN_NOTE"
    NURSING = "NURSING"
    PT_EVAL = "PT_EVAL"
    PT_VISIT = "PT_VISIT"
    OT_EVAL = "OT_EVAL"
    OT_VISIT = "OT_VISIT"
    ST_VISIT = "ST_VISIT"
    HHA_VISIT = "HHA_VISIT"
    SERVICE_ORDER = "SERVICE_ORDER"


class Assessment(BaseModel):
    """A clinical assessment or visit note moving through QA review.

    The clinical form itself is kept as an opaque ``data`` payload; only the
    visit window and QA fields are interpreted by the backend.
    """

    id: UUID
    patient_schedule_id: str
    caregiver_id: str
    patient_id: Optional[str] = None
    assessment_type: AssessmentType
    data: Dict[str, Any] = Field(default_factory=dict)

    visit_date: Optional[date] = None
    # Arrival and departure times as "HH:MM" or "HH:MM:SS".
    time_in: Optional[str] = None
    time_out: Optional[str] = None

    qa_status: QAStatus = QAStatus.INUSE
    qa_comment: Optional[str] = None
    submitted_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None

    created_at: datetime
    updated_at: datetime
    agency_id: str
