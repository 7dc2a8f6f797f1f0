from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID, uuid4

from src.homecare.domain.errors import ConflictError, NotFoundError, ValidationFailedError
from src.homecare.domain.models.assessment import QA_REVIEW_STATUSES, Assessment, AssessmentType, QAStatus
from src.homecare.domain.models.user import User, UserRole
from src.homecare.domain.updates import apply_updates
from src.homecare.infra.db import inmemory as repos
from src.homecare.security import ensure_can_access_caregiver, ensure_is_qa_reviewer
from src.homecare.services.assessments.visit_window import validate_visit_date
from src.homecare.services.audit.service import audit_service
from src.homecare.tenancy import get_current_agency

logger = logging.getLogger(__name__)

# Records in these states are with QA or signed off and cannot be edited.
_LOCKED_STATUSES = frozenset({QAStatus.COMPLETED, QAStatus.APPROVED})

_EDITABLE_FIELDS = ("patient_id", "data", "visit_date", "time_in", "time_out")


class AssessmentService:
    """Saving clinical assessments and moving them through QA review.

    draft (INUSE) -> sent to QA (COMPLETED) -> APPROVED | REJECTED.
    A rejected record may be edited and sent again.
    """

    def get_assessment(self, current_user: User, assessment_id: UUID) -> Assessment:
        assessment = repos.assessment_repository.get(assessment_id)
        if assessment is None:
            raise NotFoundError("Assessment not found")
        if current_user.role not in {UserRole.ADMIN, UserRole.QA_REVIEWER}:
            ensure_can_access_caregiver(current_user, assessment.caregiver_id)
        return assessment

    def list_assessments(
        self,
        current_user: User,
        *,
        caregiver_id: Optional[str] = None,
        patient_schedule_id: Optional[str] = None,
        qa_status: Optional[QAStatus] = None,
        assessment_type: Optional[AssessmentType] = None,
    ) -> List[Assessment]:
        if current_user.role == UserRole.CARER:
            caregiver_id = str(current_user.id)
        return list(
            repos.assessment_repository.list_by_filters(
                caregiver_id=caregiver_id,
                patient_schedule_id=patient_schedule_id,
                qa_status=qa_status,
                assessment_type=assessment_type,
            )
        )

    def create_assessment(
        self,
        current_user: User,
        *,
        patient_schedule_id: str,
        assessment_type: AssessmentType,
        caregiver_id: Optional[str] = None,
        **fields: Any,
    ) -> Assessment:
        caregiver_id = caregiver_id or str(current_user.id)
        ensure_can_access_caregiver(current_user, caregiver_id)

        now = datetime.utcnow()
        values = {key: value for key, value in fields.items() if key in _EDITABLE_FIELDS and value is not None}
        assessment = Assessment(
            id=uuid4(),
            patient_schedule_id=patient_schedule_id,
            caregiver_id=caregiver_id,
            assessment_type=assessment_type,
            created_at=now,
            updated_at=now,
            agency_id=get_current_agency(),
            **values,
        )
        repos.assessment_repository.save(assessment)

        audit_service.log_event(
            action="create_assessment",
            resource_type="assessment",
            resource_id=str(assessment.id),
            extra={"user_id": str(current_user.id), "assessment_type": assessment_type.value},
        )
        return assessment

    def save_assessment(self, current_user: User, assessment_id: UUID, changes: Dict[str, Any]) -> Assessment:
        existing = self.get_assessment(current_user, assessment_id)
        ensure_can_access_caregiver(current_user, existing.caregiver_id)
        if existing.qa_status in _LOCKED_STATUSES:
            raise ConflictError(f"Assessment is {existing.qa_status.value} and can no longer be edited")

        updates = {key: value for key, value in changes.items() if key in _EDITABLE_FIELDS}
        updates["updated_at"] = datetime.utcnow()
        assessment = apply_updates(existing, updates)
        repos.assessment_repository.save(assessment)

        audit_service.log_event(
            action="save_assessment",
            resource_type="assessment",
            resource_id=str(assessment_id),
            extra={"user_id": str(current_user.id)},
        )
        return assessment

    def send_to_qa(
        self,
        current_user: User,
        assessment_id: UUID,
        changes: Optional[Dict[str, Any]] = None,
    ) -> Assessment:
        """Submit a draft (or a rejected record) for QA review.

        The visit window is validated against the record as it would be after
        applying ``changes``; if it fails nothing is persisted.
        """

        existing = self.get_assessment(current_user, assessment_id)
        ensure_can_access_caregiver(current_user, existing.caregiver_id)
        if existing.qa_status in _LOCKED_STATUSES:
            raise ConflictError(f"Assessment is already {existing.qa_status.value}")

        updates = {key: value for key, value in (changes or {}).items() if key in _EDITABLE_FIELDS}
        candidate = apply_updates(existing, updates)

        problems = validate_visit_date(candidate.visit_date, candidate.time_in, candidate.time_out)
        if problems:
            logger.info("Send to QA rejected for assessment %s: %s", assessment_id, "; ".join(problems))
            raise ValidationFailedError(problems[0], problems)

        now = datetime.utcnow()
        assessment = candidate.model_copy(
            update={"qa_status": QAStatus.COMPLETED, "submitted_at": now, "updated_at": now}
        )
        repos.assessment_repository.save(assessment)

        audit_service.log_event(
            action="send_to_qa",
            resource_type="assessment",
            resource_id=str(assessment_id),
            extra={"user_id": str(current_user.id)},
        )
        return assessment

    def apply_qa_action(
        self,
        current_user: User,
        assessment_id: UUID,
        *,
        status: Optional[QAStatus],
        comment: Optional[str] = None,
    ) -> Assessment:
        """Approve or reject a submitted assessment.

        Without a target status there is nothing to apply and the record is
        returned unchanged.
        """

        ensure_is_qa_reviewer(current_user)
        existing = self.get_assessment(current_user, assessment_id)
        if status is None:
            return existing
        if status not in QA_REVIEW_STATUSES:
            raise ValidationFailedError("QA status must be APPROVED or REJECTED")
        if existing.qa_status == QAStatus.INUSE:
            raise ConflictError("Assessment has not been sent to QA")

        now = datetime.utcnow()
        assessment = existing.model_copy(
            update={
                "qa_status": status,
                "qa_comment": comment,
                "reviewed_by": str(current_user.id),
                "reviewed_at": now,
                "updated_at": now,
            }
        )
        repos.assessment_repository.save(assessment)

        audit_service.log_event(
            action="update_qa_status",
            resource_type="assessment",
            resource_id=str(assessment_id),
            extra={"user_id": str(current_user.id), "status": status.value, "has_comment": bool(comment)},
        )
        return assessment


assessment_service = AssessmentService()
