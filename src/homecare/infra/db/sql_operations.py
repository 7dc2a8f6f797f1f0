from __future__ import annotations

from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import func, select

from src.homecare.domain.models.assessment import Assessment, AssessmentType, QAStatus
from src.homecare.domain.models.audit_log import AuditLogEntry
from src.homecare.domain.models.staff import StaffMember
from src.homecare.domain.models.user import UserRole
from src.homecare.infra.db.models import AssessmentORM, AuditLogORM, StaffORM
from src.homecare.infra.db.repositories import AssessmentRepository, AuditLogRepository, StaffRepository
from src.homecare.infra.db.session import SessionFactory
from src.homecare.tenancy import get_current_agency


class SqlAssessmentRepository(AssessmentRepository):
    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    def get(self, assessment_id: UUID) -> Optional[Assessment]:
        session = self._session_factory()
        try:
            orm = session.get(AssessmentORM, assessment_id)
            if orm is None or orm.agency_id != get_current_agency():
                return None
            return orm.to_domain()
        finally:
            session.close()

    def list_by_filters(
        self,
        *,
        caregiver_id: Optional[str] = None,
        patient_schedule_id: Optional[str] = None,
        qa_status: Optional[QAStatus] = None,
        assessment_type: Optional[AssessmentType] = None,
    ) -> Iterable[Assessment]:
        session = self._session_factory()
        try:
            query = select(AssessmentORM).where(AssessmentORM.agency_id == get_current_agency())
            if caregiver_id is not None:
                query = query.where(AssessmentORM.caregiver_id == caregiver_id)
            if patient_schedule_id is not None:
                query = query.where(AssessmentORM.patient_schedule_id == patient_schedule_id)
            if qa_status is not None:
                query = query.where(AssessmentORM.qa_status == qa_status.value)
            if assessment_type is not None:
                query = query.where(AssessmentORM.assessment_type == assessment_type.value)
            query = query.order_by(AssessmentORM.created_at)
            return [orm.to_domain() for orm in session.scalars(query)]
        finally:
            session.close()

    def save(self, assessment: Assessment) -> None:
        session = self._session_factory()
        try:
            session.merge(AssessmentORM.from_domain(assessment))
            session.commit()
        finally:
            session.close()


class SqlStaffRepository(StaffRepository):
    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    def get(self, staff_id: UUID) -> Optional[StaffMember]:
        session = self._session_factory()
        try:
            orm = session.get(StaffORM, staff_id)
            if orm is None or orm.agency_id != get_current_agency():
                return None
            return orm.to_domain()
        finally:
            session.close()

    def get_by_email(self, email: str) -> Optional[StaffMember]:
        session = self._session_factory()
        try:
            query = select(StaffORM).where(
                StaffORM.agency_id == get_current_agency(),
                func.lower(StaffORM.email) == email.lower(),
            )
            orm = session.scalars(query).first()
            return orm.to_domain() if orm is not None else None
        finally:
            session.close()

    def list_by_filters(
        self,
        *,
        role: Optional[UserRole] = None,
        include_inactive: bool = False,
    ) -> Iterable[StaffMember]:
        session = self._session_factory()
        try:
            query = select(StaffORM).where(StaffORM.agency_id == get_current_agency())
            if role is not None:
                query = query.where(StaffORM.role == role.value)
            if not include_inactive:
                query = query.where(StaffORM.is_active.is_(True))
            query = query.order_by(func.lower(StaffORM.last_name), func.lower(StaffORM.first_name))
            return [orm.to_domain() for orm in session.scalars(query)]
        finally:
            session.close()

    def save(self, staff: StaffMember) -> None:
        session = self._session_factory()
        try:
            session.merge(StaffORM.from_domain(staff))
            session.commit()
        finally:
            session.close()


class SqlAuditLogRepository(AuditLogRepository):
    """Append-only audit trail table."""

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    def add(self, entry: AuditLogEntry) -> None:
        session = self._session_factory()
        try:
            session.add(AuditLogORM.from_domain(entry))
            session.commit()
        finally:
            session.close()

    def list_by_filters(
        self,
        *,
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
        action: Optional[str] = None,
        limit: int = 100,
    ) -> List[AuditLogEntry]:
        session = self._session_factory()
        try:
            query = select(AuditLogORM).where(AuditLogORM.agency_id == get_current_agency())
            if resource_type is not None:
                query = query.where(AuditLogORM.resource_type == resource_type)
            if resource_id is not None:
                query = query.where(AuditLogORM.resource_id == resource_id)
            if action is not None:
                query = query.where(AuditLogORM.action == action)
            query = query.order_by(AuditLogORM.timestamp.desc()).limit(limit)
            return [orm.to_domain() for orm in session.scalars(query)]
        finally:
            session.close()
