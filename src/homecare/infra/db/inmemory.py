from __future__ import annotations

from datetime import date, datetime
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from src.homecare.domain.models.assessment import Assessment, AssessmentType, QAStatus
from src.homecare.domain.models.audit_log import AuditLogEntry
from src.homecare.domain.models.credential import (
    AlertSeverity,
    AlertType,
    Credential,
    CredentialAlert,
    CredentialStatus,
    CredentialType,
)
from src.homecare.domain.models.staff import StaffMember
from src.homecare.domain.models.user import UserRole
from src.homecare.infra.db.repositories import (
    AssessmentRepository,
    AuditLogRepository,
    CredentialAlertRepository,
    CredentialRepository,
    CredentialTypeRepository,
    StaffRepository,
)
from src.homecare.tenancy import get_current_agency


def _expiration_sort_key(credential: Credential):
    # Undated credentials sort after dated ones.
    return (credential.expiration_date is None, credential.expiration_date or date.max)


class InMemoryCredentialTypeRepository(CredentialTypeRepository):
    def __init__(self) -> None:
        self._types: Dict[UUID, CredentialType] = {}

    def get(self, type_id: UUID) -> Optional[CredentialType]:
        credential_type = self._types.get(type_id)
        if credential_type is None or credential_type.agency_id != get_current_agency():
            return None
        return credential_type

    def list(self, *, include_inactive: bool = False) -> Iterable[CredentialType]:
        current_agency = get_current_agency()
        for credential_type in sorted(self._types.values(), key=lambda t: (t.category.value, t.name)):
            if credential_type.agency_id != current_agency:
                continue
            if not include_inactive and not credential_type.is_active:
                continue
            yield credential_type

    def save(self, credential_type: CredentialType) -> None:
        self._types[credential_type.id] = credential_type


class InMemoryCredentialRepository(CredentialRepository):
    def __init__(self) -> None:
        self._credentials: Dict[UUID, Credential] = {}

    def get(self, credential_id: UUID) -> Optional[Credential]:
        credential = self._credentials.get(credential_id)
        if credential is None or credential.agency_id != get_current_agency():
            return None
        return credential

    def list_by_filters(
        self,
        *,
        caregiver_id: Optional[str] = None,
        credential_type_id: Optional[UUID] = None,
        status: Optional[CredentialStatus] = None,
        expires_on_or_after: Optional[date] = None,
        expires_on_or_before: Optional[date] = None,
    ) -> Iterable[Credential]:
        current_agency = get_current_agency()
        for credential in sorted(self._credentials.values(), key=_expiration_sort_key):
            if credential.agency_id != current_agency:
                continue
            if caregiver_id is not None and credential.caregiver_id != caregiver_id:
                continue
            if credential_type_id is not None and credential.credential_type_id != credential_type_id:
                continue
            if status is not None and credential.status != status:
                continue
            if expires_on_or_after is not None or expires_on_or_before is not None:
                if credential.expiration_date is None:
                    continue
                if expires_on_or_after is not None and credential.expiration_date < expires_on_or_after:
                    continue
                if expires_on_or_before is not None and credential.expiration_date > expires_on_or_before:
                    continue
            yield credential

    def list_agencies(self) -> List[str]:
        return sorted({credential.agency_id for credential in self._credentials.values()})

    def save(self, credential: Credential) -> None:
        self._credentials[credential.id] = credential

    def delete(self, credential_id: UUID) -> None:
        credential = self.get(credential_id)
        if credential is not None:
            del self._credentials[credential_id]


class InMemoryCredentialAlertRepository(CredentialAlertRepository):
    def __init__(self) -> None:
        self._alerts: Dict[UUID, CredentialAlert] = {}

    def get(self, alert_id: UUID) -> Optional[CredentialAlert]:
        alert = self._alerts.get(alert_id)
        if alert is None or alert.agency_id != get_current_agency():
            return None
        return alert

    def list_by_filters(
        self,
        *,
        credential_id: Optional[UUID] = None,
        alert_type: Optional[AlertType] = None,
        severity: Optional[AlertSeverity] = None,
        unacknowledged_only: bool = False,
        created_after: Optional[datetime] = None,
    ) -> Iterable[CredentialAlert]:
        current_agency = get_current_agency()
        for alert in sorted(self._alerts.values(), key=lambda a: a.created_at, reverse=True):
            if alert.agency_id != current_agency:
                continue
            if credential_id is not None and alert.credential_id != credential_id:
                continue
            if alert_type is not None and alert.alert_type != alert_type:
                continue
            if severity is not None and alert.severity != severity:
                continue
            if unacknowledged_only and alert.is_acknowledged:
                continue
            if created_after is not None and alert.created_at < created_after:
                continue
            yield alert

    def save(self, alert: CredentialAlert) -> None:
        self._alerts[alert.id] = alert

    def delete_for_credential(self, credential_id: UUID) -> None:
        for alert in list(self.list_by_filters(credential_id=credential_id)):
            del self._alerts[alert.id]


class InMemoryAssessmentRepository(AssessmentRepository):
    def __init__(self) -> None:
        self._assessments: Dict[UUID, Assessment] = {}

    def get(self, assessment_id: UUID) -> Optional[Assessment]:
        assessment = self._assessments.get(assessment_id)
        if assessment is None or assessment.agency_id != get_current_agency():
            return None
        return assessment

    def list_by_filters(
        self,
        *,
        caregiver_id: Optional[str] = None,
        patient_schedule_id: Optional[str] = None,
        qa_status: Optional[QAStatus] = None,
        assessment_type: Optional[AssessmentType] = None,
    ) -> Iterable[Assessment]:
        current_agency = get_current_agency()
        for assessment in sorted(self._assessments.values(), key=lambda a: a.created_at):
            if assessment.agency_id != current_agency:
                continue
            if caregiver_id is not None and assessment.caregiver_id != caregiver_id:
                continue
            if patient_schedule_id is not None and assessment.patient_schedule_id != patient_schedule_id:
                continue
            if qa_status is not None and assessment.qa_status != qa_status:
                continue
            if assessment_type is not None and assessment.assessment_type != assessment_type:
                continue
            yield assessment

    def save(self, assessment: Assessment) -> None:
        self._assessments[assessment.id] = assessment


class InMemoryStaffRepository(StaffRepository):
    def __init__(self) -> None:
        self._staff: Dict[UUID, StaffMember] = {}

    def get(self, staff_id: UUID) -> Optional[StaffMember]:
        staff = self._staff.get(staff_id)
        if staff is None or staff.agency_id != get_current_agency():
            return None
        return staff

    def get_by_email(self, email: str) -> Optional[StaffMember]:
        wanted = email.lower()
        current_agency = get_current_agency()
        for staff in self._staff.values():
            if staff.agency_id == current_agency and staff.email.lower() == wanted:
                return staff
        return None

    def list_by_filters(
        self,
        *,
        role: Optional[UserRole] = None,
        include_inactive: bool = False,
    ) -> Iterable[StaffMember]:
        current_agency = get_current_agency()
        for staff in sorted(self._staff.values(), key=lambda s: (s.last_name.lower(), s.first_name.lower())):
            if staff.agency_id != current_agency:
                continue
            if role is not None and staff.role != role:
                continue
            if not include_inactive and not staff.is_active:
                continue
            yield staff

    def save(self, staff: StaffMember) -> None:
        self._staff[staff.id] = staff


class InMemoryAuditLogRepository(AuditLogRepository):
    def __init__(self) -> None:
        self._entries: List[AuditLogEntry] = []

    def add(self, entry: AuditLogEntry) -> None:
        self._entries.append(entry)

    def list_by_filters(
        self,
        *,
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
        action: Optional[str] = None,
        limit: int = 100,
    ) -> List[AuditLogEntry]:
        current_agency = get_current_agency()
        results: List[AuditLogEntry] = []
        for entry in reversed(self._entries):
            if entry.agency_id != current_agency:
                continue
            if resource_type is not None and entry.resource_type != resource_type:
                continue
            if resource_id is not None and entry.resource_id != resource_id:
                continue
            if action is not None and entry.action != action:
                continue
            results.append(entry)
            if len(results) >= limit:
                break
        return results


# Module-level singletons. Services look these up through the module at call
# time so that bootstrap can swap in SQL-backed implementations.
credential_type_repository: CredentialTypeRepository = InMemoryCredentialTypeRepository()
credential_repository: CredentialRepository = InMemoryCredentialRepository()
credential_alert_repository: CredentialAlertRepository = InMemoryCredentialAlertRepository()
assessment_repository: AssessmentRepository = InMemoryAssessmentRepository()
staff_repository: StaffRepository = InMemoryStaffRepository()
audit_log_repository: AuditLogRepository = InMemoryAuditLogRepository()
