from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Iterable, List, Optional
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


class CredentialTypeRepository(ABC):
    @abstractmethod
    def get(self, type_id: UUID) -> Optional[CredentialType]:
        raise NotImplementedError

    @abstractmethod
    def list(self, *, include_inactive: bool = False) -> Iterable[CredentialType]:
        raise NotImplementedError

    @abstractmethod
    def save(self, credential_type: CredentialType) -> None:
        raise NotImplementedError


class CredentialRepository(ABC):
    @abstractmethod
    def get(self, credential_id: UUID) -> Optional[Credential]:
        raise NotImplementedError

    @abstractmethod
    def list_by_filters(
        self,
        *,
        caregiver_id: Optional[str] = None,
        credential_type_id: Optional[UUID] = None,
        status: Optional[CredentialStatus] = None,
        expires_on_or_after: Optional[date] = None,
        expires_on_or_before: Optional[date] = None,
    ) -> Iterable[Credential]:
        """Yield matching credentials ordered by expiration date (undated last)."""
        raise NotImplementedError

    @abstractmethod
    def list_agencies(self) -> List[str]:
        """Return every agency that owns at least one credential.

        This is the only unscoped read; it exists for the daily check, which
        walks agencies one at a time.
        """
        raise NotImplementedError

    @abstractmethod
    def save(self, credential: Credential) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, credential_id: UUID) -> None:
        raise NotImplementedError


class CredentialAlertRepository(ABC):
    @abstractmethod
    def get(self, alert_id: UUID) -> Optional[CredentialAlert]:
        raise NotImplementedError

    @abstractmethod
    def list_by_filters(
        self,
        *,
        credential_id: Optional[UUID] = None,
        alert_type: Optional[AlertType] = None,
        severity: Optional[AlertSeverity] = None,
        unacknowledged_only: bool = False,
        created_after: Optional[datetime] = None,
    ) -> Iterable[CredentialAlert]:
        """Yield matching alerts, newest first."""
        raise NotImplementedError

    @abstractmethod
    def save(self, alert: CredentialAlert) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete_for_credential(self, credential_id: UUID) -> None:
        raise NotImplementedError


class AssessmentRepository(ABC):
    @abstractmethod
    def get(self, assessment_id: UUID) -> Optional[Assessment]:
        raise NotImplementedError

    @abstractmethod
    def list_by_filters(
        self,
        *,
        caregiver_id: Optional[str] = None,
        patient_schedule_id: Optional[str] = None,
        qa_status: Optional[QAStatus] = None,
        assessment_type: Optional[AssessmentType] = None,
    ) -> Iterable[Assessment]:
        raise NotImplementedError

    @abstractmethod
    def save(self, assessment: Assessment) -> None:
        raise NotImplementedError


class StaffRepository(ABC):
    @abstractmethod
    def get(self, staff_id: UUID) -> Optional[StaffMember]:
        raise NotImplementedError

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[StaffMember]:
        raise NotImplementedError

    @abstractmethod
    def list_by_filters(
        self,
        *,
        role: Optional[UserRole] = None,
        include_inactive: bool = False,
    ) -> Iterable[StaffMember]:
        raise NotImplementedError

    @abstractmethod
    def save(self, staff: StaffMember) -> None:
        raise NotImplementedError


class AuditLogRepository(ABC):
    @abstractmethod
    def add(self, entry: AuditLogEntry) -> None:
        raise NotImplementedError

    @abstractmethod
    def list_by_filters(
        self,
        *,
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
        action: Optional[str] = None,
        limit: int = 100,
    ) -> List[AuditLogEntry]:
        """Return matching entries, newest first."""
        raise NotImplementedError
