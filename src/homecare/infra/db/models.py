from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import JSON, Boolean, Date, DateTime, Integer, String, Text, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from src.homecare.domain.models.assessment import Assessment, AssessmentType, QAStatus
from src.homecare.domain.models.audit_log import AuditLogEntry
from src.homecare.domain.models.credential import (
    AlertSeverity,
    AlertType,
    Credential,
    CredentialAlert,
    CredentialCategory,
    CredentialStatus,
    CredentialType,
)
from src.homecare.domain.models.staff import StaffMember
from src.homecare.domain.models.user import UserRole


class Base(DeclarativeBase):
    pass


class CredentialTypeORM(Base):
    __tablename__ = "credential_types"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    agency_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    category: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    default_validity_months: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    is_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    required_for_roles: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    reminder_days: Mapped[List[int]] = mapped_column(JSON, nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    @classmethod
    def from_domain(cls, credential_type: CredentialType) -> "CredentialTypeORM":
        return cls(
            id=credential_type.id,
            agency_id=credential_type.agency_id,
            name=credential_type.name,
            category=credential_type.category.value,
            description=credential_type.description,
            default_validity_months=credential_type.default_validity_months,
            is_required=credential_type.is_required,
            required_for_roles=list(credential_type.required_for_roles),
            reminder_days=list(credential_type.reminder_days),
            is_active=credential_type.is_active,
        )

    def to_domain(self) -> CredentialType:
        return CredentialType(
            id=self.id,
            agency_id=self.agency_id,
            name=self.name,
            category=CredentialCategory(self.category),
            description=self.description,
            default_validity_months=self.default_validity_months,
            is_required=self.is_required,
            required_for_roles=list(self.required_for_roles or []),
            reminder_days=list(self.reminder_days or []),
            is_active=self.is_active,
        )


class CredentialORM(Base):
    __tablename__ = "credentials"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    agency_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    caregiver_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    credential_type_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, index=True)
    license_number: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    issuing_authority: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    issuing_state: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    issue_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    expiration_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True, index=True)
    status: Mapped[str] = mapped_column(String, nullable=False, index=True)
    # Ordered list of document URLs.
    document_urls: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    verification_url: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    verified_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    verified_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    reminders_sent_days: Mapped[List[int]] = mapped_column(JSON, nullable=False, default=list)
    last_reminder_sent: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    expired_alert_sent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    @classmethod
    def from_domain(cls, credential: Credential) -> "CredentialORM":
        values = credential.model_dump()
        values["status"] = credential.status.value
        return cls(**values)

    def to_domain(self) -> Credential:
        return Credential(
            id=self.id,
            agency_id=self.agency_id,
            caregiver_id=self.caregiver_id,
            credential_type_id=self.credential_type_id,
            license_number=self.license_number,
            issuing_authority=self.issuing_authority,
            issuing_state=self.issuing_state,
            issue_date=self.issue_date,
            expiration_date=self.expiration_date,
            status=CredentialStatus(self.status),
            document_urls=list(self.document_urls or []),
            verification_url=self.verification_url,
            notes=self.notes,
            is_verified=self.is_verified,
            verified_at=self.verified_at,
            verified_by=self.verified_by,
            reminders_sent_days=list(self.reminders_sent_days or []),
            last_reminder_sent=self.last_reminder_sent,
            expired_alert_sent=self.expired_alert_sent,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class CredentialAlertORM(Base):
    __tablename__ = "credential_alerts"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    agency_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    credential_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, index=True)
    alert_type: Mapped[str] = mapped_column(String, nullable=False)
    severity: Mapped[str] = mapped_column(String, nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    is_acknowledged: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    acknowledged_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    acknowledged_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    @classmethod
    def from_domain(cls, alert: CredentialAlert) -> "CredentialAlertORM":
        values = alert.model_dump()
        values["alert_type"] = alert.alert_type.value
        values["severity"] = alert.severity.value
        return cls(**values)

    def to_domain(self) -> CredentialAlert:
        return CredentialAlert(
            id=self.id,
            agency_id=self.agency_id,
            credential_id=self.credential_id,
            alert_type=AlertType(self.alert_type),
            severity=AlertSeverity(self.severity),
            message=self.message,
            created_at=self.created_at,
            is_acknowledged=self.is_acknowledged,
            acknowledged_by=self.acknowledged_by,
            acknowledged_at=self.acknowledged_at,
        )


class AssessmentORM(Base):
    __tablename__ = "assessments"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    agency_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    patient_schedule_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    caregiver_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    patient_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    assessment_type: Mapped[str] = mapped_column(String, nullable=False)
    # Opaque clinical form payload.
    data: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    visit_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    time_in: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)
    time_out: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)
    qa_status: Mapped[str] = mapped_column(String, nullable=False, index=True)
    qa_comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    submitted_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    reviewed_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    @classmethod
    def from_domain(cls, assessment: Assessment) -> "AssessmentORM":
        values = assessment.model_dump()
        values["assessment_type"] = assessment.assessment_type.value
        values["qa_status"] = assessment.qa_status.value
        return cls(**values)

    def to_domain(self) -> Assessment:
        return Assessment(
            id=self.id,
            agency_id=self.agency_id,
            patient_schedule_id=self.patient_schedule_id,
            caregiver_id=self.caregiver_id,
            patient_id=self.patient_id,
            assessment_type=AssessmentType(self.assessment_type),
            data=dict(self.data or {}),
            visit_date=self.visit_date,
            time_in=self.time_in,
            time_out=self.time_out,
            qa_status=QAStatus(self.qa_status),
            qa_comment=self.qa_comment,
            submitted_at=self.submitted_at,
            reviewed_by=self.reviewed_by,
            reviewed_at=self.reviewed_at,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class StaffORM(Base):
    __tablename__ = "staff"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    agency_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    email: Mapped[str] = mapped_column(String, nullable=False, index=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[str] = mapped_column(String, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    profile_data: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    @classmethod
    def from_domain(cls, staff: StaffMember) -> "StaffORM":
        values = staff.model_dump()
        values["role"] = staff.role.value
        return cls(**values)

    def to_domain(self) -> StaffMember:
        return StaffMember(
            id=self.id,
            agency_id=self.agency_id,
            email=self.email,
            first_name=self.first_name,
            last_name=self.last_name,
            role=UserRole(self.role),
            phone=self.phone,
            is_active=self.is_active,
            profile_data=self.profile_data,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class AuditLogORM(Base):
    __tablename__ = "audit_logs"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    agency_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    action: Mapped[str] = mapped_column(String, nullable=False)
    resource_type: Mapped[str] = mapped_column(String, nullable=False)
    resource_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    subject: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    extra: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)

    @classmethod
    def from_domain(cls, entry: AuditLogEntry) -> "AuditLogORM":
        return cls(**entry.model_dump())

    def to_domain(self) -> AuditLogEntry:
        return AuditLogEntry(
            id=self.id,
            agency_id=self.agency_id,
            timestamp=self.timestamp,
            action=self.action,
            resource_type=self.resource_type,
            resource_id=self.resource_id,
            subject=self.subject,
            extra=self.extra,
        )
