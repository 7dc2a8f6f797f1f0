from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class CredentialStatus(str, Enum):
    ACTIVE = "ACTIVE"
    EXPIRING_SOON = "EXPIRING_SOON"
    EXPIRED = "EXPIRED"
    PENDING_VERIFICATION = "PENDING_VERIFICATION"
    REVOKED = "REVOKED"


class CredentialCategory(str, Enum):
    LICENSE = "LICENSE"
    CERTIFICATION = "CERTIFICATION"
    HEALTH = "HEALTH"
    TRAINING = "TRAINING"
    COMPLIANCE = "COMPLIANCE"
    OTHER = "OTHER"


class CredentialType(BaseModel):
    """A kind of license or certification an agency tracks for its staff."""

    id: UUID
    name: str
    category: CredentialCategory
    description: Optional[str] = None
    default_validity_months: Optional[int] = None
    is_required: bool = False
    required_for_roles: List[str] = Field(default_factory=list)
    # Days before expiration at which reminders are raised, e.g. [60, 30, 14, 7].
    reminder_days: List[int] = Field(default_factory=list)
    is_active: bool = True
    agency_id: str


class Credential(BaseModel):
    """A license or certification attached to a caregiver.

    ``status`` is maintained server-side from ``expiration_date`` and the
    credential type's reminder thresholds; clients only display it.
    """

    id: UUID
    caregiver_id: str
    credential_type_id: UUID
    license_number: Optional[str] = None
    issuing_authority: Optional[str] = None
    issuing_state: Optional[str] = None
    issue_date: Optional[date] = None
    expiration_date: Optional[date] = None
    status: CredentialStatus = CredentialStatus.PENDING_VERIFICATION
    document_urls: List[str] = Field(default_factory=list)
    verification_url: Optional[str] = None
    notes: Optional[str] = None

    is_verified: bool = False
    verified_at: Optional[datetime] = None
    verified_by: Optional[str] = None

    # Reminder tracking, reset when the credential is renewed.
    reminders_sent_days: List[int] = Field(default_factory=list)
    last_reminder_sent: Optional[datetime] = None
    expired_alert_sent: bool = False

    created_at: datetime
    updated_at: datetime
    agency_id: str


class AlertType(str, Enum):
    EXPIRED = "EXPIRED"
    EXPIRING_7_DAYS = "EXPIRING_7_DAYS"
    EXPIRING_30_DAYS = "EXPIRING_30_DAYS"
    EXPIRING_60_DAYS = "EXPIRING_60_DAYS"
    EXPIRING_SOON = "EXPIRING_SOON"


class AlertSeverity(str, Enum):
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    WARNING = "WARNING"
    INFO = "INFO"


class CredentialAlert(BaseModel):
    id: UUID
    credential_id: UUID
    alert_type: AlertType
    severity: AlertSeverity
    message: str
    created_at: datetime
    is_acknowledged: bool = False
    acknowledged_by: Optional[str] = None
    acknowledged_at: Optional[datetime] = None
    agency_id: str
