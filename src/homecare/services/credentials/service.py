from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel

from src.homecare.domain.errors import NotFoundError, ValidationFailedError
from src.homecare.domain.models.credential import (
    AlertSeverity,
    AlertType,
    Credential,
    CredentialAlert,
    CredentialCategory,
    CredentialStatus,
    CredentialType,
)
from src.homecare.domain.models.user import User, UserRole
from src.homecare.domain.updates import apply_updates
from src.homecare.infra.db import inmemory as repos
from src.homecare.security import ensure_can_access_caregiver, ensure_is_manager
from src.homecare.services.audit.service import audit_service
from src.homecare.services.credentials import lifecycle
from src.homecare.services.credentials.defaults import DEFAULT_CREDENTIAL_TYPES
from src.homecare.services.staff.service import staff_service
from src.homecare.tenancy import get_current_agency, set_current_agency

logger = logging.getLogger(__name__)

_CREDENTIAL_FIELDS = (
    "license_number",
    "issuing_authority",
    "issuing_state",
    "issue_date",
    "expiration_date",
    "document_urls",
    "verification_url",
    "notes",
)

_TYPE_FIELDS = (
    "name",
    "category",
    "description",
    "default_validity_months",
    "is_required",
    "required_for_roles",
    "reminder_days",
    "is_active",
)

# Duplicate suppression windows for the daily check.
_REMINDER_DEDUP_WINDOW = timedelta(hours=24)
_EXPIRED_DEDUP_WINDOW = timedelta(days=7)


class CredentialSummary(BaseModel):
    total: int = 0
    active: int = 0
    expiring_soon: int = 0
    expired: int = 0
    pending_verification: int = 0
    revoked: int = 0

    @classmethod
    def from_credentials(cls, credentials: List[Credential]) -> "CredentialSummary":
        counts = {status: 0 for status in CredentialStatus}
        for credential in credentials:
            counts[credential.status] += 1
        return cls(
            total=len(credentials),
            active=counts[CredentialStatus.ACTIVE],
            expiring_soon=counts[CredentialStatus.EXPIRING_SOON],
            expired=counts[CredentialStatus.EXPIRED],
            pending_verification=counts[CredentialStatus.PENDING_VERIFICATION],
            revoked=counts[CredentialStatus.REVOKED],
        )


@dataclass
class CredentialCheckResult:
    credentials_checked: int = 0
    status_updated: int = 0
    alerts_created: int = 0
    errors: List[str] = field(default_factory=list)


class CredentialService:
    """Credential types, caregiver credentials and their expiration alerts."""

    # Credential types

    def _ensure_seeded(self) -> None:
        """Give an agency the standard catalogue the first time it is used."""

        if any(True for _ in repos.credential_type_repository.list(include_inactive=True)):
            return
        agency_id = get_current_agency()
        for seed in DEFAULT_CREDENTIAL_TYPES:
            repos.credential_type_repository.save(
                CredentialType(
                    id=uuid4(),
                    name=seed.name,
                    category=seed.category,
                    description=seed.description,
                    default_validity_months=seed.default_validity_months,
                    is_required=seed.is_required,
                    required_for_roles=list(seed.required_for_roles),
                    reminder_days=list(seed.reminder_days),
                    agency_id=agency_id,
                )
            )
        logger.info("Seeded %d default credential types for agency %s", len(DEFAULT_CREDENTIAL_TYPES), agency_id)

    def list_types(self, *, include_inactive: bool = False) -> List[CredentialType]:
        self._ensure_seeded()
        return list(repos.credential_type_repository.list(include_inactive=include_inactive))

    def get_type(self, type_id: UUID) -> CredentialType:
        self._ensure_seeded()
        credential_type = repos.credential_type_repository.get(type_id)
        if credential_type is None:
            raise NotFoundError("Credential type not found")
        return credential_type

    def find_type(self, type_id: UUID) -> Optional[CredentialType]:
        return repos.credential_type_repository.get(type_id)

    def create_type(
        self,
        current_user: User,
        *,
        name: str,
        category: CredentialCategory,
        description: Optional[str] = None,
        default_validity_months: Optional[int] = None,
        is_required: bool = False,
        required_for_roles: Optional[List[str]] = None,
        reminder_days: Optional[List[int]] = None,
    ) -> CredentialType:
        ensure_is_manager(current_user, "manage credential types")
        self._ensure_seeded()
        _validate_reminder_days(reminder_days or [])

        credential_type = CredentialType(
            id=uuid4(),
            name=name,
            category=category,
            description=description,
            default_validity_months=default_validity_months,
            is_required=is_required,
            required_for_roles=required_for_roles or [],
            reminder_days=sorted(set(reminder_days or []), reverse=True),
            agency_id=get_current_agency(),
        )
        repos.credential_type_repository.save(credential_type)
        return credential_type

    def update_type(self, current_user: User, type_id: UUID, changes: Dict[str, Any]) -> CredentialType:
        ensure_is_manager(current_user, "manage credential types")
        credential_type = self.get_type(type_id)
        updates = {key: value for key, value in changes.items() if key in _TYPE_FIELDS}
        if updates.get("reminder_days") is not None:
            _validate_reminder_days(updates["reminder_days"])
            updates["reminder_days"] = sorted(set(updates["reminder_days"]), reverse=True)
        updated = apply_updates(credential_type, updates)
        repos.credential_type_repository.save(updated)
        return updated

    def deactivate_type(self, current_user: User, type_id: UUID) -> CredentialType:
        """Types are deactivated, not deleted; existing credentials keep pointing at them."""

        return self.update_type(current_user, type_id, {"is_active": False})

    # Credentials

    def list_credentials(
        self,
        current_user: User,
        *,
        caregiver_id: Optional[str] = None,
        credential_type_id: Optional[UUID] = None,
        status: Optional[CredentialStatus] = None,
        expiring_within_days: Optional[int] = None,
        today: Optional[date] = None,
    ) -> tuple[List[Credential], CredentialSummary]:
        if not current_user.is_manager:
            if current_user.role != UserRole.CARER:
                ensure_is_manager(current_user, "view credentials")
            # Carers only ever see their own credentials.
            caregiver_id = str(current_user.id)

        expires_on_or_after: Optional[date] = None
        expires_on_or_before: Optional[date] = None
        if expiring_within_days is not None:
            today = today or date.today()
            expires_on_or_after = today
            expires_on_or_before = today + timedelta(days=expiring_within_days)

        credentials = list(
            repos.credential_repository.list_by_filters(
                caregiver_id=caregiver_id,
                credential_type_id=credential_type_id,
                status=status,
                expires_on_or_after=expires_on_or_after,
                expires_on_or_before=expires_on_or_before,
            )
        )
        return credentials, CredentialSummary.from_credentials(credentials)

    def get_credential(self, current_user: User, credential_id: UUID) -> Credential:
        credential = repos.credential_repository.get(credential_id)
        if credential is None:
            raise NotFoundError("Credential not found")
        ensure_can_access_caregiver(current_user, credential.caregiver_id)
        return credential

    def recent_alerts(self, credential_id: UUID, limit: int = 10) -> List[CredentialAlert]:
        alerts = repos.credential_alert_repository.list_by_filters(credential_id=credential_id)
        return [alert for _, alert in zip(range(limit), alerts)]

    def create_credential(
        self,
        current_user: User,
        *,
        caregiver_id: str,
        credential_type_id: UUID,
        today: Optional[date] = None,
        **fields: Any,
    ) -> Credential:
        """Attach a new credential to a caregiver.

        The status is derived from the expiration date whoever enters the
        credential. Carer entries stay unverified until a manager verifies them.
        """

        ensure_can_access_caregiver(current_user, caregiver_id)
        if current_user.is_manager and staff_service.find_staff(caregiver_id) is None:
            raise NotFoundError("Staff member not found")

        credential_type = repos.credential_type_repository.get(credential_type_id)
        if credential_type is None or not credential_type.is_active:
            raise NotFoundError("Credential type not found or inactive")

        values = {key: value for key, value in fields.items() if key in _CREDENTIAL_FIELDS and value is not None}
        _validate_dates(values.get("issue_date"), values.get("expiration_date"))

        today = today or date.today()
        status = lifecycle.calculate_status(values.get("expiration_date"), credential_type.reminder_days, today)

        now = datetime.utcnow()
        credential = Credential(
            id=uuid4(),
            caregiver_id=caregiver_id,
            credential_type_id=credential_type_id,
            status=status,
            created_at=now,
            updated_at=now,
            agency_id=get_current_agency(),
            **values,
        )
        repos.credential_repository.save(credential)

        audit_service.log_event(
            action="create_credential",
            resource_type="credential",
            resource_id=str(credential.id),
            extra={"user_id": str(current_user.id), "status": credential.status.value},
        )
        return credential

    def update_credential(
        self,
        current_user: User,
        credential_id: UUID,
        changes: Dict[str, Any],
        *,
        today: Optional[date] = None,
    ) -> Credential:
        existing = self.get_credential(current_user, credential_id)
        credential_type = repos.credential_type_repository.get(existing.credential_type_id)
        reminder_days = credential_type.reminder_days if credential_type is not None else []
        today = today or date.today()

        updates: Dict[str, Any] = {key: value for key, value in changes.items() if key in _CREDENTIAL_FIELDS}
        _validate_dates(
            updates.get("issue_date", existing.issue_date),
            updates.get("expiration_date", existing.expiration_date),
        )

        # Verification is a manager decision; carers' attempts are ignored.
        is_verified = changes.get("is_verified")
        if is_verified is not None and current_user.is_manager:
            updates["is_verified"] = is_verified
            updates["verified_at"] = datetime.utcnow() if is_verified else None
            updates["verified_by"] = str(current_user.id) if is_verified else None

        new_expiration = updates.get("expiration_date", existing.expiration_date)
        expiration_changed = "expiration_date" in updates and new_expiration != existing.expiration_date
        newly_verified = updates.get("is_verified") is True and existing.status == CredentialStatus.PENDING_VERIFICATION

        if existing.status not in lifecycle.MANUAL_STATUSES:
            if newly_verified or expiration_changed:
                updates["status"] = lifecycle.calculate_status(new_expiration, reminder_days, today)

        if expiration_changed and lifecycle.is_renewal(existing.expiration_date, new_expiration):
            updates["reminders_sent_days"] = []
            updates["expired_alert_sent"] = False
            updates["last_reminder_sent"] = None

        updates["updated_at"] = datetime.utcnow()
        credential = apply_updates(existing, updates)
        repos.credential_repository.save(credential)

        audit_service.log_event(
            action="update_credential",
            resource_type="credential",
            resource_id=str(credential_id),
            extra={
                "user_id": str(current_user.id),
                "fields": sorted(key for key in updates if key != "updated_at"),
                "status": credential.status.value,
            },
        )
        return credential

    def revoke_credential(self, current_user: User, credential_id: UUID, reason: Optional[str] = None) -> Credential:
        ensure_is_manager(current_user, "revoke credentials")
        existing = self.get_credential(current_user, credential_id)
        notes = existing.notes
        if reason:
            notes = f"{notes}\n{reason}" if notes else reason
        credential = existing.model_copy(
            update={"status": CredentialStatus.REVOKED, "notes": notes, "updated_at": datetime.utcnow()}
        )
        repos.credential_repository.save(credential)

        audit_service.log_event(
            action="revoke_credential",
            resource_type="credential",
            resource_id=str(credential_id),
            extra={"user_id": str(current_user.id)},
        )
        return credential

    def delete_credential(self, current_user: User, credential_id: UUID) -> None:
        ensure_is_manager(current_user, "delete credentials")
        self.get_credential(current_user, credential_id)
        repos.credential_alert_repository.delete_for_credential(credential_id)
        repos.credential_repository.delete(credential_id)

        audit_service.log_event(
            action="delete_credential",
            resource_type="credential",
            resource_id=str(credential_id),
            extra={"user_id": str(current_user.id)},
        )

    # Alerts

    def list_alerts(
        self,
        current_user: User,
        *,
        unacknowledged_only: bool = False,
        severity: Optional[AlertSeverity] = None,
    ) -> List[CredentialAlert]:
        ensure_is_manager(current_user, "view credential alerts")
        return list(
            repos.credential_alert_repository.list_by_filters(
                unacknowledged_only=unacknowledged_only,
                severity=severity,
            )
        )

    def acknowledge_alert(self, current_user: User, alert_id: UUID) -> CredentialAlert:
        ensure_is_manager(current_user, "acknowledge credential alerts")
        alert = repos.credential_alert_repository.get(alert_id)
        if alert is None:
            raise NotFoundError("Alert not found")
        if alert.is_acknowledged:
            return alert

        acknowledged = alert.model_copy(
            update={
                "is_acknowledged": True,
                "acknowledged_by": str(current_user.id),
                "acknowledged_at": datetime.utcnow(),
            }
        )
        repos.credential_alert_repository.save(acknowledged)
        return acknowledged

    # Daily check

    def run_credential_check(
        self,
        *,
        today: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> CredentialCheckResult:
        """Reconcile statuses and raise expiration alerts for every agency.

        Failures are collected per credential so one bad record does not stop
        the run.
        """

        today = today or date.today()
        now = now or datetime.utcnow()
        result = CredentialCheckResult()

        previous_agency = get_current_agency()
        try:
            for agency_id in repos.credential_repository.list_agencies():
                set_current_agency(agency_id)
                for credential in list(repos.credential_repository.list_by_filters()):
                    result.credentials_checked += 1
                    try:
                        self._check_credential(credential, today=today, now=now, result=result)
                    except Exception as exc:
                        logger.exception("Credential check failed for %s", credential.id)
                        result.errors.append(f"Agency {agency_id}, credential {credential.id}: {exc}")
        finally:
            set_current_agency(previous_agency)

        logger.info(
            "Credential check: %d checked, %d status updates, %d alerts, %d errors",
            result.credentials_checked,
            result.status_updated,
            result.alerts_created,
            len(result.errors),
        )
        return result

    def _check_credential(
        self,
        credential: Credential,
        *,
        today: date,
        now: datetime,
        result: CredentialCheckResult,
    ) -> None:
        if credential.status == CredentialStatus.REVOKED or credential.expiration_date is None:
            return

        credential_type = repos.credential_type_repository.get(credential.credential_type_id)
        if credential_type is None:
            raise NotFoundError("Credential type not found")

        updates: Dict[str, Any] = {}
        expected = lifecycle.calculate_status(credential.expiration_date, credential_type.reminder_days, today)
        if credential.status not in lifecycle.MANUAL_STATUSES and credential.status != expected:
            updates["status"] = expected
            result.status_updated += 1

        days = lifecycle.days_until_expiration(credential.expiration_date, today)
        caregiver = staff_service.find_staff(credential.caregiver_id)
        caregiver_name = caregiver.full_name if caregiver is not None else credential.caregiver_id

        sent = list(credential.reminders_sent_days)
        for reminder_day in lifecycle.reminders_due(days, credential_type.reminder_days, sent):
            alert_type = lifecycle.alert_type_for_days(days)
            if self._has_recent_alert(credential.id, alert_type, now - _REMINDER_DEDUP_WINDOW):
                sent.append(reminder_day)
                continue
            self._raise_alert(
                credential,
                alert_type=alert_type,
                severity=lifecycle.severity_for_days(days),
                message=lifecycle.alert_message(days, credential_type.name, caregiver_name),
                now=now,
                extra={
                    "days_until_expiration": days,
                    "notification_event": lifecycle.notification_event_for_days(days),
                },
            )
            result.alerts_created += 1
            sent.append(reminder_day)
            updates["last_reminder_sent"] = now

        if sent != credential.reminders_sent_days:
            updates["reminders_sent_days"] = sent

        if days < 0 and not credential.expired_alert_sent:
            if not self._has_recent_alert(credential.id, AlertType.EXPIRED, now - _EXPIRED_DEDUP_WINDOW):
                self._raise_alert(
                    credential,
                    alert_type=AlertType.EXPIRED,
                    severity=AlertSeverity.CRITICAL,
                    message=lifecycle.alert_message(days, credential_type.name, caregiver_name),
                    now=now,
                    extra={"notification_event": "CREDENTIAL_EXPIRED"},
                )
                result.alerts_created += 1
            updates["expired_alert_sent"] = True

        if updates:
            updates["updated_at"] = now
            repos.credential_repository.save(credential.model_copy(update=updates))

    def _has_recent_alert(self, credential_id: UUID, alert_type: AlertType, since: datetime) -> bool:
        recent = repos.credential_alert_repository.list_by_filters(
            credential_id=credential_id,
            alert_type=alert_type,
            created_after=since,
        )
        return any(True for _ in recent)

    def _raise_alert(
        self,
        credential: Credential,
        *,
        alert_type: AlertType,
        severity: AlertSeverity,
        message: str,
        now: datetime,
        extra: Dict[str, Any],
    ) -> CredentialAlert:
        alert = CredentialAlert(
            id=uuid4(),
            credential_id=credential.id,
            alert_type=alert_type,
            severity=severity,
            message=message,
            created_at=now,
            agency_id=credential.agency_id,
        )
        repos.credential_alert_repository.save(alert)

        audit_service.log_event(
            action=f"CREDENTIAL_{alert_type.value}",
            resource_type="credential",
            resource_id=str(credential.id),
            subject="system:credential-check",
            extra={"caregiver_id": credential.caregiver_id, "severity": severity.value, **extra},
        )
        return alert


def _validate_dates(issue_date: Optional[date], expiration_date: Optional[date]) -> None:
    if issue_date is not None and expiration_date is not None and expiration_date < issue_date:
        raise ValidationFailedError("Expiration date cannot be before the issue date")


def _validate_reminder_days(reminder_days: List[int]) -> None:
    if any(day < 0 for day in reminder_days):
        raise ValidationFailedError("Reminder days must be zero or positive")


credential_service = CredentialService()
