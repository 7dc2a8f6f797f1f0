"""Expiration-driven rules for credentials.

All functions are pure and take ``today`` explicitly so the daily check and
the API share one notion of "now".
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional, Sequence

from src.homecare.config import settings
from src.homecare.domain.models.credential import AlertSeverity, AlertType, CredentialStatus

# Revocation is a manager decision; the daily check never overwrites it.
MANUAL_STATUSES = frozenset({CredentialStatus.REVOKED})

# A reminder is raised at most this many days after its threshold is crossed.
REMINDER_WINDOW_DAYS = 7


def days_until_expiration(expiration_date: date, today: date) -> int:
    return (expiration_date - today).days


def _threshold(reminder_days: Sequence[int]) -> int:
    values = list(reminder_days) or settings.credential_default_reminder_days
    return min(values)


def calculate_status(
    expiration_date: Optional[date],
    reminder_days: Sequence[int],
    today: date,
) -> CredentialStatus:
    """Derive ACTIVE / EXPIRING_SOON / EXPIRED from the expiration date.

    A credential that expires today is still valid (EXPIRING_SOON). One
    without an expiration date never expires.
    """

    if expiration_date is None:
        return CredentialStatus.ACTIVE

    days = days_until_expiration(expiration_date, today)
    if days < 0:
        return CredentialStatus.EXPIRED
    if days <= _threshold(reminder_days):
        return CredentialStatus.EXPIRING_SOON
    return CredentialStatus.ACTIVE


def severity_for_days(days: int) -> AlertSeverity:
    if days < 0:
        return AlertSeverity.CRITICAL
    if days <= 7:
        return AlertSeverity.HIGH
    if days <= 30:
        return AlertSeverity.WARNING
    return AlertSeverity.INFO


def alert_type_for_days(days: int) -> AlertType:
    if days < 0:
        return AlertType.EXPIRED
    if days <= 7:
        return AlertType.EXPIRING_7_DAYS
    if days <= 30:
        return AlertType.EXPIRING_30_DAYS
    if days <= 60:
        return AlertType.EXPIRING_60_DAYS
    return AlertType.EXPIRING_SOON


def notification_event_for_days(days: int) -> Optional[str]:
    """Notification event name for a reminder, or None beyond 60 days."""

    if days < 0:
        return "CREDENTIAL_EXPIRED"
    if days <= 7:
        return "CREDENTIAL_EXPIRING_7_DAYS"
    if days <= 30:
        return "CREDENTIAL_EXPIRING_30_DAYS"
    if days <= 60:
        return "CREDENTIAL_EXPIRING_60_DAYS"
    return None


def alert_message(days: int, credential_name: str, caregiver_name: str) -> str:
    subject = f"{credential_name} for {caregiver_name}"
    if days < 0:
        return f"{subject} has expired"
    if days == 0:
        return f"{subject} expires today"
    if days == 1:
        return f"{subject} expires tomorrow"
    return f"{subject} expires in {days} days"


def reminders_due(days: int, reminder_days: Iterable[int], already_sent: Iterable[int]) -> List[int]:
    """Return the reminder thresholds that should fire today.

    A threshold ``r`` fires once ``days`` drops to ``r`` or below, but only
    within a week of crossing it, so a credential added close to expiry does
    not trigger every earlier reminder at once.
    """

    sent = set(already_sent)
    return [
        r
        for r in sorted(set(reminder_days), reverse=True)
        if days <= r and days > r - REMINDER_WINDOW_DAYS and r not in sent
    ]


def is_renewal(previous: Optional[date], new: Optional[date]) -> bool:
    if new is None:
        return False
    return previous is None or new > previous
