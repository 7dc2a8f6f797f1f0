from datetime import date, timedelta

from src.homecare.config import settings
from src.homecare.domain.models.credential import AlertSeverity, AlertType, CredentialStatus
from src.homecare.services.credentials import lifecycle

TODAY = date(2026, 3, 1)


def test_status_without_expiration_is_active():
    assert lifecycle.calculate_status(None, [30], TODAY) == CredentialStatus.ACTIVE


def test_status_thresholds():
    reminders = [60, 30, 14, 7]
    assert lifecycle.calculate_status(TODAY - timedelta(days=1), reminders, TODAY) == CredentialStatus.EXPIRED
    assert lifecycle.calculate_status(TODAY, reminders, TODAY) == CredentialStatus.EXPIRING_SOON
    assert lifecycle.calculate_status(TODAY + timedelta(days=7), reminders, TODAY) == CredentialStatus.EXPIRING_SOON
    assert lifecycle.calculate_status(TODAY + timedelta(days=8), reminders, TODAY) == CredentialStatus.ACTIVE


def test_empty_reminder_list_uses_configured_default(monkeypatch):
    monkeypatch.setattr(settings, "credential_default_reminder_days", [45])
    assert lifecycle.calculate_status(TODAY + timedelta(days=45), [], TODAY) == CredentialStatus.EXPIRING_SOON
    assert lifecycle.calculate_status(TODAY + timedelta(days=46), [], TODAY) == CredentialStatus.ACTIVE


def test_severity_and_alert_type_bands():
    assert lifecycle.severity_for_days(-1) == AlertSeverity.CRITICAL
    assert lifecycle.severity_for_days(7) == AlertSeverity.HIGH
    assert lifecycle.severity_for_days(30) == AlertSeverity.WARNING
    assert lifecycle.severity_for_days(31) == AlertSeverity.INFO

    assert lifecycle.alert_type_for_days(-3) == AlertType.EXPIRED
    assert lifecycle.alert_type_for_days(0) == AlertType.EXPIRING_7_DAYS
    assert lifecycle.alert_type_for_days(14) == AlertType.EXPIRING_30_DAYS
    assert lifecycle.alert_type_for_days(60) == AlertType.EXPIRING_60_DAYS
    assert lifecycle.alert_type_for_days(90) == AlertType.EXPIRING_SOON

    assert lifecycle.notification_event_for_days(45) == "CREDENTIAL_EXPIRING_60_DAYS"
    assert lifecycle.notification_event_for_days(90) is None


def test_alert_messages():
    assert lifecycle.alert_message(-2, "CPR", "Ada Lovelace") == "CPR for Ada Lovelace has expired"
    assert lifecycle.alert_message(0, "CPR", "Ada Lovelace") == "CPR for Ada Lovelace expires today"
    assert lifecycle.alert_message(1, "CPR", "Ada Lovelace") == "CPR for Ada Lovelace expires tomorrow"
    assert lifecycle.alert_message(12, "CPR", "Ada Lovelace") == "CPR for Ada Lovelace expires in 12 days"


def test_reminders_due_only_within_a_week_of_the_threshold():
    reminders = [60, 30, 14, 7]
    assert lifecycle.reminders_due(30, reminders, []) == [30]
    assert lifecycle.reminders_due(24, reminders, []) == [30]
    assert lifecycle.reminders_due(23, reminders, []) == []
    assert lifecycle.reminders_due(30, reminders, [30]) == []
    # Added a few days before expiry: only the closest threshold fires.
    assert lifecycle.reminders_due(5, reminders, []) == [7]


def test_renewal_detection():
    assert lifecycle.is_renewal(date(2026, 1, 1), date(2027, 1, 1))
    assert lifecycle.is_renewal(None, date(2027, 1, 1))
    assert not lifecycle.is_renewal(date(2027, 1, 1), date(2026, 1, 1))
    assert not lifecycle.is_renewal(date(2027, 1, 1), None)
