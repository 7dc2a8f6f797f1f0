from datetime import date, datetime, timedelta
from uuid import uuid4

import pytest
from fastapi import status
from httpx import ASGITransport, AsyncClient

from src.homecare.config import settings
from src.homecare.domain.errors import NotFoundError, PermissionDeniedError, ValidationFailedError
from src.homecare.domain.models.credential import (
    AlertSeverity,
    AlertType,
    Credential,
    CredentialCategory,
    CredentialStatus,
)
from src.homecare.domain.models.user import User, UserRole
from src.homecare.infra.db import inmemory as repos
from src.homecare.main import app
from src.homecare.services.audit.service import audit_service
from src.homecare.services.credentials.defaults import DEFAULT_CREDENTIAL_TYPES
from src.homecare.services.credentials.service import credential_service
from src.homecare.services.staff.service import staff_service
from src.homecare.tenancy import get_current_agency, set_current_agency

TODAY = date(2026, 3, 1)
NOW = datetime(2026, 3, 1, 6, 0)


def _cpr_type(user, reminder_days=(30, 7)):
    return credential_service.create_type(
        user,
        name="CPR/BLS",
        category=CredentialCategory.CERTIFICATION,
        reminder_days=list(reminder_days),
    )


def _create(user, caregiver_id, type_id, **fields):
    fields.setdefault("today", TODAY)
    return credential_service.create_credential(user, caregiver_id=caregiver_id, credential_type_id=type_id, **fields)


def test_default_types_are_seeded_per_agency():
    default_types = credential_service.list_types()
    assert len(default_types) == len(DEFAULT_CREDENTIAL_TYPES)

    set_current_agency("agency-b")
    other_types = credential_service.list_types()
    assert len(other_types) == len(DEFAULT_CREDENTIAL_TYPES)
    assert {t.id for t in default_types}.isdisjoint({t.id for t in other_types})


def test_type_management_is_manager_only(admin, carer_staff):
    _, carer = carer_staff
    with pytest.raises(PermissionDeniedError):
        _cpr_type(carer)

    credential_type = _cpr_type(admin, reminder_days=(7, 30, 30))
    assert credential_type.reminder_days == [30, 7]

    with pytest.raises(ValidationFailedError):
        credential_service.update_type(admin, credential_type.id, {"reminder_days": [-1]})

    deactivated = credential_service.deactivate_type(admin, credential_type.id)
    assert not deactivated.is_active
    assert credential_type.id not in {t.id for t in credential_service.list_types()}
    assert credential_type.id in {t.id for t in credential_service.list_types(include_inactive=True)}


def test_manager_created_credential_gets_date_derived_status(admin, carer_staff):
    staff, _ = carer_staff
    credential_type = _cpr_type(admin)

    expiring = _create(admin, str(staff.id), credential_type.id, expiration_date=TODAY + timedelta(days=5))
    undated = _create(admin, str(staff.id), credential_type.id)

    assert expiring.status == CredentialStatus.EXPIRING_SOON
    assert undated.status == CredentialStatus.ACTIVE


def test_carer_credential_is_unverified_until_a_manager_verifies_it(admin, carer_staff):
    staff, carer = carer_staff
    credential_type = _cpr_type(admin)

    credential = _create(
        carer,
        str(staff.id),
        credential_type.id,
        expiration_date=TODAY + timedelta(days=365),
        document_urls=["/uploads/front.png", "/uploads/back.png"],
    )
    assert credential.status == CredentialStatus.ACTIVE
    assert not credential.is_verified
    assert credential.document_urls == ["/uploads/front.png", "/uploads/back.png"]

    # A carer cannot verify their own credential.
    attempted = credential_service.update_credential(carer, credential.id, {"is_verified": True}, today=TODAY)
    assert not attempted.is_verified
    assert attempted.verified_by is None

    verified = credential_service.update_credential(admin, credential.id, {"is_verified": True}, today=TODAY)
    assert verified.is_verified
    assert verified.verified_by == str(admin.id)
    assert verified.verified_at is not None
    assert verified.status == CredentialStatus.ACTIVE


def test_carers_only_reach_their_own_credentials(admin, carer_staff, qa_reviewer):
    staff, carer = carer_staff
    other = staff_service.create_staff(email="other@example.com", first_name="Grace", last_name="Hopper")
    credential_type = _cpr_type(admin)

    others = _create(admin, str(other.id), credential_type.id)
    own = _create(carer, str(staff.id), credential_type.id)

    with pytest.raises(PermissionDeniedError):
        credential_service.get_credential(carer, others.id)
    with pytest.raises(PermissionDeniedError):
        _create(carer, str(other.id), credential_type.id)
    with pytest.raises(PermissionDeniedError):
        credential_service.list_credentials(qa_reviewer)

    credentials, summary = credential_service.list_credentials(carer, caregiver_id=str(other.id))
    assert [c.id for c in credentials] == [own.id]
    assert summary.total == 1
    assert summary.active == 1


def test_create_rejects_unknown_staff_inactive_type_and_bad_dates(admin, carer_staff):
    staff, _ = carer_staff
    credential_type = _cpr_type(admin)

    with pytest.raises(NotFoundError):
        _create(admin, str(uuid4()), credential_type.id)

    with pytest.raises(ValidationFailedError):
        _create(
            admin,
            str(staff.id),
            credential_type.id,
            issue_date=TODAY,
            expiration_date=TODAY - timedelta(days=1),
        )

    credential_service.deactivate_type(admin, credential_type.id)
    with pytest.raises(NotFoundError):
        _create(admin, str(staff.id), credential_type.id)


def test_list_is_ordered_by_expiration_with_summary(admin, carer_staff):
    staff, _ = carer_staff
    credential_type = _cpr_type(admin, reminder_days=(30,))
    caregiver_id = str(staff.id)

    undated = _create(admin, caregiver_id, credential_type.id)
    later = _create(admin, caregiver_id, credential_type.id, expiration_date=TODAY + timedelta(days=200))
    expired = _create(admin, caregiver_id, credential_type.id, expiration_date=TODAY - timedelta(days=1))
    soon = _create(admin, caregiver_id, credential_type.id, expiration_date=TODAY + timedelta(days=20))

    credentials, summary = credential_service.list_credentials(admin, caregiver_id=caregiver_id)
    assert [c.id for c in credentials] == [expired.id, soon.id, later.id, undated.id]
    assert summary.model_dump() == {
        "total": 4,
        "active": 2,
        "expiring_soon": 1,
        "expired": 1,
        "pending_verification": 0,
        "revoked": 0,
    }

    within, _ = credential_service.list_credentials(admin, expiring_within_days=30, today=TODAY)
    assert [c.id for c in within] == [soon.id]

    only_expired, _ = credential_service.list_credentials(admin, status=CredentialStatus.EXPIRED)
    assert [c.id for c in only_expired] == [expired.id]


def test_renewal_resets_reminder_tracking(admin, carer_staff):
    staff, _ = carer_staff
    credential_type = _cpr_type(admin, reminder_days=(30, 14, 7))
    credential = _create(admin, str(staff.id), credential_type.id, expiration_date=TODAY + timedelta(days=10))

    credential_service.run_credential_check(today=TODAY, now=NOW)
    checked = repos.credential_repository.get(credential.id)
    assert checked.reminders_sent_days == [14]
    assert checked.last_reminder_sent == NOW

    renewed = credential_service.update_credential(
        admin,
        credential.id,
        {"expiration_date": TODAY + timedelta(days=400)},
        today=TODAY,
    )
    assert renewed.reminders_sent_days == []
    assert renewed.last_reminder_sent is None
    assert renewed.expired_alert_sent is False
    assert renewed.status == CredentialStatus.ACTIVE


def test_daily_check_progression_raises_each_alert_once(admin, carer_staff):
    staff, _ = carer_staff
    credential_type = _cpr_type(admin, reminder_days=(30, 7))
    credential = _create(
        admin,
        str(staff.id),
        credential_type.id,
        expiration_date=TODAY + timedelta(days=30),
        today=TODAY - timedelta(days=40),
    )
    assert credential.status == CredentialStatus.ACTIVE

    first = credential_service.run_credential_check(today=TODAY, now=NOW)
    assert (first.credentials_checked, first.status_updated, first.alerts_created) == (1, 0, 1)

    repeat = credential_service.run_credential_check(today=TODAY, now=NOW + timedelta(hours=1))
    assert repeat.alerts_created == 0

    week_out = credential_service.run_credential_check(today=TODAY + timedelta(days=25), now=NOW + timedelta(days=25))
    assert (week_out.status_updated, week_out.alerts_created) == (1, 1)
    assert repos.credential_repository.get(credential.id).status == CredentialStatus.EXPIRING_SOON

    lapsed = credential_service.run_credential_check(today=TODAY + timedelta(days=31), now=NOW + timedelta(days=31))
    assert (lapsed.status_updated, lapsed.alerts_created) == (1, 1)
    stored = repos.credential_repository.get(credential.id)
    assert stored.status == CredentialStatus.EXPIRED
    assert stored.expired_alert_sent

    later = credential_service.run_credential_check(today=TODAY + timedelta(days=40), now=NOW + timedelta(days=40))
    assert later.alerts_created == 0

    alerts = credential_service.list_alerts(admin)
    assert [a.alert_type for a in alerts] == [
        AlertType.EXPIRED,
        AlertType.EXPIRING_7_DAYS,
        AlertType.EXPIRING_30_DAYS,
    ]
    assert [a.severity for a in alerts] == [AlertSeverity.CRITICAL, AlertSeverity.HIGH, AlertSeverity.WARNING]
    assert alerts[0].message == "CPR/BLS for Ada Lovelace has expired"
    assert alerts[1].message == "CPR/BLS for Ada Lovelace expires in 5 days"

    expired_events = audit_service.list_events(action="CREDENTIAL_EXPIRED")
    assert len(expired_events) == 1
    assert expired_events[0].subject == "system:credential-check"
    assert expired_events[0].extra["notification_event"] == "CREDENTIAL_EXPIRED"


def test_daily_check_never_touches_revoked_credentials(admin, carer_staff):
    staff, _ = carer_staff
    credential_type = _cpr_type(admin)
    credential = _create(admin, str(staff.id), credential_type.id, expiration_date=TODAY + timedelta(days=3))
    revoked = credential_service.revoke_credential(admin, credential.id, "License suspended by the board")
    assert revoked.status == CredentialStatus.REVOKED
    assert revoked.notes == "License suspended by the board"

    result = credential_service.run_credential_check(today=TODAY + timedelta(days=10), now=NOW + timedelta(days=10))
    assert (result.status_updated, result.alerts_created) == (0, 0)
    assert repos.credential_repository.get(credential.id).status == CredentialStatus.REVOKED


def test_daily_check_walks_every_agency_and_ages_unverified_credentials(admin):
    set_current_agency("agency-a")
    staff_a = staff_service.create_staff(email="a@example.com", first_name="Ann", last_name="Able")
    carer_a = User(id=staff_a.id, email=staff_a.email, role=UserRole.CARER, agency_id="agency-a")
    type_a = _cpr_type(admin)
    unverified = _create(carer_a, str(staff_a.id), type_a.id, expiration_date=TODAY + timedelta(days=1))
    assert unverified.status == CredentialStatus.EXPIRING_SOON

    set_current_agency("agency-b")
    staff_b = staff_service.create_staff(email="b@example.com", first_name="Ben", last_name="Baker")
    type_b = _cpr_type(admin)
    managed = _create(admin, str(staff_b.id), type_b.id, expiration_date=TODAY + timedelta(days=2))

    set_current_agency("default")
    result = credential_service.run_credential_check(today=TODAY + timedelta(days=5), now=NOW + timedelta(days=5))
    assert result.credentials_checked == 2
    assert result.errors == []
    assert get_current_agency() == "default"

    set_current_agency("agency-a")
    aged = repos.credential_repository.get(unverified.id)
    assert aged.status == CredentialStatus.EXPIRED
    assert not aged.is_verified
    set_current_agency("agency-b")
    assert repos.credential_repository.get(managed.id).status == CredentialStatus.EXPIRED


def test_daily_check_expires_credentials_still_pending_verification(admin, carer_staff):
    staff, _ = carer_staff
    credential_type = _cpr_type(admin)
    pending = Credential(
        id=uuid4(),
        caregiver_id=str(staff.id),
        credential_type_id=credential_type.id,
        expiration_date=TODAY - timedelta(days=2),
        created_at=NOW,
        updated_at=NOW,
        agency_id="default",
    )
    assert pending.status == CredentialStatus.PENDING_VERIFICATION
    repos.credential_repository.save(pending)

    result = credential_service.run_credential_check(today=TODAY, now=NOW)

    assert result.status_updated == 1
    assert repos.credential_repository.get(pending.id).status == CredentialStatus.EXPIRED
    assert [a.alert_type for a in credential_service.list_alerts(admin)] == [AlertType.EXPIRED]


def test_daily_check_collects_per_credential_errors(admin, carer_staff):
    staff, _ = carer_staff
    credential_type = _cpr_type(admin)
    healthy = _create(admin, str(staff.id), credential_type.id, expiration_date=TODAY + timedelta(days=2))
    orphan = Credential(
        id=uuid4(),
        caregiver_id=str(staff.id),
        credential_type_id=uuid4(),
        status=CredentialStatus.ACTIVE,
        expiration_date=TODAY + timedelta(days=2),
        created_at=NOW,
        updated_at=NOW,
        agency_id="default",
    )
    repos.credential_repository.save(orphan)

    result = credential_service.run_credential_check(today=TODAY, now=NOW)
    assert result.credentials_checked == 2
    assert len(result.errors) == 1
    assert str(orphan.id) in result.errors[0]
    assert repos.credential_repository.get(healthy.id).reminders_sent_days == [7]


def test_acknowledge_alert(admin, carer_staff):
    staff, carer = carer_staff
    credential_type = _cpr_type(admin)
    _create(admin, str(staff.id), credential_type.id, expiration_date=TODAY + timedelta(days=6))
    credential_service.run_credential_check(today=TODAY, now=NOW)

    (alert,) = credential_service.list_alerts(admin, unacknowledged_only=True)
    with pytest.raises(PermissionDeniedError):
        credential_service.acknowledge_alert(carer, alert.id)

    acknowledged = credential_service.acknowledge_alert(admin, alert.id)
    assert acknowledged.is_acknowledged
    assert acknowledged.acknowledged_by == str(admin.id)
    assert credential_service.list_alerts(admin, unacknowledged_only=True) == []
    assert credential_service.acknowledge_alert(admin, alert.id) == acknowledged


def test_delete_removes_credential_and_its_alerts(admin, carer_staff):
    staff, carer = carer_staff
    credential_type = _cpr_type(admin)
    credential = _create(admin, str(staff.id), credential_type.id, expiration_date=TODAY + timedelta(days=6))
    credential_service.run_credential_check(today=TODAY, now=NOW)
    assert credential_service.recent_alerts(credential.id)

    with pytest.raises(PermissionDeniedError):
        credential_service.delete_credential(carer, credential.id)

    credential_service.delete_credential(admin, credential.id)
    with pytest.raises(NotFoundError):
        credential_service.get_credential(admin, credential.id)
    assert credential_service.recent_alerts(credential.id) == []


async def test_credential_api_crud_flow():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        staff = (
            await ac.post(
                "/api/v1/staff/",
                json={"email": "nurse@example.com", "first_name": "Flo", "last_name": "Nightingale"},
            )
        ).json()

        types = await ac.get("/api/v1/credentials/types")
        assert types.status_code == status.HTTP_200_OK
        assert len(types.json()) == len(DEFAULT_CREDENTIAL_TYPES)

        created_type = await ac.post(
            "/api/v1/credentials/types",
            json={"name": "Wound Care", "category": "CERTIFICATION", "reminder_days": [30]},
        )
        assert created_type.status_code == status.HTTP_201_CREATED
        type_id = created_type.json()["id"]

        create = await ac.post(
            "/api/v1/credentials/",
            json={
                "caregiver_id": staff["id"],
                "credential_type_id": type_id,
                "license_number": "WC-1001",
                "expiration_date": (date.today() + timedelta(days=365)).isoformat(),
            },
        )
        assert create.status_code == status.HTTP_201_CREATED
        credential = create.json()
        assert credential["status"] == "ACTIVE"
        assert credential["presentation"] == {"variant": "success", "label": "Active"}

        detail = await ac.get(f"/api/v1/credentials/{credential['id']}")
        assert detail.status_code == status.HTTP_200_OK
        assert detail.json()["credential_type"]["name"] == "Wound Care"
        assert detail.json()["alerts"] == []

        patched = await ac.patch(f"/api/v1/credentials/{credential['id']}", json={"notes": "Scanned copy on file"})
        assert patched.status_code == status.HTTP_200_OK
        assert patched.json()["notes"] == "Scanned copy on file"

        revoked = await ac.post(f"/api/v1/credentials/{credential['id']}/revoke", json={"reason": "Suspended"})
        assert revoked.status_code == status.HTTP_200_OK
        assert revoked.json()["presentation"] == {"variant": "error", "label": "Revoked"}

        listing = await ac.get("/api/v1/credentials/", params={"status": "REVOKED"})
        assert listing.status_code == status.HTTP_200_OK
        assert listing.json()["summary"]["revoked"] == 1
        assert [c["id"] for c in listing.json()["credentials"]] == [credential["id"]]

        deleted = await ac.delete(f"/api/v1/credentials/{credential['id']}")
        assert deleted.json() == {"success": True}

        missing = await ac.get(f"/api/v1/credentials/{credential['id']}")
        assert missing.status_code == status.HTTP_404_NOT_FOUND
        assert missing.json() == {"detail": "Credential not found"}


async def test_credential_api_reports_validation_problems():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        staff = (
            await ac.post("/api/v1/staff/", json={"email": "x@example.com", "first_name": "X", "last_name": "Y"})
        ).json()
        type_id = (await ac.get("/api/v1/credentials/types")).json()[0]["id"]

        response = await ac.post(
            "/api/v1/credentials/",
            json={
                "caregiver_id": staff["id"],
                "credential_type_id": type_id,
                "issue_date": "2026-02-01",
                "expiration_date": "2026-01-01",
            },
        )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    body = response.json()
    assert body["detail"] == "Expiration date cannot be before the issue date"
    assert body["problems"] == [body["detail"]]


async def test_status_presentation_endpoint():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        response = await ac.get("/api/v1/credentials/status-presentation")
    assert response.status_code == status.HTTP_200_OK
    table = response.json()
    assert set(table) == {s.value for s in CredentialStatus}
    assert table["PENDING_VERIFICATION"] == {"variant": "default", "label": "Pending"}


async def test_check_endpoint_requires_cron_secret(monkeypatch):
    monkeypatch.setattr(settings, "cron_secret", "s3cret")
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        denied = await ac.post("/api/v1/credentials/check")
        assert denied.status_code == status.HTTP_401_UNAUTHORIZED

        allowed = await ac.post("/api/v1/credentials/check", headers={"Authorization": "Bearer s3cret"})
    assert allowed.status_code == status.HTTP_200_OK
    assert allowed.json() == {
        "success": True,
        "credentials_checked": 0,
        "status_updated": 0,
        "alerts_created": 0,
        "errors": [],
    }


def test_default_catalogue_covers_compliance_checks():
    by_name = {t.name: t for t in credential_service.list_types()}

    assert len(by_name) == 26
    assert by_name["Physical Examination"].is_required
    assert by_name["HIPAA Training"].reminder_days == [30, 14, 7]
    assert by_name["Infection Control Training"].reminder_days == [30, 14, 7]
    background = by_name["Background Check"]
    assert background.category == CredentialCategory.COMPLIANCE
    assert background.reminder_days == [60, 30, 14]
    assert by_name["Hepatitis B Vaccination"].reminder_days == []
    assert {t.name for t in by_name.values() if t.category == CredentialCategory.COMPLIANCE} == {
        "Background Check",
        "OIG/LEIE Exclusion Check",
        "Sex Offender Registry Check",
        "I-9 Employment Verification",
        "Auto Insurance",
    }


def test_partial_updates_cannot_clear_required_fields(admin, carer_staff):
    staff, _ = carer_staff
    credential_type = _cpr_type(admin)
    credential = _create(admin, str(staff.id), credential_type.id, document_urls=["/uploads/card.png"])

    with pytest.raises(ValidationFailedError) as exc_info:
        credential_service.update_type(admin, credential_type.id, {"name": None, "category": None})
    assert {problem.split(":")[0] for problem in exc_info.value.problems} == {"name", "category"}
    with pytest.raises(ValidationFailedError):
        credential_service.update_type(admin, credential_type.id, {"reminder_days": None})
    with pytest.raises(ValidationFailedError):
        credential_service.update_credential(admin, credential.id, {"document_urls": None}, today=TODAY)

    assert credential_service.get_type(credential_type.id) == credential_type
    assert credential_service.get_credential(admin, credential.id).document_urls == ["/uploads/card.png"]


async def test_credential_api_rejects_null_for_required_fields():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        staff = (
            await ac.post("/api/v1/staff/", json={"email": "n@example.com", "first_name": "N", "last_name": "Ull"})
        ).json()
        type_id = (await ac.get("/api/v1/credentials/types")).json()[0]["id"]

        cleared_days = await ac.patch(f"/api/v1/credentials/types/{type_id}", json={"reminder_days": None})
        assert cleared_days.status_code == status.HTTP_400_BAD_REQUEST

        cleared_name = await ac.patch(
            f"/api/v1/credentials/types/{type_id}", json={"name": None, "category": None}
        )
        assert cleared_name.status_code == status.HTTP_400_BAD_REQUEST
        assert cleared_name.json()["detail"] == "Invalid update"

        listing = await ac.get("/api/v1/credentials/types", params={"include_inactive": True})
        assert listing.status_code == status.HTTP_200_OK
        assert all(t["name"] and t["category"] for t in listing.json())

        credential = (
            await ac.post("/api/v1/credentials/", json={"caregiver_id": staff["id"], "credential_type_id": type_id})
        ).json()
        cleared_urls = await ac.patch(f"/api/v1/credentials/{credential['id']}", json={"document_urls": None})
        assert cleared_urls.status_code == status.HTTP_400_BAD_REQUEST

        detail = await ac.get(f"/api/v1/credentials/{credential['id']}")
    assert detail.json()["credential"]["document_urls"] == []
