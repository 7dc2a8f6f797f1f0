from uuid import uuid4

import pytest

from src.homecare.domain.models.user import User, UserRole
from src.homecare.infra.db import inmemory as repos
from src.homecare.tenancy import DEFAULT_AGENCY, set_current_agency


@pytest.fixture(autouse=True)
def fresh_repositories(monkeypatch):
    """Give every test empty in-memory repositories and the default agency."""

    monkeypatch.setattr(repos, "credential_type_repository", repos.InMemoryCredentialTypeRepository())
    monkeypatch.setattr(repos, "credential_repository", repos.InMemoryCredentialRepository())
    monkeypatch.setattr(repos, "credential_alert_repository", repos.InMemoryCredentialAlertRepository())
    monkeypatch.setattr(repos, "assessment_repository", repos.InMemoryAssessmentRepository())
    monkeypatch.setattr(repos, "staff_repository", repos.InMemoryStaffRepository())
    monkeypatch.setattr(repos, "audit_log_repository", repos.InMemoryAuditLogRepository())
    set_current_agency(DEFAULT_AGENCY)
    yield
    set_current_agency(DEFAULT_AGENCY)


def _user(role: UserRole, user_id=None) -> User:
    return User(id=user_id or uuid4(), email=f"{role.value.lower()}@example.com", role=role, agency_id=DEFAULT_AGENCY)


@pytest.fixture
def admin() -> User:
    return _user(UserRole.ADMIN)


@pytest.fixture
def ops_manager() -> User:
    return _user(UserRole.OPS_MANAGER)


@pytest.fixture
def qa_reviewer() -> User:
    return _user(UserRole.QA_REVIEWER)


@pytest.fixture
def carer_staff():
    """A carer staff record plus the User acting as that carer."""

    from src.homecare.services.staff.service import staff_service

    staff = staff_service.create_staff(email="carer@example.com", first_name="Ada", last_name="Lovelace")
    return staff, _user(UserRole.CARER, user_id=staff.id)
