from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import select

from src.homecare.domain.models.credential import (
    AlertSeverity,
    AlertType,
    Credential,
    CredentialAlert,
    CredentialStatus,
    CredentialType,
)
from src.homecare.infra.db.models import CredentialAlertORM, CredentialORM, CredentialTypeORM
from src.homecare.infra.db.repositories import (
    CredentialAlertRepository,
    CredentialRepository,
    CredentialTypeRepository,
)
from src.homecare.infra.db.session import SessionFactory
from src.homecare.tenancy import get_current_agency


class SqlCredentialTypeRepository(CredentialTypeRepository):
    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    def get(self, type_id: UUID) -> Optional[CredentialType]:
        session = self._session_factory()
        try:
            orm = session.get(CredentialTypeORM, type_id)
            if orm is None or orm.agency_id != get_current_agency():
                return None
            return orm.to_domain()
        finally:
            session.close()

    def list(self, *, include_inactive: bool = False) -> Iterable[CredentialType]:
        session = self._session_factory()
        try:
            query = select(CredentialTypeORM).where(CredentialTypeORM.agency_id == get_current_agency())
            if not include_inactive:
                query = query.where(CredentialTypeORM.is_active.is_(True))
            query = query.order_by(CredentialTypeORM.category, CredentialTypeORM.name)
            return [orm.to_domain() for orm in session.scalars(query)]
        finally:
            session.close()

    def save(self, credential_type: CredentialType) -> None:
        session = self._session_factory()
        try:
            session.merge(CredentialTypeORM.from_domain(credential_type))
            session.commit()
        finally:
            session.close()


class SqlCredentialRepository(CredentialRepository):
    """Credentials table access, scoped to the current agency."""

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    def get(self, credential_id: UUID) -> Optional[Credential]:
        session = self._session_factory()
        try:
            orm = session.get(CredentialORM, credential_id)
            if orm is None or orm.agency_id != get_current_agency():
                return None
            return orm.to_domain()
        finally:
            session.close()

    def list_by_filters(
        self,
        *,
        caregiver_id: Optional[str] = None,
        credential_type_id: Optional[UUID] = None,
        status: Optional[CredentialStatus] = None,
        expires_on_or_after: Optional[date] = None,
        expires_on_or_before: Optional[date] = None,
    ) -> Iterable[Credential]:
        session = self._session_factory()
        try:
            query = select(CredentialORM).where(CredentialORM.agency_id == get_current_agency())
            if caregiver_id is not None:
                query = query.where(CredentialORM.caregiver_id == caregiver_id)
            if credential_type_id is not None:
                query = query.where(CredentialORM.credential_type_id == credential_type_id)
            if status is not None:
                query = query.where(CredentialORM.status == status.value)
            if expires_on_or_after is not None:
                query = query.where(CredentialORM.expiration_date >= expires_on_or_after)
            if expires_on_or_before is not None:
                query = query.where(CredentialORM.expiration_date <= expires_on_or_before)
            query = query.order_by(CredentialORM.expiration_date.is_(None), CredentialORM.expiration_date)
            return [orm.to_domain() for orm in session.scalars(query)]
        finally:
            session.close()

    def list_agencies(self) -> List[str]:
        session = self._session_factory()
        try:
            query = select(CredentialORM.agency_id).distinct().order_by(CredentialORM.agency_id)
            return list(session.scalars(query))
        finally:
            session.close()

    def save(self, credential: Credential) -> None:
        session = self._session_factory()
        try:
            session.merge(CredentialORM.from_domain(credential))
            session.commit()
        finally:
            session.close()

    def delete(self, credential_id: UUID) -> None:
        session = self._session_factory()
        try:
            orm = session.get(CredentialORM, credential_id)
            if orm is not None and orm.agency_id == get_current_agency():
                session.delete(orm)
                session.commit()
        finally:
            session.close()


class SqlCredentialAlertRepository(CredentialAlertRepository):
    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    def get(self, alert_id: UUID) -> Optional[CredentialAlert]:
        session = self._session_factory()
        try:
            orm = session.get(CredentialAlertORM, alert_id)
            if orm is None or orm.agency_id != get_current_agency():
                return None
            return orm.to_domain()
        finally:
            session.close()

    def list_by_filters(
        self,
        *,
        credential_id: Optional[UUID] = None,
        alert_type: Optional[AlertType] = None,
        severity: Optional[AlertSeverity] = None,
        unacknowledged_only: bool = False,
        created_after: Optional[datetime] = None,
    ) -> Iterable[CredentialAlert]:
        session = self._session_factory()
        try:
            query = select(CredentialAlertORM).where(CredentialAlertORM.agency_id == get_current_agency())
            if credential_id is not None:
                query = query.where(CredentialAlertORM.credential_id == credential_id)
            if alert_type is not None:
                query = query.where(CredentialAlertORM.alert_type == alert_type.value)
            if severity is not None:
                query = query.where(CredentialAlertORM.severity == severity.value)
            if unacknowledged_only:
                query = query.where(CredentialAlertORM.is_acknowledged.is_(False))
            if created_after is not None:
                query = query.where(CredentialAlertORM.created_at >= created_after)
            query = query.order_by(CredentialAlertORM.created_at.desc())
            return [orm.to_domain() for orm in session.scalars(query)]
        finally:
            session.close()

    def save(self, alert: CredentialAlert) -> None:
        session = self._session_factory()
        try:
            session.merge(CredentialAlertORM.from_domain(alert))
            session.commit()
        finally:
            session.close()

    def delete_for_credential(self, credential_id: UUID) -> None:
        session = self._session_factory()
        try:
            query = select(CredentialAlertORM).where(
                CredentialAlertORM.agency_id == get_current_agency(),
                CredentialAlertORM.credential_id == credential_id,
            )
            for orm in session.scalars(query).all():
                session.delete(orm)
            session.commit()
        finally:
            session.close()
