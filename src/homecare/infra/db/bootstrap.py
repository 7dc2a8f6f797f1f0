from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import create_engine

from src.homecare.config import settings
from src.homecare.infra.db import inmemory as inmemory_repos
from src.homecare.infra.db.models import Base
from src.homecare.infra.db.session import create_sqlalchemy_session_factory
from src.homecare.infra.db.sql_credentials import (
    SqlCredentialAlertRepository,
    SqlCredentialRepository,
    SqlCredentialTypeRepository,
)
from src.homecare.infra.db.sql_operations import SqlAssessmentRepository, SqlAuditLogRepository, SqlStaffRepository


logger = logging.getLogger(__name__)


def init_sql_repositories(database_url: Optional[str] = None, *, force: bool = False) -> bool:
    """Optionally switch in-memory repositories to SQL-backed implementations.

    Called from application startup. If USE_SQL_REPOS is not enabled (and
    ``force`` is not set) or no database URL is configured, this is a no-op
    and the in-memory repositories remain active. Returns True when the SQL
    repositories were installed.
    """

    if not (settings.use_sql_repos or force):
        return False

    db_url = database_url or settings.database_url
    if not db_url:
        logger.warning("USE_SQL_REPOS is set but DATABASE_URL is missing; keeping in-memory repositories")
        return False

    engine = create_engine(db_url, future=True)

    # Create tables if they do not exist. Real deployments should manage the
    # schema with migrations.
    Base.metadata.create_all(engine)

    session_factory = create_sqlalchemy_session_factory(engine=engine)

    # Services resolve repositories through the inmemory module at call time,
    # so rebinding the module attributes is enough.
    inmemory_repos.credential_type_repository = SqlCredentialTypeRepository(session_factory)
    inmemory_repos.credential_repository = SqlCredentialRepository(session_factory)
    inmemory_repos.credential_alert_repository = SqlCredentialAlertRepository(session_factory)
    inmemory_repos.assessment_repository = SqlAssessmentRepository(session_factory)
    inmemory_repos.staff_repository = SqlStaffRepository(session_factory)
    inmemory_repos.audit_log_repository = SqlAuditLogRepository(session_factory)

    logger.info("SQL repositories enabled")
    return True
