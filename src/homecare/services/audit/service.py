from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from src.homecare.domain.models.audit_log import AuditLogEntry
from src.homecare.infra.db import inmemory as repos
from src.homecare.tenancy import get_current_agency

logger = logging.getLogger("audit")


@dataclass
class AuditEvent:
    """Structured representation of an audit event.

    Intentionally keeps payload minimal and avoids PHI: focus on IDs, types,
    and high-level actions rather than clinical form contents.
    """

    timestamp: str
    agency_id: str
    action: str
    resource_type: str
    resource_id: Optional[str] = None
    subject: Optional[str] = None
    extra: Optional[Dict[str, Any]] = None


class AuditService:
    def log_event(
        self,
        *,
        action: str,
        resource_type: str,
        resource_id: Optional[str] = None,
        subject: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> AuditLogEntry:
        """Log a structured audit event and keep it for the audit-log endpoint.

        - `action`: high-level verb, e.g., "create_credential", "send_to_qa".
        - `resource_type`: coarse type, e.g., "credential", "assessment".
        - `resource_id`: stable identifier (UUID string) when available.
        - `subject`: optional identifier for the caller. If omitted, we
          attempt to infer it from the current security context.
        - `extra`: optional small dict of non-PHI metadata (counts, flags).
        """

        if subject is None:
            from src.homecare.security import get_current_subject

            subject = get_current_subject()

        now = datetime.now(timezone.utc)
        event = AuditEvent(
            timestamp=now.isoformat(),
            agency_id=get_current_agency(),
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            subject=subject,
            extra=extra,
        )

        try:
            logger.info(json.dumps(asdict(event)))
        except TypeError:
            # Something in extra is not JSON serializable; log without it.
            safe_event = asdict(event)
            safe_event["extra"] = None
            logger.info(json.dumps(safe_event))

        entry = AuditLogEntry(
            id=uuid4(),
            timestamp=now,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            subject=subject,
            extra=extra,
            agency_id=event.agency_id,
        )
        repos.audit_log_repository.add(entry)
        return entry

    def list_events(
        self,
        *,
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
        action: Optional[str] = None,
        limit: int = 100,
    ) -> List[AuditLogEntry]:
        return repos.audit_log_repository.list_by_filters(
            resource_type=resource_type,
            resource_id=resource_id,
            action=action,
            limit=limit,
        )


audit_service = AuditService()
