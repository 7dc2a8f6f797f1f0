from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from src.homecare.domain.models.audit_log import AuditLogEntry
from src.homecare.domain.models.user import User
from src.homecare.security import ensure_is_manager, get_api_key, get_current_user
from src.homecare.services.audit.service import audit_service
from src.homecare.tenancy import agency_dependency


router = APIRouter(
    prefix="/audit-logs",
    tags=["audit"],
    dependencies=[Depends(get_api_key), Depends(agency_dependency)],
)


@router.get("/", response_model=List[AuditLogEntry])
async def list_audit_logs(
    resource_type: Optional[str] = None,
    resource_id: Optional[str] = None,
    action: Optional[str] = None,
    limit: int = Query(100, ge=1, le=1000),
    current_user: User = Depends(get_current_user),
) -> List[AuditLogEntry]:
    ensure_is_manager(current_user, "read audit logs")
    return audit_service.list_events(
        resource_type=resource_type,
        resource_id=resource_id,
        action=action,
        limit=limit,
    )
