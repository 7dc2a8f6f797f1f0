from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID, uuid4

from src.homecare.domain.errors import ConflictError, NotFoundError
from src.homecare.domain.models.staff import StaffMember
from src.homecare.domain.models.user import UserRole
from src.homecare.domain.updates import apply_updates
from src.homecare.infra.db import inmemory as repos
from src.homecare.tenancy import get_current_agency

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = ("first_name", "last_name", "role", "phone", "is_active", "profile_data")


class StaffService:
    """Staff administration on top of the staff repository."""

    def create_staff(
        self,
        *,
        email: str,
        first_name: str,
        last_name: str,
        role: UserRole = UserRole.CARER,
        phone: Optional[str] = None,
        profile_data: Optional[Dict[str, Any]] = None,
    ) -> StaffMember:
        if repos.staff_repository.get_by_email(email) is not None:
            raise ConflictError("A staff member with this email already exists")

        now = datetime.utcnow()
        staff = StaffMember(
            id=uuid4(),
            email=email,
            first_name=first_name,
            last_name=last_name,
            role=role,
            phone=phone,
            profile_data=profile_data,
            created_at=now,
            updated_at=now,
            agency_id=get_current_agency(),
        )
        repos.staff_repository.save(staff)
        logger.info("Created staff member %s with role %s", staff.id, staff.role.value)
        return staff

    def get_staff(self, staff_id: UUID) -> StaffMember:
        staff = repos.staff_repository.get(staff_id)
        if staff is None:
            raise NotFoundError("Staff member not found")
        return staff

    def find_staff(self, staff_id: str) -> Optional[StaffMember]:
        """Look up a staff member by its string id; None if absent or malformed."""

        try:
            return repos.staff_repository.get(UUID(staff_id))
        except ValueError:
            return None

    def list_staff(
        self,
        *,
        role: Optional[UserRole] = None,
        include_inactive: bool = False,
    ) -> List[StaffMember]:
        return list(repos.staff_repository.list_by_filters(role=role, include_inactive=include_inactive))

    def update_staff(self, staff_id: UUID, changes: Dict[str, Any]) -> StaffMember:
        """Apply a partial update. Keys outside the editable fields are ignored."""

        staff = self.get_staff(staff_id)
        updates = {key: value for key, value in changes.items() if key in _UPDATABLE_FIELDS}
        if not updates:
            return staff

        updated = apply_updates(staff, {**updates, "updated_at": datetime.utcnow()})
        repos.staff_repository.save(updated)
        return updated

    def deactivate_staff(self, staff_id: UUID) -> StaffMember:
        """Staff are never hard-deleted; their records stay referenced by notes."""

        return self.update_staff(staff_id, {"is_active": False})


staff_service = StaffService()
