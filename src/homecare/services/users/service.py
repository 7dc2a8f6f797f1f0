from __future__ import annotations

from typing import Dict, Optional, Tuple
from uuid import NAMESPACE_URL, UUID, uuid5

from src.homecare.domain.models.user import User, UserRole
from src.homecare.tenancy import get_current_agency


class InMemoryUserService:
    """Resolves authenticated subjects to agency-scoped User records.

    Subjects come from the security layer (hashed API keys), so no raw secret
    ever reaches a User. A subject bound to a staff record takes that staff
    id, which is what lets a carer reach the credentials and assessments
    filed under their caregiver id.
    """

    def __init__(self) -> None:
        self._users: Dict[Tuple[str, str], User] = {}

    def resolve_user(
        self,
        *,
        subject: str,
        role: UserRole,
        staff_id: Optional[UUID] = None,
    ) -> User:
        agency_id = get_current_agency()
        key = (agency_id, subject)
        cached = self._users.get(key)
        if cached is not None and cached.role == role and (staff_id is None or cached.id == staff_id):
            return cached

        # Unbound subjects get an id derived from agency and subject so it
        # survives restarts.
        user = User(
            id=staff_id or uuid5(NAMESPACE_URL, f"homecare:{agency_id}:{subject}"),
            email=f"{subject.replace(':', '+')}@example.com",
            role=role,
            agency_id=agency_id,
        )
        self._users[key] = user
        return user


user_service = InMemoryUserService()
