from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr

from src.homecare.domain.models.user import UserRole


class StaffMember(BaseModel):
    """An agency employee.

    Caregivers are staff members with the CARER role; their credentials and
    assessments reference the staff member id.
    """

    id: UUID
    email: EmailStr
    first_name: str
    last_name: str
    role: UserRole = UserRole.CARER
    phone: Optional[str] = None
    is_active: bool = True
    # Free-form HR data (hire date, address, emergency contact, ...).
    profile_data: Optional[Dict[str, Any]] = None
    created_at: datetime
    updated_at: datetime
    agency_id: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
