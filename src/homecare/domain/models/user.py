from __future__ import annotations

from enum import Enum
from uuid import UUID

from pydantic import BaseModel, EmailStr


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    OPS_MANAGER = "OPS_MANAGER"
    QA_REVIEWER = "QA_REVIEWER"
    CARER = "CARER"


# Roles allowed to manage staff records and credentials of other people.
MANAGER_ROLES = frozenset({UserRole.ADMIN, UserRole.OPS_MANAGER})

# Roles allowed to approve or reject submitted assessments.
QA_ROLES = frozenset({UserRole.ADMIN, UserRole.QA_REVIEWER})


class User(BaseModel):
    """The authenticated caller of a request."""

    id: UUID
    email: EmailStr
    role: UserRole
    # Agency that this user belongs to.
    agency_id: str

    @property
    def is_manager(self) -> bool:
        return self.role in MANAGER_ROLES
