from __future__ import annotations

import hashlib
import logging
from contextvars import ContextVar
from typing import Dict, NamedTuple, Optional
from uuid import UUID

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import APIKeyHeader

from src.homecare.config import settings
from src.homecare.domain.errors import PermissionDeniedError
from src.homecare.domain.models.user import QA_ROLES, User, UserRole
from src.homecare.services.users.service import user_service

logger = logging.getLogger(__name__)

# API key is expected in this header when ENABLE_API_AUTH is true.
_api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)

# Context variable storing a stable, non-raw identifier for the current caller
# (e.g., a hashed API key). This allows the audit logger to associate events
# with a subject without exposing the raw secret.
_current_subject: ContextVar[Optional[str]] = ContextVar("current_subject", default=None)


def get_current_subject() -> Optional[str]:
    """Return the current subject identifier, if any.

    This is set by ``get_api_key`` when API authentication is enabled. The
    value is a stable hash-derived identifier, not the raw secret.
    """

    return _current_subject.get()


class ApiKeyGrant(NamedTuple):
    role: UserRole
    staff_id: Optional[UUID] = None


def _parse_api_keys() -> Dict[str, ApiKeyGrant]:
    """Return the configured API keys mapped to what they grant.

    API_KEYS is a comma-separated list of ``key``, ``key:ROLE`` or
    ``key:ROLE:STAFF_ID`` entries. Keys without a role grant CARER; a staff
    id binds the caller to that staff record. Whitespace is stripped and
    empty entries are ignored. Raises ValueError for an unknown role or a
    malformed staff id; the message never includes the key itself.
    """

    if not settings.api_keys:
        return {}
    keys: Dict[str, ApiKeyGrant] = {}
    for position, entry in enumerate(settings.api_keys.split(","), start=1):
        parts = [part.strip() for part in entry.split(":")]
        if not parts[0]:
            continue
        role = UserRole.CARER
        if len(parts) > 1 and parts[1]:
            try:
                role = UserRole(parts[1].upper())
            except ValueError:
                raise ValueError(f"API_KEYS entry {position} has unknown role {parts[1]!r}") from None
        staff_id = None
        if len(parts) > 2 and parts[2]:
            try:
                staff_id = UUID(parts[2])
            except ValueError:
                raise ValueError(f"API_KEYS entry {position} has malformed staff id {parts[2]!r}") from None
        keys[parts[0]] = ApiKeyGrant(role, staff_id)
    return keys


def validate_api_keys() -> int:
    """Parse API_KEYS once at startup so a bad entry stops the service.

    Returns the number of configured keys.
    """

    keys = _parse_api_keys()
    logger.info("API authentication enabled with %d key(s)", len(keys))
    return len(keys)


def _subject_for_key(api_key: str) -> str:
    return "api-key:" + hashlib.sha256(api_key.encode("utf-8")).hexdigest()[:16]


async def get_api_key(api_key: Optional[str] = Security(_api_key_header)) -> str:
    """FastAPI dependency for simple API-key based authentication.

    - If ENABLE_API_AUTH is false (default for development/tests), this is a
      no-op and always succeeds.
    - If ENABLE_API_AUTH is true, a valid API key must be supplied in the
      X-API-Key header and match the configured API_KEYS list.
    """

    if not settings.enable_api_auth:
        _current_subject.set(None)
        return ""

    allowed_keys = _parse_api_keys()
    if not allowed_keys:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="API authentication is enabled but no API keys are configured.",
        )

    if not api_key or api_key not in allowed_keys:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key.",
        )

    _current_subject.set(_subject_for_key(api_key))
    return api_key


async def get_current_user(api_key: str = Depends(get_api_key)) -> User:
    """Resolve the current User based on the derived auth subject.

    When API auth is disabled the caller is an anonymous admin, which is only
    meant for development and tests.
    """

    subject = get_current_subject()
    if subject is None:
        return user_service.resolve_user(subject="anonymous", role=UserRole.ADMIN)

    grant = _parse_api_keys().get(api_key, ApiKeyGrant(UserRole.CARER))
    return user_service.resolve_user(subject=subject, role=grant.role, staff_id=grant.staff_id)


def ensure_is_manager(user: User, action: str = "manage staff records") -> None:
    """Raise PermissionDeniedError unless the user is an admin or ops manager."""

    if not user.is_manager:
        raise PermissionDeniedError(f"Not authorized to {action}")


def ensure_can_access_caregiver(user: User, caregiver_id: str) -> None:
    """Managers reach every caregiver; carers only themselves."""

    if user.is_manager:
        return
    if user.role == UserRole.CARER and str(user.id) == caregiver_id:
        return
    raise PermissionDeniedError("Not authorized to access this caregiver's records")


def ensure_is_qa_reviewer(user: User) -> None:
    if user.role not in QA_ROLES:
        raise PermissionDeniedError("Not authorized to review assessments")
