from __future__ import annotations

from contextvars import ContextVar
from typing import Optional

from fastapi import Header


DEFAULT_AGENCY = "default"

# Context variable storing the agency identifier for the in-flight request.
# Defaults to "default" so single-agency clients/tests work without
# specifying X-Agency-ID.
_current_agency: ContextVar[str] = ContextVar("current_agency", default=DEFAULT_AGENCY)


def get_current_agency() -> str:
    """Return the current agency identifier.

    In HTTP requests this is set by :func:`agency_dependency`. In non-request
    contexts (e.g., direct service calls in tests) it falls back to "default".
    """

    return _current_agency.get()


def set_current_agency(agency_id: str) -> None:
    """Switch the agency context outside of a request (background jobs, tests)."""

    _current_agency.set(agency_id)


async def agency_dependency(
    x_agency_id: Optional[str] = Header(None, alias="X-Agency-ID"),
) -> str:
    """FastAPI dependency that establishes the agency context for a request.

    If the header is absent, we fall back to the "default" agency.
    """

    agency_id = x_agency_id or DEFAULT_AGENCY
    _current_agency.set(agency_id)
    return agency_id
