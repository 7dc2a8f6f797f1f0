from __future__ import annotations

from typing import Dict, Union

from pydantic import BaseModel

from src.homecare.domain.models.credential import CredentialStatus


DEFAULT_VARIANT = "default"


class StatusPresentation(BaseModel):
    """Badge variant and human label for a credential status."""

    variant: str
    label: str


STATUS_PRESENTATION: Dict[CredentialStatus, StatusPresentation] = {
    CredentialStatus.ACTIVE: StatusPresentation(variant="success", label="Active"),
    CredentialStatus.EXPIRING_SOON: StatusPresentation(variant="warning", label="Expiring Soon"),
    CredentialStatus.EXPIRED: StatusPresentation(variant="error", label="Expired"),
    CredentialStatus.PENDING_VERIFICATION: StatusPresentation(variant="default", label="Pending"),
    CredentialStatus.REVOKED: StatusPresentation(variant="error", label="Revoked"),
}


def present_status(status: Union[CredentialStatus, str]) -> StatusPresentation:
    """Look up the presentation for a credential status.

    Unknown values fall back to the default variant with the raw string as
    the label, so a status added server-side never breaks the display.
    """

    raw = status.value if isinstance(status, CredentialStatus) else str(status)
    try:
        known = CredentialStatus(raw)
    except ValueError:
        return StatusPresentation(variant=DEFAULT_VARIANT, label=raw)
    return STATUS_PRESENTATION[known].model_copy()
