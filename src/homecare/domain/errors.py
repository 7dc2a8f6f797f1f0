from __future__ import annotations

from typing import List, Optional


class HomecareError(Exception):
    """Base class for errors raised by the service layer.

    Each subclass carries the HTTP status the API layer reports it with, so
    services stay free of FastAPI imports.
    """

    status_code: int = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(HomecareError):
    status_code = 404


class ConflictError(HomecareError):
    status_code = 409


class PermissionDeniedError(HomecareError):
    status_code = 403


class ValidationFailedError(HomecareError):
    status_code = 400

    def __init__(self, message: str, problems: Optional[List[str]] = None) -> None:
        super().__init__(message)
        self.problems = problems or [message]
