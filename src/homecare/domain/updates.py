from __future__ import annotations

from typing import Any, Dict, TypeVar

from pydantic import BaseModel, ValidationError

from src.homecare.domain.errors import ValidationFailedError

ModelT = TypeVar("ModelT", bound=BaseModel)


def apply_updates(record: ModelT, updates: Dict[str, Any]) -> ModelT:
    """Return ``record`` with ``updates`` applied, re-validated as a whole.

    ``model_copy(update=...)`` skips validation, so a partial update carrying
    an explicit ``None`` for a required field would otherwise be stored as is.
    """

    try:
        return type(record).model_validate({**record.model_dump(), **updates})
    except ValidationError as exc:
        problems = [
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        ]
        raise ValidationFailedError("Invalid update", problems) from exc
