"""Helpers for building DTOs from untrusted input."""

from __future__ import annotations

from typing import Any, Mapping, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from modules.core.exceptions import ValidationError

D = TypeVar("D", bound=BaseModel)


def parse_payload(dto_class: Type[D], data: Union[D, Mapping[str, Any]]) -> D:
    """Validate *data* into *dto_class*, raising the domain ``ValidationError``.

    Already-built DTOs pass through untouched.
    """
    if isinstance(data, dto_class):
        return data
    try:
        return dto_class.model_validate(data)
    except PydanticValidationError as exc:
        details = [
            {
                "code": error["type"],
                "detail": error["msg"],
                "attr": ".".join(str(part) for part in error["loc"]) or None,
            }
            for error in exc.errors()
        ]
        raise ValidationError(
            f"Invalid {dto_class.__name__}: {len(details)} error(s).",
            details=details,
        ) from exc
