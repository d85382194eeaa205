"""Running ``django-filter`` FilterSets from the service layer."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Type

import django_filters
from django.db.models import QuerySet

from modules.core.exceptions import ValidationError


def apply_filterset(
    filterset_class: Type[django_filters.FilterSet],
    params: Optional[Mapping[str, Any]],
    queryset: QuerySet,
) -> QuerySet:
    """Narrow *queryset* with *filterset_class*.

    Raises:
        ValidationError: a filter parameter is malformed.
    """
    filterset = filterset_class(params or {}, queryset=queryset)
    if not filterset.is_valid():
        raise ValidationError(
            "Invalid filter parameters.",
            details=[
                {"code": "invalid", "detail": str(message), "attr": field}
                for field, messages in filterset.errors.items()
                for message in messages
            ],
        )
    return filterset.qs
