"""Read-only access to retailers."""

from __future__ import annotations

from typing import Optional

from django.core.exceptions import ValidationError

from modules.retailers.models import Retailer


class RetailerDjangoRepository:
    def get_by_id(self, id: object) -> Optional[Retailer]:
        """Return ``None`` for non-existent or malformed IDs."""
        try:
            return Retailer.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None
