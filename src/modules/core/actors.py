"""Identity context consumed by the order and inventory services.

The services never read users, sessions or globals.  Callers hand them an
``Actor`` (who is acting) and, for audited writes, a
``RequestProvenance`` (where the request came from).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Optional

from django.db import models

from modules.core.middleware import correlation_id_var


class Role(models.TextChoices):
    SUPER_ADMIN = "super_admin", "Super Admin"
    ADMIN = "admin", "Admin"
    MANAGER = "manager", "Manager"
    STOREMAN = "storeman", "Storeman"
    SALESMAN = "salesman", "Salesman"
    RETAILER = "retailer", "Retailer"


@dataclass(frozen=True)
class Actor:
    """The authenticated principal performing an operation.

    Doubles as ``request.user`` for DRF, hence ``is_authenticated``.
    """

    id: str
    name: str
    role: str
    company_id: Optional[str] = None
    branch_code: Optional[str] = None
    retailer_id: Optional[str] = None

    is_authenticated: ClassVar[bool] = True
    is_active: ClassVar[bool] = True

    @property
    def pk(self) -> str:
        return self.id

    @property
    def is_super_admin(self) -> bool:
        return self.role == Role.SUPER_ADMIN

    def __str__(self) -> str:
        return f"{self.name} ({self.role})"


SYSTEM_ACTOR = Actor(id="system", name="System", role=Role.SUPER_ADMIN)


@dataclass(frozen=True)
class RequestProvenance:
    """Origin of a request, recorded on every audit row."""

    ip_address: Optional[str] = None
    user_agent: str = ""
    request_id: str = ""

    @classmethod
    def from_request(cls, request: Any) -> RequestProvenance:
        meta = getattr(request, "META", {})
        forwarded = meta.get("HTTP_X_FORWARDED_FOR", "")
        ip_address = forwarded.split(",")[0].strip() if forwarded else meta.get("REMOTE_ADDR")
        return cls(
            ip_address=ip_address or None,
            user_agent=meta.get("HTTP_USER_AGENT", "")[:512],
            request_id=correlation_id_var.get(),
        )
