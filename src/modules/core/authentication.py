"""Bearer-token authentication that yields an ``Actor``.

The identity provider issues an HS256 JWT whose claims carry the actor
fields (``sub``, ``name``, ``role``, ``company_id``, ``branch_code``,
``retailer_id``).  This backend only verifies the token and maps the
claims; it holds no user table and no role policy.

Security decisions
------------------
* **Fail Closed**: any decode / validation error returns 401.
* ``algorithms`` is pinned from settings, never read from the token.
* ``exp`` is mandatory.
"""

from __future__ import annotations

import jwt as pyjwt
import structlog
from django.conf import settings
from jwt.exceptions import PyJWTError
from rest_framework.authentication import BaseAuthentication
from rest_framework.exceptions import AuthenticationFailed

from modules.core.actors import Actor, Role

logger = structlog.get_logger(__name__)


class ActorJWTAuthentication(BaseAuthentication):
    """DRF authentication class that validates actor Bearer tokens."""

    keyword = "Bearer"

    def authenticate(self, request):
        """Return ``(Actor, token)`` or ``None`` (no credentials)."""
        header = request.META.get("HTTP_AUTHORIZATION", "")
        if not header:
            return None

        token = self._extract_token(header)
        try:
            payload = pyjwt.decode(
                token,
                settings.ACTOR_JWT_SECRET,
                algorithms=[settings.ACTOR_JWT_ALGORITHM],
                options={"require": ["exp", "sub", "role"]},
            )
        except PyJWTError as exc:
            logger.warning("auth.token_rejected", reason=exc.__class__.__name__)
            raise AuthenticationFailed("Invalid or expired token.") from exc

        if payload["role"] not in Role.values:
            logger.warning("auth.unknown_role", role=payload["role"])
            raise AuthenticationFailed("Invalid or expired token.")

        return self._build_actor(payload), token

    def authenticate_header(self, request) -> str:
        return self.keyword

    def _extract_token(self, header: str) -> str:
        parts = header.split()
        if len(parts) != 2 or parts[0] != self.keyword:
            raise AuthenticationFailed("Authorization header must be 'Bearer <token>'.")
        return parts[1]

    @staticmethod
    def _build_actor(payload: dict) -> Actor:
        def _optional(claim: str):
            value = payload.get(claim)
            return str(value) if value not in (None, "") else None

        return Actor(
            id=str(payload["sub"]),
            name=payload.get("name") or str(payload["sub"]),
            role=payload["role"],
            company_id=_optional("company_id"),
            branch_code=_optional("branch_code"),
            retailer_id=_optional("retailer_id"),
        )
