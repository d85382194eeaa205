"""Domain error taxonomy and its HTTP rendering.

Every module raises subclasses of ``DomainError``.  The API layer never
builds error payloads by hand: ``api_exception_handler`` (wired through
``REST_FRAMEWORK["EXCEPTION_HANDLER"]``) renders them in the standard
``{"type": ..., "errors": [...]}`` envelope.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = structlog.get_logger(__name__)


class DomainError(Exception):
    """Base class for business-rule violations."""

    code = "error"
    status_code = status.HTTP_400_BAD_REQUEST
    error_type = "client_error"

    def __init__(self, message: str = "", details: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or []


class ValidationError(DomainError):
    """Malformed or missing input.  Raised before any write."""

    code = "invalid"
    error_type = "validation_error"


class NotFound(DomainError):
    """The referenced entity does not exist."""

    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class AccessDenied(DomainError):
    """The actor's scope excludes the target order or branch."""

    code = "permission_denied"
    status_code = status.HTTP_403_FORBIDDEN


class Conflict(DomainError):
    """The write lost a race against a concurrent writer."""

    code = "conflict"
    status_code = status.HTTP_409_CONFLICT


class TransactionFailure(DomainError):
    """A write failed mid-transaction and was fully rolled back.

    The message is always generic; the root cause is logged where the
    failure is caught, never surfaced to the client.
    """

    code = "transaction_failed"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_type = "server_error"

    def __init__(self, message: str = "The operation could not be completed."):
        super().__init__(message)


def api_exception_handler(exc: Exception, context: Dict[str, Any]) -> Optional[Response]:
    """DRF exception handler producing the standard error envelope."""
    if isinstance(exc, DomainError):
        errors = exc.details or [{"code": exc.code, "detail": exc.message, "attr": None}]
        logger.info(
            "api.domain_error",
            error=exc.__class__.__name__,
            status_code=exc.status_code,
        )
        return Response(
            {"type": exc.error_type, "errors": errors},
            status=exc.status_code,
        )

    response = exception_handler(exc, context)
    if response is None:
        return None

    response.data = {
        "type": "client_error" if response.status_code < 500 else "server_error",
        "errors": _flatten_drf_errors(response.data),
    }
    return response


def _flatten_drf_errors(data: Any, attr: Optional[str] = None) -> List[Dict[str, Any]]:
    if isinstance(data, dict):
        if "detail" in data and len(data) == 1:
            detail = data["detail"]
            return [
                {
                    "code": getattr(detail, "code", "error"),
                    "detail": str(detail),
                    "attr": attr,
                }
            ]
        errors: List[Dict[str, Any]] = []
        for key, value in data.items():
            child = key if attr is None else f"{attr}.{key}"
            errors.extend(_flatten_drf_errors(value, child))
        return errors
    if isinstance(data, list):
        errors = []
        for index, value in enumerate(data):
            if isinstance(value, (dict, list)):
                child = str(index) if attr is None else f"{attr}.{index}"
                errors.extend(_flatten_drf_errors(value, child))
            else:
                errors.extend(_flatten_drf_errors(value, attr))
        return errors
    return [{"code": getattr(data, "code", "invalid"), "detail": str(data), "attr": attr}]
