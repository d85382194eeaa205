"""Order domain exceptions.

Raised by the Service Layer when business rules are violated.
``modules.core.exceptions.api_exception_handler`` translates them into
HTTP responses.
"""

from __future__ import annotations

from modules.core.exceptions import Conflict, DomainError, NotFound


class OrderNotFound(NotFound):
    """The requested order does not exist."""


class InvalidTransition(DomainError):
    """The target status is not reachable from the current status."""

    code = "invalid_transition"

    def __init__(self, current_status: str, target_status: str) -> None:
        super().__init__(
            f"Cannot transition order from {current_status} to {target_status}."
        )
        self.current_status = current_status
        self.target_status = target_status


class TransitionConflict(Conflict):
    """Another writer changed the order since the caller last read it."""
