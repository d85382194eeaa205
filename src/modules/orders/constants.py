"""Order domain constants.

Defines status choices and the allowed status transitions of the order
fulfillment workflow.  ``Hold`` is a parking state that can resume into
any non-initial stage; Completed and Cancelled are terminal.
"""

from django.db import models


class OrderStatus(models.TextChoices):
    NEW = "New", "New"
    PENDING = "Pending", "Pending"
    PROCESSING = "Processing", "Processing"
    HOLD = "Hold", "Hold"
    PICKED = "Picked", "Picked"
    DISPATCHED = "Dispatched", "Dispatched"
    COMPLETED = "Completed", "Completed"
    CANCELLED = "Cancelled", "Cancelled"


class OrderItemStatus(models.TextChoices):
    NEW = "New", "New"
    PICKED = "Picked", "Picked"
    DISPATCHED = "Dispatched", "Dispatched"
    CANCELLED = "Cancelled", "Cancelled"


VALID_TRANSITIONS: dict[str, set[str]] = {
    OrderStatus.NEW: {OrderStatus.PENDING, OrderStatus.HOLD, OrderStatus.CANCELLED},
    OrderStatus.PENDING: {
        OrderStatus.PROCESSING,
        OrderStatus.HOLD,
        OrderStatus.CANCELLED,
    },
    OrderStatus.PROCESSING: {
        OrderStatus.PICKED,
        OrderStatus.HOLD,
        OrderStatus.CANCELLED,
    },
    OrderStatus.HOLD: {
        OrderStatus.NEW,
        OrderStatus.PENDING,
        OrderStatus.PROCESSING,
        OrderStatus.PICKED,
        OrderStatus.DISPATCHED,
        OrderStatus.COMPLETED,
        OrderStatus.CANCELLED,
    },
    OrderStatus.PICKED: {OrderStatus.DISPATCHED, OrderStatus.HOLD},
    OrderStatus.DISPATCHED: {OrderStatus.COMPLETED},
    OrderStatus.COMPLETED: set(),
    OrderStatus.CANCELLED: set(),
}

TERMINAL_STATES: set[str] = {OrderStatus.COMPLETED, OrderStatus.CANCELLED}

# Header stamps written when an order enters a status: (by_field, at_field).
STATUS_STAMP_FIELDS: dict[str, tuple[str, str]] = {
    OrderStatus.PROCESSING: ("confirmed_by", "confirmed_at"),
    OrderStatus.PICKED: ("picked_by", "picked_at"),
    OrderStatus.DISPATCHED: ("packed_by", "packed_at"),
    OrderStatus.COMPLETED: ("delivered_by", "delivered_at"),
}

CORRELATION_CODE_PREFIX = "CRM"

ORDER_CREATED_NOTE = "Order created"
