"""Order, OrderItem, and OrderStatusHistory models.

Business rules implemented:
- Status is always one of ``OrderStatus``; transitions are validated at
  the service layer against ``VALID_TRANSITIONS``.
- Completed / Cancelled are terminal: no further header mutation.
- ``correlation_code`` is the human-facing identifier (``CRM-YYYY-XXXXXXXX``),
  generated from a CSPRNG and retried on collision; the UUIDv7 ``id`` is
  used internally.
- ``version`` is bumped on every header transition (compare-and-swap).
- Line item ``sequence`` is unique per order and assigned once.
- Line item ``amount`` = round(mrp * qty * (1 - (basic+scheme+additional)/100)),
  discounts summed additively, recalculated on save.
- Status history rows are append-only.
"""

from __future__ import annotations

import secrets
from decimal import Decimal
from typing import Any

import structlog
from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import IntegrityError, models, transaction
from django.utils import timezone

from modules.core.models import BaseModel
from modules.core.numbers import round_half_up
from modules.orders.constants import (
    CORRELATION_CODE_PREFIX,
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    OrderItemStatus,
    OrderStatus,
)

logger = structlog.get_logger(__name__)

_PERCENT_VALIDATORS = [MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("100"))]


def calculate_item_amount(
    mrp: Decimal,
    quantity: int,
    basic_discount: Decimal = Decimal("0"),
    scheme_discount: Decimal = Decimal("0"),
    additional_discount: Decimal = Decimal("0"),
) -> int:
    """Net line amount, discounts summed (not compounded), rounded half up."""
    total_discount = Decimal(basic_discount) + Decimal(scheme_discount) + Decimal(additional_discount)
    gross = Decimal(mrp) * quantity
    return round_half_up(gross * (1 - total_discount / Decimal(100)))


class Order(BaseModel):
    """Order aggregate root (header)."""

    correlation_code: models.CharField = models.CharField(
        max_length=25, unique=True, editable=False
    )
    retailer: models.ForeignKey = models.ForeignKey(
        "retailers.Retailer",
        on_delete=models.PROTECT,
        related_name="orders",
    )
    branch: models.ForeignKey = models.ForeignKey(
        "branches.Branch",
        on_delete=models.PROTECT,
        related_name="orders",
    )
    placed_by_id: models.CharField = models.CharField(max_length=50)
    placed_by_name: models.CharField = models.CharField(max_length=255)
    placed_at: models.DateTimeField = models.DateTimeField(default=timezone.now)
    status: models.CharField = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.NEW,
    )
    is_urgent: models.BooleanField = models.BooleanField(default=False)
    po_number: models.CharField = models.CharField(max_length=50, blank=True, default="")
    po_date: models.DateTimeField = models.DateTimeField(null=True, blank=True)
    remark: models.TextField = models.TextField(blank=True, default="")
    latitude: models.FloatField = models.FloatField(null=True, blank=True)
    longitude: models.FloatField = models.FloatField(null=True, blank=True)
    is_synced: models.BooleanField = models.BooleanField(default=False)
    last_synced_at: models.DateTimeField = models.DateTimeField(null=True, blank=True)

    confirmed_by: models.CharField = models.CharField(max_length=255, blank=True, default="")
    confirmed_at: models.DateTimeField = models.DateTimeField(null=True, blank=True)
    picked_by: models.CharField = models.CharField(max_length=255, blank=True, default="")
    picked_at: models.DateTimeField = models.DateTimeField(null=True, blank=True)
    packed_by: models.CharField = models.CharField(max_length=255, blank=True, default="")
    packed_at: models.DateTimeField = models.DateTimeField(null=True, blank=True)
    delivered_by: models.CharField = models.CharField(max_length=255, blank=True, default="")
    delivered_at: models.DateTimeField = models.DateTimeField(null=True, blank=True)

    version: models.PositiveIntegerField = models.PositiveIntegerField(default=1)

    class Meta:
        db_table = "orders"
        ordering = ["-placed_at"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["-placed_at"], name="orders_placed_idx"),
            models.Index(fields=["branch", "status"], name="orders_branch_status_idx"),
        ]

    # ------------------------------------------------------------------
    # State Machine helpers
    # ------------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        """Return ``True`` if the order is in a terminal state."""
        return self.status in TERMINAL_STATES

    def can_transition_to(self, new_status: str) -> bool:
        """Check whether transitioning to *new_status* is valid."""
        allowed = VALID_TRANSITIONS.get(self.status, set())
        return new_status in allowed

    # ------------------------------------------------------------------
    # Correlation code generation
    # ------------------------------------------------------------------

    @staticmethod
    def generate_correlation_code() -> str:
        """Generate a human-facing code: ``CRM-YYYY-XXXXXXXX`` (32 random bits)."""
        suffix = secrets.token_hex(4).upper()
        return f"{CORRELATION_CODE_PREFIX}-{timezone.now():%Y}-{suffix}"

    @staticmethod
    def correlation_code_taken(code: str) -> bool:
        return Order.objects.filter(correlation_code=code).exists()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, *args: Any, **kwargs: Any) -> None:
        if self.correlation_code:
            super().save(*args, **kwargs)
            return

        # The pre-check only narrows the window: a concurrent insert can still
        # claim the same code, which surfaces as an IntegrityError on the
        # unique index and is retried inside a savepoint.
        max_retries = settings.CORRELATION_CODE_MAX_RETRIES
        for attempt in range(1, max_retries + 1):
            candidate = self.generate_correlation_code()
            if self.correlation_code_taken(candidate):
                logger.warning("order.correlation_code_collision", attempt=attempt)
                continue
            self.correlation_code = candidate
            try:
                with transaction.atomic():
                    super().save(*args, **kwargs)
                return
            except IntegrityError as exc:
                self.correlation_code = ""
                if "correlation_code" not in str(exc):
                    raise
                logger.warning(
                    "order.correlation_code_collision", attempt=attempt, on_insert=True
                )
        raise RuntimeError(
            f"Failed to generate unique correlation_code after {max_retries} attempts"
        )

    def __str__(self) -> str:
        return f"{self.correlation_code} ({self.status})"


class OrderItem(BaseModel):
    """Line item of an order.

    ``unit_price`` (MRP) and the three discount percentages are snapshots taken at
    order time.  Only ``dispatched_quantity`` may change afterwards.
    """

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )
    sequence: models.PositiveIntegerField = models.PositiveIntegerField(editable=False)
    part_number: models.CharField = models.CharField(max_length=100)
    part_name: models.CharField = models.CharField(max_length=255, blank=True, default="")
    quantity: models.PositiveIntegerField = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
    )
    dispatched_quantity: models.PositiveIntegerField = models.PositiveIntegerField(default=0)
    unit_price: models.DecimalField = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
    )
    basic_discount: models.DecimalField = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal("0"), validators=_PERCENT_VALIDATORS
    )
    scheme_discount: models.DecimalField = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal("0"), validators=_PERCENT_VALIDATORS
    )
    additional_discount: models.DecimalField = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal("0"), validators=_PERCENT_VALIDATORS
    )
    amount: models.BigIntegerField = models.BigIntegerField(editable=False)
    is_urgent: models.BooleanField = models.BooleanField(default=False)
    status: models.CharField = models.CharField(
        max_length=25,
        choices=OrderItemStatus.choices,
        default=OrderItemStatus.NEW,
    )

    class Meta:
        db_table = "order_items"
        ordering = ["order", "sequence"]
        constraints = [
            models.UniqueConstraint(
                fields=["order", "sequence"],
                name="order_items_order_sequence_unique",
            ),
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="order_items_quantity_positive",
            ),
        ]

    def save(self, *args: Any, **kwargs: Any) -> None:
        self.amount = calculate_item_amount(
            self.unit_price,
            self.quantity,
            self.basic_discount,
            self.scheme_discount,
            self.additional_discount,
        )
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"#{self.sequence} {self.part_number} x{self.quantity}"


class OrderStatusHistory(BaseModel):
    """Append-only audit trail for order status transitions.

    The first row of every order has ``previous_status = None``.  Actor
    identity is copied (not linked) so the trail survives user changes.
    """

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="status_history",
    )
    previous_status: models.CharField = models.CharField(  # noqa: DJ01
        max_length=20,
        choices=OrderStatus.choices,
        null=True,
        blank=True,
    )
    status: models.CharField = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
    )
    actor_id: models.CharField = models.CharField(max_length=50)
    actor_name: models.CharField = models.CharField(max_length=255, blank=True, default="")
    actor_role: models.CharField = models.CharField(max_length=20, blank=True, default="")
    note: models.TextField = models.TextField(blank=True, default="")
    timestamp: models.DateTimeField = models.DateTimeField(default=timezone.now)
    ip_address: models.GenericIPAddressField = models.GenericIPAddressField(
        null=True, blank=True
    )
    user_agent: models.TextField = models.TextField(blank=True, default="")
    request_id: models.CharField = models.CharField(max_length=255, blank=True, default="")
    system_generated: models.BooleanField = models.BooleanField(default=False)
    metadata: models.JSONField = models.JSONField(null=True, blank=True, default=None)

    class Meta:
        db_table = "order_status_history"
        ordering = ["timestamp", "id"]
        indexes = [
            models.Index(fields=["order", "timestamp"], name="osh_order_ts_idx"),
            models.Index(fields=["timestamp"], name="osh_ts_idx"),
            models.Index(fields=["status"], name="osh_status_idx"),
        ]

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self._state.adding:
            raise RuntimeError("Status history entries are append-only.")
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.order_id} : {self.previous_status} -> {self.status}"
