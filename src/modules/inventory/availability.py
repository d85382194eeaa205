"""Read-time fulfillment evaluation of order items against the ledger.

Nothing here is cached: every order-detail view re-reads the ledger, so
the answer reflects inventory at the moment of the read.  Inventory is
not locked, so an item reported "Available" may be gone by pick time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Iterable, Optional
from uuid import UUID

import structlog
from django.db import models
from pydantic import BaseModel, ConfigDict

from modules.inventory.models import InventoryRecord

if TYPE_CHECKING:
    from modules.inventory.repositories import InventoryDjangoRepository
    from modules.orders.models import Order

logger = structlog.get_logger(__name__)


class FulfillmentStatus(models.TextChoices):
    AVAILABLE = "Available", "Available"
    INSUFFICIENT_STOCK = "Insufficient Stock", "Insufficient Stock"
    OUT_OF_STOCK = "Out of Stock", "Out of Stock"
    NOT_AVAILABLE = "Not Available", "Not Available"


def evaluate_item(
    ordered_quantity: int, record: Optional[InventoryRecord]
) -> FulfillmentStatus:
    """Classify one line item; checks run in priority order."""
    if record is None:
        return FulfillmentStatus.NOT_AVAILABLE
    on_hand = record.total_stock
    if on_hand <= 0:
        return FulfillmentStatus.OUT_OF_STOCK
    if on_hand < ordered_quantity:
        return FulfillmentStatus.INSUFFICIENT_STOCK
    return FulfillmentStatus.AVAILABLE


class InventorySummaryDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_items: int
    available: int
    insufficient_stock: int
    out_of_stock: int
    not_available: int
    can_fulfill: bool


def summarize(statuses: Iterable[FulfillmentStatus]) -> InventorySummaryDTO:
    statuses = list(statuses)
    counts = {status: statuses.count(status) for status in FulfillmentStatus}
    return InventorySummaryDTO(
        total_items=len(statuses),
        available=counts[FulfillmentStatus.AVAILABLE],
        insufficient_stock=counts[FulfillmentStatus.INSUFFICIENT_STOCK],
        out_of_stock=counts[FulfillmentStatus.OUT_OF_STOCK],
        not_available=counts[FulfillmentStatus.NOT_AVAILABLE],
        can_fulfill=all(s == FulfillmentStatus.AVAILABLE for s in statuses),
    )


@dataclass(frozen=True)
class OrderAvailability:
    item_statuses: Dict[UUID, FulfillmentStatus] = field(default_factory=dict)
    records: Dict[str, InventoryRecord] = field(default_factory=dict)
    summary: Optional[InventorySummaryDTO] = None


class AvailabilityEvaluator:
    """Joins an order's items with the placing branch's ledger records."""

    def __init__(self, inventory_repository: InventoryDjangoRepository) -> None:
        self._inventory_repo = inventory_repository

    def evaluate(self, order: Order) -> OrderAvailability:
        items = list(order.items.all())
        records = self._inventory_repo.for_parts(
            order.branch_id, {item.part_number for item in items}
        )
        statuses = {
            item.id: evaluate_item(item.quantity, records.get(item.part_number))
            for item in items
        }
        summary = summarize(statuses[item.id] for item in items)
        logger.debug(
            "inventory.availability_evaluated",
            order_id=str(order.id),
            can_fulfill=summary.can_fulfill,
        )
        return OrderAvailability(item_statuses=statuses, records=records, summary=summary)
