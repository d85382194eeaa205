"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF Serializers)
and the Service layer.  DTOs are immutable (``frozen=True``).

- ``CreateOrderItemDTO``: input for a single order line item.
- ``CreateOrderDTO``: input for order creation (nested items).
- ``OrderSummaryDTO``: header row for listings and creation responses.
- ``OrderDetailDTO``: header plus items, timeline and live availability.
- ``StatusHistoryEntryDTO``: one audit row.
- ``StatusStatsDTO``: status-history aggregates over a timeframe.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from modules.core.numbers import MAX_QUANTITY
from modules.inventory.availability import FulfillmentStatus, InventorySummaryDTO

if TYPE_CHECKING:
    from modules.inventory.availability import OrderAvailability
    from modules.orders.models import Order, OrderItem, OrderStatusHistory


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateOrderItemDTO(BaseModel):
    """Immutable DTO for a single order line in a creation request.

    ``mrp`` and the discount percentages are snapshotted onto the line.
    """

    model_config = ConfigDict(frozen=True)

    part_number: str = Field(min_length=1, max_length=100)
    part_name: str = Field(default="", max_length=255)
    quantity: int = Field(le=MAX_QUANTITY)
    mrp: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    basic_discount: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    scheme_discount: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    additional_discount: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    urgent: bool = False

    @field_validator("part_number")
    @classmethod
    def part_number_must_not_be_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Part number is required.")
        return v

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be at least 1.")
        return v


class CreateOrderDTO(BaseModel):
    """Immutable DTO for order creation requests.

    Validates:
    - ``items`` must contain at least one item.
    - Each item quantity must be positive.
    """

    model_config = ConfigDict(frozen=True)

    retailer_id: UUID
    po_number: str = Field(default="", max_length=50)
    po_date: Optional[datetime] = None
    urgent: bool = False
    remark: str = Field(default="", max_length=1000)
    branch: Optional[str] = Field(default=None, max_length=15)
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    items: List[CreateOrderItemDTO]

    @field_validator("items")
    @classmethod
    def items_must_not_be_empty(
        cls, v: List[CreateOrderItemDTO]
    ) -> List[CreateOrderItemDTO]:
        if not v:
            raise ValueError("Order must have at least one item.")
        return v


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class StatusHistoryEntryDTO(BaseModel):
    """Immutable DTO for order status history API responses."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    status: str
    previous_status: Optional[str]
    actor_name: str
    actor_role: str
    note: str
    timestamp: datetime
    system_generated: bool

    @classmethod
    def from_entity(cls, history: OrderStatusHistory) -> StatusHistoryEntryDTO:
        return cls(
            id=history.id,
            status=history.status,
            previous_status=history.previous_status,
            actor_name=history.actor_name,
            actor_role=history.actor_role,
            note=history.note,
            timestamp=history.timestamp,
            system_generated=history.system_generated,
        )


class OrderItemOutputDTO(BaseModel):
    """Immutable DTO for order item API responses."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    sequence: int
    part_number: str
    part_name: str
    quantity: int
    dispatched_quantity: int
    unit_price: Decimal
    basic_discount: Decimal
    scheme_discount: Decimal
    additional_discount: Decimal
    amount: int
    is_urgent: bool
    status: str
    fulfillment_status: Optional[FulfillmentStatus] = None
    available_stock: Optional[int] = None

    @classmethod
    def from_entity(
        cls,
        item: OrderItem,
        fulfillment_status: Optional[FulfillmentStatus] = None,
        available_stock: Optional[int] = None,
    ) -> OrderItemOutputDTO:
        return cls(
            id=item.id,
            sequence=item.sequence,
            part_number=item.part_number,
            part_name=item.part_name,
            quantity=item.quantity,
            dispatched_quantity=item.dispatched_quantity,
            unit_price=item.unit_price,
            basic_discount=item.basic_discount,
            scheme_discount=item.scheme_discount,
            additional_discount=item.additional_discount,
            amount=item.amount,
            is_urgent=item.is_urgent,
            status=item.status,
            fulfillment_status=fulfillment_status,
            available_stock=available_stock,
        )


class OrderSummaryDTO(BaseModel):
    """Header view of an order, enriched with retailer display fields."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    correlation_code: str
    retailer_id: UUID
    retailer_name: str
    retailer_contact: str
    branch: str
    branch_name: str
    status: str
    is_urgent: bool
    po_number: str
    po_date: Optional[datetime]
    placed_by_name: str
    placed_at: datetime
    item_count: int
    version: int

    @classmethod
    def header_fields(cls, order: Order) -> dict:
        item_count = getattr(order, "item_count", None)
        if item_count is None:
            item_count = order.items.count()
        return {
            "id": order.id,
            "correlation_code": order.correlation_code,
            "retailer_id": order.retailer_id,
            "retailer_name": order.retailer.name,
            "retailer_contact": order.retailer.contact_person,
            "branch": order.branch_id,
            "branch_name": order.branch.name,
            "status": order.status,
            "is_urgent": order.is_urgent,
            "po_number": order.po_number,
            "po_date": order.po_date,
            "placed_by_name": order.placed_by_name,
            "placed_at": order.placed_at,
            "item_count": item_count,
            "version": order.version,
        }

    @classmethod
    def from_entity(cls, order: Order) -> OrderSummaryDTO:
        """Assumes ``retailer`` and ``branch`` are select-related."""
        return cls(**cls.header_fields(order))


class OrderDetailDTO(OrderSummaryDTO):
    """Full order view: header, stamps, items with live fulfillment, timeline."""

    remark: str
    latitude: Optional[float]
    longitude: Optional[float]
    confirmed_by: str
    confirmed_at: Optional[datetime]
    picked_by: str
    picked_at: Optional[datetime]
    packed_by: str
    packed_at: Optional[datetime]
    delivered_by: str
    delivered_at: Optional[datetime]
    total_amount: int
    items: List[OrderItemOutputDTO]
    status_history: List[StatusHistoryEntryDTO]
    inventory_summary: InventorySummaryDTO

    @classmethod
    def build(cls, order: Order, availability: OrderAvailability) -> OrderDetailDTO:
        """Assemble the detail view.

        Assumes ``items`` and ``status_history`` are prefetched.
        """
        items = []
        for item in order.items.all():
            record = availability.records.get(item.part_number)
            items.append(
                OrderItemOutputDTO.from_entity(
                    item,
                    fulfillment_status=availability.item_statuses.get(item.id),
                    available_stock=record.total_stock if record is not None else None,
                )
            )
        history = [StatusHistoryEntryDTO.from_entity(h) for h in order.status_history.all()]
        header = cls.header_fields(order)
        header["item_count"] = len(items)
        return cls(
            **header,
            remark=order.remark,
            latitude=order.latitude,
            longitude=order.longitude,
            confirmed_by=order.confirmed_by,
            confirmed_at=order.confirmed_at,
            picked_by=order.picked_by,
            picked_at=order.picked_at,
            packed_by=order.packed_by,
            packed_at=order.packed_at,
            delivered_by=order.delivered_by,
            delivered_at=order.delivered_at,
            total_amount=sum(item.amount for item in items),
            items=items,
            status_history=history,
            inventory_summary=availability.summary,
        )


class StatusCountDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: str
    count: int
    unique_orders: int


class TransitionCountDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    previous_status: Optional[str]
    status: str
    count: int


class StatusStatsDTO(BaseModel):
    """Status-history aggregates for the last ``timeframe_days`` days."""

    model_config = ConfigDict(frozen=True)

    timeframe_days: int
    since: datetime
    by_status: List[StatusCountDTO]
    transitions: List[TransitionCountDTO]
