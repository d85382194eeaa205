"""Inventory DTOs.

Input DTOs accept the legacy numeric-as-text bucket format (``"12"``,
``""``) and normalise it to ``int`` so no string-typed quantity travels
past this module.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from modules.core.numbers import MAX_QUANTITY, round_half_up
from modules.inventory.classification import (
    AlertUrgency,
    StockLevel,
    alert_urgency,
    classify_stock,
    stock_percentage,
)
from modules.inventory.models import InventoryRecord


def parse_stock_quantity(value: Any) -> int:
    """Parse a bucket/threshold value to a non-negative integer.

    ``None`` and blank strings mean 0.  Integral decimals (``"12.0"``) are
    accepted; fractions, negatives, booleans, values above ``MAX_QUANTITY``
    and garbage are rejected.
    """
    if value is None:
        return 0
    if isinstance(value, bool):
        raise ValueError("Stock quantity must be a number, not a boolean.")
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0
    try:
        number = Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"Stock quantity {value!r} is not a number.") from exc
    if not number.is_finite() or number != number.to_integral_value():
        raise ValueError(f"Stock quantity {value!r} must be a whole number.")
    if number < 0:
        raise ValueError(f"Stock quantity {value!r} cannot be negative.")
    if number > MAX_QUANTITY:
        raise ValueError(f"Stock quantity {value!r} exceeds {MAX_QUANTITY}.")
    return int(number)


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class UpsertInventoryRecordDTO(BaseModel):
    """Create-or-update payload for a ledger record."""

    model_config = ConfigDict(frozen=True)

    branch_code: str = Field(min_length=1, max_length=15)
    part_number: str = Field(min_length=1, max_length=100)
    part_name: str = Field(default="", max_length=255)
    bucket_a: int = 0
    bucket_b: int = 0
    bucket_c: int = 0
    max_stock: int = 0
    rack_location: str = Field(default="", max_length=20)
    narration: str = Field(default="", max_length=50)

    @field_validator("bucket_a", "bucket_b", "bucket_c", "max_stock", mode="before")
    @classmethod
    def parse_legacy_quantities(cls, v: Any) -> int:
        return parse_stock_quantity(v)


class SetStockBucketsDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    bucket_a: int = 0
    bucket_b: int = 0
    bucket_c: int = 0
    narration: str = Field(default="", max_length=50)

    @field_validator("bucket_a", "bucket_b", "bucket_c", mode="before")
    @classmethod
    def parse_legacy_quantities(cls, v: Any) -> int:
        return parse_stock_quantity(v)


class StockMovementDTO(BaseModel):
    """Sale or purchase notification; the quantity is validated, not applied."""

    model_config = ConfigDict(frozen=True)

    quantity: int = Field(le=MAX_QUANTITY)
    narration: Optional[str] = Field(default=None, max_length=50)

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("A valid quantity is required.")
        return v


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class InventoryViewDTO(BaseModel):
    """Ledger record enriched with computed stock indicators."""

    model_config = ConfigDict(frozen=True)

    branch_code: str
    branch_name: str
    part_number: str
    part_name: str
    bucket_a: int
    bucket_b: int
    bucket_c: int
    rack_location: str
    last_sale_at: Optional[datetime]
    last_purchase_at: Optional[datetime]
    narration: str
    last_synced_at: Optional[datetime]
    total_stock: int
    max_stock: int
    stock_percentage: int
    stock_level: StockLevel

    @classmethod
    def from_entity(cls, record: InventoryRecord) -> InventoryViewDTO:
        return cls(
            branch_code=record.branch_id,
            branch_name=record.branch.name,
            part_number=record.part_number,
            part_name=record.part_name,
            bucket_a=record.bucket_a,
            bucket_b=record.bucket_b,
            bucket_c=record.bucket_c,
            rack_location=record.rack_location,
            last_sale_at=record.last_sale_at,
            last_purchase_at=record.last_purchase_at,
            narration=record.narration,
            last_synced_at=record.last_synced_at,
            total_stock=record.total_stock,
            max_stock=record.max_stock,
            stock_percentage=round_half_up(
                stock_percentage(record.total_stock, record.max_stock)
            ),
            stock_level=classify_stock(record.total_stock, record.max_stock),
        )


class LowStockAlertDTO(InventoryViewDTO):
    urgency: AlertUrgency

    @classmethod
    def from_entity(cls, record: InventoryRecord) -> LowStockAlertDTO:
        view = InventoryViewDTO.from_entity(record)
        return cls(
            **view.model_dump(),
            urgency=alert_urgency(record.total_stock, record.max_stock),
        )


class BranchStockStatsDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    branch_code: str
    total_items: int
    total_stock: int
    avg_stock: float
    low_stock_items: int
    out_of_stock_items: int
    unique_racks: int
