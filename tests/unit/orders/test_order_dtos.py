"""Unit tests for Order DTOs.

Covers:
- CreateOrderItemDTO: quantity, price and discount validation, immutability.
- CreateOrderDTO: items list validation, field limits.
- parse_payload: pydantic errors become the domain ValidationError.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest
from pydantic import ValidationError

from modules.core.dtos import parse_payload
from modules.core.numbers import MAX_QUANTITY
from modules.core.exceptions import ValidationError as DomainValidationError
from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO

pytestmark = pytest.mark.unit


def _item(**overrides):
    data = {"part_number": "BP-1001", "quantity": 2, "mrp": Decimal("100")}
    data.update(overrides)
    return data


# ===========================================================================
# CreateOrderItemDTO
# ===========================================================================


class TestCreateOrderItemDTO:
    def test_defaults(self):
        dto = CreateOrderItemDTO(**_item())
        assert dto.basic_discount == dto.scheme_discount == dto.additional_discount == 0
        assert dto.urgent is False
        assert dto.part_name == ""

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_quantity_must_be_positive(self, quantity):
        with pytest.raises(ValidationError, match="Quantity must be at least 1"):
            CreateOrderItemDTO(**_item(quantity=quantity))

    def test_quantity_capped_at_integer_column_range(self):
        assert CreateOrderItemDTO(**_item(quantity=MAX_QUANTITY)).quantity == MAX_QUANTITY
        for quantity in (MAX_QUANTITY + 1, 10**19):
            with pytest.raises(ValidationError):
                CreateOrderItemDTO(**_item(quantity=quantity))

    def test_negative_mrp_raises(self):
        with pytest.raises(ValidationError):
            CreateOrderItemDTO(**_item(mrp=Decimal("-0.01")))

    @pytest.mark.parametrize("field", ["basic_discount", "scheme_discount", "additional_discount"])
    def test_discount_above_hundred_raises(self, field):
        with pytest.raises(ValidationError):
            CreateOrderItemDTO(**_item(**{field: Decimal("100.01")}))

    def test_blank_part_number_raises(self):
        with pytest.raises(ValidationError):
            CreateOrderItemDTO(**_item(part_number="   "))

    def test_is_frozen(self):
        dto = CreateOrderItemDTO(**_item())
        with pytest.raises(ValidationError):
            dto.quantity = 5


# ===========================================================================
# CreateOrderDTO
# ===========================================================================


class TestCreateOrderDTO:
    def test_valid_order(self):
        dto = CreateOrderDTO(retailer_id=uuid4(), items=[_item()])
        assert len(dto.items) == 1
        assert dto.branch is None
        assert dto.po_number == ""

    def test_empty_items_raises(self):
        with pytest.raises(ValidationError, match="at least one item"):
            CreateOrderDTO(retailer_id=uuid4(), items=[])

    def test_po_number_limited_to_fifty_characters(self):
        with pytest.raises(ValidationError):
            CreateOrderDTO(retailer_id=uuid4(), po_number="P" * 51, items=[_item()])

    def test_remark_limited_to_thousand_characters(self):
        with pytest.raises(ValidationError):
            CreateOrderDTO(retailer_id=uuid4(), remark="r" * 1001, items=[_item()])

    def test_latitude_out_of_range_raises(self):
        with pytest.raises(ValidationError):
            CreateOrderDTO(retailer_id=uuid4(), latitude=91, items=[_item()])


class TestParsePayload:
    def test_errors_carry_field_paths(self):
        with pytest.raises(DomainValidationError) as exc_info:
            parse_payload(
                CreateOrderDTO,
                {"retailer_id": str(uuid4()), "items": [_item(quantity=0)]},
            )
        attrs = [error["attr"] for error in exc_info.value.details]
        assert "items.0.quantity" in attrs

    def test_existing_dto_passes_through(self):
        dto = CreateOrderDTO(retailer_id=uuid4(), items=[_item()])
        assert parse_payload(CreateOrderDTO, dto) is dto
