"""Order DRF serializers for API input.

The serializer operates at the Interface layer (API Views): it checks the
request shape and hands plain data to the Service Layer, which builds the
Pydantic DTOs from ``dtos.py`` and enforces the business rules.  Responses
are rendered from those DTOs, not from serializers.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.core.numbers import MAX_QUANTITY


class CreateOrderItemSerializer(serializers.Serializer):
    """Validates a single item in an order creation request."""

    part_number = serializers.CharField(max_length=100)
    part_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    quantity = serializers.IntegerField(min_value=1, max_value=MAX_QUANTITY)
    mrp = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    basic_discount = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=0, max_value=100, required=False
    )
    scheme_discount = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=0, max_value=100, required=False
    )
    additional_discount = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=0, max_value=100, required=False
    )
    urgent = serializers.BooleanField(required=False, default=False)


class CreateOrderSerializer(serializers.Serializer):
    """Validates the order creation request payload."""

    retailer_id = serializers.UUIDField()
    po_number = serializers.CharField(max_length=50, required=False, allow_blank=True)
    po_date = serializers.DateTimeField(required=False, allow_null=True)
    urgent = serializers.BooleanField(required=False, default=False)
    remark = serializers.CharField(max_length=1000, required=False, allow_blank=True)
    branch = serializers.CharField(max_length=15, required=False, allow_null=True)
    latitude = serializers.FloatField(required=False, allow_null=True)
    longitude = serializers.FloatField(required=False, allow_null=True)
    items = CreateOrderItemSerializer(many=True, allow_empty=False)


class StatusUpdateSerializer(serializers.Serializer):
    """Validates a status transition request."""

    status = serializers.CharField(max_length=20)
    note = serializers.CharField(max_length=1000, required=False, allow_blank=True, default="")
    expected_version = serializers.IntegerField(min_value=1, required=False)


class CancelOrderSerializer(serializers.Serializer):
    note = serializers.CharField(max_length=1000, required=False, allow_blank=True, default="")
    expected_version = serializers.IntegerField(min_value=1, required=False)


class StatusStatsQuerySerializer(serializers.Serializer):
    days = serializers.IntegerField(min_value=1, max_value=3650, required=False)
