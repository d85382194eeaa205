"""Inventory DRF serializers for API input.

Bucket and threshold fields are accepted as text because the ledger feed
sends them that way (``"12"``, ``""``); ``parse_stock_quantity`` turns
them into integers in the DTO layer.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.core.numbers import MAX_QUANTITY


def _legacy_quantity() -> serializers.CharField:
    return serializers.CharField(required=False, allow_blank=True, allow_null=True)


class UpsertInventoryRecordSerializer(serializers.Serializer):
    branch_code = serializers.CharField(max_length=15)
    part_number = serializers.CharField(max_length=100)
    part_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    bucket_a = _legacy_quantity()
    bucket_b = _legacy_quantity()
    bucket_c = _legacy_quantity()
    max_stock = _legacy_quantity()
    rack_location = serializers.CharField(max_length=20, required=False, allow_blank=True)
    narration = serializers.CharField(max_length=50, required=False, allow_blank=True)


class SetStockBucketsSerializer(serializers.Serializer):
    bucket_a = _legacy_quantity()
    bucket_b = _legacy_quantity()
    bucket_c = _legacy_quantity()
    narration = serializers.CharField(max_length=50, required=False, allow_blank=True)


class SetRackLocationSerializer(serializers.Serializer):
    rack_location = serializers.CharField(max_length=20, allow_blank=True)


class StockMovementSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(max_value=MAX_QUANTITY)
    narration = serializers.CharField(
        max_length=50, required=False, allow_blank=True, allow_null=True
    )
