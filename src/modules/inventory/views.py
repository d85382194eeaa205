"""Inventory ledger API views.

Records are addressed by their natural key ``(branch_code, part_number)``
rather than by surrogate id.  Domain exceptions propagate to the shared
DRF exception handler.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from modules.branches.repositories import BranchDjangoRepository
from modules.core.pagination import StandardResultsSetPagination
from modules.inventory.dtos import InventoryViewDTO
from modules.inventory.repositories import InventoryDjangoRepository
from modules.inventory.serializers import (
    SetRackLocationSerializer,
    SetStockBucketsSerializer,
    StockMovementSerializer,
    UpsertInventoryRecordSerializer,
)
from modules.inventory.services import InventoryService


class InventoryViewSet(ViewSet):
    """Ledger reads, upserts and single-record mutations."""

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = InventoryService(
            inventory_repository=InventoryDjangoRepository(),
            branch_repository=BranchDjangoRepository(),
        )

    def list(self, request: Request) -> Response:
        """GET /api/v1/inventory/"""
        queryset = self._service.list_records(request.user, request.query_params)

        paginator = StandardResultsSetPagination()
        page = paginator.paginate_queryset(
            queryset.order_by("branch_id", "part_number"), request, view=self
        )
        data = [InventoryViewDTO.from_entity(record).model_dump(mode="json") for record in page]
        return paginator.get_paginated_response(data)

    def upsert(self, request: Request) -> Response:
        """POST /api/v1/inventory/  (201 when created, 200 when overwritten)"""
        serializer = UpsertInventoryRecordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        record, created = self._service.upsert_record(request.user, serializer.validated_data)
        return Response(
            record.model_dump(mode="json"),
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    def retrieve(self, request: Request, branch_code: str, part_number: str) -> Response:
        """GET /api/v1/inventory/{branch}/{part}/"""
        record = self._service.get_record(request.user, branch_code, part_number)
        return Response(record.model_dump(mode="json"))

    def set_stock(self, request: Request, branch_code: str, part_number: str) -> Response:
        """PATCH /api/v1/inventory/{branch}/{part}/stock/"""
        serializer = SetStockBucketsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        record = self._service.set_stock_buckets(
            request.user, branch_code, part_number, serializer.validated_data
        )
        return Response(record.model_dump(mode="json"))

    def set_rack(self, request: Request, branch_code: str, part_number: str) -> Response:
        """PATCH /api/v1/inventory/{branch}/{part}/rack/"""
        serializer = SetRackLocationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        record = self._service.set_rack_location(
            request.user, branch_code, part_number, serializer.validated_data["rack_location"]
        )
        return Response(record.model_dump(mode="json"))

    def sale(self, request: Request, branch_code: str, part_number: str) -> Response:
        """POST /api/v1/inventory/{branch}/{part}/sale/"""
        serializer = StockMovementSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        record = self._service.record_sale(
            request.user, branch_code, part_number, serializer.validated_data
        )
        return Response(record.model_dump(mode="json"))

    def purchase(self, request: Request, branch_code: str, part_number: str) -> Response:
        """POST /api/v1/inventory/{branch}/{part}/purchase/"""
        serializer = StockMovementSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        record = self._service.record_purchase(
            request.user, branch_code, part_number, serializer.validated_data
        )
        return Response(record.model_dump(mode="json"))

    def low_stock(self, request: Request) -> Response:
        """GET /api/v1/inventory/alerts/low-stock/?branch=<code>"""
        alerts = self._service.low_stock_alerts(
            request.user, branch_code=request.query_params.get("branch") or None
        )
        return Response([alert.model_dump(mode="json") for alert in alerts])

    def stats(self, request: Request, branch_code: str) -> Response:
        """GET /api/v1/inventory/stats/{branch}/"""
        stats = self._service.branch_statistics(request.user, branch_code)
        return Response(stats.model_dump(mode="json"))
