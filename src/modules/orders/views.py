"""Order API views.

Exposes ``OrderService`` and ``StatusHistoryService`` via HTTP using DRF
ViewSets.  Domain exceptions propagate to
``modules.core.exceptions.api_exception_handler``; views never build
error payloads themselves.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import ViewSet

from modules.core.actors import RequestProvenance
from modules.core.pagination import StandardResultsSetPagination
from modules.orders.dtos import OrderSummaryDTO
from modules.orders.repositories import OrderDjangoRepository
from modules.orders.serializers import (
    CancelOrderSerializer,
    CreateOrderSerializer,
    StatusStatsQuerySerializer,
    StatusUpdateSerializer,
)
from modules.orders.services import StatusHistoryService, build_order_service


class OrderViewSet(ViewSet):
    """ViewSet for Order operations.

    Uses ``OrderService`` with injected repositories (DIP).
    Does **not** extend ``ModelViewSet``: all ORM access goes through
    the service/repository layer.
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_order_service()
        self._history = StatusHistoryService(OrderDjangoRepository())

    def get_throttles(self) -> list[BaseThrottle]:
        """Throttling scopes per action."""
        throttle_scope: str | None
        if self.action == "create":
            throttle_scope = "order_creation"
        elif self.action in {"list", "retrieve"}:
            throttle_scope = "order_listing"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/"""
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = self._service.create_order(
            serializer.validated_data,
            request.user,
            provenance=RequestProvenance.from_request(request),
        )
        return Response(order.model_dump(mode="json"), status=status.HTTP_201_CREATED)

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/

        Filtering (status, urgent, retailer, branch, date range) is
        handled by ``OrderFilter`` inside the service.  Results are
        paginated.
        """
        queryset = self._service.list_orders(request.user, request.query_params)

        paginator = StandardResultsSetPagination()
        page = paginator.paginate_queryset(queryset, request, view=self)
        data = [OrderSummaryDTO.from_entity(order).model_dump(mode="json") for order in page]
        return paginator.get_paginated_response(data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        order = self._service.get_order_detail(pk, request.user)
        return Response(order.model_dump(mode="json"))

    # ------------------------------------------------------------------
    # Status Update
    # ------------------------------------------------------------------

    @action(detail=True, methods=["patch"], url_path="status")
    def update_status(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/status/"""
        serializer = StatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        order = self._service.transition(
            pk,
            data["status"],
            request.user,
            note=data["note"],
            expected_version=data.get("expected_version"),
            provenance=RequestProvenance.from_request(request),
        )
        return Response(order.model_dump(mode="json"))

    @action(detail=True, methods=["post"])
    def cancel(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/cancel/"""
        serializer = CancelOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        order = self._service.cancel_order(
            pk,
            request.user,
            note=data["note"],
            expected_version=data.get("expected_version"),
            provenance=RequestProvenance.from_request(request),
        )
        return Response(order.model_dump(mode="json"))

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    @action(detail=True, methods=["get"])
    def history(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/history/"""
        entries = self._history.timeline(pk, request.user)
        return Response([entry.model_dump(mode="json") for entry in entries])


class OrderStatusHistoryViewSet(ViewSet):
    """Aggregates over the status audit trail."""

    @action(detail=False, methods=["get"])
    def stats(self, request: Request) -> Response:
        """GET /api/v1/order-status-history/stats/?days=30"""
        serializer = StatusStatsQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)

        stats = StatusHistoryService(OrderDjangoRepository()).statistics(
            request.user, days=serializer.validated_data.get("days")
        )
        return Response(stats.model_dump(mode="json"))
