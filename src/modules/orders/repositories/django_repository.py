"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.  Write
methods do not open their own transactions: the service wraps creation
and transitions in ``transaction.atomic()`` so header, items and history
commit or roll back together.

Status updates are guarded by the ``version`` column
(``UPDATE ... WHERE id = ? AND version = ?``).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

import structlog
from django.core.exceptions import ValidationError
from django.db.models import Count, F, QuerySet

from modules.core.scoping import Scope, scope_filter
from modules.orders.models import Order, OrderItem, OrderStatusHistory
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    def create(self, header: Dict[str, Any], items: Sequence[Dict[str, Any]]) -> Order:
        """Create an order with its items.

        ``header`` holds the ``Order`` field values; each entry of
        ``items`` the ``OrderItem`` field values minus ``order`` and
        ``sequence``.  Items are saved one by one so ``amount`` is derived
        by ``OrderItem.save``.
        """
        order = Order(**header)
        order.save()

        for sequence, item_data in enumerate(items, start=1):
            item = OrderItem(order=order, sequence=sequence, **item_data)
            item.save()

        log = logger.bind(order_id=str(order.id), item_count=len(items))
        log.debug("order.rows_inserted")
        return order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: Any) -> Optional[Order]:
        """Retrieve an order with eager-loaded relations.

        Uses ``select_related`` for retailer and branch (single JOIN) and
        ``prefetch_related`` for items and status history (separate
        batched queries).  Prevents N+1.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return (
                Order.objects.select_related("retailer", "branch")
                .prefetch_related("items", "status_history")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: Any) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE).

        Must be called inside ``transaction.atomic()``.  Backends without
        row locks (SQLite) ignore the clause.  Returns ``None`` for
        non-existent or invalid IDs.
        """
        try:
            return (
                Order.objects.select_for_update()
                .select_related("retailer", "branch")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def list(self, scope: Scope) -> QuerySet:
        return (
            Order.objects.select_related("retailer", "branch")
            .filter(scope_filter(scope, branch_field="branch", retailer_field="retailer"))
            .annotate(item_count=Count("items"))
        )

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def compare_and_swap(self, id: Any, version: int, fields: Dict[str, Any]) -> int:
        """Conditional header update; also bumps ``version``.

        Returns the number of rows updated: 0 means another writer got
        there first.
        """
        return Order.objects.filter(id=id, version=version).update(
            version=F("version") + 1, **fields
        )

    # ------------------------------------------------------------------
    # Status history
    # ------------------------------------------------------------------

    def add_history(self, **fields: Any) -> OrderStatusHistory:
        """Record a status change in the order's audit trail."""
        history = OrderStatusHistory(**fields)
        history.save()

        logger.debug(
            "order.history_added",
            order_id=str(history.order_id),
            previous_status=history.previous_status,
            status=history.status,
        )
        return history

    def history_for(self, order_id: Any) -> List[OrderStatusHistory]:
        return list(
            OrderStatusHistory.objects.filter(order_id=order_id).order_by("timestamp", "id")
        )

    def history_stats(self, scope: Scope, since: datetime) -> Dict[str, List[Dict[str, Any]]]:
        queryset = OrderStatusHistory.objects.filter(
            scope_filter(scope, branch_field="order__branch", retailer_field="order__retailer"),
            timestamp__gte=since,
        )
        by_status = (
            queryset.values("status")
            .annotate(count=Count("id"), unique_orders=Count("order", distinct=True))
            .order_by("-count", "status")
        )
        transitions = (
            queryset.values("previous_status", "status")
            .annotate(count=Count("id"))
            .order_by("-count", "previous_status", "status")
        )
        return {"by_status": list(by_status), "transitions": list(transitions)}
