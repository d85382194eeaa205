"""Order repository interface.

Extends ``IRepository[Order]`` with methods required by the Order
aggregate: atomic creation with items, the version compare-and-swap used
by status transitions, and status history tracking.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from modules.core.scoping import Scope
    from modules.orders.models import Order, OrderStatusHistory


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The Order aggregate includes OrderItem children and
    OrderStatusHistory records.  Callers own the transaction boundary.
    """

    @abstractmethod
    def create(self, header: Dict[str, Any], items: Sequence[Dict[str, Any]]) -> Order:
        """Insert the header, then items numbered 1..N in input order."""

    @abstractmethod
    def get_by_id(self, id: Any) -> Optional[Order]:
        """Retrieve an order with prefetched items and status history."""

    @abstractmethod
    def get_for_update(self, id: Any) -> Optional[Order]:
        """Retrieve an order with a row-level lock."""

    @abstractmethod
    def list(self, scope: Scope) -> QuerySet:
        """Orders visible under *scope*, annotated with ``item_count``."""

    @abstractmethod
    def compare_and_swap(self, id: Any, version: int, fields: Dict[str, Any]) -> int:
        """Apply *fields* only if the stored version is *version*; return rows updated."""

    @abstractmethod
    def add_history(self, **fields: Any) -> OrderStatusHistory:
        """Append a status change to the order's audit trail."""

    @abstractmethod
    def history_for(self, order_id: Any) -> List[OrderStatusHistory]:
        """Audit rows for one order, oldest first."""

    @abstractmethod
    def history_stats(self, scope: Scope, since: datetime) -> Dict[str, List[Dict[str, Any]]]:
        """Counts per status and per transition for rows newer than *since*."""
