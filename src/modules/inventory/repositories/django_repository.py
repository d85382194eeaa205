"""Django ORM implementation of the inventory ledger repository.

Every mutation is a single conditional ``UPDATE`` on one row; there is no
cross-record transaction.  Callers learn about a missing key from the
returned row count.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional, Tuple

import structlog
from django.core.exceptions import ValidationError
from django.db.models import Avg, Count, ExpressionWrapper, F, IntegerField, Q, QuerySet, Sum

from modules.core.repositories.interfaces import IRepository
from modules.core.scoping import Scope, scope_filter
from modules.inventory.models import InventoryRecord

logger = structlog.get_logger(__name__)

_STOCK_TOTAL = F("bucket_a") + F("bucket_b") + F("bucket_c")

# percentage < 20  <=>  5 * total < max  (for max > 0); max == 0 counts as 0%.
LOW_STOCK_Q = Q(max_stock=0) | Q(stock_total_x5__lt=F("max_stock"))


def with_stock_totals(queryset: QuerySet) -> QuerySet:
    """Annotate ``stock_total`` and ``stock_total_x5`` for SQL-side filtering."""
    return queryset.annotate(
        stock_total=ExpressionWrapper(_STOCK_TOTAL, output_field=IntegerField()),
        stock_total_x5=ExpressionWrapper(_STOCK_TOTAL * 5, output_field=IntegerField()),
    )


class InventoryDjangoRepository(IRepository[InventoryRecord]):
    """Concrete ledger repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: Any) -> Optional[InventoryRecord]:
        try:
            return InventoryRecord.objects.select_related("branch").filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_by_key(self, branch_code: str, part_number: str) -> Optional[InventoryRecord]:
        return (
            InventoryRecord.objects.select_related("branch")
            .filter(branch_id=branch_code, part_number=part_number)
            .first()
        )

    def list(self, scope: Scope) -> QuerySet:
        """Records visible under *scope*, with stock totals annotated."""
        queryset = InventoryRecord.objects.select_related("branch").filter(
            scope_filter(scope, branch_field="branch")
        )
        return with_stock_totals(queryset)

    def for_parts(
        self, branch_code: str, part_numbers: Iterable[str]
    ) -> Dict[str, InventoryRecord]:
        """Batch-load the records for *part_numbers* at one branch."""
        part_numbers = list(part_numbers)
        if not part_numbers:
            return {}
        records = InventoryRecord.objects.filter(
            branch_id=branch_code, part_number__in=part_numbers
        )
        return {record.part_number: record for record in records}

    def low_stock(self, scope: Scope, branch_code: Optional[str] = None) -> QuerySet:
        """Records under 20% of their threshold, lowest total stock first."""
        queryset = self.list(scope).filter(LOW_STOCK_Q)
        if branch_code:
            queryset = queryset.filter(branch_id=branch_code)
        return queryset.order_by("stock_total", "branch_id", "part_number")

    def branch_statistics(self, branch_code: str) -> Dict[str, Any]:
        queryset = with_stock_totals(
            InventoryRecord.objects.filter(branch_id=branch_code)
        )
        return queryset.aggregate(
            total_items=Count("id"),
            total_stock=Sum("stock_total"),
            avg_stock=Avg("stock_total"),
            low_stock_items=Count("id", filter=LOW_STOCK_Q),
            out_of_stock_items=Count("id", filter=Q(stock_total=0)),
            unique_racks=Count("rack_location", distinct=True, filter=~Q(rack_location="")),
        )

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def update_fields(self, branch_code: str, part_number: str, **fields: Any) -> int:
        """Apply a single-row ``UPDATE``; return the number of rows matched."""
        updated = InventoryRecord.objects.filter(
            branch_id=branch_code, part_number=part_number
        ).update(**fields)
        logger.info(
            "inventory.record_updated",
            branch_code=branch_code,
            part_number=part_number,
            fields=sorted(fields),
            rows=updated,
        )
        return updated

    def upsert(
        self, branch_code: str, part_number: str, defaults: Dict[str, Any]
    ) -> Tuple[InventoryRecord, bool]:
        record, created = InventoryRecord.objects.update_or_create(
            branch_id=branch_code,
            part_number=part_number,
            defaults=defaults,
        )
        logger.info(
            "inventory.record_upserted",
            branch_code=branch_code,
            part_number=part_number,
            created=created,
        )
        return record, created
