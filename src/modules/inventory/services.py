"""Inventory service layer (Use Cases).

Ledger reads are scope-filtered; every mutation is authorised against the
actor's scope first and then applied as one single-row ``UPDATE`` that
also stamps the sync marker.  Mutations on different records are never
grouped in a transaction.

Bucket decrement on sale is not done here: ``record_sale`` only stamps
the last-sale time and narration.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Tuple, Union

import structlog
from django.db.models import QuerySet
from django.utils import timezone

from modules.branches.repositories import get_branch_in_scope
from modules.core.dtos import parse_payload
from modules.core.exceptions import ValidationError
from modules.core.filters import apply_filterset
from modules.core.scoping import resolve_scope
from modules.inventory.dtos import (
    BranchStockStatsDTO,
    InventoryViewDTO,
    LowStockAlertDTO,
    SetStockBucketsDTO,
    StockMovementDTO,
    UpsertInventoryRecordDTO,
)
from modules.inventory.exceptions import InventoryRecordNotFound
from modules.inventory.filters import InventoryFilter

if TYPE_CHECKING:
    from modules.branches.repositories import BranchDjangoRepository
    from modules.core.actors import Actor
    from modules.inventory.repositories import InventoryDjangoRepository

logger = structlog.get_logger(__name__)


class InventoryService:
    """Application service for the inventory ledger."""

    def __init__(
        self,
        inventory_repository: InventoryDjangoRepository,
        branch_repository: BranchDjangoRepository,
    ) -> None:
        self._inventory_repo = inventory_repository
        self._branch_repo = branch_repository

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_records(self, actor: Actor, params: Optional[Mapping[str, Any]] = None) -> QuerySet:
        """Scope-filtered ledger records, narrowed by ``InventoryFilter``.

        Raises:
            ValidationError: a filter parameter is malformed.
        """
        queryset = self._inventory_repo.list(resolve_scope(actor))
        return apply_filterset(InventoryFilter, params, queryset)

    def get_record(self, actor: Actor, branch_code: str, part_number: str) -> InventoryViewDTO:
        get_branch_in_scope(resolve_scope(actor), branch_code, self._branch_repo)
        record = self._inventory_repo.get_by_key(branch_code, part_number)
        if record is None:
            raise InventoryRecordNotFound(
                f"Inventory record {branch_code}/{part_number} not found."
            )
        return InventoryViewDTO.from_entity(record)

    def low_stock_alerts(
        self, actor: Actor, branch_code: Optional[str] = None
    ) -> List[LowStockAlertDTO]:
        """Records under 20% of max, ascending by total stock."""
        scope = resolve_scope(actor)
        if branch_code:
            get_branch_in_scope(scope, branch_code, self._branch_repo)
        records = self._inventory_repo.low_stock(scope, branch_code)
        return [LowStockAlertDTO.from_entity(record) for record in records]

    def branch_statistics(self, actor: Actor, branch_code: str) -> BranchStockStatsDTO:
        get_branch_in_scope(resolve_scope(actor), branch_code, self._branch_repo)
        stats = self._inventory_repo.branch_statistics(branch_code)
        return BranchStockStatsDTO(
            branch_code=branch_code,
            total_items=stats["total_items"],
            total_stock=stats["total_stock"] or 0,
            avg_stock=float(stats["avg_stock"] or 0),
            low_stock_items=stats["low_stock_items"],
            out_of_stock_items=stats["out_of_stock_items"],
            unique_racks=stats["unique_racks"],
        )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def upsert_record(
        self,
        actor: Actor,
        data: Union[UpsertInventoryRecordDTO, Mapping[str, Any]],
    ) -> Tuple[InventoryViewDTO, bool]:
        """Create or overwrite the record for ``(branch_code, part_number)``."""
        dto = parse_payload(UpsertInventoryRecordDTO, data)
        get_branch_in_scope(resolve_scope(actor), dto.branch_code, self._branch_repo)

        defaults = dto.model_dump(exclude={"branch_code", "part_number"})
        defaults["last_synced_at"] = timezone.now()
        record, created = self._inventory_repo.upsert(
            dto.branch_code, dto.part_number, defaults
        )
        return InventoryViewDTO.from_entity(record), created

    def set_stock_buckets(
        self,
        actor: Actor,
        branch_code: str,
        part_number: str,
        data: Union[SetStockBucketsDTO, Mapping[str, Any]],
    ) -> InventoryViewDTO:
        dto = parse_payload(SetStockBucketsDTO, data)
        return self._apply(
            actor,
            branch_code,
            part_number,
            bucket_a=dto.bucket_a,
            bucket_b=dto.bucket_b,
            bucket_c=dto.bucket_c,
            narration=dto.narration,
        )

    def set_rack_location(
        self, actor: Actor, branch_code: str, part_number: str, rack_location: str
    ) -> InventoryViewDTO:
        rack_location = (rack_location or "").strip()
        if len(rack_location) > 20:
            raise ValidationError("Rack location must be at most 20 characters.")
        return self._apply(actor, branch_code, part_number, rack_location=rack_location)

    def record_sale(
        self,
        actor: Actor,
        branch_code: str,
        part_number: str,
        data: Union[StockMovementDTO, Mapping[str, Any]],
    ) -> InventoryViewDTO:
        dto = parse_payload(StockMovementDTO, data)
        return self._apply(
            actor,
            branch_code,
            part_number,
            last_sale_at=timezone.now(),
            narration=dto.narration or "Sale recorded",
        )

    def record_purchase(
        self,
        actor: Actor,
        branch_code: str,
        part_number: str,
        data: Union[StockMovementDTO, Mapping[str, Any]],
    ) -> InventoryViewDTO:
        dto = parse_payload(StockMovementDTO, data)
        return self._apply(
            actor,
            branch_code,
            part_number,
            last_purchase_at=timezone.now(),
            narration=dto.narration or "Purchase recorded",
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _apply(
        self, actor: Actor, branch_code: str, part_number: str, **fields: Any
    ) -> InventoryViewDTO:
        """Authorise, then run one single-row update stamped with the sync marker.

        Raises:
            AccessDenied: the branch is outside the actor's scope.
            InventoryRecordNotFound: no record for the key.
        """
        get_branch_in_scope(resolve_scope(actor), branch_code, self._branch_repo)

        now = timezone.now()
        fields["last_synced_at"] = now
        fields["updated_at"] = now
        updated = self._inventory_repo.update_fields(branch_code, part_number, **fields)
        if updated == 0:
            logger.warning(
                "inventory.record_missing",
                branch_code=branch_code,
                part_number=part_number,
                actor_id=actor.id,
            )
            raise InventoryRecordNotFound(
                f"Inventory record {branch_code}/{part_number} not found."
            )
        record = self._inventory_repo.get_by_key(branch_code, part_number)
        return InventoryViewDTO.from_entity(record)
