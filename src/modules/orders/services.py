"""Order service layer (Use Cases).

Orchestrates order creation, status transitions and the read models
built on top of them.  The service defines the unit-of-work boundary:
creation and every transition run in one ``transaction.atomic()`` block,
and any database failure inside it is logged and re-raised as
``TransactionFailure`` after the rollback.

Business rules enforced:
- Orders are placed for an existing retailer at a branch inside the
  actor's scope; a retailer account may only order for itself.
- Header, items (numbered 1..N) and the initial audit row are written
  together or not at all.
- Status transitions are validated against ``VALID_TRANSITIONS``.
- Transitions are guarded by a version compare-and-swap: a stale writer
  gets ``TransitionConflict`` and writes nothing.
- Every accepted transition appends exactly one audit row.
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Union

import structlog
from django.conf import settings
from django.db import DatabaseError, transaction
from django.db.models import QuerySet
from django.utils import timezone

from modules.branches.exceptions import BranchNotFound
from modules.branches.repositories import BranchDjangoRepository, get_branch_in_scope
from modules.core.actors import RequestProvenance
from modules.core.dtos import parse_payload
from modules.core.exceptions import AccessDenied, TransactionFailure, ValidationError
from modules.core.filters import apply_filterset
from modules.core.scoping import RetailerScope, resolve_scope, scope_allows
from modules.inventory.availability import AvailabilityEvaluator
from modules.inventory.repositories import InventoryDjangoRepository
from modules.orders.constants import ORDER_CREATED_NOTE, STATUS_STAMP_FIELDS, OrderStatus
from modules.orders.dtos import (
    CreateOrderDTO,
    OrderDetailDTO,
    OrderSummaryDTO,
    StatusCountDTO,
    StatusHistoryEntryDTO,
    StatusStatsDTO,
    TransitionCountDTO,
)
from modules.orders.exceptions import InvalidTransition, OrderNotFound, TransitionConflict
from modules.orders.filters import OrderFilter
from modules.orders.repositories import OrderDjangoRepository
from modules.retailers.exceptions import RetailerNotFound
from modules.retailers.repositories import RetailerDjangoRepository

if TYPE_CHECKING:
    from modules.branches.models import Branch
    from modules.core.actors import Actor
    from modules.core.scoping import Scope
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


def _provenance_fields(provenance: Optional[RequestProvenance]) -> dict:
    provenance = provenance or RequestProvenance()
    return {
        "ip_address": provenance.ip_address,
        "user_agent": provenance.user_agent,
        "request_id": provenance.request_id,
    }


class OrderService:
    """Application service for Order use-cases.

    Receives repositories via constructor injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        retailer_repository: RetailerDjangoRepository,
        branch_repository: BranchDjangoRepository,
        availability_evaluator: AvailabilityEvaluator,
    ) -> None:
        self._order_repo = order_repository
        self._retailer_repo = retailer_repository
        self._branch_repo = branch_repository
        self._availability = availability_evaluator

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_order(
        self,
        data: Union[CreateOrderDTO, Mapping[str, Any]],
        actor: Actor,
        provenance: Optional[RequestProvenance] = None,
    ) -> OrderSummaryDTO:
        """Create an order with its items and initial audit row, atomically.

        Steps:
        1. Validate the payload (nothing is written on failure).
        2. Resolve the branch (explicit, else the actor's) and check scope.
        3. Validate the retailer exists.
        4. Insert header, items 1..N and the "Order created" history row
           in one transaction.

        Raises:
            ValidationError: malformed payload or no resolvable branch.
            BranchNotFound: the branch does not exist.
            AccessDenied: the branch or retailer is outside the actor's scope.
            RetailerNotFound: the retailer does not exist.
            TransactionFailure: a database error rolled the order back.
        """
        dto = parse_payload(CreateOrderDTO, data)
        scope = resolve_scope(actor)
        log = logger.bind(actor_id=actor.id, retailer_id=str(dto.retailer_id))
        log.info("order.creation_started", item_count=len(dto.items))

        branch = self._resolve_branch(scope, dto.branch or actor.branch_code)

        if isinstance(scope, RetailerScope) and str(dto.retailer_id) != scope.retailer_id:
            raise AccessDenied("Retailer accounts may only place their own orders.")
        retailer = self._retailer_repo.get_by_id(dto.retailer_id)
        if retailer is None:
            raise RetailerNotFound(f"Retailer {dto.retailer_id} not found.")
        if not retailer.is_active:
            raise ValidationError(f"Retailer {dto.retailer_id} is inactive.")

        now = timezone.now()
        header = {
            "retailer": retailer,
            "branch": branch,
            "placed_by_id": actor.id,
            "placed_by_name": actor.name,
            "placed_at": now,
            "status": OrderStatus.NEW,
            "is_urgent": dto.urgent,
            "po_number": dto.po_number,
            "po_date": dto.po_date or (now if dto.po_number else None),
            "remark": dto.remark,
            "latitude": dto.latitude,
            "longitude": dto.longitude,
        }
        items = [
            {
                "part_number": item.part_number,
                "part_name": item.part_name,
                "quantity": item.quantity,
                "unit_price": item.mrp,
                "basic_discount": item.basic_discount,
                "scheme_discount": item.scheme_discount,
                "additional_discount": item.additional_discount,
                "is_urgent": item.urgent,
            }
            for item in dto.items
        ]

        try:
            with transaction.atomic():
                order = self._order_repo.create(header, items)
                self._order_repo.add_history(
                    order=order,
                    previous_status=None,
                    status=OrderStatus.NEW,
                    actor_id=actor.id,
                    actor_name=actor.name,
                    actor_role=actor.role,
                    note=ORDER_CREATED_NOTE,
                    timestamp=now,
                    system_generated=True,
                    metadata={
                        "correlation_code": order.correlation_code,
                        "item_count": len(items),
                    },
                    **_provenance_fields(provenance),
                )
        except DatabaseError as exc:
            log.exception("order.creation_failed", branch=branch.code)
            raise TransactionFailure() from exc

        order.item_count = len(items)
        log.info(
            "order.created",
            order_id=str(order.id),
            correlation_code=order.correlation_code,
            branch=branch.code,
        )
        return OrderSummaryDTO.from_entity(order)

    def transition(
        self,
        order_id: Any,
        target_status: str,
        actor: Actor,
        note: str = "",
        expected_version: Optional[int] = None,
        provenance: Optional[RequestProvenance] = None,
    ) -> OrderSummaryDTO:
        """Move an order to *target_status* and append one audit row.

        The header row is read with ``SELECT FOR UPDATE`` and written with
        ``UPDATE ... WHERE version = <read version>``; zero matched rows
        means a concurrent writer won.

        Raises:
            ValidationError: *target_status* is not a known status.
            OrderNotFound: order does not exist.
            AccessDenied: order is outside the actor's scope.
            TransitionConflict: stale ``expected_version`` or lost race.
            InvalidTransition: transition is not allowed.
            TransactionFailure: a database error rolled the change back.
        """
        if target_status not in OrderStatus.values:
            raise ValidationError(
                f"Unknown order status {target_status!r}.",
                details=[
                    {
                        "code": "invalid_choice",
                        "detail": f"{target_status!r} is not a valid status.",
                        "attr": "status",
                    }
                ],
            )
        scope = resolve_scope(actor)
        note = (note or "").strip()
        log = logger.bind(
            order_id=str(order_id),
            target_status=target_status,
            actor_id=actor.id,
        )

        try:
            with transaction.atomic():
                order = self._order_repo.get_for_update(order_id)
                if order is None:
                    raise OrderNotFound(f"Order {order_id} not found.")
                if not scope_allows(scope, branch=order.branch, retailer_id=order.retailer_id):
                    raise AccessDenied(f"Access denied to order {order_id}.")

                log = log.bind(current_status=order.status, version=order.version)
                if expected_version is not None and expected_version != order.version:
                    log.warning("order.stale_version", expected_version=expected_version)
                    raise TransitionConflict(
                        f"Order {order_id} is at version {order.version}, "
                        f"not {expected_version}."
                    )
                if not order.can_transition_to(target_status):
                    log.warning("order.invalid_transition")
                    raise InvalidTransition(order.status, target_status)

                previous_status = order.status
                now = timezone.now()
                fields = {"status": target_status, "last_synced_at": now, "updated_at": now}
                stamp = STATUS_STAMP_FIELDS.get(target_status)
                if stamp:
                    by_field, at_field = stamp
                    fields[by_field] = actor.name
                    fields[at_field] = now
                if note:
                    fields["remark"] = note

                if self._order_repo.compare_and_swap(order.id, order.version, fields) == 0:
                    log.warning("order.version_conflict")
                    raise TransitionConflict(
                        f"Order {order_id} was modified concurrently; reload and retry."
                    )

                self._order_repo.add_history(
                    order=order,
                    previous_status=previous_status,
                    status=target_status,
                    actor_id=actor.id,
                    actor_name=actor.name,
                    actor_role=actor.role,
                    note=note or f"Status changed from {previous_status} to {target_status}",
                    timestamp=now,
                    **_provenance_fields(provenance),
                )
        except DatabaseError as exc:
            log.exception("order.transition_failed")
            raise TransactionFailure() from exc

        log.info("order.status_changed", previous_status=previous_status)
        return OrderSummaryDTO.from_entity(self._order_repo.get_by_id(order.id))

    def cancel_order(
        self,
        order_id: Any,
        actor: Actor,
        note: str = "",
        expected_version: Optional[int] = None,
        provenance: Optional[RequestProvenance] = None,
    ) -> OrderSummaryDTO:
        """Shorthand for ``transition(order_id, Cancelled, ...)``."""
        return self.transition(
            order_id,
            OrderStatus.CANCELLED,
            actor,
            note=note,
            expected_version=expected_version,
            provenance=provenance,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order_detail(self, order_id: Any, actor: Actor) -> OrderDetailDTO:
        """Order with items, timeline and freshly evaluated availability.

        Raises:
            OrderNotFound: if the order does not exist.
            AccessDenied: order is outside the actor's scope.
        """
        order = self._get_in_scope(order_id, actor)
        return OrderDetailDTO.build(order, self._availability.evaluate(order))

    def list_orders(self, actor: Actor, params: Optional[Mapping[str, Any]] = None) -> QuerySet:
        """Scope-filtered orders, narrowed by ``OrderFilter``.

        Raises:
            ValidationError: a filter parameter is malformed.
        """
        queryset = self._order_repo.list(resolve_scope(actor))
        return apply_filterset(OrderFilter, params, queryset)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _get_in_scope(self, order_id: Any, actor: Actor) -> Order:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise OrderNotFound(f"Order {order_id} not found.")
        if not scope_allows(
            resolve_scope(actor), branch=order.branch, retailer_id=order.retailer_id
        ):
            raise AccessDenied(f"Access denied to order {order_id}.")
        return order

    def _resolve_branch(self, scope: Scope, branch_code: Optional[str]) -> Branch:
        if not branch_code:
            raise ValidationError(
                "A branch is required to place an order.",
                details=[
                    {"code": "required", "detail": "Branch is required.", "attr": "branch"}
                ],
            )
        if isinstance(scope, RetailerScope):
            branch = self._branch_repo.get_by_code(branch_code)
            if branch is None:
                raise BranchNotFound(f"Branch {branch_code} not found.")
            return branch
        return get_branch_in_scope(scope, branch_code, self._branch_repo)


class StatusHistoryService:
    """Read models over the status audit trail."""

    def __init__(self, order_repository: IOrderRepository) -> None:
        self._order_repo = order_repository

    def timeline(self, order_id: Any, actor: Actor) -> List[StatusHistoryEntryDTO]:
        """Audit rows for one order, oldest first."""
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise OrderNotFound(f"Order {order_id} not found.")
        if not scope_allows(
            resolve_scope(actor), branch=order.branch, retailer_id=order.retailer_id
        ):
            raise AccessDenied(f"Access denied to order {order_id}.")
        return [
            StatusHistoryEntryDTO.from_entity(entry)
            for entry in self._order_repo.history_for(order.id)
        ]

    def statistics(self, actor: Actor, days: Optional[int] = None) -> StatusStatsDTO:
        """Counts per status and per transition over the last *days* days."""
        if days is None:
            days = settings.STATUS_STATS_DEFAULT_DAYS
        if days < 1:
            raise ValidationError(
                "Timeframe must be at least one day.",
                details=[{"code": "min_value", "detail": "Must be >= 1.", "attr": "days"}],
            )
        since = timezone.now() - timedelta(days=days)
        stats = self._order_repo.history_stats(resolve_scope(actor), since)
        return StatusStatsDTO(
            timeframe_days=days,
            since=since,
            by_status=[StatusCountDTO(**row) for row in stats["by_status"]],
            transitions=[TransitionCountDTO(**row) for row in stats["transitions"]],
        )


def build_order_service() -> OrderService:
    """``OrderService`` wired to the Django repositories."""
    return OrderService(
        order_repository=OrderDjangoRepository(),
        retailer_repository=RetailerDjangoRepository(),
        branch_repository=BranchDjangoRepository(),
        availability_evaluator=AvailabilityEvaluator(InventoryDjangoRepository()),
    )
