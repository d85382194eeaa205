"""Audit trail reads: per-order timeline and aggregate statistics."""

from __future__ import annotations

from datetime import timedelta

import pytest
from django.utils import timezone
from freezegun import freeze_time

from modules.core.exceptions import AccessDenied, ValidationError
from modules.orders.constants import OrderStatus
from modules.orders.models import OrderStatusHistory
from modules.orders.repositories import OrderDjangoRepository
from modules.orders.services import StatusHistoryService

pytestmark = pytest.mark.integration


@pytest.fixture()
def history_service():
    return StatusHistoryService(OrderDjangoRepository())


class TestTimeline:
    def test_oldest_first(self, history_service, order_service, new_order, storeman):
        order_service.transition(new_order.id, OrderStatus.PENDING, storeman)
        order_service.transition(new_order.id, OrderStatus.HOLD, storeman, note="Credit check")

        entries = history_service.timeline(new_order.id, storeman)

        assert [e.status for e in entries] == [
            OrderStatus.NEW,
            OrderStatus.PENDING,
            OrderStatus.HOLD,
        ]
        assert [e.previous_status for e in entries] == [
            None,
            OrderStatus.NEW,
            OrderStatus.PENDING,
        ]
        assert entries[0].system_generated is True
        assert entries[2].note == "Credit check"

    def test_chain_links_up(self, history_service, order_service, new_order, storeman):
        for target in (OrderStatus.PENDING, OrderStatus.PROCESSING, OrderStatus.HOLD):
            order_service.transition(new_order.id, target, storeman)

        entries = history_service.timeline(new_order.id, storeman)
        for earlier, later in zip(entries, entries[1:]):
            assert later.previous_status == earlier.status

    def test_out_of_scope(self, history_service, new_order, foreign_manager):
        with pytest.raises(AccessDenied):
            history_service.timeline(new_order.id, foreign_manager)


class TestAppendOnly:
    def test_existing_row_cannot_be_resaved(self, new_order):
        entry = OrderStatusHistory.objects.get(order_id=new_order.id)
        entry.note = "rewritten"
        with pytest.raises(RuntimeError):
            entry.save()
        assert OrderStatusHistory.objects.get(id=entry.id).note == "Order created"


class TestStatistics:
    def test_counts_by_status_and_transition(
        self, history_service, order_service, order_payload, branch_manager, storeman
    ):
        first = order_service.create_order(order_payload, branch_manager)
        second = order_service.create_order(order_payload, branch_manager)
        order_service.transition(first.id, OrderStatus.PENDING, storeman)
        order_service.transition(second.id, OrderStatus.PENDING, storeman)
        order_service.transition(second.id, OrderStatus.HOLD, storeman)

        stats = history_service.statistics(storeman, days=7)

        by_status = {row.status: row for row in stats.by_status}
        assert by_status[OrderStatus.NEW].count == 2
        assert by_status[OrderStatus.PENDING].count == 2
        assert by_status[OrderStatus.PENDING].unique_orders == 2
        assert by_status[OrderStatus.HOLD].count == 1

        transitions = {(t.previous_status, t.status): t.count for t in stats.transitions}
        assert transitions[(None, OrderStatus.NEW)] == 2
        assert transitions[(OrderStatus.NEW, OrderStatus.PENDING)] == 2
        assert transitions[(OrderStatus.PENDING, OrderStatus.HOLD)] == 1
        assert stats.timeframe_days == 7

    def test_ordered_by_descending_count(
        self, history_service, order_service, new_order, storeman
    ):
        order_service.transition(new_order.id, OrderStatus.HOLD, storeman)
        order_service.transition(new_order.id, OrderStatus.NEW, storeman)

        stats = history_service.statistics(storeman)

        counts = [row.count for row in stats.by_status]
        assert counts == sorted(counts, reverse=True)
        assert stats.by_status[0].status == OrderStatus.NEW
        assert stats.by_status[0].count == 2
        assert stats.by_status[0].unique_orders == 1

    def test_rows_outside_window_are_ignored(
        self, history_service, order_service, order_payload, branch_manager
    ):
        with freeze_time(timezone.now() - timedelta(days=45)):
            order_service.create_order(order_payload, branch_manager)
        order_service.create_order(order_payload, branch_manager)

        stats = history_service.statistics(branch_manager)

        assert stats.timeframe_days == 30
        assert [(row.status, row.count) for row in stats.by_status] == [(OrderStatus.NEW, 1)]

    def test_scoped_to_actor(self, history_service, new_order, foreign_manager):
        stats = history_service.statistics(foreign_manager)
        assert stats.by_status == []
        assert stats.transitions == []

    def test_retailer_sees_own_orders(self, history_service, new_order, retailer_actor):
        stats = history_service.statistics(retailer_actor)
        assert stats.by_status[0].count == 1

    @pytest.mark.parametrize("days", [0, -5])
    def test_rejects_non_positive_window(self, history_service, storeman, days):
        with pytest.raises(ValidationError):
            history_service.statistics(storeman, days=days)
