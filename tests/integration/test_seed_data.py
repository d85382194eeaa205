from io import StringIO

import pytest
from django.core.management import call_command

from modules.branches.models import Branch
from modules.core.management.commands import seed_data
from modules.inventory.models import InventoryRecord
from modules.orders.models import Order, OrderStatusHistory
from modules.orders.services import OrderService, build_order_service

pytestmark = pytest.mark.integration


class TestSeedData:
    def test_seeds_reference_data_and_orders(self):
        out = StringIO()
        call_command("seed_data", orders=6, stdout=out)

        assert Branch.objects.count() == 3
        assert InventoryRecord.objects.count() == 24
        assert Order.objects.count() == 6
        assert "Seed completed" in out.getvalue()
        for order in Order.objects.all():
            history = list(OrderStatusHistory.objects.filter(order=order))
            assert history[0].previous_status is None
            assert history[-1].status == order.status
            assert order.version == len(history)

    def test_is_idempotent(self):
        call_command("seed_data", orders=3, stdout=StringIO())
        call_command("seed_data", orders=3, stdout=StringIO())

        assert Branch.objects.count() == 3
        assert InventoryRecord.objects.count() == 24
        assert Order.objects.count() == 3

    def test_orders_built_through_service_factory(self):
        assert seed_data.build_order_service is build_order_service
        assert build_order_service.__module__ == "modules.orders.services"
        assert isinstance(build_order_service(), OrderService)
