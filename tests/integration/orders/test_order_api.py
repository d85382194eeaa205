"""HTTP-level tests for the order endpoints."""

from __future__ import annotations

from uuid import uuid4

import pytest

from modules.orders.constants import OrderStatus
from modules.orders.models import Order, OrderStatusHistory

pytestmark = pytest.mark.integration


@pytest.fixture()
def manager_client(actor_client, branch_manager):
    return actor_client(branch_manager)


@pytest.fixture()
def store_client(actor_client, storeman):
    return actor_client(storeman)


class TestCreateOrderEndpoint:
    def test_create_returns_201_with_summary(self, manager_client, order_payload, retailer):
        response = manager_client.post("/api/v1/orders/", order_payload, format="json")

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "New"
        assert data["version"] == 1
        assert data["item_count"] == 2
        assert data["retailer_name"] == retailer.name
        assert data["correlation_code"].startswith("CRM-")

    def test_request_id_and_client_recorded(self, manager_client, order_payload):
        response = manager_client.post(
            "/api/v1/orders/",
            order_payload,
            format="json",
            HTTP_X_REQUEST_ID="req-create-1",
            HTTP_USER_AGENT="mobile-app/4.2",
            HTTP_X_FORWARDED_FOR="203.0.113.9, 10.0.0.1",
        )

        entry = OrderStatusHistory.objects.get(order_id=response.json()["id"])
        assert entry.request_id == "req-create-1"
        assert entry.user_agent == "mobile-app/4.2"
        assert entry.ip_address == "203.0.113.9"

    def test_empty_items_rejected(self, manager_client, order_payload):
        order_payload["items"] = []
        response = manager_client.post("/api/v1/orders/", order_payload, format="json")
        assert response.status_code == 400
        assert Order.objects.count() == 0

    def test_quantity_beyond_integer_range_rejected(self, manager_client, order_payload):
        order_payload["items"][0]["quantity"] = 10**19
        response = manager_client.post("/api/v1/orders/", order_payload, format="json")
        assert response.status_code == 400
        assert response.json()["errors"][0]["attr"] == "items.0.quantity"
        assert Order.objects.count() == 0

    def test_out_of_scope_branch_forbidden(self, manager_client, order_payload, other_company_branch):
        order_payload["branch"] = other_company_branch.code
        response = manager_client.post("/api/v1/orders/", order_payload, format="json")
        assert response.status_code == 403

    def test_unknown_retailer_not_found(self, manager_client, order_payload):
        order_payload["retailer_id"] = str(uuid4())
        response = manager_client.post("/api/v1/orders/", order_payload, format="json")
        assert response.status_code == 404


class TestReadEndpoints:
    def test_list_is_paginated(self, manager_client, new_order):
        response = manager_client.get("/api/v1/orders/")

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 1
        assert data["results"][0]["id"] == str(new_order.id)
        assert data["results"][0]["item_count"] == 2

    def test_list_filters(self, manager_client, new_order):
        assert manager_client.get("/api/v1/orders/?status=Pending").json()["count"] == 0
        assert manager_client.get("/api/v1/orders/?status=New").json()["count"] == 1

    def test_list_bad_filter(self, manager_client, new_order):
        response = manager_client.get("/api/v1/orders/?start_date=yesterday")
        assert response.status_code == 400
        assert response.json()["errors"][0]["attr"] == "start_date"

    def test_detail(self, manager_client, new_order, make_record):
        make_record("BP-1001", bucket_a=20)

        response = manager_client.get(f"/api/v1/orders/{new_order.id}/")

        assert response.status_code == 200
        data = response.json()
        assert [item["sequence"] for item in data["items"]] == [1, 2]
        assert data["items"][0]["fulfillment_status"] == "Available"
        assert data["items"][1]["fulfillment_status"] == "Not Available"
        assert data["inventory_summary"]["can_fulfill"] is False
        assert data["status_history"][0]["note"] == "Order created"

    def test_detail_foreign_actor(self, actor_client, foreign_manager, new_order):
        response = actor_client(foreign_manager).get(f"/api/v1/orders/{new_order.id}/")
        assert response.status_code == 403

    def test_history(self, store_client, new_order):
        store_client.patch(
            f"/api/v1/orders/{new_order.id}/status/", {"status": "Pending"}, format="json"
        )

        response = store_client.get(f"/api/v1/orders/{new_order.id}/history/")

        assert response.status_code == 200
        assert [row["status"] for row in response.json()] == ["New", "Pending"]


class TestStatusEndpoints:
    def test_patch_status(self, store_client, new_order):
        response = store_client.patch(
            f"/api/v1/orders/{new_order.id}/status/",
            {"status": "Pending", "note": "Payment received", "expected_version": 1},
            format="json",
        )

        assert response.status_code == 200
        assert response.json()["status"] == "Pending"
        assert response.json()["version"] == 2
        assert Order.objects.get(id=new_order.id).remark == "Payment received"

    def test_unknown_status_value(self, store_client, new_order):
        response = store_client.patch(
            f"/api/v1/orders/{new_order.id}/status/", {"status": "Lost"}, format="json"
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["attr"] == "status"

    def test_cancel(self, store_client, new_order):
        response = store_client.post(
            f"/api/v1/orders/{new_order.id}/cancel/", {"note": "Customer request"}, format="json"
        )

        assert response.status_code == 200
        assert response.json()["status"] == OrderStatus.CANCELLED

    def test_cancel_terminal_order(self, store_client, new_order):
        store_client.post(f"/api/v1/orders/{new_order.id}/cancel/", {}, format="json")
        response = store_client.post(f"/api/v1/orders/{new_order.id}/cancel/", {}, format="json")
        assert response.status_code == 400

    def test_unknown_order(self, store_client):
        response = store_client.patch(
            f"/api/v1/orders/{uuid4()}/status/", {"status": "Pending"}, format="json"
        )
        assert response.status_code == 404


class TestStatusStatsEndpoint:
    def test_stats(self, store_client, new_order):
        store_client.patch(
            f"/api/v1/orders/{new_order.id}/status/", {"status": "Pending"}, format="json"
        )

        response = store_client.get("/api/v1/order-status-history/stats/?days=7")

        assert response.status_code == 200
        data = response.json()
        assert data["timeframe_days"] == 7
        assert {row["status"] for row in data["by_status"]} == {"New", "Pending"}
        assert {"previous_status": "New", "status": "Pending", "count": 1} in data["transitions"]

    def test_default_window(self, store_client, new_order):
        response = store_client.get("/api/v1/order-status-history/stats/")
        assert response.json()["timeframe_days"] == 30

    def test_invalid_window(self, store_client):
        response = store_client.get("/api/v1/order-status-history/stats/?days=0")
        assert response.status_code == 400
