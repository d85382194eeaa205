"""Inventory URL configuration.

Fixed prefixes (``alerts/``, ``stats/``) are declared before the
``<branch>/<part>/`` routes so they are never read as a record key.
"""

from __future__ import annotations

from django.urls import path

from modules.inventory.views import InventoryViewSet

urlpatterns = [
    path(
        "inventory/",
        InventoryViewSet.as_view({"get": "list", "post": "upsert"}),
        name="inventory-list",
    ),
    path(
        "inventory/alerts/low-stock/",
        InventoryViewSet.as_view({"get": "low_stock"}),
        name="inventory-low-stock",
    ),
    path(
        "inventory/stats/<str:branch_code>/",
        InventoryViewSet.as_view({"get": "stats"}),
        name="inventory-stats",
    ),
    path(
        "inventory/<str:branch_code>/<str:part_number>/",
        InventoryViewSet.as_view({"get": "retrieve"}),
        name="inventory-detail",
    ),
    path(
        "inventory/<str:branch_code>/<str:part_number>/stock/",
        InventoryViewSet.as_view({"patch": "set_stock"}),
        name="inventory-stock",
    ),
    path(
        "inventory/<str:branch_code>/<str:part_number>/rack/",
        InventoryViewSet.as_view({"patch": "set_rack"}),
        name="inventory-rack",
    ),
    path(
        "inventory/<str:branch_code>/<str:part_number>/sale/",
        InventoryViewSet.as_view({"post": "sale"}),
        name="inventory-sale",
    ),
    path(
        "inventory/<str:branch_code>/<str:part_number>/purchase/",
        InventoryViewSet.as_view({"post": "purchase"}),
        name="inventory-purchase",
    ),
]
