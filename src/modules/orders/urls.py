"""Order URL configuration."""

from __future__ import annotations

from rest_framework.routers import DefaultRouter

from modules.orders.views import OrderStatusHistoryViewSet, OrderViewSet

router = DefaultRouter(trailing_slash=True)
router.register("orders", OrderViewSet, basename="order")
router.register(
    "order-status-history", OrderStatusHistoryViewSet, basename="order-status-history"
)

urlpatterns = router.urls
