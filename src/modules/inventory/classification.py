"""Stock classification.

Two distinct bandings exist and must not be merged:

* ``classify_stock`` is the four-tier level shown wherever stock is
  surfaced: <20% critical, [20, 40) low, [40, 70) medium, else good.
* ``alert_urgency`` applies only inside the low-stock alert set (<20%):
  <10% critical, otherwise low.
"""

from __future__ import annotations

from django.db import models

LOW_STOCK_THRESHOLD = 20
ALERT_CRITICAL_THRESHOLD = 10


class StockLevel(models.TextChoices):
    CRITICAL = "critical", "Critical"
    LOW = "low", "Low"
    MEDIUM = "medium", "Medium"
    GOOD = "good", "Good"


class AlertUrgency(models.TextChoices):
    CRITICAL = "critical", "Critical"
    LOW = "low", "Low"


def stock_percentage(total_stock: int, max_stock: int) -> float:
    """Return ``total / max * 100``; a zero threshold yields 0."""
    if max_stock <= 0:
        return 0.0
    return total_stock / max_stock * 100


def classify_stock(total_stock: int, max_stock: int) -> StockLevel:
    percentage = stock_percentage(total_stock, max_stock)
    if percentage < LOW_STOCK_THRESHOLD:
        return StockLevel.CRITICAL
    if percentage < 40:
        return StockLevel.LOW
    if percentage < 70:
        return StockLevel.MEDIUM
    return StockLevel.GOOD


def is_low_stock(total_stock: int, max_stock: int) -> bool:
    return stock_percentage(total_stock, max_stock) < LOW_STOCK_THRESHOLD


def alert_urgency(total_stock: int, max_stock: int) -> AlertUrgency:
    if stock_percentage(total_stock, max_stock) < ALERT_CRITICAL_THRESHOLD:
        return AlertUrgency.CRITICAL
    return AlertUrgency.LOW
