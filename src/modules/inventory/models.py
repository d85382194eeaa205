"""Inventory ledger: one stock record per branch + part.

Business rules implemented:
- A (branch, part_number) pair has at most one record (unique constraint).
- Buckets A/B/C are distinct storage tiers; their sum is the on-hand stock.
- Bucket values are stored as non-negative integers.  Legacy text values
  are parsed at the DTO boundary (see ``dtos.parse_stock_quantity``).
- Records are read, never locked, while evaluating orders.
"""

from __future__ import annotations

from django.db import models

from modules.core.models import BaseModel
from modules.inventory.classification import StockLevel, classify_stock, stock_percentage


class InventoryRecord(BaseModel):
    branch = models.ForeignKey(
        "branches.Branch",
        on_delete=models.PROTECT,
        related_name="inventory_records",
    )
    part_number = models.CharField(max_length=100)
    part_name = models.CharField(max_length=255, blank=True, default="")
    bucket_a = models.PositiveIntegerField(default=0)
    bucket_b = models.PositiveIntegerField(default=0)
    bucket_c = models.PositiveIntegerField(default=0)
    max_stock = models.PositiveIntegerField(default=0)
    rack_location = models.CharField(max_length=20, blank=True, default="")
    last_sale_at = models.DateTimeField(null=True, blank=True, default=None)
    last_purchase_at = models.DateTimeField(null=True, blank=True, default=None)
    narration = models.CharField(max_length=50, blank=True, default="")
    last_synced_at = models.DateTimeField(null=True, blank=True, default=None)

    class Meta:
        db_table = "inventory_records"
        ordering = ["branch_id", "part_number"]
        constraints = [
            models.UniqueConstraint(
                fields=["branch", "part_number"],
                name="inventory_branch_part_unique",
            ),
        ]

    @property
    def total_stock(self) -> int:
        return self.bucket_a + self.bucket_b + self.bucket_c

    @property
    def stock_percentage(self) -> float:
        return stock_percentage(self.total_stock, self.max_stock)

    @property
    def stock_level(self) -> StockLevel:
        return classify_stock(self.total_stock, self.max_stock)

    def __str__(self) -> str:
        return f"{self.branch_id}-{self.part_number} ({self.total_stock}/{self.max_stock})"
