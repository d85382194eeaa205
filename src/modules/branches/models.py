"""Branch reference data.

A branch is a physical distribution location with its own inventory.
Branches are administered elsewhere; this core only reads them to place
orders and to resolve company scope.
"""

from __future__ import annotations

from django.db import models


class Branch(models.Model):
    """Distribution branch, keyed by its short code."""

    code = models.CharField(max_length=15, primary_key=True)
    name = models.CharField(max_length=255, blank=True, default="")
    company_id = models.CharField(max_length=50, db_index=True)
    company_name = models.CharField(max_length=255, blank=True, default="")
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "branches"
        ordering = ["code"]

    def __str__(self) -> str:
        return f"{self.code} - {self.name}" if self.name else self.code
