"""Retailer reference data.

Retailers are the downstream customers that place orders against a
branch.  ``Order.retailer`` uses PROTECT so order history is never
orphaned.
"""

from __future__ import annotations

from django.db import models

from modules.core.models import BaseModel


class Retailer(BaseModel):
    name = models.CharField(max_length=255)
    contact_person = models.CharField(max_length=255, blank=True, default="")
    email = models.EmailField(max_length=254, blank=True, default="")
    mobile = models.CharField(max_length=50, blank=True, default="")
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "retailers"
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name
