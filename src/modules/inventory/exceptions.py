"""Inventory domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import NotFound


class InventoryRecordNotFound(NotFound):
    """No inventory record exists for the branch + part key."""
