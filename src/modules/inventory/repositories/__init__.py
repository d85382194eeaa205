"""Inventory repositories package."""

from modules.inventory.repositories.django_repository import InventoryDjangoRepository

__all__ = ["InventoryDjangoRepository"]
