"""Generic repository interface (Dependency Inversion Principle).

Provides ``IRepository[T]``, the base abstract class that all
domain-specific repository interfaces extend.  Service-layer code
depends on this abstraction, never on Django ORM directly.

Listing always takes an explicit ``Scope``: a repository cannot be asked
for rows without saying whose rows they are.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Generic, Optional, Protocol, TypeVar

from django.db import models

if TYPE_CHECKING:
    from modules.core.scoping import Scope

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class Queryable(Protocol[T_co]):
    def filter(self, *args: Any, **kwargs: Any) -> models.QuerySet: ...


class IRepository(ABC, Generic[T]):
    """Base generic repository contract.

    Type parameter ``T`` represents the domain entity managed by the
    repository (e.g. ``Order``, ``InventoryRecord``).
    """

    @abstractmethod
    def get_by_id(self, id: Any) -> Optional[T]:
        """Retrieve an entity by its primary key."""

    @abstractmethod
    def list(self, scope: Scope) -> Queryable[T]:
        """Return the entities visible under *scope* (lazy, unfiltered otherwise)."""
