"""Explicit data-visibility scopes.

An actor sees either everything, one company's branches, one branch, or
one retailer's orders.  ``resolve_scope`` turns an ``Actor`` into one of
those values; query-building functions receive the scope as an argument
and translate it into a ``Q`` predicate with ``scope_filter``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Union

from django.db.models import Q

from modules.core.actors import Actor, Role
from modules.core.exceptions import AccessDenied

if TYPE_CHECKING:
    from modules.branches.models import Branch


@dataclass(frozen=True)
class Unrestricted:
    pass


@dataclass(frozen=True)
class CompanyScope:
    company_id: str


@dataclass(frozen=True)
class BranchScope:
    branch_code: str


@dataclass(frozen=True)
class RetailerScope:
    retailer_id: str


Scope = Union[Unrestricted, CompanyScope, BranchScope, RetailerScope]


def resolve_scope(actor: Actor) -> Scope:
    """Map an actor to its visibility scope.

    Branch assignment wins over company assignment.  A non super-admin
    with neither is denied outright.
    """
    if actor.is_super_admin:
        return Unrestricted()
    if actor.role == Role.RETAILER:
        if not actor.retailer_id:
            raise AccessDenied("Retailer account is not linked to a retailer.")
        return RetailerScope(retailer_id=str(actor.retailer_id))
    if actor.branch_code:
        return BranchScope(branch_code=actor.branch_code)
    if actor.company_id:
        return CompanyScope(company_id=str(actor.company_id))
    raise AccessDenied(f"Actor {actor.id} has no company or branch assignment.")


def scope_filter(
    scope: Scope,
    *,
    branch_field: str = "branch",
    retailer_field: Optional[str] = None,
) -> Q:
    """Build the visibility predicate for a queryset.

    ``branch_field`` names the FK to ``Branch`` on the queried model.
    ``retailer_field`` is ``None`` for models a retailer may not see.
    """
    if isinstance(scope, Unrestricted):
        return Q()
    if isinstance(scope, CompanyScope):
        return Q(**{f"{branch_field}__company_id": scope.company_id})
    if isinstance(scope, BranchScope):
        return Q(**{f"{branch_field}_id": scope.branch_code})
    if isinstance(scope, RetailerScope):
        if retailer_field is None:
            raise AccessDenied("Retailer accounts cannot access this resource.")
        return Q(**{f"{retailer_field}_id": scope.retailer_id})
    raise TypeError(f"Unknown scope {scope!r}")


def scope_allows_branch(scope: Scope, branch: Branch) -> bool:
    if isinstance(scope, Unrestricted):
        return True
    if isinstance(scope, CompanyScope):
        return str(branch.company_id) == scope.company_id
    if isinstance(scope, BranchScope):
        return branch.code == scope.branch_code
    return False


def scope_allows(scope: Scope, *, branch: Branch, retailer_id: object = None) -> bool:
    """Check a single row (order or inventory record) against a scope."""
    if isinstance(scope, RetailerScope):
        return retailer_id is not None and str(retailer_id) == scope.retailer_id
    return scope_allows_branch(scope, branch)
