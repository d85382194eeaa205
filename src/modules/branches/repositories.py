"""Read-only access to branches."""

from __future__ import annotations

from typing import Optional

from modules.branches.exceptions import BranchNotFound
from modules.branches.models import Branch
from modules.core.exceptions import AccessDenied
from modules.core.scoping import Scope, Unrestricted, scope_allows_branch


class BranchDjangoRepository:
    def get_by_code(self, code: str) -> Optional[Branch]:
        return Branch.objects.filter(code=code).first()


def get_branch_in_scope(
    scope: Scope, branch_code: str, repository: BranchDjangoRepository
) -> Branch:
    """Load *branch_code* and check it against *scope*.

    Scoped actors asking for an unknown branch get ``AccessDenied`` rather
    than ``BranchNotFound`` so the call cannot probe for branch codes.
    """
    branch = repository.get_by_code(branch_code)
    if branch is None:
        if isinstance(scope, Unrestricted):
            raise BranchNotFound(f"Branch {branch_code} not found.")
        raise AccessDenied(f"Access denied to branch {branch_code}.")
    if not scope_allows_branch(scope, branch):
        raise AccessDenied(f"Access denied to branch {branch_code}.")
    return branch
