from __future__ import annotations

from modules.core.exceptions import NotFound


class BranchNotFound(NotFound):
    """The referenced branch code does not exist."""
