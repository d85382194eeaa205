from __future__ import annotations

from modules.core.exceptions import NotFound


class RetailerNotFound(NotFound):
    """The retailer referenced by the order does not exist."""
