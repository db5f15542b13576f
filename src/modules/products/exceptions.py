"""Product domain exceptions.

Raised by the Service Layer and the Inventory Ledger when business
rules are violated.  ``InsufficientStock`` lives in
``modules.core.exceptions`` and is re-exported here for convenience.
"""

from __future__ import annotations

from modules.core.exceptions import (
    Conflict,
    DomainValidationError,
    InsufficientStock,
    NotFound,
)

__all__ = [
    "InsufficientStock",
    "InvalidQuantity",
    "ProductAlreadyExists",
    "ProductNotFound",
]


class ProductAlreadyExists(Conflict):
    """A product with the same name already exists."""


class ProductNotFound(NotFound):
    """The requested product does not exist."""


class InvalidQuantity(DomainValidationError):
    """A stock movement was requested with a quantity below one."""
