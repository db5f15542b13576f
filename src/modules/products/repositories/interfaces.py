"""Product repository interface.

Extends ``IRepository[Product]`` with the look-ups required by the
unique-name rule, the low-stock report and the two atomic stock
primitives the Inventory Ledger is built on.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Optional
from uuid import UUID

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.products.models import Product


class IProductRepository(IRepository["Product"]):
    """Repository contract for the Product aggregate."""

    @abstractmethod
    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Product]":
        """List products with optional filters."""

    @abstractmethod
    def get_by_name(self, name: str) -> Optional["Product"]:
        """Retrieve a product by its exact (trimmed) name."""

    @abstractmethod
    def get_many(self, ids: "list[UUID]") -> Dict[UUID, "Product"]:
        """Fetch several products in one query, keyed by id."""

    @abstractmethod
    def low_stock(self, threshold: int) -> "models.QuerySet[Product]":
        """Products whose stock is at or below *threshold*, lowest first."""

    @abstractmethod
    def decrement_stock(self, id: UUID, quantity: int) -> bool:
        """Atomically subtract *quantity* when enough stock is available.

        Returns ``False`` when the product is missing or holds less than
        *quantity* units; the row is left untouched in both cases.
        """

    @abstractmethod
    def increment_stock(self, id: UUID, quantity: int) -> bool:
        """Atomically add *quantity* to the stock count.

        Returns ``False`` when the product no longer exists.
        """
