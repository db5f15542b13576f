"""Inventory Ledger.

The only component allowed to move ``Product.stock_count`` on behalf of
orders.  Each call touches exactly one product row through the atomic
primitives of ``IProductRepository``; callers run it inside their own
``transaction.atomic`` block so a later failure rolls every movement
back.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from modules.products.exceptions import (
    InsufficientStock,
    InvalidQuantity,
    ProductNotFound,
)

if TYPE_CHECKING:
    from modules.products.models import Product
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


def _require_positive(quantity: int) -> None:
    if quantity < 1:
        raise InvalidQuantity(f"Quantity must be at least 1, got {quantity}.")


class InventoryLedger:
    """Reserves and releases stock for order lines."""

    def __init__(self, product_repository: IProductRepository) -> None:
        self._products = product_repository

    def check_available(self, product: Product, quantity: int) -> None:
        """Non-locking pre-check against a product snapshot.

        Lets a multi-line order fail before any row is modified; the
        reservation itself is still guarded by ``reserve``.
        """
        _require_positive(quantity)
        if product.stock_count < quantity:
            raise InsufficientStock(product.name, product.stock_count, quantity)

    def reserve(self, product_id: UUID, quantity: int) -> None:
        """Take *quantity* units out of stock.

        Raises:
            InvalidQuantity: ``quantity < 1``.
            ProductNotFound: the product does not exist.
            InsufficientStock: fewer than *quantity* units are available.
        """
        _require_positive(quantity)
        log = logger.bind(product_id=str(product_id), quantity=quantity)

        if self._products.decrement_stock(product_id, quantity):
            log.info("inventory.stock_reserved")
            return

        product = self._products.get_by_id(str(product_id))
        if product is None:
            log.warning("inventory.product_missing")
            raise ProductNotFound(f"Product {product_id} not found.")
        log.warning("inventory.insufficient_stock", available=product.stock_count)
        raise InsufficientStock(product.name, product.stock_count, quantity)

    def release(self, product_id: UUID, quantity: int) -> bool:
        """Return *quantity* units to stock.

        A product deleted since the order was placed cannot receive its
        units back; the release is logged and skipped (``False``).
        """
        _require_positive(quantity)
        log = logger.bind(product_id=str(product_id), quantity=quantity)

        if not self._products.increment_stock(product_id, quantity):
            log.warning("inventory.release_skipped", reason="product_missing")
            return False
        log.info("inventory.stock_released")
        return True
