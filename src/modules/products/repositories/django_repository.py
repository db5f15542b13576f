"""Django ORM implementation of the Product repository.

Satisfies ``IProductRepository`` using Django's QuerySet API.
Error handling follows the Null Object pattern: methods return ``None``
instead of raising HTTP-level exceptions; the Service Layer decides
how to translate a missing entity into an API response.

Stock is never read-modified-written here: ``decrement_stock`` and
``increment_stock`` issue a single conditional ``UPDATE`` with an
``F()`` expression, so concurrent reservations cannot oversell.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import models, transaction
from django.db.models import F
from django.utils import timezone

from modules.products.models import Product
from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Product]:
        """Retrieve a product by primary key.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return Product.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> "models.QuerySet[Product]":
        """List products with optional Django ORM look-ups.

        Examples of valid filters::

            {"name__icontains": "widget"}
            {"price__lte": "10.00"}
        """
        queryset = Product.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    @transaction.atomic
    def save(self, entity: Product) -> Product:
        """Persist (create or update) a product."""
        entity.save()
        logger.info(
            "product.saved",
            product_id=str(entity.id),
            name=entity.name,
        )
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        """Hard-delete a product by ID.

        Order items keep their name/price snapshots and the dangling
        ``product_id``; no order row is touched.
        """
        product = self.get_by_id(id)
        if not product:
            return False
        product.delete()
        logger.info("product.deleted", product_id=str(id))
        return True

    def get_by_name(self, name: str) -> Optional[Product]:
        return Product.objects.filter(name=name.strip()).first()

    def get_many(self, ids: List[UUID]) -> Dict[UUID, Product]:
        return {product.id: product for product in Product.objects.filter(id__in=ids)}

    def low_stock(self, threshold: int) -> "models.QuerySet[Product]":
        return Product.objects.filter(stock_count__lte=threshold).order_by(
            "stock_count", "name"
        )

    # ------------------------------------------------------------------
    # Atomic stock primitives
    # ------------------------------------------------------------------

    def decrement_stock(self, id: UUID, quantity: int) -> bool:
        updated = Product.objects.filter(id=id, stock_count__gte=quantity).update(
            stock_count=F("stock_count") - quantity,
            updated_at=timezone.now(),
        )
        return updated == 1

    def increment_stock(self, id: UUID, quantity: int) -> bool:
        updated = Product.objects.filter(id=id).update(
            stock_count=F("stock_count") + quantity,
            updated_at=timezone.now(),
        )
        return updated == 1
