"""Product service layer (Use Cases).

Orchestrates business logic for the Product aggregate, delegating
persistence to the injected ``IProductRepository``.

Business rules enforced here:
- Product name must be unique (create and update).
- Price and stock cannot be negative (validated by DTO).
- Delete is a hard delete; orders keep their line snapshots.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

import structlog
from django.conf import settings
from django.db import IntegrityError, models, transaction

from modules.products.exceptions import ProductAlreadyExists, ProductNotFound
from modules.products.models import Product

if TYPE_CHECKING:
    from modules.products.dtos import CreateProductDTO, UpdateProductDTO
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductService:
    """Application service for Product use-cases.

    Receives an ``IProductRepository`` via constructor injection (DIP).
    """

    def __init__(self, repository: IProductRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_product(self, dto: CreateProductDTO) -> Product:
        """Create a new product after enforcing uniqueness rules.

        Raises:
            ProductAlreadyExists: if the name is already taken.
        """
        log = logger.bind(name=dto.name)

        if self._repo.get_by_name(dto.name):
            log.warning("product.duplicate_name")
            raise ProductAlreadyExists(f"Product '{dto.name}' already exists.")

        product = Product(
            name=dto.name,
            price=dto.price,
            stock_count=dto.stock_count,
        )
        product = self._save_unique(product, log)
        log.info("product.created", product_id=str(product.id))
        return product

    @transaction.atomic
    def update_product(self, id: str, dto: UpdateProductDTO) -> Product:
        """Update an existing product with the supplied fields.

        Raises:
            ProductNotFound: if the product does not exist.
            ProductAlreadyExists: if the new name belongs to another product.
        """
        product = self._repo.get_by_id(id)
        if not product:
            raise ProductNotFound(f"Product {id} not found.")

        log = logger.bind(product_id=str(id))

        if dto.name is not None and dto.name != product.name:
            other = self._repo.get_by_name(dto.name)
            if other and other.pk != product.pk:
                log.warning("product.duplicate_name", name=dto.name)
                raise ProductAlreadyExists(f"Product '{dto.name}' already exists.")

        for field in ("name", "price", "stock_count"):
            value = getattr(dto, field)
            if value is not None:
                setattr(product, field, value)

        product = self._save_unique(product, log)
        log.info("product.updated")
        return product

    @transaction.atomic
    def delete_product(self, id: str) -> None:
        """Hard-delete a product.

        Raises:
            ProductNotFound: if the product does not exist.
        """
        if not self._repo.delete(id):
            raise ProductNotFound(f"Product {id} not found.")
        logger.info("product.deleted", product_id=str(id))

    def _save_unique(self, product: Product, log) -> Product:
        try:
            with transaction.atomic():
                return self._repo.save(product)
        except IntegrityError as exc:
            log.warning("product.duplicate_name_race")
            raise ProductAlreadyExists(
                f"Product '{product.name}' already exists."
            ) from exc

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_products(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Product]":
        """Return products, optionally filtered."""
        return self._repo.list(filters)

    def get_product(self, id: str) -> Product:
        """Retrieve a single product by ID.

        Raises:
            ProductNotFound: if the product does not exist.
        """
        product = self._repo.get_by_id(id)
        if not product:
            raise ProductNotFound(f"Product {id} not found.")
        return product

    def low_stock(self, threshold: Optional[int] = None) -> "models.QuerySet[Product]":
        """Products with ``stock_count <= threshold``, lowest stock first.

        ``threshold`` defaults to ``settings.LOW_STOCK_THRESHOLD``.
        """
        if threshold is None:
            threshold = settings.LOW_STOCK_THRESHOLD
        return self._repo.low_stock(threshold)
