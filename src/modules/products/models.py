"""Product model with name uniqueness and stock control.

Business rules implemented:
- Product name is unique (trimmed before saving).
- Price cannot be negative.
- Stock count cannot be negative (column type + CHECK constraint).
- ``stock_count`` changes caused by orders go through
  ``modules.products.inventory.InventoryLedger``; direct edits through
  ``ProductService.update_product`` set it outright.
"""

from __future__ import annotations

from decimal import Decimal

import structlog
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel

logger = structlog.get_logger(__name__)


class Product(BaseModel):
    """Catalog item.

    ``unique=True`` on ``name`` creates the UNIQUE INDEX that backs the
    service-level duplicate check.
    """

    name = models.CharField(max_length=255, unique=True)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    stock_count = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "products"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["stock_count"], name="products_stock_idx"),
            models.Index(fields=["-created_at"], name="products_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gte=0),
                name="products_price_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(stock_count__gte=0),
                name="products_stock_non_negative",
            ),
        ]

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def clean(self) -> None:
        super().clean()
        if self.name:
            self.name = self.name.strip()
        if self.price is not None and self.price < 0:
            raise ValidationError({"price": "Price cannot be negative."})
        if self.stock_count is not None and self.stock_count < 0:
            raise ValidationError({"stock_count": "Stock count cannot be negative."})

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, *args, **kwargs) -> None:
        is_new = self._state.adding
        if self.name:
            self.name = self.name.strip()
        super().save(*args, **kwargs)
        if is_new:
            logger.info(
                "product.inserted",
                product_id=str(self.id),
                name=self.name,
                stock_count=self.stock_count,
            )

    def __str__(self) -> str:
        return f"{self.name} ({self.stock_count} in stock)"
