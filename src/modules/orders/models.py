"""Order, OrderItem, and OrderStatusHistory models.

Business rules implemented:
- ``order_id`` is generated on first insert (``ORD-<unix millis>-<seq>``),
  unique at the database level and never rewritten.
- ``total_amount`` is derived from the items on every save of an existing
  order; callers never supply it.
- ``return_reason`` is filled exactly when the status is Returned or
  Cancelled (service rule, backed by a CHECK constraint).
- User FK uses PROTECT: a user with orders cannot be deleted.
- OrderItem snapshots the product name and price at creation time.  Its
  product reference carries no database constraint, so deleting a
  product leaves historical orders untouched.
- Each status change generates a history record.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

import structlog
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import IntegrityError, models, transaction
from django.db.models import Q
from django.utils import timezone

from modules.core.models import BaseModel
from modules.orders.constants import (
    ORDER_ID_MAX_RETRIES,
    ORDER_ID_PREFIX,
    ORDER_ID_SEQUENCE_WIDTH,
    RESTOCKED_STATES,
    OrderStatus,
)
from shared.domain.events import DomainEventMixin

logger = structlog.get_logger(__name__)

_RESTOCKED = sorted(RESTOCKED_STATES)


class OrderIdGenerationError(RuntimeError):
    """No free ``order_id`` was found within ``ORDER_ID_MAX_RETRIES``."""


class Order(DomainEventMixin, BaseModel):
    """Order aggregate root.

    ``order_id`` is the public, human-readable identifier used by the API;
    the UUIDv7 ``id`` is used for internal references.
    """

    order_id: models.CharField = models.CharField(
        max_length=40, unique=True, editable=False
    )
    user: models.ForeignKey = models.ForeignKey(
        "users.User",
        on_delete=models.PROTECT,
        related_name="orders",
    )
    status: models.CharField = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    return_reason: models.TextField = models.TextField(blank=True, default="")
    total_amount: models.DecimalField = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )

    class Meta:
        db_table = "orders"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["-created_at"], name="orders_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(total_amount__gte=0),
                name="orders_total_non_negative",
            ),
            models.CheckConstraint(
                condition=(
                    (Q(status__in=_RESTOCKED) & ~Q(return_reason=""))
                    | (~Q(status__in=_RESTOCKED) & Q(return_reason=""))
                ),
                name="orders_return_reason_matches_status",
            ),
        ]

    # ------------------------------------------------------------------
    # Stock helpers
    # ------------------------------------------------------------------

    @property
    def is_restocked(self) -> bool:
        """``True`` when the order's units are back in stock."""
        return self.status in RESTOCKED_STATES

    def compute_total(self) -> Decimal:
        total = sum((item.subtotal for item in self.items.all()), Decimal("0.00"))
        return total.quantize(Decimal("0.01"))

    # ------------------------------------------------------------------
    # Order id generation
    # ------------------------------------------------------------------

    @staticmethod
    def generate_order_id(sequence: int) -> str:
        """Build ``ORD-<unix millis>-<sequence zero-padded>``."""
        millis = int(timezone.now().timestamp() * 1000)
        return f"{ORDER_ID_PREFIX}-{millis}-{sequence:0{ORDER_ID_SEQUENCE_WIDTH}d}"

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def clean(self) -> None:
        super().clean()
        if self.status in RESTOCKED_STATES and not self.return_reason.strip():
            raise ValidationError(
                {"return_reason": "Return reason is required for Returned/Cancelled status."}
            )
        if self.status not in RESTOCKED_STATES and self.return_reason:
            raise ValidationError(
                {"return_reason": "Only Returned/Cancelled orders carry a return reason."}
            )

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, *args: Any, **kwargs: Any) -> None:
        if self._state.adding and not self.order_id:
            self._insert_with_generated_id(*args, **kwargs)
            return

        if not self._state.adding:
            self.total_amount = self.compute_total()
            update_fields = kwargs.get("update_fields")
            if update_fields is not None and "total_amount" not in update_fields:
                kwargs["update_fields"] = list(update_fields) + ["total_amount"]
        super().save(*args, **kwargs)

    def _insert_with_generated_id(self, *args: Any, **kwargs: Any) -> None:
        """Insert inside a savepoint, regenerating ``order_id`` on collision."""
        base_sequence = Order.objects.count() + 1
        for attempt in range(ORDER_ID_MAX_RETRIES):
            self.order_id = self.generate_order_id(base_sequence + attempt)
            try:
                with transaction.atomic():
                    super().save(*args, **kwargs)
                return
            except IntegrityError as exc:
                if "order_id" not in str(exc):
                    raise
                logger.warning(
                    "order.order_id_collision",
                    order_id=self.order_id,
                    attempt=attempt + 1,
                )
        self.order_id = ""
        raise OrderIdGenerationError(
            f"Failed to generate unique order_id after {ORDER_ID_MAX_RETRIES} attempts"
        )

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def __str__(self) -> str:
        return f"{self.order_id} ({self.status})"


class OrderItem(BaseModel):
    """Line item of an Order.

    ``name`` and ``price_at_order`` are **snapshots** of the product at
    purchase time; they never change when the product is edited or
    deleted.  ``subtotal`` is always ``quantity * price_at_order``.
    """

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )
    product: models.ForeignKey = models.ForeignKey(
        "products.Product",
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name="order_items",
    )
    name: models.CharField = models.CharField(max_length=255)
    quantity: models.PositiveIntegerField = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
    )
    price_at_order: models.DecimalField = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    subtotal: models.DecimalField = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        editable=False,
    )

    class Meta:
        db_table = "order_items"
        ordering = ["created_at", "id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gte=1),
                name="order_items_quantity_positive",
            ),
            models.CheckConstraint(
                condition=Q(price_at_order__gte=0),
                name="order_items_price_non_negative",
            ),
        ]

    def clean(self) -> None:
        super().clean()
        if self.quantity is not None and self.quantity < 1:
            raise ValidationError({"quantity": "Quantity must be at least 1."})

    def save(self, *args: Any, **kwargs: Any) -> None:
        self.subtotal = self.quantity * self.price_at_order
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.name} x{self.quantity} (${self.subtotal})"


class OrderStatusHistory(BaseModel):
    """Append-only audit trail for order status changes.

    The creation of an order is recorded with ``old_status=None``.
    ``notes`` holds the return reason when one was given.
    """

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="status_history",
    )
    old_status: models.CharField = models.CharField(  # noqa: DJ01
        max_length=20,
        choices=OrderStatus.choices,
        null=True,
        blank=True,
    )
    new_status: models.CharField = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
    )
    notes: models.TextField = models.TextField(blank=True, default="")

    class Meta:
        db_table = "order_status_history"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(
                fields=["order", "created_at"],
                name="osh_order_created_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.order} : {self.old_status} -> {self.new_status}"
