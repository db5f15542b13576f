"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.
All write operations are wrapped in ``transaction.atomic()`` so the
Order aggregate (Order + OrderItems) is persisted atomically.

Concurrency control on status updates and deletes uses
``select_for_update()`` on the order row.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import models, transaction
from django.db.models import Count, Q

from modules.core.models import OutboxEvent
from modules.orders.constants import OrderStatus
from modules.orders.dtos import OrderListQueryDTO
from modules.orders.exceptions import InvalidOrderFilter
from modules.orders.filters import OrderFilter
from modules.orders.models import Order, OrderItem, OrderStatusHistory
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)

OUTBOX_TOPIC = "orders"


def _with_relations(queryset: "models.QuerySet[Order]") -> "models.QuerySet[Order]":
    return queryset.select_related("user").prefetch_related("items", "status_history")


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, data: Dict[str, Any]) -> Order:
        """Create an order with its items atomically.

        ``data`` keys:
        - ``user_id`` (required)
        - ``items`` (required): list of dicts with ``product_id``,
          ``name``, ``quantity``, ``price_at_order``
        """
        order = Order(user_id=data["user_id"])
        order.save()

        items = data["items"]
        for item_data in items:
            OrderItem(
                order=order,
                product_id=item_data["product_id"],
                name=item_data["name"],
                quantity=item_data["quantity"],
                price_at_order=item_data["price_at_order"],
            ).save()

        order.save(update_fields=["total_amount"])

        logger.info(
            "order.created",
            order_id=order.order_id,
            item_count=len(items),
            total_amount=str(order.total_amount),
        )
        return order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve an order by UUID primary key.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return _with_relations(Order.objects.filter(id=id)).first()
        except (ValueError, ValidationError):
            return None

    def get_by_order_id(self, order_id: str) -> Optional[Order]:
        return _with_relations(Order.objects.filter(order_id=order_id)).first()

    def get_for_update(self, order_id: str) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE).

        Only the order row is locked; items are prefetched so the caller
        can iterate over them while holding the lock.
        """
        return (
            Order.objects.select_for_update(of=("self",))
            .select_related("user")
            .prefetch_related("items")
            .filter(order_id=order_id)
            .first()
        )

    def list(self, filters: Optional[Dict[str, Any]] = None) -> "models.QuerySet[Order]":
        """List orders with optional Django ORM look-ups.

        Examples of valid filters::

            {"status": "Pending"}
            {"user_id": user.id}
        """
        queryset = _with_relations(Order.objects.all())
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def search(self, query: OrderListQueryDTO) -> Tuple[List[Order], int]:
        filterset = OrderFilter(
            data=query.filter_data(),
            queryset=_with_relations(Order.objects.all()),
        )
        if not filterset.is_valid():
            raise InvalidOrderFilter(str(dict(filterset.errors)))

        queryset = filterset.qs.order_by("-created_at", "-id")
        total = queryset.count()
        page = list(queryset[query.offset : query.offset + query.limit])
        return page, total

    def stats(self) -> Dict[str, int]:
        return Order.objects.aggregate(
            total=Count("id"),
            pending=Count("id", filter=Q(status=OrderStatus.PENDING)),
            in_progress=Count("id", filter=Q(status=OrderStatus.IN_PROGRESS)),
            completed=Count("id", filter=Q(status=OrderStatus.COMPLETE)),
            returned=Count("id", filter=Q(status=OrderStatus.RETURNED)),
            cancelled=Count("id", filter=Q(status=OrderStatus.CANCELLED)),
        )

    def list_for_product(self, product_id: UUID) -> "models.QuerySet[Order]":
        return (
            _with_relations(Order.objects.filter(items__product_id=product_id))
            .distinct()
            .order_by("-created_at", "-id")
        )

    # ------------------------------------------------------------------
    # Save / Delete (IRepository contract)
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Order) -> Order:
        """Persist an order and write its pending events to the outbox."""
        entity.save()
        event_count = self._flush_events(entity)
        logger.info("order.saved", order_id=entity.order_id, event_count=event_count)
        return entity

    @transaction.atomic
    def remove(self, entity: Order) -> None:
        order_id = entity.order_id
        self._flush_events(entity)
        entity.delete()
        logger.info("order.deleted", order_id=order_id)

    def delete(self, id: str) -> bool:
        """Refuse keyed deletes.

        Only Pending orders may be deleted, and their stock must be
        released in the same transaction.  ``OrderService.delete_order``
        owns that rule and calls ``remove`` on the locked order.
        """
        raise NotImplementedError("use OrderService.delete_order")

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    @transaction.atomic
    def add_history(
        self,
        order_pk: UUID,
        status: OrderStatus,
        notes: str = "",
        old_status: Optional[str] = None,
    ) -> OrderStatusHistory:
        """Record a status change in the order's audit trail."""
        history = OrderStatusHistory(
            order_id=order_pk,
            old_status=old_status,
            new_status=status,
            notes=notes,
        )
        history.save()

        logger.info(
            "order.history_added",
            order_pk=str(order_pk),
            old_status=old_status,
            new_status=status,
        )
        return history

    @staticmethod
    def _flush_events(entity: Order) -> int:
        events = entity.domain_events
        for event in events:
            OutboxEvent.record(event, topic=OUTBOX_TOPIC)
        entity.clear_domain_events()
        return len(events)
