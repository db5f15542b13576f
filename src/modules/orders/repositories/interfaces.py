"""Order repository interface.

Extends ``IRepository[Order]`` with methods required by the Order
aggregate: atomic creation with items, locked look-ups by public
``order_id``, status history tracking and the list/stats queries.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple
from uuid import UUID

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.constants import OrderStatus
    from modules.orders.dtos import OrderListQueryDTO
    from modules.orders.models import Order, OrderStatusHistory


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The Order aggregate includes OrderItem children and
    OrderStatusHistory records.  Mutations must be atomic.
    """

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Order:
        """Create an order with its items atomically.

        ``data`` must include ``user_id`` and ``items`` (list of dicts
        with ``product_id``, ``name``, ``quantity``, ``price_at_order``).
        """

    @abstractmethod
    def get_by_order_id(self, order_id: str) -> Optional[Order]:
        """Retrieve an order by its public id with user, items and history."""

    @abstractmethod
    def get_for_update(self, order_id: str) -> Optional[Order]:
        """Retrieve an order by public id with a row-level lock."""

    @abstractmethod
    def remove(self, entity: Order) -> None:
        """Flush the order's pending events and hard-delete it."""

    @abstractmethod
    def add_history(
        self,
        order_pk: UUID,
        status: OrderStatus,
        notes: str = "",
        old_status: Optional[str] = None,
    ) -> OrderStatusHistory:
        """Record a status change in the order's audit trail."""

    @abstractmethod
    def search(self, query: OrderListQueryDTO) -> Tuple[List[Order], int]:
        """Return one page of matching orders and the total match count."""

    @abstractmethod
    def stats(self) -> Dict[str, int]:
        """Count all orders and the orders in each status."""

    @abstractmethod
    def list_for_product(self, product_id: UUID) -> "models.QuerySet[Order]":
        """Orders with at least one line for *product_id*, newest first."""
