"""Order service layer (Use Cases).

Orchestrates the order lifecycle and keeps inventory consistent with
it.  All write operations are atomic: the service defines the
unit-of-work boundary, so a failure at any step rolls back every stock
movement made before it.

Business rules enforced:
- Orders are placed for an existing user (by id) or for a phone number,
  registering the buyer from inline details when the phone is unknown.
- Every line is checked (product exists, enough stock) before any stock
  is reserved; reservation goes through the Inventory Ledger.
- Entering Returned/Cancelled releases the order's stock once; leaving
  those statuses for an active one reserves it again.
- Returned/Cancelled require a return reason.
- Only pending orders can be deleted; deleting releases their stock.
- History recorded on every status change.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional
from uuid import UUID

import structlog
from django.db import models, transaction

from modules.orders.constants import (
    DELETABLE_STATES,
    RESTOCKED_STATES,
    OrderStatus,
    parse_status,
)
from modules.orders.dtos import OrderPageDTO, OrderStatsDTO
from modules.orders.events import OrderCreated, OrderDeleted, OrderStatusChanged
from modules.orders.exceptions import (
    InvalidOrderStatus,
    MissingReturnReason,
    OrderNotDeletable,
    OrderNotFound,
)
from modules.products.exceptions import ProductNotFound
from modules.products.inventory import InventoryLedger
from modules.users.exceptions import UserNotFound
from modules.users.services import UserService

if TYPE_CHECKING:
    from modules.orders.dtos import CreateOrderDTO, OrderListQueryDTO
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.products.repositories.interfaces import IProductRepository
    from modules.users.models import User
    from modules.users.repositories.interfaces import IUserRepository

logger = structlog.get_logger(__name__)


class OrderService:
    """Application service for Order use-cases.

    Receives repositories via constructor injection (DIP).  The Inventory
    Ledger defaults to one built on ``product_repository``.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        user_repository: IUserRepository,
        product_repository: IProductRepository,
        ledger: Optional[InventoryLedger] = None,
    ) -> None:
        self._order_repo = order_repository
        self._user_repo = user_repository
        self._product_repo = product_repository
        self._users = UserService(repository=user_repository)
        self._ledger = ledger or InventoryLedger(product_repository)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_order(self, dto: CreateOrderDTO) -> Order:
        """Create a new order, reserving stock for every line.

        Steps:
        1. Resolve the buyer (by id, or find-or-create by phone).
        2. Check every product exists and holds enough stock.
        3. Reserve each line through the ledger (sorted by product id so
           concurrent orders lock rows in the same order).
        4. Persist order + items with name/price snapshots.
        5. Record initial status history and the ``OrderCreated`` event.

        Raises:
            UserNotFound: unknown ``user_id``, or unknown phone without
                user details.
            ProductNotFound: a product does not exist.
            InsufficientStock: not enough stock for a line.
        """
        log = logger.bind(
            user_id=str(dto.user_id) if dto.user_id else None,
            item_count=len(dto.items),
        )
        log.info("order.creation_started")

        # 1. Buyer
        user = self._resolve_user(dto)
        log = log.bind(user_id=str(user.id))

        # 2. Validate all lines before touching stock
        products = self._product_repo.get_many([item.product_id for item in dto.items])
        for item in dto.items:
            product = products.get(item.product_id)
            if product is None:
                log.warning("order.product_missing", product_id=str(item.product_id))
                raise ProductNotFound(f"Product {item.product_id} not found.")
            self._ledger.check_available(product, item.quantity)

        # 3. Reserve
        repo_items = []
        for item in sorted(dto.items, key=lambda i: str(i.product_id)):
            self._ledger.reserve(item.product_id, item.quantity)
            product = products[item.product_id]
            repo_items.append(
                {
                    "product_id": product.id,
                    "name": product.name,
                    "quantity": item.quantity,
                    "price_at_order": product.price,
                }
            )

        # 4. Persist
        order = self._order_repo.create({"user_id": user.id, "items": repo_items})
        order.add_domain_event(
            OrderCreated(
                aggregate_id=order.id,
                order_id=order.order_id,
                total_amount=str(order.total_amount),
            )
        )
        self._order_repo.save(order)

        # 5. History
        self._order_repo.add_history(
            order_pk=order.id,
            status=OrderStatus.PENDING,
            notes="Order created",
        )

        log.info("order.placed", order_id=order.order_id)
        return self._order_repo.get_by_order_id(order.order_id) or order

    @transaction.atomic
    def update_status(
        self,
        order_id: str,
        new_status: str,
        return_reason: Optional[str] = None,
    ) -> Order:
        """Move an order to *new_status*, adjusting stock when needed.

        Status and reason are validated before the order is looked up.
        The order row is locked for the rest of the transaction.

        Raises:
            InvalidOrderStatus: *new_status* is not a known status.
            MissingReturnReason: Returned/Cancelled without a reason.
            OrderNotFound: order does not exist.
            InsufficientStock: reactivating an order whose stock is gone.
        """
        try:
            status = parse_status(new_status)
        except ValueError as exc:
            raise InvalidOrderStatus(str(exc)) from exc

        reason = (return_reason or "").strip()
        if status in RESTOCKED_STATES and not reason:
            raise MissingReturnReason(
                "Return reason is required for Returned/Cancelled status."
            )

        order = self._order_repo.get_for_update(order_id)
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")

        old_status = order.status
        log = logger.bind(
            order_id=order_id,
            current_status=old_status,
            new_status=status.value,
        )

        was_restocked = old_status in RESTOCKED_STATES
        now_restocked = status in RESTOCKED_STATES
        if now_restocked and not was_restocked:
            self._release_items(order)
            log.info("order.stock_returned")
        elif was_restocked and not now_restocked:
            self._reserve_items(order)
            log.info("order.stock_rereserved")

        order.status = status
        order.return_reason = reason if now_restocked else ""
        if old_status != status:
            order.add_domain_event(
                OrderStatusChanged(
                    aggregate_id=order.id,
                    order_id=order.order_id,
                    old_status=old_status,
                    new_status=status.value,
                )
            )
        self._order_repo.save(order)

        if old_status != status:
            self._order_repo.add_history(
                order_pk=order.id,
                status=status,
                notes=reason,
                old_status=old_status,
            )

        log.info("order.status_updated")
        return self._order_repo.get_by_order_id(order_id) or order

    @transaction.atomic
    def delete_order(self, order_id: str) -> None:
        """Delete a pending order and release its stock.

        Raises:
            OrderNotFound: order does not exist.
            OrderNotDeletable: the order is not pending.
        """
        order = self._order_repo.get_for_update(order_id)
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")

        log = logger.bind(order_id=order_id, current_status=order.status)

        if order.status not in DELETABLE_STATES:
            log.warning("order.delete_rejected")
            raise OrderNotDeletable("Only pending orders can be deleted.")

        self._release_items(order)
        order.add_domain_event(OrderDeleted(aggregate_id=order.id, order_id=order_id))
        self._order_repo.remove(order)
        log.info("order.removed")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: str) -> Order:
        """Retrieve a single order by its public id.

        Raises:
            OrderNotFound: if the order does not exist.
        """
        order = self._order_repo.get_by_order_id(order_id)
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    def list_orders(self, query: OrderListQueryDTO) -> OrderPageDTO:
        """Return one page of orders matching *query*, newest first."""
        results, total = self._order_repo.search(query)
        return OrderPageDTO(
            results=results,
            total=total,
            page=query.page,
            limit=query.limit,
        )

    def get_order_stats(self) -> OrderStatsDTO:
        return OrderStatsDTO(**self._order_repo.stats())

    def list_orders_for_product(self, product_id: UUID) -> "models.QuerySet[Order]":
        return self._order_repo.list_for_product(product_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _resolve_user(self, dto: CreateOrderDTO) -> User:
        if dto.user_id is not None:
            user = self._user_repo.get_by_id(str(dto.user_id))
            if not user:
                raise UserNotFound(f"User {dto.user_id} not found.")
            return user
        return self._users.get_or_create_by_phone(dto.lookup_phone, dto.user)

    def _release_items(self, order: Order) -> None:
        for item in sorted(order.items.all(), key=lambda i: str(i.product_id)):
            self._ledger.release(item.product_id, item.quantity)

    def _reserve_items(self, order: Order) -> None:
        for item in sorted(order.items.all(), key=lambda i: str(i.product_id)):
            self._ledger.reserve(item.product_id, item.quantity)
