"""Order API views.

Exposes the ``OrderService`` via HTTP using DRF ViewSets.  Orders are
addressed by their public ``order_id``.  Domain exceptions are caught
and translated into HTTP status codes by ``domain_error_response``;
the view never swallows generic exceptions.
"""

from __future__ import annotations

from typing import Any, Dict

from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.core.exceptions import DomainError, domain_error_response
from modules.orders.dtos import CreateOrderDTO, OrderListQueryDTO, OrderPageDTO
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import OrderListSerializer, OrderSerializer
from modules.orders.services import OrderService
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.users.repositories.django_repository import UserDjangoRepository


def build_order_service() -> OrderService:
    """Wire ``OrderService`` to the Django ORM repositories."""
    return OrderService(
        order_repository=OrderDjangoRepository(),
        user_repository=UserDjangoRepository(),
        product_repository=ProductDjangoRepository(),
    )


def render_order_page(page: OrderPageDTO) -> Dict[str, Any]:
    return {
        "results": OrderListSerializer(page.results, many=True).data,
        "total": page.total,
        "page": page.page,
        "limit": page.limit,
        "total_pages": page.total_pages,
    }


def list_orders_response(
    service: OrderService, request: Request, **overrides: Any
) -> Response:
    """Parse list query parameters and answer one page of orders."""
    try:
        query = OrderListQueryDTO.from_query_params(request.query_params, **overrides)
    except PydanticValidationError as exc:
        return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
    try:
        page = service.list_orders(query)
    except DomainError as exc:
        return domain_error_response(exc)
    return Response(render_order_page(page))


class OrderViewSet(GenericViewSet):
    """ViewSet for Order operations.

    Uses ``OrderService`` with injected repositories (DIP).
    Does **not** extend ``ModelViewSet``; all ORM access goes through
    the service/repository layer.
    """

    queryset = Order.objects.all()
    serializer_class = OrderSerializer
    lookup_field = "order_id"
    pagination_class = None

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_order_service()

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/"""
        try:
            dto = CreateOrderDTO.model_validate(request.data)
        except PydanticValidationError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        try:
            order = self._service.create_order(dto)
        except DomainError as exc:
            return domain_error_response(exc)

        out = OrderSerializer(order)
        return Response(out.data, status=status.HTTP_201_CREATED)

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/

        Accepts ``status``, ``user_id``, ``start_date``, ``end_date``,
        ``min_amount``, ``max_amount``, ``search``, ``page`` and ``limit``.
        """
        return list_orders_response(self._service, request)

    def retrieve(self, request: Request, order_id: str | None = None) -> Response:
        """GET /api/v1/orders/{order_id}/"""
        try:
            order = self._service.get_order(order_id or "")
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(OrderSerializer(order).data)

    @action(detail=False, methods=["get"])
    def stats(self, request: Request) -> Response:
        """GET /api/v1/orders/stats/"""
        return Response(self._service.get_order_stats().model_dump())

    # ------------------------------------------------------------------
    # Status Update
    # ------------------------------------------------------------------

    @action(detail=True, methods=["patch", "put"], url_path="status")
    def update_status(self, request: Request, order_id: str | None = None) -> Response:
        """PATCH /api/v1/orders/{order_id}/status/

        Body: ``{"status": "...", "return_reason": "..."}``.  The reason is
        required for Returned and Cancelled.
        """
        status_value = request.data.get("status")
        if not status_value:
            return Response(
                {"detail": "Field 'status' is required."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        reason = request.data.get("return_reason")
        try:
            order = self._service.update_status(
                order_id=order_id or "",
                new_status=str(status_value),
                return_reason=None if reason is None else str(reason),
            )
        except DomainError as exc:
            return domain_error_response(exc)

        return Response(OrderSerializer(order).data)

    def partial_update(self, request: Request, order_id: str | None = None) -> Response:
        """PATCH /api/v1/orders/{order_id}/ (status changes only)."""
        return self.update_status(request, order_id=order_id)

    # ------------------------------------------------------------------
    # Destroy
    # ------------------------------------------------------------------

    def destroy(self, request: Request, order_id: str | None = None) -> Response:
        """DELETE /api/v1/orders/{order_id}/

        Only pending orders can be deleted; their stock is released.
        """
        try:
            self._service.delete_order(order_id or "")
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(
            {"detail": "Order deleted successfully.", "order_id": order_id},
            status=status.HTTP_200_OK,
        )
