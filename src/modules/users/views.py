"""User API views.

Exposes the ``UserService`` via HTTP using DRF ViewSets.
Domain exceptions are caught and translated into appropriate
HTTP status codes; the view never swallows generic exceptions.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.mixins import ListModelMixin
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.core.pagination import StandardResultsSetPagination
from modules.orders.views import build_order_service, list_orders_response
from modules.users.dtos import CreateUserDTO, UpdateUserDTO, normalize_phone
from modules.users.exceptions import UserAlreadyExists, UserHasOrders, UserNotFound
from modules.users.filters import UserFilter
from modules.users.models import User
from modules.users.repositories.django_repository import UserDjangoRepository
from modules.users.serializers import UserSerializer
from modules.users.services import UserService

USER_FIELDS = ("first_name", "last_name", "phone", "email", "address")


class UserViewSet(ListModelMixin, GenericViewSet):
    """ViewSet for User CRUD operations.

    Uses ``UserService`` with ``UserDjangoRepository`` (DIP).
    Does **not** extend ``ModelViewSet``; all ORM access goes through
    the service/repository layer.
    """

    filterset_class = UserFilter
    search_fields = ["first_name", "last_name", "phone", "email"]
    ordering_fields = ["first_name", "last_name", "created_at"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    pagination_class = StandardResultsSetPagination
    queryset = User.objects.all()
    serializer_class = UserSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = UserService(repository=UserDjangoRepository())

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def get_queryset(self):
        return self._service.list_users()

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/users/{pk}/"""
        try:
            user = self._service.get_user(pk or "")
        except UserNotFound:
            return Response(
                {"detail": "User not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(UserSerializer(user).data)

    # ------------------------------------------------------------------
    # Create / Update / Destroy
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/users/"""
        data = request.data

        try:
            dto = CreateUserDTO(
                first_name=data.get("first_name", ""),
                last_name=data.get("last_name", ""),
                phone=data.get("phone", ""),
                email=data.get("email"),
                address=data.get("address", ""),
            )
        except (PydanticValidationError, ValueError) as exc:
            return Response(
                {"detail": str(exc)},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            user = self._service.create_user(dto)
        except UserAlreadyExists as exc:
            return Response(
                {"detail": str(exc)},
                status=status.HTTP_409_CONFLICT,
            )

        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT/PATCH /api/v1/users/{pk}/"""
        data = request.data

        try:
            dto = UpdateUserDTO(**{field: data.get(field) for field in USER_FIELDS})
        except (PydanticValidationError, ValueError) as exc:
            return Response(
                {"detail": str(exc)},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            user = self._service.update_user(pk or "", dto)
        except UserNotFound:
            return Response(
                {"detail": "User not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        except UserAlreadyExists as exc:
            return Response(
                {"detail": str(exc)},
                status=status.HTTP_409_CONFLICT,
            )

        return Response(UserSerializer(user).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/users/{pk}/"""
        return self.update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/users/{pk}/"""
        try:
            self._service.delete_user(pk or "")
        except UserNotFound:
            return Response(
                {"detail": "User not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        except UserHasOrders as exc:
            return Response(
                {"detail": str(exc)},
                status=status.HTTP_409_CONFLICT,
            )
        return Response(status=status.HTTP_204_NO_CONTENT)

    # ------------------------------------------------------------------
    # Extra actions
    # ------------------------------------------------------------------

    @action(detail=False, methods=["post"], url_path="check-phone")
    def check_phone(self, request: Request) -> Response:
        """POST /api/v1/users/check-phone/

        Answers ``{"exists": bool, "user": {...} | null}``.
        """
        phone = normalize_phone(request.data.get("phone") or "")
        if not phone:
            return Response(
                {"detail": "Field 'phone' is required."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        user = self._service.find_by_phone(phone)
        return Response(
            {
                "exists": user is not None,
                "user": UserSerializer(user).data if user else None,
            }
        )

    @action(detail=True, methods=["get"])
    def orders(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/users/{pk}/orders/

        Paginated like ``GET /orders/``, restricted to this user.
        """
        try:
            user = self._service.get_user(pk or "")
        except UserNotFound:
            return Response(
                {"detail": "User not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        return list_orders_response(build_order_service(), request, user_id=user.id)
