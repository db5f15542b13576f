"""Unit tests for the domain error taxonomy and the DRF exception handler."""

from __future__ import annotations

import pytest
from rest_framework.exceptions import NotAuthenticated

from modules.core.exceptions import (
    Conflict,
    DomainError,
    DomainValidationError,
    InsufficientStock,
    NotFound,
    api_exception_handler,
    domain_error_response,
)
from modules.orders.exceptions import MissingReturnReason, OrderNotDeletable, OrderNotFound
from modules.products.exceptions import InvalidQuantity, ProductAlreadyExists
from modules.users.exceptions import UserHasOrders

pytestmark = pytest.mark.unit


class TestDomainErrorResponse:
    @pytest.mark.parametrize(
        "exc,status_code",
        [
            (NotFound("missing"), 404),
            (OrderNotFound("Order ORD-1 not found."), 404),
            (DomainValidationError("bad"), 400),
            (MissingReturnReason("reason"), 400),
            (OrderNotDeletable("pending only"), 400),
            (InvalidQuantity("qty"), 400),
            (Conflict("clash"), 409),
            (ProductAlreadyExists("dup"), 409),
            (UserHasOrders("has orders"), 409),
            (InsufficientStock("Widget", 2, 5), 409),
            (DomainError("generic"), 400),
        ],
    )
    def test_status_mapping(self, exc, status_code):
        response = domain_error_response(exc)
        assert response.status_code == status_code
        assert response.data == {"detail": str(exc)}

    def test_insufficient_stock_message(self):
        exc = InsufficientStock("Widget", 2, 5)
        assert str(exc) == "Insufficient stock for Widget. Available: 2, Requested: 5"


class TestApiExceptionHandler:
    def test_drf_exceptions_keep_default_rendering(self):
        response = api_exception_handler(NotAuthenticated(), {})
        assert response.status_code == 401

    def test_domain_error_escaping_a_view(self):
        response = api_exception_handler(OrderNotFound("Order X not found."), {})
        assert response.status_code == 404
        assert response.data == {"detail": "Order X not found."}

    def test_unexpected_error_is_opaque(self):
        response = api_exception_handler(RuntimeError("db password=hunter2"), {})
        assert response.status_code == 500
        assert response.data == {"detail": "Internal server error."}
