from decimal import Decimal
from itertools import count

import pytest
from rest_framework.test import APIClient

from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.users.models import User
from modules.users.repositories.django_repository import UserDjangoRepository

_phone_numbers = count(1)


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


@pytest.fixture()
def make_user():
    """Factory creating users with distinct phone numbers."""

    def _make(**overrides):
        data = {
            "first_name": "Ana",
            "last_name": "Souza",
            "phone": f"+1555{next(_phone_numbers):07d}",
            "email": "",
            "address": "12 Elm St",
        }
        data.update(overrides)
        return User.objects.create(**data)

    return _make


@pytest.fixture()
def make_product():
    def _make(name, price="10.00", stock_count=10):
        return Product.objects.create(
            name=name,
            price=Decimal(price),
            stock_count=stock_count,
        )

    return _make


@pytest.fixture()
def order_service():
    return OrderService(
        order_repository=OrderDjangoRepository(),
        user_repository=UserDjangoRepository(),
        product_repository=ProductDjangoRepository(),
    )
