"""Integration tests for Order creation endpoint.

Covers:
- Success 201: order by user id, by known phone, by new phone + details.
- Validation 400: missing items, zero quantity, no user reference.
- Business 404/409: unknown user or product, insufficient stock.
- Stock deduction: products stock decremented on creation.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest

from modules.orders.constants import OrderStatus
from modules.orders.models import Order
from modules.products.models import Product
from modules.users.models import User

pytestmark = pytest.mark.integration

URL = "/api/v1/orders/"


@pytest.fixture()
def user(make_user):
    return make_user(phone="+15550100001")


@pytest.fixture()
def widget(make_product):
    return make_product("Widget", price="12.50", stock_count=5)


class TestCreateOrderSuccess:
    def test_create_by_user_id(self, api_client, user, widget):
        response = api_client.post(
            URL,
            {
                "user_id": str(user.id),
                "items": [{"product_id": str(widget.id), "quantity": 3}],
            },
            format="json",
        )

        assert response.status_code == 201
        data = response.json()
        assert data["order_id"].startswith("ORD-")
        assert data["status"] == OrderStatus.PENDING
        assert data["total_amount"] == "37.50"
        assert data["return_reason"] == ""
        assert data["user"]["id"] == str(user.id)
        assert data["items"] == [
            {
                "product_id": str(widget.id),
                "name": "Widget",
                "quantity": 3,
                "price_at_order": "12.50",
                "subtotal": "37.50",
            }
        ]
        assert len(data["status_history"]) == 1
        assert data["status_history"][0]["new_status"] == OrderStatus.PENDING

        widget.refresh_from_db()
        assert widget.stock_count == 2

    def test_create_by_known_phone(self, api_client, user, widget):
        response = api_client.post(
            URL,
            {
                "phone": "+1 555-010-0001",
                "items": [{"product_id": str(widget.id), "quantity": 1}],
            },
            format="json",
        )

        assert response.status_code == 201
        assert response.json()["user"]["id"] == str(user.id)

    def test_create_registers_new_user(self, api_client, widget):
        response = api_client.post(
            URL,
            {
                "phone": "+15550108000",
                "user": {
                    "first_name": "Leo",
                    "last_name": "Prado",
                    "phone": "+15550108000",
                    "email": "leo@example.com",
                    "address": "90 Hill Rd",
                },
                "items": [{"product_id": str(widget.id), "quantity": 1}],
            },
            format="json",
        )

        assert response.status_code == 201
        assert User.objects.filter(phone="+15550108000").exists()
        assert response.json()["user"]["first_name"] == "Leo"


class TestCreateOrderValidation:
    def test_missing_items(self, api_client, user):
        response = api_client.post(URL, {"user_id": str(user.id), "items": []}, format="json")
        assert response.status_code == 400
        assert "detail" in response.json()

    def test_zero_quantity(self, api_client, user, widget):
        response = api_client.post(
            URL,
            {
                "user_id": str(user.id),
                "items": [{"product_id": str(widget.id), "quantity": 0}],
            },
            format="json",
        )
        assert response.status_code == 400
        widget.refresh_from_db()
        assert widget.stock_count == 5

    def test_missing_user_reference(self, api_client, widget):
        response = api_client.post(
            URL,
            {"items": [{"product_id": str(widget.id), "quantity": 1}]},
            format="json",
        )
        assert response.status_code == 400

    def test_invalid_user_details(self, api_client, widget):
        response = api_client.post(
            URL,
            {
                "phone": "+15550108001",
                "user": {"first_name": "Leo", "phone": "+15550108001"},
                "items": [{"product_id": str(widget.id), "quantity": 1}],
            },
            format="json",
        )
        assert response.status_code == 400
        assert Order.objects.count() == 0


class TestCreateOrderBusinessErrors:
    def test_unknown_user(self, api_client, widget):
        response = api_client.post(
            URL,
            {
                "user_id": str(uuid4()),
                "items": [{"product_id": str(widget.id), "quantity": 1}],
            },
            format="json",
        )
        assert response.status_code == 404

    def test_unknown_phone_without_details(self, api_client, widget):
        response = api_client.post(
            URL,
            {
                "phone": "+15550108002",
                "items": [{"product_id": str(widget.id), "quantity": 1}],
            },
            format="json",
        )
        assert response.status_code == 404

    def test_unknown_product(self, api_client, user):
        response = api_client.post(
            URL,
            {
                "user_id": str(user.id),
                "items": [{"product_id": str(uuid4()), "quantity": 1}],
            },
            format="json",
        )
        assert response.status_code == 404
        assert "not found" in response.json()["detail"]

    def test_insufficient_stock(self, api_client, user, widget):
        response = api_client.post(
            URL,
            {
                "user_id": str(user.id),
                "items": [{"product_id": str(widget.id), "quantity": 6}],
            },
            format="json",
        )

        assert response.status_code == 409
        assert response.json()["detail"] == (
            "Insufficient stock for Widget. Available: 5, Requested: 6"
        )
        widget.refresh_from_db()
        assert widget.stock_count == 5
        assert Order.objects.count() == 0

    def test_second_line_failure_keeps_first_line_stock(
        self, api_client, user, widget, make_product
    ):
        scarce = make_product("Scarce", price="1.00", stock_count=1)
        response = api_client.post(
            URL,
            {
                "user_id": str(user.id),
                "items": [
                    {"product_id": str(widget.id), "quantity": 2},
                    {"product_id": str(scarce.id), "quantity": 2},
                ],
            },
            format="json",
        )

        assert response.status_code == 409
        assert Product.objects.get(pk=widget.pk).stock_count == 5
        assert Product.objects.get(pk=scarce.pk).stock_count == 1


def test_total_matches_lines(api_client, user, widget, make_product):
    cable = make_product("Cable", price="3.33", stock_count=10)
    response = api_client.post(
        URL,
        {
            "user_id": str(user.id),
            "items": [
                {"product_id": str(widget.id), "quantity": 1},
                {"product_id": str(cable.id), "quantity": 3},
            ],
        },
        format="json",
    )

    assert response.status_code == 201
    data = response.json()
    expected = sum(Decimal(item["subtotal"]) for item in data["items"])
    assert Decimal(data["total_amount"]) == expected == Decimal("22.49")
