"""Integration tests for the User API.

Covers:
- CRUD with phone normalisation and uniqueness (409).
- Delete blocked while orders reference the user (409).
- check-phone look-up.
- List pagination, filters and search.
"""

from __future__ import annotations

from uuid import uuid4

import pytest

from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO
from modules.users.models import User

pytestmark = pytest.mark.integration

URL = "/api/v1/users/"

PAYLOAD = {
    "first_name": "Maria",
    "last_name": "Silva",
    "phone": "+1 (555) 010-2000",
    "email": "maria@example.com",
    "address": "22 River St",
}


class TestCreateUser:
    def test_create(self, api_client):
        response = api_client.post(URL, PAYLOAD, format="json")

        assert response.status_code == 201
        data = response.json()
        assert data["phone"] == "+15550102000"
        assert data["email"] == "maria@example.com"
        assert User.objects.filter(phone="+15550102000").exists()

    def test_duplicate_phone(self, api_client):
        api_client.post(URL, PAYLOAD, format="json")
        response = api_client.post(URL, {**PAYLOAD, "first_name": "Other"}, format="json")

        assert response.status_code == 409
        assert User.objects.count() == 1

    @pytest.mark.parametrize(
        "override",
        [{"phone": "012"}, {"first_name": ""}, {"email": "nope"}, {"address": " "}],
    )
    def test_invalid_payload(self, api_client, override):
        response = api_client.post(URL, {**PAYLOAD, **override}, format="json")
        assert response.status_code == 400


class TestRetrieveUpdateDelete:
    def test_retrieve(self, api_client, make_user):
        user = make_user()
        response = api_client.get(f"{URL}{user.id}/")
        assert response.status_code == 200
        assert response.json()["id"] == str(user.id)

    def test_retrieve_unknown(self, api_client):
        assert api_client.get(f"{URL}{uuid4()}/").status_code == 404

    def test_patch(self, api_client, make_user):
        user = make_user()
        response = api_client.patch(f"{URL}{user.id}/", {"address": "5 Lake Ave"}, format="json")

        assert response.status_code == 200
        assert response.json()["address"] == "5 Lake Ave"
        assert response.json()["first_name"] == user.first_name

    def test_patch_phone_conflict(self, api_client, make_user):
        make_user(phone="+15550103000")
        user = make_user()
        response = api_client.patch(
            f"{URL}{user.id}/", {"phone": "+15550103000"}, format="json"
        )
        assert response.status_code == 409

    def test_delete(self, api_client, make_user):
        user = make_user()
        response = api_client.delete(f"{URL}{user.id}/")
        assert response.status_code == 204
        assert not User.objects.filter(pk=user.pk).exists()

    def test_delete_with_orders(self, api_client, make_user, make_product, order_service):
        user = make_user()
        product = make_product("Mug")
        order_service.create_order(
            CreateOrderDTO(
                user_id=user.id,
                items=[CreateOrderItemDTO(product_id=product.id, quantity=1)],
            )
        )

        response = api_client.delete(f"{URL}{user.id}/")

        assert response.status_code == 409
        assert User.objects.filter(pk=user.pk).exists()


class TestCheckPhone:
    def test_existing(self, api_client, make_user):
        user = make_user(phone="+15550104000")
        response = api_client.post(
            f"{URL}check-phone/", {"phone": "+1 555 010 4000"}, format="json"
        )
        assert response.status_code == 200
        assert response.json()["exists"] is True
        assert response.json()["user"]["id"] == str(user.id)

    def test_unknown(self, api_client):
        response = api_client.post(f"{URL}check-phone/", {"phone": "+15550104001"}, format="json")
        assert response.json() == {"exists": False, "user": None}

    def test_missing_phone(self, api_client):
        response = api_client.post(f"{URL}check-phone/", {}, format="json")
        assert response.status_code == 400


class TestListUsers:
    def test_paginated(self, api_client, make_user):
        for _ in range(3):
            make_user()

        response = api_client.get(URL, {"page_size": 2})

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 3
        assert len(data["results"]) == 2
        assert data["next"] is not None

    def test_filter_by_name(self, api_client, make_user):
        make_user(first_name="Carla")
        make_user(first_name="Bruno")

        data = api_client.get(URL, {"name": "carl"}).json()

        assert [u["first_name"] for u in data["results"]] == ["Carla"]

    def test_search(self, api_client, make_user):
        make_user(last_name="Mendes")
        make_user(last_name="Costa")

        data = api_client.get(URL, {"search": "mend"}).json()

        assert [u["last_name"] for u in data["results"]] == ["Mendes"]
