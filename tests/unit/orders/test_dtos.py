"""Unit tests for Order DTOs and status parsing."""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest
from pydantic import ValidationError

from modules.orders.constants import OrderStatus, parse_status
from modules.orders.dtos import (
    CreateOrderDTO,
    CreateOrderItemDTO,
    OrderListQueryDTO,
    OrderPageDTO,
)

pytestmark = pytest.mark.unit


class TestCreateOrderItemDTO:
    def test_valid(self):
        dto = CreateOrderItemDTO(product_id=uuid4(), quantity=2)
        assert dto.quantity == 2

    @pytest.mark.parametrize("quantity", [0, -3])
    def test_quantity_must_be_positive(self, quantity):
        with pytest.raises(ValidationError):
            CreateOrderItemDTO(product_id=uuid4(), quantity=quantity)

    def test_product_id_must_be_uuid(self):
        with pytest.raises(ValidationError):
            CreateOrderItemDTO(product_id="widget", quantity=1)


class TestCreateOrderDTO:
    def _item(self):
        return {"product_id": str(uuid4()), "quantity": 1}

    def test_user_id_reference(self):
        user_id = uuid4()
        dto = CreateOrderDTO.model_validate({"user_id": str(user_id), "items": [self._item()]})
        assert dto.user_id == user_id
        assert dto.lookup_phone is None

    def test_phone_reference_is_normalized(self):
        dto = CreateOrderDTO(phone="+1 (555) 010-0001", items=[self._item()])
        assert dto.phone == "+15550100001"
        assert dto.lookup_phone == "+15550100001"

    def test_lookup_phone_falls_back_to_user_details(self):
        dto = CreateOrderDTO.model_validate(
            {
                "user": {
                    "first_name": "Ana",
                    "last_name": "Souza",
                    "phone": "+15550100002",
                    "address": "12 Elm St",
                },
                "items": [self._item()],
            }
        )
        assert dto.lookup_phone == "+15550100002"

    def test_user_reference_required(self):
        with pytest.raises(ValidationError, match="user_id or phone"):
            CreateOrderDTO(items=[self._item()])

    def test_blank_phone_counts_as_missing(self):
        with pytest.raises(ValidationError):
            CreateOrderDTO(phone="  ", items=[self._item()])

    def test_invalid_phone(self):
        with pytest.raises(ValidationError):
            CreateOrderDTO(phone="12ab", items=[self._item()])

    def test_items_required(self):
        with pytest.raises(ValidationError, match="at least one item"):
            CreateOrderDTO(user_id=uuid4(), items=[])

    def test_duplicate_products_rejected(self):
        product_id = str(uuid4())
        with pytest.raises(ValidationError, match="Duplicate product"):
            CreateOrderDTO.model_validate(
                {
                    "user_id": str(uuid4()),
                    "items": [
                        {"product_id": product_id, "quantity": 1},
                        {"product_id": product_id, "quantity": 2},
                    ],
                }
            )


class TestOrderListQueryDTO:
    def test_defaults(self):
        query = OrderListQueryDTO()
        assert query.page == 1
        assert query.limit == 10
        assert query.offset == 0
        assert query.filter_data() == {}

    def test_from_query_params_skips_blank_and_unknown(self):
        query = OrderListQueryDTO.from_query_params(
            {"status": "", "page": "3", "limit": "5", "colour": "red"}
        )
        assert query.status is None
        assert query.page == 3
        assert query.limit == 5
        assert query.offset == 10

    def test_status_alias_normalized(self):
        query = OrderListQueryDTO(status="in-progress")
        assert query.status == OrderStatus.IN_PROGRESS.value

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            OrderListQueryDTO(status="Shipped")

    @pytest.mark.parametrize("limit", [0, 101])
    def test_limit_bounds(self, limit):
        with pytest.raises(ValidationError):
            OrderListQueryDTO(limit=limit)

    def test_page_must_be_positive(self):
        with pytest.raises(ValidationError):
            OrderListQueryDTO(page=0)

    def test_date_range_must_be_ordered(self):
        with pytest.raises(ValidationError):
            OrderListQueryDTO(start_date="2026-02-02", end_date="2026-02-01")

    def test_timestamps_narrowed_to_day(self):
        query = OrderListQueryDTO(
            start_date="2026-02-01T15:30:00Z",
            end_date=datetime(2026, 2, 3, 9, 0, tzinfo=timezone.utc),
        )
        assert query.start_date == date(2026, 2, 1)
        assert query.end_date == date(2026, 2, 3)

    def test_malformed_timestamp_rejected(self):
        with pytest.raises(ValidationError):
            OrderListQueryDTO(start_date="2026-02-01Tnoon")

    def test_amount_range_must_be_ordered(self):
        with pytest.raises(ValidationError):
            OrderListQueryDTO(min_amount="50", max_amount="10")

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError):
            OrderListQueryDTO(min_amount="-1")

    def test_filter_data_is_stringified(self):
        user_id = uuid4()
        query = OrderListQueryDTO(
            user_id=user_id,
            start_date=date(2026, 1, 1),
            min_amount=Decimal("10.5"),
            search="ORD",
            page=2,
        )
        assert query.filter_data() == {
            "user_id": str(user_id),
            "start_date": "2026-01-01",
            "min_amount": "10.5",
            "search": "ORD",
        }

    def test_overrides_win(self):
        user_id = uuid4()
        query = OrderListQueryDTO.from_query_params(
            {"user_id": str(uuid4())}, user_id=user_id
        )
        assert query.user_id == user_id


class TestOrderPageDTO:
    @pytest.mark.parametrize(
        "total,limit,pages",
        [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2), (25, 5, 5)],
    )
    def test_total_pages(self, total, limit, pages):
        page = OrderPageDTO(results=[], total=total, page=1, limit=limit)
        assert page.total_pages == pages


class TestParseStatus:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Pending", OrderStatus.PENDING),
            ("In Progress", OrderStatus.IN_PROGRESS),
            ("InProgress", OrderStatus.IN_PROGRESS),
            ("in_progress", OrderStatus.IN_PROGRESS),
            ("COMPLETE", OrderStatus.COMPLETE),
            ("returned", OrderStatus.RETURNED),
            ("Cancelled", OrderStatus.CANCELLED),
        ],
    )
    def test_known_values(self, raw, expected):
        assert parse_status(raw) is expected

    @pytest.mark.parametrize("raw", ["", "Shipped", "Canceled", None])
    def test_unknown_values(self, raw):
        with pytest.raises(ValueError):
            parse_status(raw)
