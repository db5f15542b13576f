"""Unit tests for the Inventory Ledger.

Covers:
- reserve: atomic decrement, insufficient stock, missing product.
- release: increment, skipped release for deleted products.
- check_available: snapshot pre-check.
- Quantities below one are rejected.
"""

from __future__ import annotations

from uuid import uuid4

import pytest

from modules.products.exceptions import (
    InsufficientStock,
    InvalidQuantity,
    ProductNotFound,
)
from modules.products.inventory import InventoryLedger
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository

pytestmark = pytest.mark.unit


@pytest.fixture()
def ledger():
    return InventoryLedger(ProductDjangoRepository())


@pytest.fixture()
def widget(make_product):
    return make_product("Widget", price="25.00", stock_count=10)


class TestReserve:
    def test_reserve_decrements_stock(self, ledger, widget):
        ledger.reserve(widget.id, 3)
        widget.refresh_from_db()
        assert widget.stock_count == 7

    def test_reserve_entire_stock(self, ledger, widget):
        ledger.reserve(widget.id, 10)
        widget.refresh_from_db()
        assert widget.stock_count == 0

    def test_reserve_more_than_available_raises(self, ledger, widget):
        with pytest.raises(InsufficientStock) as exc_info:
            ledger.reserve(widget.id, 11)

        assert str(exc_info.value) == (
            "Insufficient stock for Widget. Available: 10, Requested: 11"
        )
        assert exc_info.value.available == 10
        assert exc_info.value.requested == 11
        widget.refresh_from_db()
        assert widget.stock_count == 10

    def test_reserve_uses_current_row_not_stale_instance(self, ledger, widget):
        # Another writer takes stock after ``widget`` was loaded.
        Product.objects.filter(id=widget.id).update(stock_count=2)

        with pytest.raises(InsufficientStock) as exc_info:
            ledger.reserve(widget.id, 5)

        assert exc_info.value.available == 2
        widget.refresh_from_db()
        assert widget.stock_count == 2

    def test_reserve_unknown_product_raises(self, ledger):
        with pytest.raises(ProductNotFound):
            ledger.reserve(uuid4(), 1)

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_reserve_rejects_non_positive_quantity(self, ledger, widget, quantity):
        with pytest.raises(InvalidQuantity):
            ledger.reserve(widget.id, quantity)
        widget.refresh_from_db()
        assert widget.stock_count == 10


class TestRelease:
    def test_release_increments_stock(self, ledger, widget):
        assert ledger.release(widget.id, 4) is True
        widget.refresh_from_db()
        assert widget.stock_count == 14

    def test_release_for_deleted_product_is_skipped(self, ledger, widget):
        product_id = widget.id
        widget.delete()

        assert ledger.release(product_id, 4) is False
        assert not Product.objects.filter(id=product_id).exists()

    def test_release_rejects_non_positive_quantity(self, ledger, widget):
        with pytest.raises(InvalidQuantity):
            ledger.release(widget.id, 0)

    def test_reserve_then_release_restores_stock(self, ledger, widget):
        ledger.reserve(widget.id, 6)
        ledger.release(widget.id, 6)
        widget.refresh_from_db()
        assert widget.stock_count == 10


class TestCheckAvailable:
    def test_enough_stock_passes(self, ledger, widget):
        ledger.check_available(widget, 10)

    def test_not_enough_stock_raises(self, ledger, widget):
        with pytest.raises(InsufficientStock):
            ledger.check_available(widget, 11)

    def test_check_does_not_touch_stock(self, ledger, widget):
        ledger.check_available(widget, 5)
        widget.refresh_from_db()
        assert widget.stock_count == 10
