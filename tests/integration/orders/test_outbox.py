"""Integration tests for the transactional outbox publisher.

Covers:
- Rows written by OrderService are PENDING until published.
- publish_outbox_events marks rows PUBLISHED and dispatches to handlers.
- Unknown event types and failing handlers mark rows FAILED.
- Rows past the retry limit are left alone.
"""

from __future__ import annotations

from unittest.mock import patch
from uuid import uuid4

import pytest

from modules.core.models import EventStatus, OutboxEvent
from modules.core.tasks import OUTBOX_MAX_RETRIES, publish_outbox_events
from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO
from modules.orders.events import OrderCreated

pytestmark = pytest.mark.integration


@pytest.fixture()
def placed_order(order_service, make_user, make_product):
    product = make_product("Outbox Product", price="10.00", stock_count=5)
    return order_service.create_order(
        CreateOrderDTO(
            user_id=make_user().id,
            items=[CreateOrderItemDTO(product_id=product.id, quantity=1)],
        )
    )


def test_create_order_writes_pending_row(placed_order):
    events = OutboxEvent.objects.filter(
        event_type="OrderCreated", aggregate_id=str(placed_order.id)
    )
    assert events.count() == 1
    assert events.get().status == EventStatus.PENDING


def test_publish_marks_rows_published(placed_order, order_service):
    order_service.update_status(placed_order.order_id, "Complete")

    result = publish_outbox_events()

    assert result == {"published": 2, "failed": 0}
    rows = OutboxEvent.objects.all()
    assert {row.status for row in rows} == {EventStatus.PUBLISHED}
    assert all(row.processed_at is not None for row in rows)


def test_publish_dispatches_rebuilt_event(placed_order):
    with patch("modules.orders.handlers.logger") as handler_logger:
        publish_outbox_events()

    handler_logger.info.assert_any_call(
        "order.event.created",
        order_id=placed_order.order_id,
        total_amount="10.00",
    )


def test_published_rows_are_not_sent_twice(placed_order):
    publish_outbox_events()
    assert publish_outbox_events() == {"published": 0, "failed": 0}


def test_unknown_event_type_marked_failed():
    row = OutboxEvent.objects.create(
        event_type="SomethingElse",
        aggregate_id=str(uuid4()),
        payload={},
        topic="orders",
    )

    assert publish_outbox_events() == {"published": 0, "failed": 1}

    row.refresh_from_db()
    assert row.status == EventStatus.FAILED
    assert row.retry_count == 1
    assert "SomethingElse" in row.error_message


def test_handler_failure_marked_failed_and_retried(placed_order):
    with patch(
        "modules.orders.handlers.OrderCreatedHandler.handle",
        side_effect=RuntimeError("handler down"),
    ):
        assert publish_outbox_events() == {"published": 0, "failed": 1}

    row = OutboxEvent.objects.get(event_type="OrderCreated")
    assert row.status == EventStatus.FAILED
    assert row.error_message == "handler down"

    assert publish_outbox_events() == {"published": 1, "failed": 0}
    row.refresh_from_db()
    assert row.status == EventStatus.PUBLISHED
    assert row.error_message == ""


def test_rows_past_retry_limit_are_skipped():
    event = OrderCreated(aggregate_id=uuid4(), order_id="ORD-1-0001")
    row = OutboxEvent.record(event, topic="orders")
    OutboxEvent.objects.filter(pk=row.pk).update(
        status=EventStatus.FAILED, retry_count=OUTBOX_MAX_RETRIES
    )

    assert publish_outbox_events() == {"published": 0, "failed": 0}


def test_batch_size_limits_rows(placed_order, order_service):
    order_service.update_status(placed_order.order_id, "In Progress")
    order_service.update_status(placed_order.order_id, "Complete")

    assert publish_outbox_events(batch_size=2)["published"] == 2
    assert OutboxEvent.objects.filter(status=EventStatus.PENDING).count() == 1
