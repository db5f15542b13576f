"""Celery tasks of the core module."""

from __future__ import annotations

import structlog
from celery import shared_task
from django.db.models import Q

from modules.core.models import EventStatus, OutboxEvent
from shared.infrastructure.bus import event_bus

logger = structlog.get_logger(__name__)

OUTBOX_BATCH_SIZE = 100
OUTBOX_MAX_RETRIES = 5


@shared_task(name="core.publish_outbox_events")
def publish_outbox_events(batch_size: int = OUTBOX_BATCH_SIZE) -> dict:
    """Publish pending outbox rows to the in-process event bus.

    Rows whose event type has no registered class, or whose handlers
    raise, are marked ``FAILED`` and retried until ``OUTBOX_MAX_RETRIES``.
    """
    pending = OutboxEvent.objects.filter(
        Q(status=EventStatus.PENDING)
        | Q(status=EventStatus.FAILED, retry_count__lt=OUTBOX_MAX_RETRIES)
    ).order_by("created_at")[:batch_size]

    published = failed = 0
    for row in pending:
        log = logger.bind(outbox_id=str(row.id), event_type=row.event_type)
        event_class = event_bus.resolve(row.event_type)
        if event_class is None:
            row.mark_as_failed(f"Unknown event type {row.event_type}.")
            log.warning("outbox.unknown_event_type")
            failed += 1
            continue
        try:
            event_bus.publish(event_class.from_payload(row.payload))
        except Exception as exc:
            row.mark_as_failed(str(exc))
            log.exception("outbox.publish_failed", retry_count=row.retry_count)
            failed += 1
            continue
        row.mark_as_published()
        published += 1

    logger.info("outbox.batch_processed", published=published, failed=failed)
    return {"published": published, "failed": failed}
