import time
from typing import Any, Callable, Dict

import structlog
from django.conf import settings
from django.core.cache import cache
from django.db import connections
from django.http import HttpRequest, JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_GET

logger = structlog.get_logger()

_STARTED_AT = time.monotonic()


def _check_database() -> None:
    conn = connections["default"]
    conn.ensure_connection()
    with conn.cursor() as cursor:
        cursor.execute("SELECT 1")
        cursor.fetchone()


def _check_cache() -> None:
    cache.set("_health_check", "ok", 10)
    if cache.get("_health_check") != "ok":
        raise ConnectionError("Cache read failed")


def _probe(name: str, check: Callable[[], None]) -> Dict[str, Any]:
    start = time.monotonic()
    try:
        check()
    except Exception:
        logger.exception("health_check.service_down", service=name)
        return {"status": "down"}
    return {
        "status": "up",
        "response_time_ms": round((time.monotonic() - start) * 1000, 2),
    }


@require_GET
def health_check(request: HttpRequest) -> JsonResponse:
    services = {
        "database": _probe("database", _check_database),
        "cache": _probe("cache", _check_cache),
    }
    healthy = all(service["status"] == "up" for service in services.values())

    logger.info(
        "health_check.completed", status="healthy" if healthy else "unhealthy"
    )

    response = JsonResponse(
        {
            "status": "healthy" if healthy else "unhealthy",
            "timestamp": timezone.now().isoformat(),
            "uptime_seconds": round(time.monotonic() - _STARTED_AT),
            "version": settings.APP_VERSION,
            "services": services,
        },
        status=200 if healthy else 503,
    )
    response["Cache-Control"] = "no-cache, no-store, must-revalidate"
    return response
