"""Domain error taxonomy and the DRF exception handler.

Every business-rule failure raised by a service derives from
``DomainError``:

- ``NotFound``: a referenced user, product or order does not exist.
- ``DomainValidationError``: the caller must correct the input (missing
  return reason, unknown status, duplicate unique key, ...).
- ``Conflict``: the request clashes with existing rows (duplicate phone
  or name, user still referenced by orders).
- ``InsufficientStock``: requested quantity exceeds available stock.

Views translate these into HTTP responses.  Anything that is not a
``DomainError`` nor a DRF ``APIException`` is an internal error: it is
logged here and answered with an opaque 500.
"""

from __future__ import annotations

from typing import Any, Optional

import structlog
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = structlog.get_logger(__name__)


class DomainError(Exception):
    """Base class of all business-rule failures."""


class NotFound(DomainError):
    """A referenced entity does not exist."""


class DomainValidationError(DomainError):
    """Input violates a business rule and must be corrected by the caller."""


class Conflict(DomainError):
    """The request clashes with existing state (duplicate key, dependent rows)."""


class InsufficientStock(DomainError):
    """Requested quantity exceeds the stock available at reservation time."""

    def __init__(self, product_name: str, available: int, requested: int) -> None:
        self.product_name = product_name
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for {product_name}. "
            f"Available: {available}, Requested: {requested}"
        )


DOMAIN_ERROR_STATUS = {
    NotFound: status.HTTP_404_NOT_FOUND,
    DomainValidationError: status.HTTP_400_BAD_REQUEST,
    Conflict: status.HTTP_409_CONFLICT,
    InsufficientStock: status.HTTP_409_CONFLICT,
}


def domain_error_response(exc: DomainError) -> Response:
    """Build the HTTP response for a business-rule failure."""
    for error_class, status_code in DOMAIN_ERROR_STATUS.items():
        if isinstance(exc, error_class):
            return Response({"detail": str(exc)}, status=status_code)
    return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)


def api_exception_handler(exc: Exception, context: dict[str, Any]) -> Optional[Response]:
    """DRF ``EXCEPTION_HANDLER``.

    DRF exceptions keep their default rendering.  Domain errors that
    escape a view are mapped by ``domain_error_response``.  Everything
    else is logged and surfaced without internal detail.
    """
    response = exception_handler(exc, context)
    if response is not None:
        return response

    if isinstance(exc, DomainError):
        return domain_error_response(exc)

    view = context.get("view")
    logger.exception(
        "api.unhandled_error",
        view=view.__class__.__name__ if view else None,
        error_type=exc.__class__.__name__,
    )
    return Response(
        {"detail": "Internal server error."},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
