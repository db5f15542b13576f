"""Order domain exceptions.

Raised by the Service Layer when business rules are violated.
The API layer (Views) catches these and translates them into
appropriate HTTP responses.
"""

from __future__ import annotations

from modules.core.exceptions import DomainValidationError, NotFound


class OrderNotFound(NotFound):
    """The requested order does not exist."""


class InvalidOrderStatus(DomainValidationError):
    """The requested status is not one of the known order statuses."""


class MissingReturnReason(DomainValidationError):
    """Returned/Cancelled was requested without a return reason."""


class OrderNotDeletable(DomainValidationError):
    """Only pending orders can be deleted."""


class InvalidOrderFilter(DomainValidationError):
    """The order list query could not be applied."""
