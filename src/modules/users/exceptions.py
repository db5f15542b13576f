"""User domain exceptions.

Raised by the Service Layer when business rules are violated.
The API layer (Views) catches these and translates them into
appropriate HTTP responses.
"""

from __future__ import annotations

from modules.core.exceptions import Conflict, NotFound


class UserNotFound(NotFound):
    """The requested user does not exist."""


class UserAlreadyExists(Conflict):
    """Another user is already registered with the same phone number."""


class UserHasOrders(Conflict):
    """The user is referenced by orders and cannot be deleted."""
