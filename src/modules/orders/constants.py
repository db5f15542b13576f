"""Order domain constants.

Statuses are free-form: any status may follow any other.  What matters
is whether an order holds stock (active statuses) or has given it back
(``RESTOCKED_STATES``).
"""

import re

from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = "Pending", "Pending"
    IN_PROGRESS = "In Progress", "In Progress"
    COMPLETE = "Complete", "Complete"
    RETURNED = "Returned", "Returned"
    CANCELLED = "Cancelled", "Cancelled"


RESTOCKED_STATES: frozenset[str] = frozenset(
    {OrderStatus.RETURNED, OrderStatus.CANCELLED}
)

DELETABLE_STATES: frozenset[str] = frozenset({OrderStatus.PENDING})

ORDER_ID_PREFIX = "ORD"
ORDER_ID_SEQUENCE_WIDTH = 4
ORDER_ID_MAX_RETRIES = 5

DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 100

_STATUS_ALIASES = {
    re.sub(r"[\s_-]", "", value).lower(): value for value in OrderStatus.values
}


def parse_status(value: str) -> OrderStatus:
    """Resolve ``"In Progress"``, ``"InProgress"`` or ``"in_progress"``.

    Raises ``ValueError`` for anything that is not a known status.
    """
    key = re.sub(r"[\s_-]", "", value or "").lower()
    try:
        return OrderStatus(_STATUS_ALIASES[key])
    except KeyError:
        raise ValueError(f"Invalid order status: {value!r}.") from None
