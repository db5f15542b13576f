"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer and the Service layer.
DTOs are immutable (``frozen=True``).

- ``CreateOrderItemDTO``: input for a single order line item.
- ``CreateOrderDTO``: input for order creation (nested items, user
  reference or phone plus inline user details).
- ``OrderListQueryDTO``: validated filters and paging for order lists.
- ``OrderPageDTO``: one page of orders plus paging metadata.
- ``OrderStatsDTO``: per-status order counters.
"""

from __future__ import annotations

import math
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from modules.orders.constants import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT, parse_status
from modules.users.dtos import CreateUserDTO, check_phone, normalize_phone

# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateOrderItemDTO(BaseModel):
    """Immutable DTO for a single order item in a creation request.

    The client sends ``product_id`` and ``quantity``.  Name and price are
    snapshotted by the Service Layer from the product catalog.
    """

    model_config = ConfigDict(frozen=True)

    product_id: UUID
    quantity: int

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be at least 1.")
        return v


class CreateOrderDTO(BaseModel):
    """Immutable DTO for order creation requests.

    The buyer is given either by ``user_id`` or by ``phone``; with a phone,
    ``user`` carries the details used to register an unknown buyer.  When
    only ``user`` is sent its phone is used for the look-up.

    Validates:
    - a user reference (``user_id``, ``phone`` or ``user``) is present.
    - ``items`` must contain at least one item.
    - the same product may not appear twice.
    """

    model_config = ConfigDict(frozen=True)

    user_id: Optional[UUID] = None
    phone: Optional[str] = None
    user: Optional[CreateUserDTO] = None
    items: List[CreateOrderItemDTO]

    @field_validator("phone", mode="before")
    @classmethod
    def sanitize_phone(cls, v: Any) -> Any:
        v = normalize_phone(v)
        return v or None

    @field_validator("phone")
    @classmethod
    def phone_must_be_valid(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return check_phone(v)

    @field_validator("items")
    @classmethod
    def items_must_not_be_empty(
        cls, v: List[CreateOrderItemDTO]
    ) -> List[CreateOrderItemDTO]:
        if not v:
            raise ValueError("Order must have at least one item.")
        return v

    @model_validator(mode="after")
    def user_reference_required(self):
        if self.user_id is None and self.phone is None and self.user is None:
            raise ValueError("Either user_id or phone is required.")
        return self

    @model_validator(mode="after")
    def no_duplicate_products(self):
        """Prevent duplicate product IDs in the same order."""
        product_ids = [item.product_id for item in self.items]
        if len(product_ids) != len(set(product_ids)):
            raise ValueError("Duplicate product IDs are not allowed in the same order.")
        return self

    @property
    def lookup_phone(self) -> Optional[str]:
        if self.phone:
            return self.phone
        return self.user.phone if self.user else None


class OrderListQueryDTO(BaseModel):
    """Immutable DTO for order list queries.

    Dates are whole days, both ends inclusive.  A full ISO timestamp is
    accepted and narrowed to its calendar day.  Amount bounds are
    inclusive.  ``search`` matches, case-insensitively, the order id, the
    user id or any line item name.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    status: Optional[str] = None
    user_id: Optional[UUID] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    min_amount: Optional[Decimal] = Field(default=None, ge=0)
    max_amount: Optional[Decimal] = Field(default=None, ge=0)
    search: Optional[str] = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT)

    @field_validator("status", "search", mode="before")
    @classmethod
    def blank_is_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def timestamp_to_day(cls, v: Any) -> Any:
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, str) and "T" in v:
            try:
                return datetime.fromisoformat(v.strip()).date()
            except ValueError:
                return v
        return v

    @field_validator("status")
    @classmethod
    def status_must_be_known(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return parse_status(v).value

    @model_validator(mode="after")
    def ranges_must_be_ordered(self):
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date.")
        if (
            self.min_amount is not None
            and self.max_amount is not None
            and self.min_amount > self.max_amount
        ):
            raise ValueError("min_amount must not exceed max_amount.")
        return self

    @classmethod
    def from_query_params(cls, params: Any, **overrides: Any) -> "OrderListQueryDTO":
        """Build a query from request parameters, ignoring unknown or blank keys."""
        data = {
            name: params.get(name)
            for name in cls.model_fields
            if params.get(name) not in (None, "")
        }
        data.update(overrides)
        return cls(**data)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def filter_data(self) -> Dict[str, Any]:
        """Filter values keyed by ``OrderFilter`` field name."""
        data = self.model_dump(
            exclude={"page", "limit"},
            exclude_none=True,
        )
        return {key: str(value) for key, value in data.items()}


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class OrderPageDTO(BaseModel):
    """One page of ``Order`` rows with paging metadata."""

    model_config = ConfigDict(frozen=True)

    results: List[Any]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.total else 0


class OrderStatsDTO(BaseModel):
    """Order counters, overall and per status."""

    model_config = ConfigDict(frozen=True)

    total: int = 0
    pending: int = 0
    in_progress: int = 0
    completed: int = 0
    returned: int = 0
    cancelled: int = 0
