"""User DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer and the Service layer.
DTOs are immutable (``frozen=True``).

- ``CreateUserDTO``: input for user creation (also used inline when an
  order is placed by phone for an unknown user).
- ``UpdateUserDTO``: input for partial user updates.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, field_validator

from modules.users.models import PHONE_PATTERN

_PHONE_RE = re.compile(PHONE_PATTERN)


def normalize_phone(v: Any) -> Any:
    if isinstance(v, str):
        return re.sub(r"[\s\-().]", "", v)
    return v


def _blank_to_none(v: Any) -> Any:
    if isinstance(v, str) and not v.strip():
        return None
    return v


def check_phone(v: str) -> str:
    if not _PHONE_RE.match(v):
        raise ValueError("Please enter a valid phone number.")
    return v


class CreateUserDTO(BaseModel):
    """Immutable DTO for user creation requests.

    Validates:
    - ``first_name``, ``last_name`` and ``address`` are non-empty.
    - ``phone`` is E.164-like after stripping spaces, dashes and brackets.
    - ``email`` is optional; an empty string counts as absent.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    first_name: str
    last_name: str
    phone: str
    address: str
    email: Optional[EmailStr] = None

    @field_validator("first_name", "last_name", "address")
    @classmethod
    def must_not_be_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("Field must not be empty.")
        return v

    @field_validator("phone", mode="before")
    @classmethod
    def sanitize_phone(cls, v: Any) -> Any:
        return normalize_phone(v)

    @field_validator("phone")
    @classmethod
    def phone_must_be_valid(cls, v: str) -> str:
        return check_phone(v)

    @field_validator("email", mode="before")
    @classmethod
    def empty_email_is_none(cls, v: Any) -> Any:
        return _blank_to_none(v)


class UpdateUserDTO(BaseModel):
    """Immutable DTO for user update requests.

    All fields are optional; only supplied fields will be updated.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    email: Optional[EmailStr] = None

    @field_validator("phone", mode="before")
    @classmethod
    def sanitize_phone(cls, v: Any) -> Any:
        return normalize_phone(v)

    @field_validator("phone")
    @classmethod
    def phone_must_be_valid(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return check_phone(v)

    @field_validator("first_name", "last_name", "address")
    @classmethod
    def must_not_be_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v:
            raise ValueError("Field must not be empty.")
        return v
