"""User (order placer) model.

Business rules implemented:
- Phone number is the natural key: unique and E.164-like
  (``+`` optional, no leading zero, up to 15 digits).
- E-mail is optional; when present it is validated and stored lower-case.
- A user with orders cannot be deleted (``Order.user`` uses PROTECT).
"""

from __future__ import annotations

import structlog
from django.core.validators import RegexValidator
from django.db import models

from modules.core.models import BaseModel

logger = structlog.get_logger(__name__)

PHONE_PATTERN = r"^\+?[1-9]\d{1,14}$"

phone_validator = RegexValidator(
    regex=PHONE_PATTERN,
    message="Please enter a valid phone number.",
)


class User(BaseModel):
    """A customer who places orders.

    ``phone`` carries a UNIQUE index; the service layer checks it first
    to return a friendly error, the index closes the race.
    """

    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    phone = models.CharField(max_length=16, unique=True, validators=[phone_validator])
    email = models.EmailField(max_length=254, blank=True, default="")
    address = models.TextField()

    class Meta:
        db_table = "users"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["-created_at"], name="users_created_idx"),
        ]

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def save(self, *args, **kwargs) -> None:
        is_new = self._state.adding
        self.first_name = (self.first_name or "").strip()
        self.last_name = (self.last_name or "").strip()
        self.phone = (self.phone or "").strip()
        self.email = (self.email or "").strip().lower()
        self.address = (self.address or "").strip()
        super().save(*args, **kwargs)
        if is_new:
            logger.info("user.inserted", user_id=str(self.id))

    def __str__(self) -> str:
        return f"{self.full_name} ({self.phone})"
