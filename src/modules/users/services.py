"""User service layer (Use Cases).

Orchestrates business logic for the User entity, delegating
persistence to the injected ``IUserRepository``.

Business rules enforced here:
- Phone numbers are unique across users (create and update).
- A user referenced by orders cannot be deleted.
- Placing an order by phone reuses the matching user or registers a new
  one from the inline details.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

import structlog
from django.db import IntegrityError, models, transaction

from modules.users.exceptions import UserAlreadyExists, UserHasOrders, UserNotFound
from modules.users.models import User

if TYPE_CHECKING:
    from modules.users.dtos import CreateUserDTO, UpdateUserDTO
    from modules.users.repositories.interfaces import IUserRepository

logger = structlog.get_logger(__name__)


class UserService:
    """Application service for User use-cases.

    Receives an ``IUserRepository`` via constructor injection (DIP).
    """

    def __init__(self, repository: IUserRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_user(self, dto: CreateUserDTO) -> User:
        """Register a new user.

        Raises:
            UserAlreadyExists: if the phone number is already taken.
        """
        log = logger.bind(phone_suffix=dto.phone[-4:])

        if self._repo.get_by_phone(dto.phone):
            log.warning("user.duplicate_phone")
            raise UserAlreadyExists("Phone number already exists.")

        user = User(
            first_name=dto.first_name,
            last_name=dto.last_name,
            phone=dto.phone,
            email=dto.email or "",
            address=dto.address,
        )
        try:
            with transaction.atomic():
                user = self._repo.save(user)
        except IntegrityError as exc:
            log.warning("user.duplicate_phone_race")
            raise UserAlreadyExists("Phone number already exists.") from exc
        log.info("user.created", user_id=str(user.id))
        return user

    @transaction.atomic
    def update_user(self, id: str, dto: UpdateUserDTO) -> User:
        """Apply the supplied fields to an existing user.

        Raises:
            UserNotFound: if the user does not exist.
            UserAlreadyExists: if the new phone belongs to another user.
        """
        user = self._repo.get_by_id(id)
        if not user:
            raise UserNotFound(f"User {id} not found.")

        log = logger.bind(user_id=str(id))

        if dto.phone is not None and dto.phone != user.phone:
            other = self._repo.get_by_phone(dto.phone)
            if other and other.pk != user.pk:
                log.warning("user.duplicate_phone")
                raise UserAlreadyExists("Phone number already exists.")

        for field in ("first_name", "last_name", "phone", "email", "address"):
            value = getattr(dto, field)
            if value is not None:
                setattr(user, field, value)

        try:
            with transaction.atomic():
                user = self._repo.save(user)
        except IntegrityError as exc:
            log.warning("user.duplicate_phone_race")
            raise UserAlreadyExists("Phone number already exists.") from exc
        log.info("user.updated")
        return user

    @transaction.atomic
    def delete_user(self, id: str) -> None:
        """Delete a user that has no orders.

        Raises:
            UserNotFound: if the user does not exist.
            UserHasOrders: if orders still reference the user.
        """
        user = self._repo.get_by_id(id)
        if not user:
            raise UserNotFound(f"User {id} not found.")
        if self._repo.has_orders(id):
            logger.warning("user.delete_rejected", user_id=str(id))
            raise UserHasOrders("User has orders and cannot be deleted.")
        self._repo.delete(id)
        logger.info("user.deleted", user_id=str(id))

    def get_or_create_by_phone(
        self, phone: str, details: Optional[CreateUserDTO] = None
    ) -> User:
        """Return the user owning *phone*, registering one from *details*.

        An existing user is returned untouched.  Must run inside the
        caller's transaction so a failed order also discards the new user.

        Raises:
            UserNotFound: no user has this phone and no details were given.
        """
        user = self._repo.get_by_phone(phone)
        if user:
            return user
        if details is None:
            raise UserNotFound(
                "User not found and no user details provided."
            )
        if details.phone != phone:
            details = details.model_copy(update={"phone": phone})
        return self.create_user(details)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_users(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[User]":
        """Return users, optionally filtered."""
        return self._repo.list(filters)

    def get_user(self, id: str) -> User:
        """Retrieve a single user by ID.

        Raises:
            UserNotFound: if the user does not exist.
        """
        user = self._repo.get_by_id(id)
        if not user:
            raise UserNotFound(f"User {id} not found.")
        return user

    def find_by_phone(self, phone: str) -> Optional[User]:
        """Look up a user by phone without raising."""
        return self._repo.get_by_phone(phone)
