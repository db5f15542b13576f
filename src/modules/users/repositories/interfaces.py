"""User repository interface.

Extends ``IRepository[User]`` with the phone look-up behind the
unique-phone rule and the order check that guards deletion.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.users.models import User


class IUserRepository(IRepository["User"]):
    """Repository contract for the User entity."""

    @abstractmethod
    def get_by_phone(self, phone: str) -> Optional[User]:
        """Retrieve a user by phone number."""

    @abstractmethod
    def has_orders(self, id: str) -> bool:
        """Return ``True`` when any order references the user."""
