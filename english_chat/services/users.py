"""Service layer for user operations."""
from __future__ import annotations

import uuid

from sqlalchemy.orm import Session

from english_chat.db.models.user import User


class UserNotFoundError(ValueError):
    """Raised when a user lookup fails."""


class UserService:
    """Encapsulates reusable user-related data access operations."""

    def __init__(self, db: Session):
        self.db = db

    def find(self, user_id: uuid.UUID) -> User | None:
        """Return the user with ``user_id`` or ``None``."""

        return self.db.get(User, user_id)

    def get(self, user_id: uuid.UUID) -> User:
        """Return a user by identifier or raise ``UserNotFoundError``."""

        user = self.find(user_id)
        if not user:
            raise UserNotFoundError("User not found")
        return user
