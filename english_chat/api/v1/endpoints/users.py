"""User profile endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from english_chat.api import deps
from english_chat.db.models.user import User
from english_chat.schemas import UserRead

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserRead)
def read_current_user(current_user: User = Depends(deps.get_current_user)) -> User:
    """Return the authenticated user profile."""

    return current_user
