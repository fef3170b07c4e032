"""Shared API dependencies."""
from __future__ import annotations

import uuid
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from pydantic import ValidationError
from sqlalchemy.orm import Session

from english_chat.config import settings
from english_chat.core.security import ACCESS_TOKEN, InvalidTokenError, decode_token
from english_chat.db.models.user import User
from english_chat.db.session import get_db
from english_chat.schemas import TokenPayload
from english_chat.services.chat_service import ChatService
from english_chat.services.llm_service import LLMService
from english_chat.services.users import UserService

oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_STR}/auth/login", auto_error=False
)

__all__ = [
    "get_chat_reader",
    "get_chat_service",
    "get_current_caller",
    "get_current_user",
    "get_db",
    "get_llm_service",
]


def get_current_caller(
    token: Optional[str] = Depends(oauth2_scheme), db: Session = Depends(get_db)
) -> Optional[User]:
    """Return the authenticated user, or ``None`` when the request is anonymous."""

    if not token:
        return None

    try:
        payload = decode_token(token, expected_type=ACCESS_TOKEN)
        token_data = TokenPayload.model_validate(payload)
    except (InvalidTokenError, ValidationError, ValueError, KeyError):
        return None

    return UserService(db).find(uuid.UUID(str(token_data.sub)))


def get_current_user(caller: Optional[User] = Depends(get_current_caller)) -> User:
    """Resolve the authenticated user or reject the request with 401."""

    if caller is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return caller


def get_llm_service() -> LLMService:
    """Build an LLM service from settings or report that none is configured."""

    try:
        return LLMService()
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="LLM providers are not configured",
        ) from exc


def get_chat_service(
    db: Session = Depends(get_db),
    llm_service: LLMService = Depends(get_llm_service),
) -> ChatService:
    """Assemble the chat service with request-scoped dependencies."""

    return ChatService(db, llm_service=llm_service)


def get_chat_reader(db: Session = Depends(get_db)) -> ChatService:
    """Chat service for read-only and bookkeeping routes that never call the model."""

    return ChatService(db, llm_service=None)
