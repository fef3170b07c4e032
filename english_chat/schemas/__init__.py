"""Pydantic schemas package."""

from english_chat.schemas.auth import RefreshRequest, Token, TokenPayload
from english_chat.schemas.chat import (
    ChatSessionDetail,
    ChatSessionRead,
    ChatTurnResponse,
    ExpressionRead,
    MessageCreate,
    MessageRead,
    TextSegmentRead,
)
from english_chat.schemas.user import (
    RegistrationErrorResponse,
    RegistrationRequest,
    UserLogin,
    UserRead,
)

__all__ = [
    "RefreshRequest",
    "Token",
    "TokenPayload",
    "ChatSessionDetail",
    "ChatSessionRead",
    "ChatTurnResponse",
    "ExpressionRead",
    "MessageCreate",
    "MessageRead",
    "TextSegmentRead",
    "RegistrationErrorResponse",
    "RegistrationRequest",
    "UserLogin",
    "UserRead",
]
