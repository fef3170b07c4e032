"""Service layer package."""

from english_chat.services.auth import AuthService
from english_chat.services.chat_service import ChatOutcome, ChatService, ChatTurn
from english_chat.services.llm_service import LLMService
from english_chat.services.users import UserService

__all__ = [
    "AuthService",
    "ChatOutcome",
    "ChatService",
    "ChatTurn",
    "LLMService",
    "UserService",
]
