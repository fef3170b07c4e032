"""Database models package."""
from english_chat.db.models.user import User
from english_chat.db.models.chat import ChatSession, Message, MessageType
from english_chat.db.models.expression import Bookmark, EnglishExpression

__all__ = [
    "User",
    "ChatSession",
    "Message",
    "MessageType",
    "EnglishExpression",
    "Bookmark",
]
