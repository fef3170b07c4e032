"""Chat session and message database models."""
from __future__ import annotations

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from english_chat.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MessageType(str, enum.Enum):
    """Origin of a chat message."""

    USER = "user"
    AI_WELCOME = "ai_welcome"
    AI_RESPONSE = "ai_response"

    @property
    def role(self) -> str:
        """Return the chat-completion role for this message type."""

        return "user" if self is MessageType.USER else "assistant"


class ChatSession(Base):
    """A conversation thread owned by exactly one user."""

    __tablename__ = "chat_sessions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        default=_utcnow,
        server_default=func.now(),
        onupdate=_utcnow,
    )

    user = relationship("User", back_populates="chat_sessions")
    messages = relationship(
        "Message",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by=lambda: [Message.created_at, Message.sequence_number],
    )


class Message(Base):
    """A single append-only message within a chat session."""

    __tablename__ = "messages"
    __table_args__ = (
        CheckConstraint(
            "message_type IN ('user', 'ai_welcome', 'ai_response')",
            name="ck_messages_message_type",
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    chat_session_id = Column(
        UUID(as_uuid=True), ForeignKey("chat_sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    message_type = Column(String(20), nullable=False)
    content = Column(Text, nullable=False)
    # Breaks ties between messages stored within the same clock tick
    sequence_number = Column(Integer, nullable=False, default=0)

    created_at = Column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), index=True
    )

    session = relationship("ChatSession", back_populates="messages")
    expressions = relationship(
        "EnglishExpression",
        back_populates="message",
        cascade="all, delete-orphan",
        order_by="EnglishExpression.position",
    )
