"""Pydantic models for chat workflows."""
from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from english_chat.core.conversation import split_highlighted
from english_chat.db.models.chat import ChatSession, Message
from english_chat.db.models.expression import EnglishExpression


class MessageCreate(BaseModel):
    """Payload for sending a user message within a chat session."""

    content: str = Field(..., min_length=1, max_length=4000)


class ChatSessionRead(BaseModel):
    """Summary of a chat session."""

    id: UUID
    title: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ExpressionRead(BaseModel):
    """An expression highlighted by the assistant."""

    id: UUID
    message_id: UUID
    expression_text: str
    difficulty_level: Optional[str] = None
    pronunciation: Optional[str] = None
    position: int = 0
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class TextSegmentRead(BaseModel):
    """A display run of message text."""

    text: str
    is_expression: bool


class MessageRead(BaseModel):
    """A stored chat message with display segments."""

    id: UUID
    message_type: Literal["user", "ai_welcome", "ai_response"]
    content: str
    created_at: Optional[datetime] = None
    segments: List[TextSegmentRead] = Field(default_factory=list)
    expressions: List[ExpressionRead] = Field(default_factory=list)

    @classmethod
    def from_message(
        cls, message: Message, expressions: Optional[List[EnglishExpression]] = None
    ) -> "MessageRead":
        if expressions is None:
            expressions = list(message.expressions or [])
        return cls(
            id=message.id,
            message_type=message.message_type,
            content=message.content,
            created_at=message.created_at,
            segments=[
                TextSegmentRead(text=segment.text, is_expression=segment.is_expression)
                for segment in split_highlighted(message.content)
            ],
            expressions=[ExpressionRead.model_validate(item) for item in expressions],
        )


class ChatSessionDetail(ChatSessionRead):
    """A chat session together with its messages, oldest first."""

    messages: List[MessageRead] = Field(default_factory=list)

    @classmethod
    def from_session(cls, session: ChatSession, messages: List[Message]) -> "ChatSessionDetail":
        return cls(
            id=session.id,
            title=session.title,
            created_at=session.created_at,
            updated_at=session.updated_at,
            messages=[MessageRead.from_message(message) for message in messages],
        )


class ChatTurnResponse(BaseModel):
    """Result of sending a message: the assistant reply and session state."""

    session: ChatSessionRead
    user_message: MessageRead
    message: MessageRead
    expressions: List[ExpressionRead]
    title_updated: bool
