"""Vocabulary expressions extracted from assistant replies."""
import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from english_chat.db.base import Base


class EnglishExpression(Base):
    """An expression the assistant highlighted with ``【】`` markers."""

    __tablename__ = "english_expressions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    message_id = Column(
        UUID(as_uuid=True), ForeignKey("messages.id", ondelete="CASCADE"), nullable=False, index=True
    )
    expression_text = Column(Text, nullable=False)
    pronunciation = Column(String(255))
    difficulty_level = Column(String(20))
    # Left-to-right order of appearance within the message
    position = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    message = relationship("Message", back_populates="expressions")


class Bookmark(Base):
    """A user's saved expression with optional notes."""

    __tablename__ = "bookmarks"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    english_expression_id = Column(
        UUID(as_uuid=True),
        ForeignKey("english_expressions.id", ondelete="CASCADE"),
        nullable=False,
    )
    notes = Column(Text)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="bookmarks")
    expression = relationship("EnglishExpression")
