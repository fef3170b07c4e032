"""Service layer for orchestrating chat sessions."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar

from loguru import logger
from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from english_chat.config import Settings, settings as default_settings
from english_chat.core.conversation import (
    WELCOME_MESSAGE,
    ContextMessage,
    GeneratedReply,
    ReplyGenerator,
    build_context,
)
from english_chat.db.models.chat import ChatSession, Message, MessageType
from english_chat.db.models.expression import EnglishExpression
from english_chat.db.models.user import User
from english_chat.services.llm_service import LLMProviderError
from english_chat.utils.exceptions import (
    PROVIDER_FAILURE_MESSAGE,
    SESSION_NOT_FOUND_MESSAGE,
    FailureKind,
)

T = TypeVar("T")


@dataclass(slots=True)
class ChatOutcome(Generic[T]):
    """Success value or categorised failure returned by chat operations."""

    value: Optional[T] = None
    failure: Optional[FailureKind] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def retryable(self) -> bool:
        return self.failure is FailureKind.PROVIDER

    @classmethod
    def success(cls, value: T) -> "ChatOutcome[T]":
        return cls(value=value)

    @classmethod
    def fail(cls, kind: FailureKind, error: str) -> "ChatOutcome[T]":
        return cls(failure=kind, error=error)


@dataclass(slots=True)
class ChatTurn:
    """Persisted result of one user message and the assistant's reply."""

    session: ChatSession
    user_message: Message
    assistant_message: Message
    expressions: list[EnglishExpression] = field(default_factory=list)
    title_updated: bool = False


class ChatService:
    """Coordinate session ownership, message persistence and reply generation."""

    def __init__(
        self,
        db: Session,
        *,
        llm_service,
        reply_generator: ReplyGenerator | None = None,
        config: Settings | None = None,
    ) -> None:
        self.db = db
        self.config = config or default_settings
        self.reply_generator = reply_generator or ReplyGenerator(
            llm_service=llm_service,
            temperature=self.config.CHAT_TEMPERATURE,
            max_tokens=self.config.CHAT_MAX_TOKENS,
        )

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------
    def create_session(self, *, user: User) -> ChatOutcome[ChatSession]:
        """Create a session with the default title and a welcome message."""

        session = ChatSession(user_id=user.id, title=self.config.DEFAULT_CHAT_TITLE)
        try:
            self.db.add(session)
            self.db.flush([session])
            self.db.add(
                Message(
                    chat_session_id=session.id,
                    message_type=MessageType.AI_WELCOME.value,
                    content=WELCOME_MESSAGE,
                    sequence_number=1,
                )
            )
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Chat session creation failed", user_id=str(user.id), error=str(exc))
            return ChatOutcome.fail(FailureKind.PERSISTENCE, "Failed to create the chat session")
        self.db.refresh(session)
        logger.info("Chat session created", session_id=str(session.id), user_id=str(user.id))
        return ChatOutcome.success(session)

    def list_sessions(self, *, user: User, limit: int = 50, offset: int = 0) -> list[ChatSession]:
        """Return the caller's sessions, most recently updated first."""

        stmt = (
            select(ChatSession)
            .where(ChatSession.user_id == user.id)
            .order_by(ChatSession.updated_at.desc(), ChatSession.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(self.db.scalars(stmt))

    def authorize_session(
        self, caller_id: uuid.UUID, session_id: uuid.UUID
    ) -> ChatSession | None:
        """Return the session only when ``caller_id`` owns it.

        Id and owner are filtered in the same query so a session owned by
        someone else is indistinguishable from a missing one.
        """

        stmt = select(ChatSession).where(
            ChatSession.id == session_id,
            ChatSession.user_id == caller_id,
        )
        return self.db.scalars(stmt).one_or_none()

    def list_messages(self, *, session: ChatSession) -> list[Message]:
        """Return every message in ``session`` oldest first, with expressions."""

        stmt = (
            select(Message)
            .where(Message.chat_session_id == session.id)
            .options(selectinload(Message.expressions))
            .order_by(Message.created_at, Message.sequence_number)
        )
        return list(self.db.scalars(stmt))

    def list_expressions(self, *, session: ChatSession) -> list[EnglishExpression]:
        """Return the expressions extracted in ``session`` in conversation order."""

        stmt = (
            select(EnglishExpression)
            .join(Message, EnglishExpression.message_id == Message.id)
            .where(Message.chat_session_id == session.id)
            .order_by(Message.created_at, Message.sequence_number, EnglishExpression.position)
        )
        return list(self.db.scalars(stmt))

    # ------------------------------------------------------------------
    # Context and reply helpers
    # ------------------------------------------------------------------
    def load_context(self, session_id: uuid.UUID, limit: int | None = None) -> list[ContextMessage]:
        """Return the ``limit`` most recent messages in chronological order."""

        window = self.config.CHAT_CONTEXT_LIMIT if limit is None else limit
        stmt = (
            select(Message)
            .where(Message.chat_session_id == session_id)
            .order_by(Message.created_at.desc(), Message.sequence_number.desc())
            .limit(window)
        )
        recent = list(self.db.scalars(stmt))
        recent.reverse()
        return build_context(recent)

    def generate_reply(self, context: list[ContextMessage]) -> GeneratedReply:
        """Ask the model for a reply; raises ``LLMProviderError`` on failure."""

        return self.reply_generator.generate_reply(context)

    def _next_sequence_number(self, session_id: uuid.UUID) -> int:
        stmt = select(func.coalesce(func.max(Message.sequence_number), 0)).where(
            Message.chat_session_id == session_id
        )
        return (self.db.scalar(stmt) or 0) + 1

    def _append_message(self, session_id: uuid.UUID, message_type: MessageType, content: str) -> Message:
        message = Message(
            chat_session_id=session_id,
            message_type=message_type.value,
            content=content,
            sequence_number=self._next_sequence_number(session_id),
        )
        self.db.add(message)
        self.db.flush([message])
        return message

    def _persist_reply(self, session_id: uuid.UUID, reply: GeneratedReply) -> tuple[Message, list[EnglishExpression]]:
        message = self._append_message(session_id, MessageType.AI_RESPONSE, reply.text)
        expressions = [
            EnglishExpression(
                message_id=message.id,
                expression_text=text,
                difficulty_level=self.config.EXPRESSION_DEFAULT_DIFFICULTY,
                position=index,
            )
            for index, text in enumerate(reply.expressions)
        ]
        self.db.add_all(expressions)
        self.db.commit()
        return message, expressions

    def _retitle_if_first_message(
        self, caller_id: uuid.UUID, session_id: uuid.UUID, content: str
    ) -> bool:
        """Set the title of a session ``caller_id`` owns when exactly one user message is stored.

        The count and the update run as one statement so two concurrent first
        messages cannot both retitle the session.
        """

        user_message_count = (
            select(func.count(Message.id))
            .where(
                Message.chat_session_id == session_id,
                Message.message_type == MessageType.USER.value,
            )
            .scalar_subquery()
        )
        stmt = (
            update(ChatSession)
            .where(
                ChatSession.id == session_id,
                ChatSession.user_id == caller_id,
                user_message_count == 1,
            )
            .values(title=content[: self.config.CHAT_TITLE_MAX_LENGTH])
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        self.db.commit()
        return result.rowcount == 1

    # ------------------------------------------------------------------
    # Orchestration
    # ------------------------------------------------------------------
    def send_message(
        self, *, caller: User, session_id: uuid.UUID, content: str
    ) -> ChatOutcome[ChatTurn]:
        """Store a user message, ask the model for a reply and store the result."""

        if not content or not content.strip():
            return ChatOutcome.fail(FailureKind.VALIDATION, "Message cannot be empty")

        session = self.authorize_session(caller.id, session_id)
        if session is None:
            logger.info("Chat session not found for caller", session_id=str(session_id), user_id=str(caller.id))
            return ChatOutcome.fail(FailureKind.NOT_FOUND, SESSION_NOT_FOUND_MESSAGE)

        try:
            user_message = self._append_message(session.id, MessageType.USER, content)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Failed to store user message", session_id=str(session.id), error=str(exc))
            return ChatOutcome.fail(FailureKind.PERSISTENCE, "Failed to send the message")

        try:
            context = self.load_context(session.id)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Failed to load chat context", session_id=str(session.id), error=str(exc))
            return ChatOutcome.fail(FailureKind.PERSISTENCE, "Failed to load the conversation")

        try:
            reply = self.generate_reply(context)
        except LLMProviderError as exc:
            logger.warning("AI response generation failed", session_id=str(session.id), error=str(exc))
            return ChatOutcome.fail(FailureKind.PROVIDER, PROVIDER_FAILURE_MESSAGE)

        try:
            assistant_message, expressions = self._persist_reply(session.id, reply)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Failed to store assistant reply", session_id=str(session.id), error=str(exc))
            return ChatOutcome.fail(FailureKind.PERSISTENCE, "Failed to save the response")

        try:
            title_updated = self._retitle_if_first_message(caller.id, session.id, content)
        except SQLAlchemyError as exc:
            # The reply is already stored; a missing title is cosmetic.
            self.db.rollback()
            logger.warning("Failed to update chat title", session_id=str(session.id), error=str(exc))
            title_updated = False

        self.db.refresh(session)
        logger.info(
            "Chat message processed",
            session_id=str(session.id),
            context_size=len(context),
            expressions=len(expressions),
            title_updated=title_updated,
        )
        return ChatOutcome.success(
            ChatTurn(
                session=session,
                user_message=user_message,
                assistant_message=assistant_message,
                expressions=expressions,
                title_updated=title_updated,
            )
        )


__all__ = ["ChatOutcome", "ChatService", "ChatTurn"]
