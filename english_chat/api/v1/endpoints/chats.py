"""Chat session endpoints."""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from english_chat.api.deps import get_chat_reader, get_chat_service, get_current_user
from english_chat.db.models.chat import ChatSession
from english_chat.db.models.user import User
from english_chat.schemas import (
    ChatSessionDetail,
    ChatSessionRead,
    ChatTurnResponse,
    ExpressionRead,
    MessageCreate,
    MessageRead,
)
from english_chat.services.chat_service import ChatOutcome, ChatService
from english_chat.utils.exceptions import (
    SESSION_NOT_FOUND_MESSAGE,
    AuthorizationError,
    FailureKind,
    error_for_kind,
    to_http_exception,
)


router = APIRouter(prefix="/chats", tags=["chats"])


def _unwrap(outcome: ChatOutcome):
    if outcome.ok:
        return outcome.value
    kind = outcome.failure or FailureKind.UNEXPECTED
    raise to_http_exception(error_for_kind(kind, outcome.error or ""))


def _resolve_session(service: ChatService, session_id: UUID, user: User) -> ChatSession:
    session = service.authorize_session(user.id, session_id)
    if session is None:
        raise to_http_exception(AuthorizationError(SESSION_NOT_FOUND_MESSAGE))
    return session


@router.post("", response_model=ChatSessionRead, status_code=status.HTTP_201_CREATED)
def create_chat(
    *,
    service: ChatService = Depends(get_chat_reader),
    current_user: User = Depends(get_current_user),
) -> ChatSession:
    """Start a new chat session greeted by the assistant."""

    return _unwrap(service.create_session(user=current_user))


@router.get("", response_model=list[ChatSessionRead])
def list_chats(
    *,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    service: ChatService = Depends(get_chat_reader),
    current_user: User = Depends(get_current_user),
) -> list[ChatSession]:
    """Return the caller's chat sessions, most recently updated first."""

    return service.list_sessions(user=current_user, limit=limit, offset=offset)


@router.get("/{session_id}", response_model=ChatSessionDetail)
def get_chat(
    session_id: UUID,
    *,
    service: ChatService = Depends(get_chat_reader),
    current_user: User = Depends(get_current_user),
) -> ChatSessionDetail:
    session = _resolve_session(service, session_id, current_user)
    messages = service.list_messages(session=session)
    return ChatSessionDetail.from_session(session, messages)


@router.get("/{session_id}/expressions", response_model=list[ExpressionRead])
def list_chat_expressions(
    session_id: UUID,
    *,
    service: ChatService = Depends(get_chat_reader),
    current_user: User = Depends(get_current_user),
) -> list[ExpressionRead]:
    session = _resolve_session(service, session_id, current_user)
    return [ExpressionRead.model_validate(item) for item in service.list_expressions(session=session)]


@router.post("/{session_id}/messages", response_model=ChatTurnResponse)
def post_chat_message(
    session_id: UUID,
    payload: MessageCreate,
    *,
    service: ChatService = Depends(get_chat_service),
    current_user: User = Depends(get_current_user),
) -> ChatTurnResponse:
    """Send a message and return the assistant's reply."""

    turn = _unwrap(
        service.send_message(caller=current_user, session_id=session_id, content=payload.content)
    )
    return ChatTurnResponse(
        session=ChatSessionRead.model_validate(turn.session),
        user_message=MessageRead.from_message(turn.user_message, expressions=[]),
        message=MessageRead.from_message(turn.assistant_message, expressions=turn.expressions),
        expressions=[ExpressionRead.model_validate(item) for item in turn.expressions],
        title_updated=turn.title_updated,
    )
