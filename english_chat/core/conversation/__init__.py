"""Conversation domain helpers."""

from english_chat.core.conversation.expressions import (
    TextSegment,
    extract_expressions,
    split_highlighted,
)
from english_chat.core.conversation.generator import (
    ContextMessage,
    ConversationRole,
    GeneratedReply,
    ReplyGenerator,
    build_context,
)
from english_chat.core.conversation.prompts import (
    SYSTEM_PROMPT,
    WELCOME_MESSAGE,
    build_system_prompt,
)

__all__ = [
    "ContextMessage",
    "ConversationRole",
    "GeneratedReply",
    "ReplyGenerator",
    "SYSTEM_PROMPT",
    "TextSegment",
    "WELCOME_MESSAGE",
    "build_context",
    "build_system_prompt",
    "extract_expressions",
    "split_highlighted",
]
