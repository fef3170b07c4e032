"""Assistant reply generation for chat sessions."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, List, Literal, Sequence

from loguru import logger

from english_chat.core.conversation.expressions import extract_expressions
from english_chat.core.conversation.prompts import build_system_prompt
from english_chat.db.models.chat import Message, MessageType

if TYPE_CHECKING:
    from english_chat.services.llm_service import LLMResult

ConversationRole = Literal["user", "assistant"]


@dataclass(slots=True)
class ContextMessage:
    """Role-tagged message handed to the language model."""

    role: ConversationRole
    content: str

    @classmethod
    def from_message(cls, message: Message) -> "ContextMessage":
        role = MessageType(message.message_type).role
        return cls(role=role, content=message.content)  # type: ignore[arg-type]

    def as_payload(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(slots=True)
class GeneratedReply:
    """Model output together with the expressions it highlighted."""

    text: str
    expressions: List[str] = field(default_factory=list)
    llm_result: LLMResult | None = None


def build_context(messages: Iterable[Message]) -> List[ContextMessage]:
    """Map stored messages, oldest first, to model roles."""

    return [ContextMessage.from_message(message) for message in messages]


class ReplyGenerator:
    """Send assembled context to the LLM and parse the reply."""

    def __init__(
        self,
        *,
        llm_service,
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> None:
        self.llm_service = llm_service
        self.temperature = temperature
        self.max_tokens = max_tokens

    def generate_reply(self, context: Sequence[ContextMessage]) -> GeneratedReply:
        """Return the assistant reply for ``context``.

        Provider failures propagate as ``LLMProviderError`` so the caller can
        report them as retryable.
        """

        result: LLMResult = self.llm_service.generate_chat_completion(
            [message.as_payload() for message in context],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            system_prompt=build_system_prompt(),
        )
        text = result.content or ""
        expressions = extract_expressions(text)
        logger.debug(
            "Generated assistant reply",
            provider=result.provider,
            model=result.model,
            tokens=result.total_tokens,
            cost=result.cost,
            context_size=len(context),
            expressions=len(expressions),
        )
        return GeneratedReply(text=text, expressions=expressions, llm_result=result)


__all__ = [
    "ContextMessage",
    "ConversationRole",
    "GeneratedReply",
    "ReplyGenerator",
    "build_context",
]
