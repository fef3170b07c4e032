"""Utility helpers package."""

from english_chat.utils.exceptions import (
    AuthorizationError,
    EnglishChatException,
    FailureKind,
    PersistenceError,
    ProviderError,
    ValidationError,
)

__all__ = [
    "AuthorizationError",
    "EnglishChatException",
    "FailureKind",
    "PersistenceError",
    "ProviderError",
    "ValidationError",
]
