"""Failure categories and their translation into HTTP responses."""
from __future__ import annotations

import enum
from typing import Any, Dict, Optional

from fastapi import HTTPException, status
from loguru import logger


class FailureKind(str, enum.Enum):
    """Categories a service outcome can fail with."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    PROVIDER = "provider"
    PERSISTENCE = "persistence"
    UNEXPECTED = "unexpected"


GENERIC_FAILURE_MESSAGE = "An unexpected error occurred"
SESSION_NOT_FOUND_MESSAGE = "Session not found"
PROVIDER_FAILURE_MESSAGE = "AI response generation failed. Please wait a moment and try again."


class EnglishChatException(Exception):
    """Base exception for the application."""

    kind: FailureKind = FailureKind.UNEXPECTED

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationError(EnglishChatException):
    """Bad field input; recoverable by correcting the submission."""

    kind = FailureKind.VALIDATION


class AuthorizationError(EnglishChatException):
    """Caller is unauthenticated or does not own the target resource."""

    kind = FailureKind.NOT_FOUND


class PersistenceError(EnglishChatException):
    """Datastore read or write failure."""

    kind = FailureKind.PERSISTENCE


class ProviderError(EnglishChatException):
    """Language model invocation failure; the user may resubmit."""

    kind = FailureKind.PROVIDER


def handle_validation_error(error: ValidationError) -> HTTPException:
    """Report the first validation message together with every field error."""
    logger.warning("Validation error", message=error.message)
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={"message": error.message, "errors": error.details},
    )


def handle_authorization_error(error: AuthorizationError) -> HTTPException:
    """Hide whether the resource exists or belongs to somebody else."""
    logger.info("Authorization failed", message=error.message)
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=error.message or SESSION_NOT_FOUND_MESSAGE,
    )


def handle_persistence_error(error: PersistenceError) -> HTTPException:
    """Handle database errors without leaking their detail."""
    logger.error("Persistence error", message=error.message, **error.details)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=error.message,
    )


def handle_provider_error(error: ProviderError) -> HTTPException:
    """Handle LLM failures; the client is told it may retry."""
    logger.warning("LLM provider error", message=error.message, **error.details)
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=error.message or PROVIDER_FAILURE_MESSAGE,
        headers={"Retry-After": "5"},
    )


def to_http_exception(error: EnglishChatException) -> HTTPException:
    """Dispatch ``error`` to the handler for its category."""

    if isinstance(error, ValidationError):
        return handle_validation_error(error)
    if isinstance(error, AuthorizationError):
        return handle_authorization_error(error)
    if isinstance(error, PersistenceError):
        return handle_persistence_error(error)
    if isinstance(error, ProviderError):
        return handle_provider_error(error)
    logger.error("Unclassified application error", message=error.message)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=GENERIC_FAILURE_MESSAGE,
    )


_ERRORS_BY_KIND = {
    FailureKind.VALIDATION: ValidationError,
    FailureKind.NOT_FOUND: AuthorizationError,
    FailureKind.PERSISTENCE: PersistenceError,
    FailureKind.PROVIDER: ProviderError,
}


def error_for_kind(kind: FailureKind, message: str, details: Optional[Dict[str, Any]] = None) -> EnglishChatException:
    """Build the exception class matching ``kind``."""

    return _ERRORS_BY_KIND.get(kind, EnglishChatException)(message, details)
