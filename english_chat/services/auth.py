"""Authentication service layer."""
from __future__ import annotations

import uuid

from fastapi import HTTPException, status
from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from english_chat.core.security import (
    REFRESH_TOKEN,
    InvalidTokenError,
    create_access_token,
    create_refresh_token,
    decode_token,
    get_password_hash,
    verify_password,
)
from english_chat.core.validation import RegistrationForm
from english_chat.db.models.user import User
from english_chat.schemas import Token


class EmailAlreadyExistsError(ValueError):
    """Raised when attempting to register with an email that already exists."""


class InvalidCredentialsError(ValueError):
    """Raised when authentication credentials are invalid."""


class AuthService:
    """Encapsulates user registration and authentication logic."""

    def __init__(self, db: Session):
        self.db = db

    def register_user(self, form: RegistrationForm) -> User:
        """Create a user from an already validated registration form.

        Credentials and profile live in the same row, so registration either
        fully succeeds or leaves nothing behind.
        """

        existing_user = self.db.scalar(select(User).where(User.email == form.email))
        if existing_user:
            raise EmailAlreadyExistsError("A user with this email already exists.")

        user = User(
            username=form.username,
            email=form.email,
            hashed_password=get_password_hash(form.password),
        )

        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise EmailAlreadyExistsError("A user with this email already exists.") from exc
        self.db.refresh(user)
        logger.info("User registered", user_id=str(user.id))
        return user

    def authenticate_user(self, email: str, password: str) -> User:
        """Validate credentials and return the associated user."""

        user = self.db.scalar(select(User).where(User.email == email))
        if not user or not verify_password(password, user.hashed_password):
            raise InvalidCredentialsError("Incorrect email or password")
        return user

    def create_tokens(self, user: User) -> Token:
        """Generate access and refresh tokens for a user."""

        user_id = uuid.UUID(str(user.id))
        access = create_access_token(str(user_id))
        refresh = create_refresh_token(str(user_id))
        return Token(access_token=access, refresh_token=refresh)

    def refresh_tokens(self, refresh_token: str) -> Token:
        """Issue a new token pair for the owner of a valid refresh token."""

        try:
            payload = decode_token(refresh_token, expected_type=REFRESH_TOKEN)
            user_id = uuid.UUID(str(payload["sub"]))
        except (InvalidTokenError, KeyError, ValueError) as exc:
            raise InvalidCredentialsError("Invalid refresh token") from exc
        user = self.db.get(User, user_id)
        if not user:
            raise InvalidCredentialsError("Invalid refresh token")
        return self.create_tokens(user)


def handle_email_exists(error: EmailAlreadyExistsError) -> None:
    """Raise an HTTP 400 error for duplicate email attempts."""

    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=str(error),
    ) from error


def handle_invalid_credentials(error: InvalidCredentialsError) -> None:
    """Raise an HTTP 401 error for invalid login attempts."""

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=str(error),
        headers={"WWW-Authenticate": "Bearer"},
    ) from error
