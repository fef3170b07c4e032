"""Authentication API endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from english_chat.api.deps import get_db
from english_chat.core.validation import (
    first_validation_error,
    has_validation_errors,
    validate_registration,
)
from english_chat.schemas import (
    RefreshRequest,
    RegistrationErrorResponse,
    RegistrationRequest,
    Token,
    UserLogin,
    UserRead,
)
from english_chat.services.auth import (
    AuthService,
    EmailAlreadyExistsError,
    InvalidCredentialsError,
    handle_email_exists,
    handle_invalid_credentials,
)


router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    responses={status.HTTP_422_UNPROCESSABLE_ENTITY: {"model": RegistrationErrorResponse}},
)
def register_user(payload: RegistrationRequest, db: Session = Depends(get_db)):
    """Validate the registration form and create the user."""

    form = payload.to_form()
    errors = validate_registration(form)
    if has_validation_errors(errors):
        body = RegistrationErrorResponse(detail=first_validation_error(errors) or "", errors=errors)
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=body.model_dump(),
        )

    service = AuthService(db)
    try:
        user = service.register_user(form)
    except EmailAlreadyExistsError as exc:
        handle_email_exists(exc)
    return user


@router.post("/login", response_model=Token)
def login(payload: UserLogin, db: Session = Depends(get_db)) -> Token:
    """Authenticate a user and return JWT tokens."""

    if not payload.email or not payload.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email and password are required",
        )

    service = AuthService(db)
    try:
        user = service.authenticate_user(payload.email, payload.password)
    except InvalidCredentialsError as exc:
        handle_invalid_credentials(exc)
    return service.create_tokens(user)


@router.post("/refresh", response_model=Token)
def refresh(payload: RefreshRequest, db: Session = Depends(get_db)) -> Token:
    """Exchange a refresh token for a new token pair."""

    service = AuthService(db)
    try:
        return service.refresh_tokens(payload.refresh_token)
    except InvalidCredentialsError as exc:
        handle_invalid_credentials(exc)
