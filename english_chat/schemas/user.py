"""Pydantic models for user API interactions."""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from english_chat.core.validation import RegistrationForm


class RegistrationRequest(BaseModel):
    """Raw registration submission.

    Fields are accepted as plain strings so that every format rule is applied
    by :func:`english_chat.core.validation.validate_registration`.
    """

    username: str = ""
    email: str = ""
    password: str = ""
    confirm_password: str = Field("", alias="confirmPassword")

    model_config = ConfigDict(populate_by_name=True)

    def to_form(self) -> RegistrationForm:
        return RegistrationForm(
            username=self.username,
            email=self.email,
            password=self.password,
            confirm_password=self.confirm_password,
        )


class RegistrationErrorResponse(BaseModel):
    """Validation failure body: the first message plus every field error."""

    detail: str
    errors: Dict[str, str]


class UserLogin(BaseModel):
    """Schema for user login request."""

    email: str = ""
    password: str = ""


class UserRead(BaseModel):
    """Public representation of a user."""

    id: uuid.UUID
    username: str
    email: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
