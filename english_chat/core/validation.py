"""Registration form validation.

Every field is checked independently so a single submission reports all of
its problems at once. Within a field the first failing rule wins. Callers that
only show one message use :func:`first_validation_error`, which follows the
field declaration order of :class:`RegistrationForm`.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, fields
from typing import Dict, Optional

FieldErrors = Dict[str, str]

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 8

_USERNAME_PATTERN = re.compile(r"[a-zA-Z0-9_-]+")
_EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
_PASSWORD_CLASSES = (re.compile(r"[a-z]"), re.compile(r"[A-Z]"), re.compile(r"[0-9]"))


@dataclass(frozen=True)
class RegistrationForm:
    """Typed registration submission handed to the validator."""

    username: str = ""
    email: str = ""
    password: str = ""
    confirm_password: str = ""


def _validate_username(username: str) -> Optional[str]:
    if not username:
        return "Username is required"
    if len(username) < USERNAME_MIN_LENGTH:
        return f"Username must be at least {USERNAME_MIN_LENGTH} characters"
    if len(username) > USERNAME_MAX_LENGTH:
        return f"Username must be at most {USERNAME_MAX_LENGTH} characters"
    if not _USERNAME_PATTERN.fullmatch(username):
        return "Username may only contain letters, numbers, underscores and hyphens"
    return None


def _validate_email(email: str) -> Optional[str]:
    if not email:
        return "Email is required"
    if not _EMAIL_PATTERN.fullmatch(email):
        return "Enter a valid email address"
    return None


def _validate_password(password: str) -> Optional[str]:
    if not password:
        return "Password is required"
    if len(password) < PASSWORD_MIN_LENGTH:
        return f"Password must be at least {PASSWORD_MIN_LENGTH} characters"
    if not all(pattern.search(password) for pattern in _PASSWORD_CLASSES):
        return "Password must contain an uppercase letter, a lowercase letter and a number"
    return None


def _validate_confirm_password(password: str, confirm_password: str) -> Optional[str]:
    if not confirm_password:
        return "Password confirmation is required"
    if password != confirm_password:
        return "Passwords do not match"
    return None


def validate_registration(form: RegistrationForm) -> FieldErrors:
    """Return a mapping of field name to message; empty when the form is valid."""

    checks = {
        "username": _validate_username(form.username),
        "email": _validate_email(form.email),
        "password": _validate_password(form.password),
        "confirm_password": _validate_confirm_password(form.password, form.confirm_password),
    }
    return {field_name: message for field_name, message in checks.items() if message}


def has_validation_errors(errors: FieldErrors) -> bool:
    """Return ``True`` when ``errors`` holds at least one message."""

    return bool(errors)


def first_validation_error(errors: FieldErrors) -> Optional[str]:
    """Return the message of the first invalid field in declaration order."""

    for field_def in fields(RegistrationForm):
        if field_def.name in errors:
            return errors[field_def.name]
    return None


__all__ = [
    "FieldErrors",
    "RegistrationForm",
    "first_validation_error",
    "has_validation_errors",
    "validate_registration",
]
