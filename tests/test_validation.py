"""Tests for registration form validation."""
from __future__ import annotations

import pytest

from english_chat.core.validation import (
    RegistrationForm,
    first_validation_error,
    has_validation_errors,
    validate_registration,
)


def make_form(**overrides) -> RegistrationForm:
    values = {
        "username": "learner_01",
        "email": "learner@example.com",
        "password": "LongEnough1",
        "confirm_password": "LongEnough1",
    }
    values.update(overrides)
    return RegistrationForm(**values)


def test_valid_form_has_no_errors():
    errors = validate_registration(make_form())

    assert errors == {}
    assert has_validation_errors(errors) is False
    assert first_validation_error(errors) is None


def test_validation_is_idempotent():
    form = make_form(username="ab", password="short")

    assert validate_registration(form) == validate_registration(form)


@pytest.mark.parametrize(
    ("username", "expected"),
    [
        ("", "Username is required"),
        ("ab", "Username must be at least 3 characters"),
        ("a" * 51, "Username must be at most 50 characters"),
        ("abc def", "Username may only contain letters, numbers, underscores and hyphens"),
    ],
)
def test_username_rules(username, expected):
    assert validate_registration(make_form(username=username))["username"] == expected


@pytest.mark.parametrize("username", ["abc", "a" * 50, "Jane_Doe-42"])
def test_accepted_usernames(username):
    assert "username" not in validate_registration(make_form(username=username))


@pytest.mark.parametrize("email", ["", "learner", "learner@example", "a b@example.com"])
def test_invalid_emails(email):
    assert "email" in validate_registration(make_form(email=email))


def test_password_rules():
    assert validate_registration(make_form(password="short1A", confirm_password="short1A"))[
        "password"
    ] == "Password must be at least 8 characters"
    assert validate_registration(make_form(password="longenough1", confirm_password="longenough1"))[
        "password"
    ] == "Password must contain an uppercase letter, a lowercase letter and a number"
    assert "password" not in validate_registration(
        make_form(password="LongEnough1", confirm_password="LongEnough1")
    )


def test_confirm_password_mismatch_reports_only_that_field():
    errors = validate_registration(make_form(confirm_password="LongEnough2"))

    assert errors == {"confirm_password": "Passwords do not match"}


def test_confirm_password_mismatch_reported_alongside_other_errors():
    errors = validate_registration(make_form(username="ab", confirm_password="different"))

    assert errors["confirm_password"] == "Passwords do not match"
    assert "username" in errors


def test_confirm_password_required():
    errors = validate_registration(make_form(confirm_password=""))

    assert errors == {"confirm_password": "Password confirmation is required"}


def test_all_fields_checked_without_short_circuit():
    errors = validate_registration(RegistrationForm())

    assert set(errors) == {"username", "email", "password", "confirm_password"}


def test_first_error_follows_field_order():
    errors = validate_registration(make_form(email="nope", password="short"))

    assert first_validation_error(errors) == "Enter a valid email address"
