"""Integration tests for authentication endpoints."""
from __future__ import annotations

import uuid

from fastapi.testclient import TestClient


def _registration(**overrides) -> dict[str, str]:
    payload = {
        "username": "learner",
        "email": "learner@example.com",
        "password": "LongEnough1",
        "confirmPassword": "LongEnough1",
    }
    payload.update(overrides)
    return payload


def test_user_registration_success(client: TestClient) -> None:
    response = client.post("/api/v1/auth/register", json=_registration())

    assert response.status_code == 201
    data = response.json()
    assert uuid.UUID(data["id"])
    assert data["username"] == "learner"
    assert data["email"] == "learner@example.com"
    assert "hashed_password" not in data


def test_user_registration_reports_first_error_and_field_map(client: TestClient) -> None:
    response = client.post(
        "/api/v1/auth/register",
        json=_registration(username="ab", email="not-an-email", confirmPassword="Different1"),
    )

    assert response.status_code == 422
    body = response.json()
    assert body["detail"] == "Username must be at least 3 characters"
    assert body["errors"] == {
        "username": "Username must be at least 3 characters",
        "email": "Enter a valid email address",
        "confirm_password": "Passwords do not match",
    }


def test_user_registration_rejects_missing_fields(client: TestClient) -> None:
    response = client.post("/api/v1/auth/register", json={})

    assert response.status_code == 422
    body = response.json()
    assert body["detail"] == "Username is required"
    assert set(body["errors"]) == {"username", "email", "password", "confirm_password"}


def test_user_registration_duplicate_email(client: TestClient) -> None:
    first_response = client.post("/api/v1/auth/register", json=_registration())
    assert first_response.status_code == 201

    duplicate_response = client.post(
        "/api/v1/auth/register", json=_registration(username="another_learner")
    )
    assert duplicate_response.status_code == 400
    assert duplicate_response.json()["detail"] == "A user with this email already exists."


def test_user_login_success(client: TestClient) -> None:
    client.post("/api/v1/auth/register", json=_registration())

    response = client.post(
        "/api/v1/auth/login",
        json={"email": "learner@example.com", "password": "LongEnough1"},
    )

    assert response.status_code == 200
    data = response.json()
    assert "access_token" in data
    assert "refresh_token" in data
    assert data["token_type"] == "bearer"


def test_user_login_invalid_credentials(client: TestClient) -> None:
    client.post("/api/v1/auth/register", json=_registration())

    response = client.post(
        "/api/v1/auth/login",
        json={"email": "learner@example.com", "password": "WrongPassword1"},
    )

    assert response.status_code == 401
    assert response.json()["detail"] == "Incorrect email or password"


def test_user_login_requires_both_fields(client: TestClient) -> None:
    response = client.post("/api/v1/auth/login", json={"email": "learner@example.com"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Email and password are required"


def test_refresh_issues_new_tokens(client: TestClient) -> None:
    client.post("/api/v1/auth/register", json=_registration())
    tokens = client.post(
        "/api/v1/auth/login",
        json={"email": "learner@example.com", "password": "LongEnough1"},
    ).json()

    response = client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]})

    assert response.status_code == 200
    assert "access_token" in response.json()


def test_refresh_rejects_access_token(client: TestClient) -> None:
    client.post("/api/v1/auth/register", json=_registration())
    tokens = client.post(
        "/api/v1/auth/login",
        json={"email": "learner@example.com", "password": "LongEnough1"},
    ).json()

    response = client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["access_token"]})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid refresh token"


def test_read_current_user(client: TestClient, auth_headers: dict[str, str]) -> None:
    response = client.get("/api/v1/users/me", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["username"] == "learner"


def test_read_current_user_requires_token(client: TestClient) -> None:
    response = client.get("/api/v1/users/me")

    assert response.status_code == 401
    assert response.json()["detail"] == "Could not validate credentials"
