"""Integration tests for chat endpoints."""
from __future__ import annotations

import uuid

from fastapi.testclient import TestClient

from english_chat.api import deps
from english_chat.core.conversation import WELCOME_MESSAGE
from english_chat.main import create_app


def _create_chat(client: TestClient, headers: dict[str, str]) -> dict:
    response = client.post("/api/v1/chats", headers=headers)
    assert response.status_code == 201
    return response.json()


def test_create_chat_starts_with_welcome_message(client: TestClient, auth_headers) -> None:
    chat = _create_chat(client, auth_headers)

    assert chat["title"] == "New chat"

    detail = client.get(f"/api/v1/chats/{chat['id']}", headers=auth_headers).json()
    assert [(m["message_type"], m["content"]) for m in detail["messages"]] == [
        ("ai_welcome", WELCOME_MESSAGE)
    ]


def test_chat_routes_require_authentication(client: TestClient) -> None:
    assert client.post("/api/v1/chats").status_code == 401
    assert client.get("/api/v1/chats").status_code == 401


def test_send_message_returns_reply_with_expressions(client: TestClient, auth_headers, stub_llm) -> None:
    chat = _create_chat(client, auth_headers)
    stub_llm.replies.append("When you meet someone, say 【nice to meet you】 or 【pleased to meet you】.")

    response = client.post(
        f"/api/v1/chats/{chat['id']}/messages",
        json={"content": "How do I greet someone new?"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["title_updated"] is True
    assert data["session"]["title"] == "How do I greet someone new?"
    assert data["user_message"]["message_type"] == "user"
    assert data["message"]["message_type"] == "ai_response"
    assert [item["expression_text"] for item in data["expressions"]] == [
        "nice to meet you",
        "pleased to meet you",
    ]
    assert [item["position"] for item in data["expressions"]] == [0, 1]
    assert [segment for segment in data["message"]["segments"] if segment["is_expression"]] == [
        {"text": "nice to meet you", "is_expression": True},
        {"text": "pleased to meet you", "is_expression": True},
    ]


def test_detail_lists_messages_in_order(client: TestClient, auth_headers) -> None:
    chat = _create_chat(client, auth_headers)
    client.post(f"/api/v1/chats/{chat['id']}/messages", json={"content": "First"}, headers=auth_headers)
    client.post(f"/api/v1/chats/{chat['id']}/messages", json={"content": "Second"}, headers=auth_headers)

    detail = client.get(f"/api/v1/chats/{chat['id']}", headers=auth_headers).json()

    assert detail["title"] == "First"
    assert [m["message_type"] for m in detail["messages"]] == [
        "ai_welcome",
        "user",
        "ai_response",
        "user",
        "ai_response",
    ]
    assert detail["messages"][2]["expressions"][0]["expression_text"] == "good morning"


def test_list_chats_returns_only_own_sessions(client: TestClient, auth_headers, login_as) -> None:
    mine = _create_chat(client, auth_headers)
    other_headers = login_as(username="other_learner", email="other@example.com")
    _create_chat(client, other_headers)

    response = client.get("/api/v1/chats", headers=auth_headers)

    assert response.status_code == 200
    assert [chat["id"] for chat in response.json()] == [mine["id"]]


def test_foreign_chat_is_reported_as_missing(client: TestClient, auth_headers, login_as, stub_llm) -> None:
    other_headers = login_as(username="other_learner", email="other@example.com")
    foreign = _create_chat(client, other_headers)

    detail = client.get(f"/api/v1/chats/{foreign['id']}", headers=auth_headers)
    send = client.post(
        f"/api/v1/chats/{foreign['id']}/messages", json={"content": "Hi"}, headers=auth_headers
    )
    missing = client.get(f"/api/v1/chats/{uuid.uuid4()}", headers=auth_headers)

    assert detail.status_code == 404
    assert send.status_code == 404
    assert missing.status_code == 404
    assert detail.json()["detail"] == missing.json()["detail"] == "Session not found"
    assert stub_llm.calls == []


def test_provider_failure_returns_retryable_error(client: TestClient, auth_headers, stub_llm) -> None:
    chat = _create_chat(client, auth_headers)
    stub_llm.should_fail = True

    response = client.post(
        f"/api/v1/chats/{chat['id']}/messages", json={"content": "Hello?"}, headers=auth_headers
    )

    assert response.status_code == 503
    assert response.headers["Retry-After"] == "5"
    assert response.json()["detail"].startswith("AI response generation failed")

    detail = client.get(f"/api/v1/chats/{chat['id']}", headers=auth_headers).json()
    assert [m["message_type"] for m in detail["messages"]] == ["ai_welcome", "user"]


def test_blank_message_is_rejected(client: TestClient, auth_headers, stub_llm) -> None:
    chat = _create_chat(client, auth_headers)

    response = client.post(
        f"/api/v1/chats/{chat['id']}/messages", json={"content": "   "}, headers=auth_headers
    )

    assert response.status_code == 422
    assert response.json()["detail"]["message"] == "Message cannot be empty"
    assert stub_llm.calls == []


def test_expressions_endpoint_collects_session_expressions(client: TestClient, auth_headers, stub_llm) -> None:
    chat = _create_chat(client, auth_headers)
    stub_llm.replies.extend(["Say 【thank you】.", "Plain answer.", "Try 【you're welcome】."])
    for content in ("One", "Two", "Three"):
        client.post(f"/api/v1/chats/{chat['id']}/messages", json={"content": content}, headers=auth_headers)

    response = client.get(f"/api/v1/chats/{chat['id']}/expressions", headers=auth_headers)

    assert response.status_code == 200
    assert [item["expression_text"] for item in response.json()] == ["thank you", "you're welcome"]


def test_unexpected_error_returns_generic_message(db_session, learner) -> None:
    app = create_app()

    def broken_reader():
        raise RuntimeError("secret internal detail")

    app.dependency_overrides[deps.get_db] = lambda: db_session
    app.dependency_overrides[deps.get_current_user] = lambda: learner
    app.dependency_overrides[deps.get_chat_reader] = broken_reader

    with TestClient(app, raise_server_exceptions=False) as test_client:
        response = test_client.get("/api/v1/chats")

    assert response.status_code == 500
    assert response.json() == {"detail": "An unexpected error occurred"}
    assert "secret" not in response.text
