"""Pytest fixtures for service and API tests."""

import os
from collections.abc import Generator

os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from english_chat.api import deps
from english_chat.config import get_settings
from english_chat.db import models  # noqa: F401  # Imported for side effects
from english_chat.db.base import Base
from english_chat.db.models import User
from english_chat.main import create_app
from english_chat.services.chat_service import ChatService
from english_chat.services.llm_service import LLMProviderError, LLMResult


class StubLLMService:
    """Return scripted completions and record what was sent."""

    def __init__(self) -> None:
        self.replies: list[str] = []
        self.default_reply = "Great question! You can say 【good morning】 when you arrive."
        self.should_fail = False
        self.calls: list[dict] = []

    def generate_chat_completion(self, messages, *, temperature=0.7, max_tokens=512, system_prompt=None):
        self.calls.append(
            {
                "messages": list(messages),
                "temperature": temperature,
                "max_tokens": max_tokens,
                "system_prompt": system_prompt,
            }
        )
        if self.should_fail:
            raise LLMProviderError("stub provider unavailable")
        content = self.replies.pop(0) if self.replies else self.default_reply
        return LLMResult(
            provider="stub",
            model="stub-model",
            content=content,
            prompt_tokens=10,
            completion_tokens=20,
            total_tokens=30,
            cost=0.0,
            raw_response={},
        )


@pytest.fixture()
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(db_engine) -> Generator[Session, None, None]:
    TestingSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=db_engine, expire_on_commit=False
    )
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def stub_llm() -> StubLLMService:
    return StubLLMService()


@pytest.fixture()
def chat_service(db_session: Session, stub_llm: StubLLMService) -> ChatService:
    return ChatService(db_session, llm_service=stub_llm, config=get_settings())


def make_user(db: Session, username: str, email: str) -> User:
    user = User(username=username, email=email, hashed_password="not-a-real-hash")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture()
def learner(db_session: Session) -> User:
    return make_user(db_session, "learner", "learner@example.com")


@pytest.fixture()
def other_learner(db_session: Session) -> User:
    return make_user(db_session, "someone_else", "other@example.com")


@pytest.fixture()
def client(db_session: Session, stub_llm: StubLLMService) -> Generator[TestClient, None, None]:
    app = create_app()

    def override_get_db() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[deps.get_db] = override_get_db
    app.dependency_overrides[deps.get_llm_service] = lambda: stub_llm
    with TestClient(app) as test_client:
        yield test_client


def _register_and_login(
    client: TestClient,
    *,
    username: str = "learner",
    email: str = "learner@example.com",
    password: str = "LongEnough1",
) -> dict[str, str]:
    client.post(
        "/api/v1/auth/register",
        json={
            "username": username,
            "email": email,
            "password": password,
            "confirmPassword": password,
        },
    )
    response = client.post("/api/v1/auth/login", json={"email": email, "password": password})
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture()
def login_as(client: TestClient):
    """Register a user through the API and return bearer headers for it."""

    def _login(**kwargs) -> dict[str, str]:
        return _register_and_login(client, **kwargs)

    return _login


@pytest.fixture()
def auth_headers(login_as) -> dict[str, str]:
    return login_as()
